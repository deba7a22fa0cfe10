"""Sandboxed local backend that replays precompiled WebAssembly modules."""

from __future__ import annotations

import asyncio
import codecs
import logging
import os
from pathlib import Path

from codewalk.backend_base import OutputCallback, SandboxRuntime
from codewalk.errors import CodewalkError, ExecutionError, TransportError, ValidationError
from codewalk.models import ErrorKind, RunResult
from codewalk.samples import SAMPLES

logger = logging.getLogger(__name__)

_DEFAULT_PATH = "/usr/bin:/bin:/usr/local/bin"


class SubprocessRuntime:
    """Runs a module under an external WASI runner, capturing output as it arrives.

    stdout and stderr are merged into one buffer in arrival order; both
    callbacks receive the whole buffer after every chunk.
    """

    def __init__(self, command: list[str], timeout: int = 10, chunk_size: int = 4096) -> None:
        if not command:
            raise ValueError("Sandbox command must not be empty")
        self._command = list(command)
        self._timeout = timeout
        self._chunk_size = chunk_size

    async def execute(
        self,
        module_path: Path,
        on_stdout: OutputCallback,
        on_stderr: OutputCallback,
    ) -> int:
        proc = await asyncio.create_subprocess_exec(
            *self._command,
            str(module_path),
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            env={"PATH": os.environ.get("PATH", _DEFAULT_PATH)},
        )
        captured: list[str] = []

        async def pump(stream: asyncio.StreamReader, callback: OutputCallback) -> None:
            decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
            while True:
                chunk = await stream.read(self._chunk_size)
                text = decoder.decode(chunk, final=not chunk)
                if text:
                    captured.append(text)
                    callback("".join(captured))
                if not chunk:
                    return

        try:
            await asyncio.wait_for(
                asyncio.gather(pump(proc.stdout, on_stdout), pump(proc.stderr, on_stderr), proc.wait()),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            proc.kill()
            await proc.wait()
            raise ExecutionError("Execution timed out", output="".join(captured)) from None
        return proc.returncode


class LocalSandboxBackend:
    """Executes the precompiled module registered for an example.

    The module is selected by example identifier; the source text is only
    checked for emptiness, so edits are not compiled.
    """

    def __init__(
        self,
        runtime: SandboxRuntime,
        module_dir: Path | str,
        suffix: str = ".wasm",
        references: dict[str, str] | None = None,
    ) -> None:
        self._runtime = runtime
        self._module_dir = Path(module_dir)
        self._suffix = suffix
        if references is None:
            references = {sample.module: sample.code for sample in SAMPLES.values()}
        self._references = references

    async def run(self, source: str, example: str | None = None) -> RunResult:
        return await self.run_streaming(source, example, lambda _text: None)

    async def run_streaming(
        self,
        source: str,
        example: str | None,
        on_output: OutputCallback,
    ) -> RunResult:
        latest = ""

        def deliver(text: str) -> None:
            nonlocal latest
            latest = text
            on_output(text)

        try:
            if not source.strip():
                raise ValidationError("Code is required")
            module_path = self.resolve_module(example)
            self._warn_if_edited(source, example)
            logger.debug("Executing %s", module_path)
            try:
                status = await self._runtime.execute(module_path, deliver, deliver)
            except OSError as e:
                raise TransportError(f"Sandbox runtime unavailable: {e}") from e
            if status != 0:
                raise ExecutionError(f"Program exited with status {status}", output=latest)
        except ExecutionError as e:
            return RunResult(output=e.output or latest, error=str(e), kind=e.kind)
        except CodewalkError as e:
            logger.info("Sandbox run failed (%s): %s", e.kind.value, e)
            return RunResult(output="", error=str(e), kind=e.kind)
        except Exception as e:
            logger.exception("Unexpected failure in sandbox backend")
            return RunResult(output="", error=str(e), kind=ErrorKind.TRANSPORT)
        return RunResult(output=latest)

    def resolve_module(self, example: str | None) -> Path:
        """Return the module path for *example*, raising if it cannot be loaded."""
        if not example:
            raise ValidationError("No precompiled example selected")
        if Path(example).name != example:
            raise ValidationError(f"Invalid example name {example!r}")
        path = self._module_dir / f"{example}{self._suffix}"
        if not path.is_file():
            raise TransportError(f"Failed to load module: {path.name} not found")
        return path

    def _warn_if_edited(self, source: str, example: str) -> None:
        reference = self._references.get(example)
        if reference is not None and source.strip() != reference.strip():
            logger.warning(
                "Source for %r differs from its precompiled module; running the original build", example
            )
