"""Abstract interfaces for execution backends and the sandboxed runtime."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Protocol, runtime_checkable

from codewalk.models import RunResult

# Receives the cumulative output captured so far, never a delta.
OutputCallback = Callable[[str], None]


@runtime_checkable
class ExecutionBackend(Protocol):
    async def run(self, source: str, example: str | None = None) -> RunResult: ...


@runtime_checkable
class StreamingBackend(Protocol):
    async def run(self, source: str, example: str | None = None) -> RunResult: ...

    async def run_streaming(
        self,
        source: str,
        example: str | None,
        on_output: OutputCallback,
    ) -> RunResult: ...


@runtime_checkable
class SandboxRuntime(Protocol):
    async def execute(
        self,
        module_path: Path,
        on_stdout: OutputCallback,
        on_stderr: OutputCallback,
    ) -> int: ...
