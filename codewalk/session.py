"""Execution session controller: source buffer, run state machine and live output."""

from __future__ import annotations

import logging
from typing import Callable

from codewalk.backend_base import ExecutionBackend, StreamingBackend
from codewalk.errors import ValidationError
from codewalk.models import ErrorKind, RunResult, SessionState, Verdict
from codewalk.reconcile import reconcile

logger = logging.getLogger(__name__)

OutputListener = Callable[[str], None]


class ExecutionSession:
    """Owns the editable source and mediates runs against one backend.

    Every ``load`` or ``clear`` starts a new generation. A run remembers the
    generation it started in and drops its result if that generation is no
    longer current, so a slow run never overwrites a newer session.
    """

    def __init__(
        self,
        backend: ExecutionBackend,
        source: str = "",
        expected_output: str | None = None,
        example: str | None = None,
    ) -> None:
        self._backend = backend
        self._listeners: list[OutputListener] = []
        self._generation = 0
        self.source = source
        self.expected_output = expected_output
        self.example = example
        self.state = SessionState.IDLE
        self.error: str | None = None
        self.error_kind: ErrorKind | None = None
        self._output = ""

    @property
    def output(self) -> str:
        return self._output

    @property
    def running(self) -> bool:
        return self.state is SessionState.RUNNING

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def verdict(self) -> Verdict:
        return reconcile(self._output, self.expected_output)

    def get_output(self) -> str:
        return self._output

    def subscribe(self, listener: OutputListener) -> Callable[[], None]:
        """Register *listener* for every output update; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def set_source(self, text: str) -> None:
        self.source = text

    def load(self, source: str, expected_output: str | None = None, example: str | None = None) -> None:
        """Replace the session with a fresh one seeded from *source*."""
        self._generation += 1
        self.source = source
        self.expected_output = expected_output
        self.example = example
        self._reset()

    def clear(self) -> None:
        self._generation += 1
        self._reset()

    async def run(self) -> RunResult | None:
        """Run the current source.

        Returns None when the request was ignored (already running) or its
        result arrived for a session that has since been replaced.
        """
        if self.running:
            logger.debug("Run requested while another run is in flight; ignoring")
            return None

        generation = self._generation
        self.error = None
        self.error_kind = None
        self._set_output("")

        if not self.source.strip():
            err = ValidationError("Code is required")
            result = RunResult(output="", error=str(err), kind=err.kind)
            self._apply_failure(result)
            return result

        self.state = SessionState.RUNNING
        logger.info("Run started (generation %d, example %s)", generation, self.example)

        def on_output(text: str) -> None:
            if generation == self._generation:
                self._set_output(text)

        try:
            if isinstance(self._backend, StreamingBackend):
                result = await self._backend.run_streaming(self.source, self.example, on_output)
            else:
                result = await self._backend.run(self.source, self.example)
        except Exception as e:
            logger.exception("Backend raised instead of returning a result")
            result = RunResult(output="", error=str(e), kind=ErrorKind.TRANSPORT)

        if generation != self._generation:
            logger.debug("Discarding stale run result (generation %d, now %d)", generation, self._generation)
            return None

        if result.ok:
            self.state = SessionState.IDLE
            self._set_output(result.output)
            logger.info("Run finished with %d chars of output", len(result.output))
        else:
            self._apply_failure(result)
        return result

    def _apply_failure(self, result: RunResult) -> None:
        self.state = SessionState.ERRORED
        self.error = result.error
        self.error_kind = result.kind
        # Only a program that actually ran may leave output behind
        self._set_output(result.output if result.kind is ErrorKind.EXECUTION else "")
        logger.info("Run failed (%s): %s", result.kind.value if result.kind else "unknown", result.error)

    def _reset(self) -> None:
        self.state = SessionState.IDLE
        self.error = None
        self.error_kind = None
        self._set_output("")

    def _set_output(self, text: str) -> None:
        self._output = text
        for listener in list(self._listeners):
            listener(text)
