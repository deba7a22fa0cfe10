"""Go Playground client used by the compile endpoint of the course API."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

logger = logging.getLogger(__name__)


@dataclass
class CompileOutcome:
    output: str
    error: str | None = None

    def to_dict(self) -> dict:
        return {"output": self.output, "error": self.error}


class GoPlaygroundClient:
    """Compiles and runs Go source through the public Go Playground."""

    def __init__(self, url: str = "https://play.golang.org/compile", timeout: float = 30.0) -> None:
        self._url = url
        self._timeout = timeout

    def compile_and_run(self, code: str) -> CompileOutcome:
        try:
            resp = httpx.post(
                self._url,
                data={"body": code, "version": "2"},
                timeout=self._timeout,
            )
        except httpx.HTTPError as e:
            logger.warning("Go Playground request failed: %s", e)
            return CompileOutcome(output="", error=str(e))

        if not resp.is_success:
            return CompileOutcome(output="", error=f"HTTP {resp.status_code}: {resp.reason_phrase}")

        try:
            data = resp.json()
        except ValueError:
            return CompileOutcome(output="", error="Go Playground returned an invalid response")
        return self._parse_response(data)

    def _parse_response(self, data: dict) -> CompileOutcome:
        if data.get("Errors"):
            return CompileOutcome(output="", error=data["Errors"])

        output = "".join(
            event.get("Message") or "" for event in data.get("Events") or []
        )
        return CompileOutcome(output=output)
