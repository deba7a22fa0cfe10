"""Remote compile-and-run backend talking to the course API's compile endpoint."""

from __future__ import annotations

import logging

import httpx

from codewalk.config import Config
from codewalk.errors import CodewalkError, ExecutionError, TransportError, ValidationError
from codewalk.models import ErrorKind, RunResult

logger = logging.getLogger(__name__)


class RemoteCompileBackend:
    """Submits source text to a compile endpoint and returns its output in one piece."""

    def __init__(self, config: Config, client: httpx.AsyncClient | None = None) -> None:
        self._config = config
        self._client = client

    async def run(self, source: str, example: str | None = None) -> RunResult:
        try:
            if not source.strip():
                raise ValidationError("Code is required")
            output = await self._compile(source)
        except CodewalkError as e:
            logger.info("Remote run failed (%s): %s", e.kind.value, e)
            return RunResult(output="", error=str(e), kind=e.kind)
        except Exception as e:
            logger.exception("Unexpected failure in remote backend")
            return RunResult(output="", error=str(e), kind=ErrorKind.TRANSPORT)
        return RunResult(output=output)

    async def _compile(self, source: str) -> str:
        try:
            if self._client is not None:
                resp = await self._client.post(self._config.compile_url, json={"code": source})
            else:
                async with httpx.AsyncClient(timeout=self._config.request_timeout) as client:
                    resp = await client.post(self._config.compile_url, json={"code": source})
        except httpx.TimeoutException:
            raise TransportError("Compile request timed out") from None
        except httpx.HTTPError as e:
            raise TransportError(f"Compile request failed: {e}") from e

        if not resp.is_success:
            raise TransportError(f"HTTP {resp.status_code}: {resp.reason_phrase}", resp.status_code)

        try:
            data = resp.json()
        except ValueError:
            raise TransportError("Compile service returned an invalid response") from None
        if not isinstance(data, dict):
            raise TransportError("Compile service returned an invalid response")

        if data.get("error"):
            raise ExecutionError(str(data["error"]))
        output = data.get("output") or ""
        if not isinstance(output, str):
            raise TransportError("Compile service returned an invalid response")
        return output
