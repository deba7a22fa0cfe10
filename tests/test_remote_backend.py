"""Tests for the remote compile backend (mocked transport, no real server needed)."""

from __future__ import annotations

import asyncio
import json

import httpx

from codewalk.backend_base import ExecutionBackend, StreamingBackend
from codewalk.backend_remote import RemoteCompileBackend
from codewalk.config import Config
from codewalk.models import ErrorKind

COMPILE_URL = "http://fake:8081/api/compile"


def _backend(handler) -> tuple[RemoteCompileBackend, list[httpx.Request]]:
    requests: list[httpx.Request] = []

    def recording(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return handler(request)

    client = httpx.AsyncClient(transport=httpx.MockTransport(recording))
    return RemoteCompileBackend(Config(compile_url=COMPILE_URL), client=client), requests


class TestRemoteSuccess:
    def test_successful_run(self):
        backend, requests = _backend(lambda r: httpx.Response(200, json={"output": "Hello\n", "error": None}))
        result = asyncio.run(backend.run("package main"))
        assert result.ok
        assert result.output == "Hello\n"
        assert len(requests) == 1

    def test_payload(self):
        backend, requests = _backend(lambda r: httpx.Response(200, json={"output": ""}))
        asyncio.run(backend.run("package main", example="hello"))
        request = requests[0]
        assert request.method == "POST"
        assert str(request.url) == COMPILE_URL
        assert json.loads(request.content) == {"code": "package main"}

    def test_is_atomic_backend(self):
        backend, _ = _backend(lambda r: httpx.Response(200, json={"output": ""}))
        assert isinstance(backend, ExecutionBackend)
        assert not isinstance(backend, StreamingBackend)


class TestRemoteErrors:
    def test_empty_source_skips_network(self):
        backend, requests = _backend(lambda r: httpx.Response(200, json={"output": ""}))
        result = asyncio.run(backend.run(""))
        assert requests == []
        assert result.kind is ErrorKind.VALIDATION

    def test_compile_error_in_payload(self):
        backend, _ = _backend(lambda r: httpx.Response(200, json={"output": "", "error": "syntax error line 3"}))
        result = asyncio.run(backend.run("func main() {"))
        assert result.kind is ErrorKind.EXECUTION
        assert result.error == "syntax error line 3"
        assert result.output == ""

    def test_non_success_status_is_transport_error(self):
        backend, _ = _backend(lambda r: httpx.Response(502))
        result = asyncio.run(backend.run("package main"))
        assert result.kind is ErrorKind.TRANSPORT
        assert result.error == "HTTP 502: Bad Gateway"

    def test_bad_request_with_error_body_is_still_transport(self):
        backend, _ = _backend(lambda r: httpx.Response(400, json={"error": "Code is required"}))
        result = asyncio.run(backend.run("package main"))
        assert result.kind is ErrorKind.TRANSPORT

    def test_unreachable_endpoint(self):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        backend, _ = _backend(refuse)
        result = asyncio.run(backend.run("package main"))
        assert result.kind is ErrorKind.TRANSPORT
        assert "connection refused" in result.error

    def test_timeout(self):
        def slow(request):
            raise httpx.ReadTimeout("timed out", request=request)

        backend, _ = _backend(slow)
        result = asyncio.run(backend.run("package main"))
        assert result.kind is ErrorKind.TRANSPORT
        assert "timed out" in result.error

    def test_invalid_json(self):
        backend, _ = _backend(lambda r: httpx.Response(200, text="<html>oops</html>"))
        result = asyncio.run(backend.run("package main"))
        assert result.kind is ErrorKind.TRANSPORT

    def test_non_string_output_is_transport_error(self):
        backend, _ = _backend(lambda r: httpx.Response(200, json={"output": 42, "error": None}))
        result = asyncio.run(backend.run("package main"))
        assert result.kind is ErrorKind.TRANSPORT
        assert result.output == ""
        assert "invalid response" in result.error
