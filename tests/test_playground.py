"""Tests for the Go Playground client (mocked, no network needed)."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import httpx

from codewalk.playground import GoPlaygroundClient


def _make_response(status_code: int = 200, payload: dict | None = None, reason: str = "OK"):
    """Build a mock Go Playground response."""
    resp = MagicMock()
    resp.status_code = status_code
    resp.is_success = 200 <= status_code < 300
    resp.reason_phrase = reason
    resp.json.return_value = payload or {}
    return resp


class TestCompileAndRun:
    @patch("codewalk.playground.httpx.post")
    def test_concatenates_events(self, mock_post):
        mock_post.return_value = _make_response(
            payload={"Errors": "", "Events": [{"Message": "Hello, ", "Kind": "stdout"}, {"Message": "World!\n"}]}
        )
        outcome = GoPlaygroundClient("http://fake/compile").compile_and_run("package main")
        assert outcome.error is None
        assert outcome.output == "Hello, World!\n"

    @patch("codewalk.playground.httpx.post")
    def test_form_payload(self, mock_post):
        mock_post.return_value = _make_response(payload={"Events": []})
        GoPlaygroundClient("http://fake/compile").compile_and_run("package main")
        call_kwargs = mock_post.call_args
        assert call_kwargs.args[0] == "http://fake/compile"
        assert call_kwargs.kwargs["data"] == {"body": "package main", "version": "2"}

    @patch("codewalk.playground.httpx.post")
    def test_compile_errors(self, mock_post):
        mock_post.return_value = _make_response(payload={"Errors": "prog.go:3: syntax error", "Events": None})
        outcome = GoPlaygroundClient().compile_and_run("func")
        assert outcome.output == ""
        assert "syntax error" in outcome.error

    @patch("codewalk.playground.httpx.post")
    def test_http_failure(self, mock_post):
        mock_post.return_value = _make_response(503, reason="Service Unavailable")
        outcome = GoPlaygroundClient().compile_and_run("package main")
        assert outcome.error == "HTTP 503: Service Unavailable"

    @patch("codewalk.playground.httpx.post")
    def test_network_failure(self, mock_post):
        mock_post.side_effect = httpx.ConnectError("connection refused")
        outcome = GoPlaygroundClient().compile_and_run("package main")
        assert "connection refused" in outcome.error

    def test_to_dict(self):
        from codewalk.playground import CompileOutcome

        assert CompileOutcome(output="x").to_dict() == {"output": "x", "error": None}
