"""Tests for the Flask course API."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from codewalk.config import Config
from codewalk.playground import CompileOutcome
from codewalk.web.app import create_app


@pytest.fixture
def playground():
    client = MagicMock()
    client.compile_and_run.return_value = CompileOutcome(output="Hello, World!\n")
    return client


@pytest.fixture
def client(tmp_path, playground):
    app = create_app(Config(db_path=str(tmp_path / "test.db")), playground=playground)
    app.config["TESTING"] = True
    return app.test_client()


class TestCourses:
    def test_list_courses(self, client):
        resp = client.get("/api/courses")
        assert resp.status_code == 200
        courses = resp.get_json()
        ids = [c["id"] for c in courses]
        assert "go-basics" in ids
        go = next(c for c in courses if c["id"] == "go-basics")
        assert go["lessons_count"] == 3
        assert go["level"] == "beginner"

    def test_course_detail_orders_lessons(self, client):
        resp = client.get("/api/courses/go-basics")
        assert resp.status_code == 200
        data = resp.get_json()
        assert data["title"] == "Go Basics"
        orders = [lesson["order"] for lesson in data["lessons"]]
        assert orders == sorted(orders)
        assert [lesson["id"] for lesson in data["lessons"]] == ["hello", "loop", "fibonacci"]
        assert "code" not in data["lessons"][0]

    def test_unknown_course(self, client):
        resp = client.get("/api/courses/rust")
        assert resp.status_code == 404
        assert resp.get_json() == {"error": "Course not found"}

    def test_lesson_detail(self, client):
        resp = client.get("/api/courses/go-basics/lessons/hello")
        assert resp.status_code == 200
        lesson = resp.get_json()
        assert lesson["course_id"] == "go-basics"
        assert "fmt.Println" in lesson["code"]
        assert lesson["expected_output"] == "Hello, World!\n"
        assert isinstance(lesson["hints"], list) and lesson["hints"]

    def test_unknown_lesson(self, client):
        resp = client.get("/api/courses/go-basics/lessons/nope")
        assert resp.status_code == 404
        assert resp.get_json() == {"error": "Lesson not found"}

    def test_seeding_is_idempotent(self, tmp_path, playground):
        config = Config(db_path=str(tmp_path / "again.db"))
        create_app(config, playground=playground)
        app = create_app(config, playground=playground)
        courses = app.test_client().get("/api/courses").get_json()
        assert len(courses) == len({c["id"] for c in courses})


class TestCompile:
    def test_compile(self, client, playground):
        resp = client.post("/api/compile", json={"code": "package main"})
        assert resp.status_code == 200
        assert resp.get_json() == {"output": "Hello, World!\n", "error": None}
        playground.compile_and_run.assert_called_once_with("package main")

    def test_compile_error_payload(self, client, playground):
        playground.compile_and_run.return_value = CompileOutcome(output="", error="syntax error line 3")
        resp = client.post("/api/compile", json={"code": "func"})
        assert resp.status_code == 200
        assert resp.get_json()["error"] == "syntax error line 3"

    def test_missing_code(self, client, playground):
        resp = client.post("/api/compile", json={})
        assert resp.status_code == 400
        assert resp.get_json() == {"error": "Code is required"}
        playground.compile_and_run.assert_not_called()

    def test_compile_requires_post(self, client):
        resp = client.get("/api/compile")
        assert resp.status_code == 405


class TestMisc:
    def test_health(self, client):
        data = client.get("/health").get_json()
        assert data["status"] == "ok"
        assert data["timestamp"]

    def test_unknown_route(self, client):
        resp = client.get("/api/nothing")
        assert resp.status_code == 404
        assert resp.get_json() == {"error": "Not found"}

    def test_cors_headers(self, client):
        resp = client.get("/health")
        assert resp.headers["Access-Control-Allow-Origin"] == "*"

    def test_preflight(self, client):
        resp = client.options("/api/compile")
        assert resp.status_code == 200
        assert "POST" in resp.headers["Access-Control-Allow-Methods"]
