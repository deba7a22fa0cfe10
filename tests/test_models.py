"""Tests for data models and payload parsing."""

import pytest

from codewalk.errors import NotFoundError, TransportError
from codewalk.models import (
    Course,
    CourseDetail,
    ErrorKind,
    Lesson,
    Level,
    RunResult,
    Verdict,
    parse_hints,
)


def test_verdict_enum():
    assert Verdict.MATCH.value == "match"
    assert Verdict.MISMATCH.value == "mismatch"
    assert Verdict.NOT_APPLICABLE.value == "not-applicable"


def test_course_from_dict():
    course = Course.from_dict(
        {
            "id": "go-basics",
            "title": "Go Basics",
            "description": "Core concepts",
            "instructor": "Zhang San",
            "duration": 12,
            "level": "beginner",
            "category": "programming",
            "lessons_count": 3,
        }
    )
    assert course.level is Level.BEGINNER
    assert course.duration == 12
    assert course.lessons_count == 3


def test_course_rejects_unknown_level():
    with pytest.raises(ValueError):
        Course.from_dict({"id": "x", "title": "X", "level": "expert"})


def test_course_detail_keeps_store_order():
    detail = CourseDetail.from_dict(
        {
            "id": "go-basics",
            "title": "Go Basics",
            "lessons": [
                {"id": "b", "title": "B", "order": 5},
                {"id": "a", "title": "A", "order": 9, "description": None},
            ],
        }
    )
    assert [lesson.id for lesson in detail.lessons] == ["b", "a"]
    assert detail.course.id == "go-basics"


def test_lesson_from_dict():
    lesson = Lesson.from_dict(
        {
            "id": "hello",
            "course_id": "go-basics",
            "title": "Hello",
            "description": None,
            "content": "# Hello",
            "code": "package main",
            "hints": '["first", "second"]',
            "expected_output": "Hello, World!\n",
            "order": 1,
        }
    )
    assert lesson.hints == ["first", "second"]
    assert lesson.expected_output == "Hello, World!\n"


def test_parse_hints_variants():
    assert parse_hints(None) == []
    assert parse_hints("") == []
    assert parse_hints(["a", "b"]) == ["a", "b"]
    assert parse_hints('["a"]') == ["a"]
    assert parse_hints("just a tip") == ["just a tip"]


def test_run_result_ok():
    assert RunResult(output="x").ok
    assert not RunResult(error="boom", kind=ErrorKind.EXECUTION).ok


def test_error_kinds():
    assert TransportError("down", 503).kind is ErrorKind.TRANSPORT
    assert TransportError("down", 503).status_code == 503
    err = NotFoundError("lesson", "loop")
    assert str(err) == "Lesson loop not found"
    assert err.identifier == "loop"
