"""Data models for codewalk."""

from __future__ import annotations

import enum
import json
from dataclasses import dataclass, field


class Level(enum.Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class Verdict(enum.Enum):
    NOT_APPLICABLE = "not-applicable"
    MATCH = "match"
    MISMATCH = "mismatch"


class ErrorKind(enum.Enum):
    VALIDATION = "validation"
    TRANSPORT = "transport"
    EXECUTION = "execution"


class SessionState(enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    ERRORED = "errored"


class PageState(enum.Enum):
    LOADING = "loading"
    READY = "ready"
    NOT_FOUND = "not_found"
    ERROR = "error"


@dataclass(frozen=True)
class Course:
    id: str
    title: str
    description: str = ""
    instructor: str = ""
    duration: int = 0  # hours
    level: Level = Level.BEGINNER
    category: str = ""
    lessons_count: int = 0
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> Course:
        return cls(
            id=data["id"],
            title=data["title"],
            description=data.get("description") or "",
            instructor=data.get("instructor") or "",
            duration=int(data.get("duration") or 0),
            level=Level(data.get("level") or "beginner"),
            category=data.get("category") or "",
            lessons_count=int(data.get("lessons_count") or 0),
            created_at=data.get("created_at") or "",
            updated_at=data.get("updated_at") or "",
        )


@dataclass(frozen=True)
class LessonSummary:
    id: str
    title: str
    order: int
    description: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> LessonSummary:
        return cls(
            id=data["id"],
            title=data["title"],
            order=int(data["order"]),
            description=data.get("description"),
        )


@dataclass(frozen=True)
class CourseDetail:
    course: Course
    lessons: list[LessonSummary] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> CourseDetail:
        return cls(
            course=Course.from_dict(data),
            lessons=[LessonSummary.from_dict(item) for item in data.get("lessons") or []],
        )


@dataclass(frozen=True)
class Lesson:
    id: str
    course_id: str
    title: str
    order: int
    content: str = ""
    code: str = ""
    description: str | None = None
    hints: list[str] = field(default_factory=list)
    expected_output: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> Lesson:
        return cls(
            id=data["id"],
            course_id=data["course_id"],
            title=data["title"],
            order=int(data["order"]),
            content=data.get("content") or "",
            code=data.get("code") or "",
            description=data.get("description"),
            hints=parse_hints(data.get("hints")),
            expected_output=data.get("expected_output"),
        )


def parse_hints(raw) -> list[str]:
    """Normalize stored hints: a list, a JSON-encoded list, or a bare string."""
    if not raw:
        return []
    if isinstance(raw, list):
        return [str(h) for h in raw]
    try:
        decoded = json.loads(raw)
    except (TypeError, ValueError):
        return [str(raw)]
    if isinstance(decoded, list):
        return [str(h) for h in decoded]
    return [str(decoded)]


@dataclass
class RunResult:
    output: str = ""
    error: str | None = None
    kind: ErrorKind | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
