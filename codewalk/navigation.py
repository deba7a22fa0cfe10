"""Lesson navigation: ordered traversal of a course and the lesson-scoped UI state."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from urllib.parse import parse_qs, quote, unquote, urlencode, urlsplit

from codewalk.errors import CodewalkError, NotFoundError
from codewalk.models import Course, Lesson, LessonSummary, PageState, RunResult, Verdict
from codewalk.reconcile import reconcile
from codewalk.session import ExecutionSession
from codewalk.store import CourseStore

logger = logging.getLogger(__name__)

_COURSES_PREFIX = "/courses/"


@dataclass(frozen=True)
class Locator:
    """Shareable address of a course position, e.g. ``/courses/go-basics?lesson=intro``."""

    course_id: str
    lesson_id: str | None = None

    @classmethod
    def parse(cls, text: str) -> Locator:
        """Parse a locator from a path, a full URL or a bare course id."""
        parts = urlsplit(text.strip())
        path = parts.path
        if _COURSES_PREFIX in path:
            path = path.split(_COURSES_PREFIX, 1)[1]
        course_id = unquote(path.strip("/"))
        if not course_id or "/" in course_id:
            raise ValueError(f"Not a course locator: {text!r}")
        lesson = parse_qs(parts.query).get("lesson")
        return cls(course_id=course_id, lesson_id=lesson[0] if lesson else None)

    def with_lesson(self, lesson_id: str | None) -> Locator:
        return replace(self, lesson_id=lesson_id)

    def __str__(self) -> str:
        text = _COURSES_PREFIX + quote(self.course_id, safe="")
        if self.lesson_id:
            text += "?" + urlencode({"lesson": self.lesson_id})
        return text


class HintCursor:
    """Index into a lesson's hints plus the hint/answer disclosure toggles."""

    def __init__(self, hints: list[str] | None = None) -> None:
        self.reset(hints)

    def reset(self, hints: list[str] | None = None) -> None:
        self.hints = list(hints or [])
        self.index = 0
        self.collapse()

    @property
    def count(self) -> int:
        return len(self.hints)

    @property
    def current(self) -> str | None:
        if not self.hints:
            return None
        return self.hints[self.index]

    def next(self) -> None:
        if self.index < self.count - 1:
            self.index += 1

    def previous(self) -> None:
        if self.index > 0:
            self.index -= 1

    def toggle(self) -> None:
        self.visible = not self.visible

    def toggle_answer(self) -> None:
        self.answer_visible = not self.answer_visible

    def collapse(self) -> None:
        self.visible = False
        self.answer_visible = False


@dataclass(frozen=True)
class OutlineEntry:
    lesson: LessonSummary
    active: bool
    completed: bool


class LessonNavigator:
    """Tracks the active lesson of one course and keeps the session in step with it.

    Course and lesson fetches are tagged with generation counters; a response
    whose generation is no longer current is dropped.
    """

    def __init__(
        self,
        store: CourseStore,
        session: ExecutionSession,
        locator: Locator | None = None,
    ) -> None:
        self._store = store
        self._session = session
        self.locator = locator
        self.course: Course | None = None
        self.lessons: list[LessonSummary] = []
        self.lesson: Lesson | None = None
        self.active_id: str | None = None
        self.page_state = PageState.LOADING
        self.page_error: str | None = None
        self.hints = HintCursor()
        self.completed: set[str] = set()
        self.last_output = ""
        self._course_generation = 0
        self._lesson_generation = 0
        session.subscribe(self._on_output)

    @property
    def session(self) -> ExecutionSession:
        return self._session

    # -- course / lesson loading ------------------------------------------

    async def open(self, course_id: str | None = None, lesson_id: str | None = None) -> None:
        """Load a course and activate a lesson in it.

        Without an explicit lesson the locator's lesson is used, falling back
        to the first lesson of the course.
        """
        if course_id is None:
            if self.locator is None:
                raise ValueError("No course given and no locator to read it from")
            course_id = self.locator.course_id
        if lesson_id is None and self.locator is not None and self.locator.course_id == course_id:
            lesson_id = self.locator.lesson_id

        if self.course is None or self.course.id != course_id:
            if not await self._load_course(course_id):
                return
        if self.locator is None or self.locator.course_id != course_id:
            self.locator = Locator(course_id)

        if not self.lessons:
            self.page_state = PageState.READY
            return
        await self.select_lesson(lesson_id or self.lessons[0].id)

    async def _load_course(self, course_id: str) -> bool:
        self._course_generation += 1
        generation = self._course_generation
        # Any lesson fetch still in flight belongs to the previous course
        self._lesson_generation += 1
        self.page_state = PageState.LOADING
        try:
            detail = await self._store.get_course(course_id)
        except CodewalkError as e:
            if generation == self._course_generation:
                self.course = None
                self.lessons = []
                self.lesson = None
                self.active_id = None
                self.locator = Locator(course_id)
                self._fail(e)
            return False
        if generation != self._course_generation:
            logger.debug("Discarding stale course response for %s", course_id)
            return False

        logger.info("Loaded course %s with %d lessons", course_id, len(detail.lessons))
        self.course = detail.course
        self.lessons = list(detail.lessons)
        self.lesson = None
        self.active_id = None
        self.completed = set()
        return True

    async def select_lesson(self, lesson_id: str) -> None:
        """Make *lesson_id* the active lesson; selecting the active lesson again does nothing."""
        if self.course is None:
            raise RuntimeError("No course is open")
        if lesson_id == self.active_id and self.page_state in (PageState.READY, PageState.LOADING):
            return

        self.active_id = lesson_id
        self.locator = (self.locator or Locator(self.course.id)).with_lesson(lesson_id)
        self.lesson = None
        self.hints.reset()
        self._session.clear()
        self._lesson_generation += 1
        generation = self._lesson_generation

        if self.active_index is None:
            self._fail(NotFoundError("lesson", lesson_id))
            return

        self.page_state = PageState.LOADING
        try:
            lesson = await self._store.get_lesson(self.course.id, lesson_id)
        except CodewalkError as e:
            if generation == self._lesson_generation:
                self._fail(e)
            return
        if generation != self._lesson_generation:
            logger.debug("Discarding stale lesson response for %s", lesson_id)
            return

        self.lesson = lesson
        self.hints.reset(lesson.hints)
        self._session.load(lesson.code, lesson.expected_output, example=lesson.id)
        self.page_state = PageState.READY
        self.page_error = None

    def _fail(self, error: CodewalkError) -> None:
        if isinstance(error, NotFoundError):
            self.page_state = PageState.NOT_FOUND
        else:
            self.page_state = PageState.ERROR
        self.page_error = str(error)
        logger.warning("Navigation failed: %s", error)

    # -- traversal ----------------------------------------------------------

    @property
    def active_index(self) -> int | None:
        for i, summary in enumerate(self.lessons):
            if summary.id == self.active_id:
                return i
        return None

    @property
    def has_previous(self) -> bool:
        index = self.active_index
        return index is not None and index > 0

    @property
    def has_next(self) -> bool:
        index = self.active_index
        return index is not None and index < len(self.lessons) - 1

    async def go_next(self) -> None:
        if self.has_next:
            await self.select_lesson(self.lessons[self.active_index + 1].id)

    async def go_previous(self) -> None:
        if self.has_previous:
            await self.select_lesson(self.lessons[self.active_index - 1].id)

    # -- execution and feedback --------------------------------------------

    def set_source(self, text: str) -> None:
        self._session.set_source(text)

    async def run(self) -> RunResult | None:
        return await self._session.run()

    def clear_output(self) -> None:
        self._session.clear()

    @property
    def verdict(self) -> Verdict:
        expected = self.lesson.expected_output if self.lesson is not None else None
        return reconcile(self.last_output, expected)

    def _on_output(self, text: str) -> None:
        self.last_output = text
        if self.active_id is not None and self.verdict is Verdict.MATCH:
            self.completed.add(self.active_id)

    def outline(self) -> list[OutlineEntry]:
        return [
            OutlineEntry(
                lesson=summary,
                active=summary.id == self.active_id,
                completed=summary.id in self.completed,
            )
            for summary in self.lessons
        ]

    @property
    def progress(self) -> tuple[int, int]:
        ids = {summary.id for summary in self.lessons}
        return len(self.completed & ids), len(self.lessons)
