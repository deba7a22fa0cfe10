"""Read-only client for the course API."""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable
from urllib.parse import quote

import httpx

from codewalk.config import Config
from codewalk.errors import NotFoundError, TransportError
from codewalk.models import Course, CourseDetail, Lesson

logger = logging.getLogger(__name__)


@runtime_checkable
class CourseStore(Protocol):
    async def list_courses(self) -> list[Course]: ...

    async def get_course(self, course_id: str) -> CourseDetail: ...

    async def get_lesson(self, course_id: str, lesson_id: str) -> Lesson: ...


class HttpCourseStore:
    """Fetches courses and lessons from the JSON API."""

    def __init__(self, config: Config, client: httpx.AsyncClient | None = None) -> None:
        self._base = config.api_url.rstrip("/")
        self._timeout = config.request_timeout
        self._client = client

    async def list_courses(self) -> list[Course]:
        data = await self._get("/courses", resource="courses", identifier="")
        return _parse(lambda: [Course.from_dict(item) for item in data], "courses")

    async def get_course(self, course_id: str) -> CourseDetail:
        data = await self._get(f"/courses/{quote(course_id, safe='')}", "course", course_id)
        return _parse(lambda: CourseDetail.from_dict(data), "course")

    async def get_lesson(self, course_id: str, lesson_id: str) -> Lesson:
        path = f"/courses/{quote(course_id, safe='')}/lessons/{quote(lesson_id, safe='')}"
        data = await self._get(path, "lesson", lesson_id)
        return _parse(lambda: Lesson.from_dict(data), "lesson")

    async def _get(self, path: str, resource: str, identifier: str):
        url = f"{self._base}{path}"
        logger.debug("GET %s", url)
        try:
            if self._client is not None:
                resp = await self._client.get(url)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    resp = await client.get(url)
        except httpx.HTTPError as e:
            raise TransportError(f"Failed to fetch {resource}: {e}") from e

        if resp.status_code == 404:
            raise NotFoundError(resource, identifier)
        if not resp.is_success:
            raise TransportError(
                f"Failed to fetch {resource}: HTTP {resp.status_code}: {resp.reason_phrase}",
                resp.status_code,
            )
        try:
            return resp.json()
        except ValueError:
            raise TransportError(f"Failed to fetch {resource}: invalid JSON") from None


def _parse(build, resource: str):
    try:
        return build()
    except (KeyError, TypeError, ValueError) as e:
        raise TransportError(f"Malformed {resource} payload: {e}") from e
