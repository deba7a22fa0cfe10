"""Exception hierarchy shared by the backends, the course store and the controllers."""

from __future__ import annotations

from codewalk.models import ErrorKind


class CodewalkError(Exception):
    """Base exception for all codewalk errors."""

    kind: ErrorKind | None = None


class ValidationError(CodewalkError):
    """Raised when a run is requested with empty source."""

    kind = ErrorKind.VALIDATION


class TransportError(CodewalkError):
    """Raised when an endpoint is unreachable or answers with a non-success status."""

    kind = ErrorKind.TRANSPORT

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class ExecutionError(CodewalkError):
    """Raised when a backend reports a compile or runtime failure."""

    kind = ErrorKind.EXECUTION

    def __init__(self, message: str, output: str = ""):
        self.output = output
        super().__init__(message)


class NotFoundError(CodewalkError):
    """Raised when a course or lesson does not exist."""

    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource.capitalize()} {identifier} not found")
