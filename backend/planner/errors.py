"""Planner error taxonomy.

Engine and store operations report these inside their result objects; the HTTP
layer maps them onto status codes through ``http_status``.
"""
from fastapi import HTTPException, status


class PlannerError(Exception):
    """Base class for every error the planner reports."""

    http_status: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class PermissionDenied(PlannerError):
    """Caller lacks the role or admin flag for the mutation."""

    http_status = status.HTTP_403_FORBIDDEN


class ValidationError(PlannerError):
    """A referenced employee, project or sprint does not resolve, or input is out of range."""

    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY


class NotFound(PlannerError):
    """Target sprint or allocation is absent from the loaded collections."""

    http_status = status.HTTP_404_NOT_FOUND


class BackendError(PlannerError):
    """The persistence call failed; the optimistic change was reverted."""

    http_status = status.HTTP_502_BAD_GATEWAY


class CapacityWarning(PlannerError):
    """Requested days exceed available capacity and need explicit confirmation."""

    http_status = status.HTTP_409_CONFLICT

    def __init__(self, message: str, requested: int, available: int) -> None:
        super().__init__(message)
        self.requested = requested
        self.available = available


def to_http_exception(error: PlannerError) -> HTTPException:
    return HTTPException(status_code=error.http_status, detail=error.message)
