"""Domain exceptions raised by the service layer.

Each exception carries the HTTP status the API layer renders it with, so
services never import FastAPI.
"""

from fastapi import status


class ThreadlineError(Exception):
    """Base exception for all Threadline errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str = "An unexpected error occurred") -> None:
        self.message = message
        super().__init__(self.message)


class InvalidArgumentError(ThreadlineError):
    """Raised when a request carries a malformed or out-of-range value."""

    status_code = status.HTTP_400_BAD_REQUEST


class UnauthorizedError(ThreadlineError):
    """Raised when the caller's identity cannot be verified."""

    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Could not validate credentials") -> None:
        super().__init__(message)


class ForbiddenError(ThreadlineError):
    """Raised when an authenticated caller may not act on a resource."""

    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(ThreadlineError):
    """Raised when a requested resource is missing or soft-deleted."""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, resource: str) -> None:
        super().__init__(f"{resource} not found")


class ConflictError(ThreadlineError):
    """Raised when a unique resource already exists."""

    status_code = status.HTTP_409_CONFLICT


class InternalError(ThreadlineError):
    """Raised when the storage layer fails; the message is never client-facing detail."""

    def __init__(self, message: str = "Internal server error") -> None:
        super().__init__(message)
