"""Error taxonomy shared by the services and the HTTP boundary."""

from __future__ import annotations


class ServiceError(Exception):
    """Base class for errors that carry an HTTP status."""

    status_code = 500
    reason = "Internal Server Error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(ServiceError):
    status_code = 400
    reason = "Bad Request"


class UnauthorizedError(ServiceError):
    status_code = 401
    reason = "Unauthorized"


class NotFoundError(ServiceError):
    status_code = 404
    reason = "Not Found"


class ConflictError(ServiceError):
    status_code = 409
    reason = "Conflict"


class InternalError(ServiceError):
    """Unclassified failure; the message is safe to return to callers."""

    status_code = 500
    reason = "Internal Server Error"
