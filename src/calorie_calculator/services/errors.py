"""Errors raised by server-side services and rendered as JSON responses."""


class ServiceError(Exception):
    """Request failure with an HTTP status and a client-facing message."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class BadRequestError(ServiceError):
    """Missing or malformed input."""

    status_code = 400


class UnauthorizedError(ServiceError):
    """Missing, invalid or expired credentials."""

    status_code = 401


class NotFoundError(ServiceError):
    """The requested record does not exist."""

    status_code = 404


class ConflictError(ServiceError):
    """The record already exists."""

    status_code = 409
