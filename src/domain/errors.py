from __future__ import annotations


class SnipStashError(Exception):
    """Base error carrying a machine-readable code and an HTTP-like status."""

    code = "INTERNAL_SERVER_ERROR"
    status = 500

    def __init__(self, message: str, code: str | None = None, status: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        if status is not None:
            self.status = status

    def to_dict(self) -> dict:
        return {"message": self.message, "code": self.code, "status": self.status}


class InvalidRequestError(SnipStashError, ValueError):
    """A list/search request that cannot be planned."""

    code = "INVALID_REQUEST"
    status = 400


class ValidationError(SnipStashError, ValueError):
    """Write payload failed validation."""

    code = "VALIDATION_ERROR"
    status = 400


class NotFoundError(SnipStashError, LookupError):
    """Record is missing or belongs to another user (the two are indistinguishable)."""

    code = "NOT_FOUND"
    status = 404
