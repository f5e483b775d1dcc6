from __future__ import annotations

from typing import Any

from pydantic import BaseModel


_STATUS_BY_CODE = {
    400: "INVALID_ARGUMENT",
    401: "UNAUTHENTICATED",
    403: "PERMISSION_DENIED",
    404: "NOT_FOUND",
    409: "ALREADY_EXISTS",
    429: "RESOURCE_EXHAUSTED",
    499: "CANCELLED",
    500: "INTERNAL",
    501: "NOT_IMPLEMENTED",
    503: "UNAVAILABLE",
    504: "DEADLINE_EXCEEDED",
}


def google_status(code: int) -> str:
    return _STATUS_BY_CODE.get(code, "UNKNOWN")


class ErrorBody(BaseModel):
    code: int
    message: str
    status: str
    details: list[dict[str, Any]] | None = None


def error_envelope(code: int, message: str, details: list[dict[str, Any]] | None = None) -> dict[str, Any]:
    body = ErrorBody(code=code, message=message, status=google_status(code), details=details)
    return {"error": body.model_dump(exclude_none=True)}


class ApiError(Exception):
    code = 500

    def __init__(self, message: str, *, code: int | None = None, details: list[dict[str, Any]] | None = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.details = details

    @property
    def status(self) -> str:
        return google_status(self.code)

    def to_envelope(self) -> dict[str, Any]:
        return error_envelope(self.code, self.message, self.details)


class InvalidArgumentError(ApiError):
    code = 400


class TokenLimitError(InvalidArgumentError):
    def __init__(self, token_count: int, limit: int) -> None:
        super().__init__(f"Request exceeds token limit. Input tokens: {token_count}, limit: {limit}")
        self.token_count = token_count
        self.limit = limit


class UnauthenticatedError(ApiError):
    code = 401


class PermissionDeniedError(ApiError):
    code = 403


class NotFoundError(ApiError):
    code = 404


class AlreadyExistsError(ApiError):
    code = 409
