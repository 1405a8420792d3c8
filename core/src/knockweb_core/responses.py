from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class ErrorBody(BaseModel):
    code: str
    message: str
    details: Any | None = None


class ErrorResponse(BaseModel):
    ok: bool = False
    error: ErrorBody


def fail(*, code: str, message: str, details: Any | None = None) -> ErrorResponse:
    return ErrorResponse(error=ErrorBody(code=code, message=message, details=details))


def status_to_code(status_code: int) -> str:
    if status_code == 404:
        return "not_found"
    if status_code == 405:
        return "method_not_allowed"
    if status_code == 422:
        return "validation_error"
    if 400 <= status_code < 500:
        return "client_error"
    return "server_error"
