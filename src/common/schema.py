"""Common schemas for the API."""

import typing as t

from ninja import Schema

from .enums import ErrorCode


class VersionResponse(Schema):
    version: str


class ResponseOk(Schema):
    status: t.Literal["ok"] = "ok"


class ResponseMessage(Schema):
    message: str


class ErrorResponse(Schema):
    code: ErrorCode
    detail: str


class ValidationErrorResponse(Schema):
    code: ErrorCode = ErrorCode.INVALID_REQUEST
    errors: dict[str, str | list[str]]
