"""Uniform response envelope shared by every handler outcome."""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, Field

from dnsqueryx.core.errors import CODE_OK

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Envelope wrapping every handler response body.

    ``data`` is populated only on success; failures always serialize it as
    ``null``.
    """

    code: str = Field(..., description="Status code; '00000' means success.")
    msg: str = Field(..., description="Human-readable status message.")
    data: T | None = Field(
        default=None,
        description="Payload, present only when code is '00000'.",
    )

    @classmethod
    def ok(cls, data: T) -> "ApiResponse[T]":
        return cls(code=CODE_OK, msg="OK", data=data)

    @classmethod
    def fail(cls, code: str, msg: str) -> "ApiResponse[T]":
        return cls(code=code, msg=msg, data=None)
