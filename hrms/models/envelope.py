"""Uniform response envelope returned by every endpoint."""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class ErrorBody(BaseModel):
    code: str
    message: str
    details: list[dict[str, Any]] | None = None


class PaginationMeta(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    page: int
    page_size: int = Field(..., alias="pageSize")
    total: int
    total_pages: int = Field(..., alias="totalPages")


class ResponseMetadata(BaseModel):
    pagination: PaginationMeta | None = None


class ApiResponse(BaseModel, Generic[T]):
    success: bool
    data: T | None = None
    error: ErrorBody | None = None
    message: str | None = None
    metadata: ResponseMetadata | None = None


def error_envelope(code: str, message: str, details: list[dict[str, Any]] | None = None) -> dict[str, Any]:
    body = ApiResponse[Any](success=False, error=ErrorBody(code=code, message=message, details=details))
    return body.model_dump(mode="json", by_alias=True)
