from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Standard API response envelope."""

    success: bool
    data: T | None = None
    error: str | None = None
    meta: dict | None = None

    @classmethod
    def ok(cls, data: T, meta: dict | None = None) -> "ApiResponse[T]":
        return cls(success=True, data=data, meta=meta)

    @classmethod
    def fail(cls, error: str, meta: dict | None = None) -> "ApiResponse[None]":
        return cls(success=False, error=error, meta=meta)


class PageResponse(BaseModel, Generic[T]):
    """Envelope for paginated lists: pagination fields sit beside ``data``."""

    success: bool
    data: list[T] | None = None
    error: str | None = None
    meta: dict | None = None
    total: int = 0
    page: int = 1
    limit: int = 0

    @classmethod
    def ok(
        cls,
        data: list[T],
        total: int,
        page: int,
        limit: int,
        meta: dict | None = None,
    ) -> "PageResponse[T]":
        return cls(success=True, data=data, total=total, page=page, limit=limit, meta=meta)

    @classmethod
    def fail(cls, error: str) -> "PageResponse[T]":
        return cls(success=False, error=error)
