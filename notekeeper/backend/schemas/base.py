"""
Base Schemas.

Every JSON body the API returns is one of three envelopes:

    ApiResponse        {"success": true,  "data": {...}, "error": null, "metadata": {...}}
    PaginatedResponse  {"success": true,  "data": [...], "pagination": {...}, ...}
    ErrorResponse      {"success": false, "data": null,  "error": {"code", "message", "details"}, ...}
"""

from datetime import datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from notekeeper.backend.core.utils import utc_now

DataT = TypeVar("DataT")


class ResponseMetadata(BaseModel):
    timestamp: datetime = Field(default_factory=utc_now)
    request_id: str | None = None


class ErrorDetail(BaseModel):
    """``code`` is stable and machine-readable; ``message`` is for people."""

    code: str
    message: str
    details: dict[str, Any] | None = None


class PaginationInfo(BaseModel):
    total: int
    limit: int
    offset: int = 0
    has_more: bool = False

    @classmethod
    def for_page(cls, total: int, limit: int, offset: int, count: int) -> "PaginationInfo":
        """count is the number of items actually returned on this page."""
        return cls(total=total, limit=limit, offset=offset, has_more=offset + count < total)


class ApiResponse(BaseModel, Generic[DataT]):
    model_config = ConfigDict(from_attributes=True)

    success: bool = True
    data: DataT | None = None
    error: ErrorDetail | None = None
    metadata: ResponseMetadata = Field(default_factory=ResponseMetadata)


class PaginatedResponse(BaseModel, Generic[DataT]):
    success: bool = True
    data: list[DataT]
    error: None = None
    metadata: ResponseMetadata = Field(default_factory=ResponseMetadata)
    pagination: PaginationInfo


class ErrorResponse(BaseModel):
    success: bool = False
    data: None = None
    error: ErrorDetail
    metadata: ResponseMetadata = Field(default_factory=ResponseMetadata)
