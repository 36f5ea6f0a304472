# Pydantic schemas package
from notekeeper.backend.schemas.base import (
    ApiResponse,
    ErrorDetail,
    ErrorResponse,
    PaginatedResponse,
    ResponseMetadata,
)

__all__ = [
    "ApiResponse",
    "ErrorDetail",
    "ErrorResponse",
    "PaginatedResponse",
    "ResponseMetadata",
]
