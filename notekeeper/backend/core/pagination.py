"""
Pagination Utilities.

List endpoints take ``limit`` and ``offset`` query parameters. An absent
limit falls back to application.pagination.default_limit and any limit is
clamped to max_limit, so a client can never ask for an unbounded page.
"""

from dataclasses import dataclass
from typing import Any

from fastapi import Query
from pydantic import BaseModel

from notekeeper.backend.core.config import get_app_config
from notekeeper.backend.schemas.base import PaginatedResponse, PaginationInfo, ResponseMetadata


@dataclass
class PaginationParams:
    limit: int
    offset: int


def get_pagination_params(
    limit: int | None = Query(
        default=None,
        ge=1,
        description="Page size, clamped to the configured maximum",
    ),
    offset: int = Query(default=0, ge=0, description="Items to skip"),
) -> PaginationParams:
    """Dependency: ``pagination: PaginationParams = Depends(get_pagination_params)``."""
    bounds = get_app_config().application.pagination
    return PaginationParams(
        limit=min(limit or bounds.default_limit, bounds.max_limit),
        offset=offset,
    )


def create_paginated_response(
    items: list[Any],
    item_schema: type[BaseModel],
    total: int,
    limit: int,
    offset: int = 0,
    request_id: str | None = None,
) -> dict[str, Any]:
    """
    Serialise one page through item_schema into the PaginatedResponse envelope.

    items may be ORM rows or dicts; total counts every match, not just this page.
    """
    page = PaginatedResponse(
        data=[item_schema.model_validate(item).model_dump(mode="json") for item in items],
        pagination=PaginationInfo.for_page(total=total, limit=limit, offset=offset, count=len(items)),
        metadata=ResponseMetadata(request_id=request_id),
    )
    return page.model_dump(mode="json")
