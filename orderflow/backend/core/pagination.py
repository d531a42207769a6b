"""
Offset pagination for the settings and users listings.

Page sizes come from application.pagination: a request without `limit`
gets default_limit, and nothing larger than max_limit is ever served.
"""

from dataclasses import dataclass
from typing import Any

from fastapi import Query
from pydantic import BaseModel

from orderflow.backend.schemas.base import PaginatedResponse, PaginationInfo, ResponseMetadata


@dataclass
class PaginationParams:
    limit: int
    offset: int
    search: str | None = None


def get_pagination_params(
    limit: int | None = Query(default=None, ge=1, description="Page size; capped at the configured maximum"),
    offset: int = Query(default=0, ge=0, description="Rows to skip"),
    search: str | None = Query(default=None, max_length=100, description="Free-text filter"),
) -> PaginationParams:
    """FastAPI dependency; blank search text counts as no search."""
    from orderflow.backend.core.config import get_app_config

    bounds = get_app_config().application.pagination
    return PaginationParams(
        limit=min(limit or bounds.default_limit, bounds.max_limit),
        offset=offset,
        search=(search or "").strip() or None,
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
    Serialise one page through `item_schema` (camelCase aliases) into the
    list envelope. `has_more` is true while rows remain past this page.
    """
    page = PaginatedResponse(
        data=[item_schema.model_validate(item).model_dump(mode="json", by_alias=True) for item in items],
        pagination=PaginationInfo(
            total=total, limit=limit, offset=offset, has_more=offset + len(items) < total
        ),
        metadata=ResponseMetadata(request_id=request_id),
    )
    return page.model_dump(mode="json")
