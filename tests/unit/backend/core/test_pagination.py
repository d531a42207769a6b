"""
Unit Tests for Pagination Utilities.

Tests offset pagination parameters and the paginated response builder.
"""

from types import SimpleNamespace
from unittest.mock import patch

from pydantic import BaseModel

from orderflow.backend.core.pagination import (
    PaginationParams,
    create_paginated_response,
    get_pagination_params,
)
from orderflow.backend.schemas.base import CamelModel


class Item(BaseModel):
    id: str
    name: str


def _pagination_config(default_limit: int = 20, max_limit: int = 100) -> SimpleNamespace:
    return SimpleNamespace(
        application=SimpleNamespace(
            pagination=SimpleNamespace(default_limit=default_limit, max_limit=max_limit),
        ),
    )


class TestGetPaginationParams:
    """Tests for the pagination query dependency."""

    def test_missing_limit_uses_default(self):
        with patch(
            "orderflow.backend.core.config.get_app_config",
            return_value=_pagination_config(default_limit=25),
        ):
            params = get_pagination_params(limit=None, offset=0, search=None)

        assert params == PaginationParams(limit=25, offset=0, search=None)

    def test_limit_is_clamped_to_max(self):
        with patch(
            "orderflow.backend.core.config.get_app_config",
            return_value=_pagination_config(max_limit=50),
        ):
            params = get_pagination_params(limit=500, offset=10, search=None)

        assert params.limit == 50
        assert params.offset == 10

    def test_search_is_stripped(self):
        with patch(
            "orderflow.backend.core.config.get_app_config",
            return_value=_pagination_config(),
        ):
            params = get_pagination_params(limit=10, offset=0, search="  flow  ")

        assert params.search == "flow"

    def test_blank_search_becomes_none(self):
        with patch(
            "orderflow.backend.core.config.get_app_config",
            return_value=_pagination_config(),
        ):
            params = get_pagination_params(limit=10, offset=0, search="   ")

        assert params.search is None


class TestCreatePaginatedResponse:
    """Tests for the paginated response builder."""

    def test_creates_valid_response_structure(self):
        items = [{"id": "1", "name": "a"}, {"id": "2", "name": "b"}]

        response = create_paginated_response(items, Item, total=2, limit=20)

        assert response["success"] is True
        assert response["error"] is None
        assert [item["id"] for item in response["data"]] == ["1", "2"]

    def test_includes_pagination_info(self):
        items = [{"id": str(i), "name": "x"} for i in range(20)]

        response = create_paginated_response(items, Item, total=100, limit=20, offset=40)

        pagination = response["pagination"]
        assert pagination["total"] == 100
        assert pagination["limit"] == 20
        assert pagination["offset"] == 40
        assert pagination["has_more"] is True

    def test_has_more_false_at_end(self):
        items = [{"id": "99", "name": "last"}]

        response = create_paginated_response(items, Item, total=100, limit=20, offset=99)

        assert response["pagination"]["has_more"] is False

    def test_includes_request_id(self):
        response = create_paginated_response(
            [], Item, total=0, limit=20, request_id="test-request-123"
        )

        assert response["metadata"]["request_id"] == "test-request-123"

    def test_items_use_wire_aliases(self):
        class Flag(CamelModel):
            flag_type: str

        response = create_paginated_response(
            [{"flag_type": "bool"}], Flag, total=1, limit=20
        )

        assert response["data"] == [{"flagType": "bool"}]

    def test_handles_empty_items(self):
        response = create_paginated_response([], Item, total=0, limit=20)

        assert response["data"] == []
        assert response["pagination"]["has_more"] is False
