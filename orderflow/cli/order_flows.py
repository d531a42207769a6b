"""
Order Flow API Client.

Typed wrapper over the order-flow REST endpoints, used by the admin CLI.
Reads are memoised in a QueryCache; every mutation invalidates the
cached order-flow queries so the next read goes to the server.
"""

from typing import Any

import httpx

from orderflow.backend.core.config import get_app_config
from orderflow.backend.core.logging import get_logger, log_with_source
from orderflow.cli.client import APIClient

logger = get_logger(__name__)

FLOWS_PREFIX = "order-flows"
SHOPS_PREFIX = "shops"

CacheKey = tuple[Any, ...]


class QueryCache:
    """
    In-memory cache of GET results keyed by (path, params) tuples.

    Keys start with a resource prefix ("order-flows", "shops") so a
    mutation can drop every query for that resource at once.
    """

    def __init__(self) -> None:
        self._entries: dict[CacheKey, Any] = {}

    @staticmethod
    def make_key(path: str, params: dict[str, Any] | None = None) -> CacheKey:
        parts = tuple(p for p in path.strip("/").split("/") if p)
        frozen = tuple(sorted((params or {}).items()))
        return (*parts, frozen)

    def get(self, key: CacheKey) -> Any | None:
        return self._entries.get(key)

    def set(self, key: CacheKey, value: Any) -> None:
        self._entries[key] = value

    def __contains__(self, key: CacheKey) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def invalidate(self, *prefix: str) -> int:
        """Drop every key starting with prefix. Returns the number removed."""
        stale = [key for key in self._entries if key[: len(prefix)] == prefix]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def clear(self) -> None:
        self._entries.clear()


class OrderFlowClient:
    """
    Client for /order-flows and the shop flow customisation endpoints.

    Every method returns the `data` member of the response envelope.
    Non-2xx responses raise httpx.HTTPStatusError; the server's error
    envelope is available on `exc.response.json()`.

    Usage:
        async with OrderFlowClient(APIClient(token=token)) as flows:
            flow = await flows.get_flow_for_shop(shop_id)
    """

    def __init__(
        self,
        api: APIClient | None = None,
        cache: QueryCache | None = None,
        api_prefix: str | None = None,
    ):
        self.api = api or APIClient()
        self.cache = cache if cache is not None else QueryCache()
        if api_prefix is None:
            api_prefix = get_app_config().application.api_prefix
        self.api_prefix = api_prefix.rstrip("/")

    async def __aenter__(self) -> "OrderFlowClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.api.close()

    def _url(self, path: str) -> str:
        return f"{self.api_prefix}/{path.lstrip('/')}"

    @staticmethod
    def _data(response: httpx.Response) -> Any:
        response.raise_for_status()
        if response.status_code == 204 or not response.content:
            return None
        return response.json().get("data")

    async def _query(self, path: str, params: dict[str, Any] | None = None) -> Any:
        params = {k: v for k, v in (params or {}).items() if v is not None}
        key = QueryCache.make_key(path, params)
        if key in self.cache:
            return self.cache.get(key)

        response = await self.api.get(self._url(path), params=params or None)
        data = self._data(response)
        self.cache.set(key, data)
        return data

    async def _mutate(
        self,
        method: str,
        path: str,
        json: Any | None = None,
        invalidate: tuple[str, ...] = (FLOWS_PREFIX,),
    ) -> Any:
        response = await self.api.request(method, self._url(path), json=json)
        data = self._data(response)
        for prefix in invalidate:
            removed = self.cache.invalidate(prefix)
            log_with_source(
                logger,
                "cli",
                "debug",
                "Query cache invalidated",
                prefix=prefix,
                removed=removed,
            )
        return data

    # Queries

    async def get_all_flows(self) -> list[dict[str, Any]]:
        return await self._query(FLOWS_PREFIX)

    async def get_flow_by_id(self, flow_id: str) -> dict[str, Any]:
        return await self._query(f"{FLOWS_PREFIX}/{flow_id}")

    async def get_vocabulary(self) -> dict[str, Any]:
        return await self._query(f"{FLOWS_PREFIX}/vocabulary")

    async def get_flow_for_shop(self, shop_id: str) -> dict[str, Any]:
        return await self._query(f"{FLOWS_PREFIX}/shop/{shop_id}")

    async def get_step_by_status(self, status: str, shop_id: str | None = None) -> dict[str, Any]:
        return await self._query(f"{FLOWS_PREFIX}/step/{status}", {"shopId": shop_id})

    async def get_next_statuses(self, status: str, shop_id: str | None = None) -> list[str]:
        return await self._query(f"{FLOWS_PREFIX}/next-statuses/{status}", {"shopId": shop_id})

    async def get_forwarding_destinations(
        self, status: str, shop_id: str | None = None
    ) -> list[dict[str, Any]]:
        return await self._query(
            f"{FLOWS_PREFIX}/forwarding-destinations/{status}", {"shopId": shop_id}
        )

    async def can_change_status(
        self,
        current_status: str,
        new_status: str,
        user_role: str,
        shop_id: str | None = None,
    ) -> bool:
        """Ask the server whether a role may move an order between statuses. Not cached."""
        body = {
            "currentStatus": current_status,
            "newStatus": new_status,
            "userRole": user_role,
        }
        if shop_id is not None:
            body["shopId"] = shop_id
        response = await self.api.post(self._url(f"{FLOWS_PREFIX}/can-change-status"), json=body)
        return bool(self._data(response)["canChange"])

    # Mutations

    async def create_flow(self, flow: dict[str, Any]) -> dict[str, Any]:
        return await self._mutate("POST", FLOWS_PREFIX, json=flow)

    async def update_flow(self, flow_id: str, updates: dict[str, Any]) -> dict[str, Any]:
        return await self._mutate("PUT", f"{FLOWS_PREFIX}/{flow_id}", json=updates)

    async def delete_flow(self, flow_id: str) -> dict[str, Any]:
        return await self._mutate("DELETE", f"{FLOWS_PREFIX}/{flow_id}")

    async def set_default_flow(self, flow_id: str) -> dict[str, Any]:
        return await self._mutate("POST", f"{FLOWS_PREFIX}/{flow_id}/set-default")

    async def customize_shop_flow(
        self, shop_id: str, flow: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        """Create or update the shop's custom flow (copy of the default when flow is None)."""
        return await self._mutate(
            "POST",
            f"{SHOPS_PREFIX}/{shop_id}/order-flow/customize",
            json=flow,
            invalidate=(FLOWS_PREFIX, SHOPS_PREFIX),
        )

    async def reset_shop_flow(self, shop_id: str) -> dict[str, Any]:
        """Delete the shop's custom flow; returns the flow now in effect."""
        return await self._mutate(
            "DELETE",
            f"{SHOPS_PREFIX}/{shop_id}/order-flow",
            invalidate=(FLOWS_PREFIX, SHOPS_PREFIX),
        )
