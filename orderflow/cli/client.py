"""
HTTP transport for the admin CLI.

APIClient is a thin wrapper over httpx.AsyncClient that knows where the
order flow API lives (application.yaml server block), tags every request
with X-Frontend-ID: cli and, when given a token, sends it as a bearer
header. OrderFlowClient in order_flows.py builds on it.
"""

from typing import Any

import httpx

from orderflow.backend.core.config import get_server_base_url
from orderflow.backend.core.logging import get_logger, log_with_source

logger = get_logger(__name__)

DEFAULT_TIMEOUT = 30.0


def _configured_target(base_url: str | None, timeout: float | None) -> tuple[str, float]:
    """Fill whatever the caller left out from application.yaml."""
    if base_url is not None and timeout is not None:
        return base_url, timeout
    try:
        config_url, config_timeout = get_server_base_url()
    except (RuntimeError, FileNotFoundError, ValueError) as e:
        if base_url is None:
            raise RuntimeError(
                "Could not determine server URL from config/settings/application.yaml"
            ) from e
        config_url, config_timeout = base_url, DEFAULT_TIMEOUT
    return base_url or config_url, config_timeout if timeout is None else timeout


class APIClient:
    """
    Lazily opened httpx client bound to the order flow API.

    Args:
        base_url: API root; defaults to http://<server.host>:<server.port>.
        timeout: Seconds per request; defaults to timeouts.external_api.
        token: Bearer token for admin-only routes.
        transport: Replacement transport, e.g. httpx.MockTransport in tests.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        base_url, timeout = _configured_target(base_url, timeout)
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.token = token
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def headers(self) -> dict[str, str]:
        headers = {"X-Frontend-ID": "cli"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _http(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers=self.headers,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    async def request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Send one request; transport failures are logged and re-raised as httpx errors."""
        try:
            response = await self._http().request(method, path, **kwargs)
        except httpx.HTTPError as e:
            log_with_source(
                logger, "cli", "error", "API request failed", method=method, path=path, error=str(e)
            )
            raise
        log_with_source(
            logger,
            "cli",
            "debug",
            "API request",
            method=method,
            path=path,
            status_code=response.status_code,
        )
        return response

    async def get(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("POST", path, **kwargs)

    async def put(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("PUT", path, **kwargs)

    async def patch(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("PATCH", path, **kwargs)

    async def delete(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("DELETE", path, **kwargs)


_shared: APIClient | None = None


def get_api_client() -> APIClient:
    """Process-wide anonymous client, used by the health commands."""
    global _shared
    if _shared is None:
        _shared = APIClient()
    return _shared


async def close_api_client() -> None:
    global _shared
    if _shared is not None:
        await _shared.close()
        _shared = None
