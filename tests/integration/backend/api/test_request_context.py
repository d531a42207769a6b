"""
Correlation headers on the live app.

Every response, error envelopes included, carries X-Request-ID and
X-Response-Time, and error envelopes repeat the request id in metadata.
"""

import re
import uuid

import pytest
from httpx import AsyncClient

MILLISECONDS = re.compile(r"^\d+ms$")


@pytest.mark.parametrize("path", ["/health", "/health/ready", "/api/v1/order-flows"])
async def test_generated_request_id_is_a_uuid(client: AsyncClient, path):
    response = await client.get(path)

    assert uuid.UUID(response.headers["X-Request-ID"]).version == 4


async def test_caller_request_id_is_echoed(client: AsyncClient):
    response = await client.get("/health", headers={"X-Request-ID": "checkout-7781"})

    assert response.status_code == 200
    assert response.headers["X-Request-ID"] == "checkout-7781"


async def test_response_time_is_whole_milliseconds(client: AsyncClient):
    response = await client.get("/health")

    assert MILLISECONDS.match(response.headers["X-Response-Time"])


class TestErrorResponses:
    async def test_missing_flow_keeps_timing_header(self, client: AsyncClient, admin_headers, api):
        response = await client.get("/api/v1/order-flows/no-such-flow", headers=admin_headers)

        api.assert_error(response, 404)
        assert MILLISECONDS.match(response.headers["X-Response-Time"])

    async def test_not_found_envelope_carries_request_id(self, client: AsyncClient, admin_headers, api):
        headers = {**admin_headers, "X-Request-ID": "lookup-404"}

        body = api.assert_error(
            await client.get("/api/v1/order-flows/no-such-flow", headers=headers), 404
        )

        assert body["metadata"]["request_id"] == "lookup-404"

    async def test_validation_envelope_carries_request_id(self, client: AsyncClient, admin_headers, api):
        headers = {**admin_headers, "X-Request-ID": "setting-422"}

        body = api.assert_validation_error(
            await client.post("/api/v1/settings", json={}, headers=headers)
        )

        assert body["metadata"]["request_id"] == "setting-422"
