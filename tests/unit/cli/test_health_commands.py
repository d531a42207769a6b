"""Unit tests for `orderflow-admin health`."""

from unittest.mock import patch

import httpx
import pytest
from typer.testing import CliRunner

from orderflow.cli.client import APIClient
from orderflow.cli.main import app

runner = CliRunner()

DETAILED = {
    "status": "healthy",
    "checks": {
        "database": {"status": "healthy", "latency_ms": 3},
        "telegram": {"status": "disabled"},
    },
    "application": {"name": "Order Flow Service", "version": "0.1.0", "env": "test"},
}


@pytest.fixture
def serve():
    """Answer health paths with the given (status, body) pairs."""

    def install(responses: dict[str, tuple[int, dict]]):
        def handler(request: httpx.Request) -> httpx.Response:
            status, body = responses[request.url.path]
            return httpx.Response(status, json=body)

        client = APIClient(base_url="http://test", transport=httpx.MockTransport(handler))
        return (
            patch("orderflow.cli.commands.health.get_api_client", return_value=client),
            patch("orderflow.cli.commands.health.close_api_client", new=client.close),
        )

    return install


def _invoke(patches, *args: str):
    with patches[0], patches[1]:
        return runner.invoke(app, ["health", *args])


class TestStatus:
    def test_ready(self, serve) -> None:
        result = _invoke(serve({"/health/ready": (200, {"status": "healthy"})}), "status")

        assert result.exit_code == 0
        assert "HEALTHY" in result.stdout

    def test_detailed_lists_components(self, serve) -> None:
        result = _invoke(serve({"/health/detailed": (200, DETAILED)}), "status", "--detailed")

        assert result.exit_code == 0
        assert "database" in result.stdout
        assert "telegram" in result.stdout
        assert "Order Flow Service" in result.stdout

    def test_unhealthy_exits_1(self, serve) -> None:
        result = _invoke(serve({"/health/ready": (503, {"status": "unhealthy"})}), "status")

        assert result.exit_code == 1
        assert "UNHEALTHY" in result.stdout

    def test_unreachable_backend(self) -> None:
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        client = APIClient(base_url="http://test", transport=httpx.MockTransport(refuse))
        with (
            patch("orderflow.cli.commands.health.get_api_client", return_value=client),
            patch("orderflow.cli.commands.health.close_api_client", new=client.close),
        ):
            result = runner.invoke(app, ["health", "status"])

        assert result.exit_code == 1
        assert "Cannot connect" in result.stdout


class TestPing:
    def test_reachable(self, serve) -> None:
        result = _invoke(serve({"/health": (200, {"status": "healthy"})}), "ping")

        assert result.exit_code == 0
        assert "reachable" in result.stdout


class TestLocalCheck:
    def test_all_checks_pass(self) -> None:
        result = runner.invoke(app, ["health", "check"])

        assert result.exit_code == 0, result.stdout
        assert "Health Check Results" in result.stdout
        assert "All checks passed!" in result.stdout

    def test_failed_check_exits_1(self) -> None:
        def broken() -> str:
            raise RuntimeError("config/.env missing")

        with patch(
            "orderflow.cli.commands.health.LOCAL_CHECKS", [("Secrets (.env)", broken)]
        ):
            result = runner.invoke(app, ["health", "check"])

        assert result.exit_code == 1
        assert "1 check(s) failed" in result.stdout
