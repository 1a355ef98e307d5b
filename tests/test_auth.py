"""Tests for client-credentials authentication."""

from urllib.parse import parse_qs

import httpx
import pytest

from pylogto.auth import create_api_client, fetch_access_token
from pylogto.config import Config
from pylogto.exceptions import LogtoAuthenticationError, LogtoNetworkError


@pytest.fixture
def config():
    """Tenant configuration on a cloud endpoint."""
    return Config(
        endpoint="https://abc123.logto.app",
        tenant_id="abc123",
        client_id="client",
        client_secret="secret",
    )


class TestFetchAccessToken:
    """Tests for fetch_access_token."""

    @pytest.mark.asyncio
    async def test_posts_client_credentials(self, config):
        """Test the token request form and basic auth."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["Authorization"]
            seen["form"] = parse_qs(request.content.decode())
            return httpx.Response(200, json={"access_token": "tok"})

        token = await fetch_access_token(config, transport=httpx.MockTransport(handler))

        assert token == "tok"
        assert seen["url"] == "https://abc123.logto.app/oidc/token"
        assert seen["auth"].startswith("Basic ")
        assert seen["form"] == {
            "grant_type": ["client_credentials"],
            "resource": ["https://abc123.logto.app/api"],
            "scope": ["all"],
        }

    @pytest.mark.asyncio
    async def test_error_description_in_message(self, config):
        """Test a rejected request reports the server description."""
        transport = httpx.MockTransport(
            lambda request: httpx.Response(
                401,
                json={"error": "invalid_client", "error_description": "bad secret"},
            )
        )

        with pytest.raises(LogtoAuthenticationError, match="bad secret") as exc_info:
            await fetch_access_token(config, transport=transport)

        assert exc_info.value.status == 401

    @pytest.mark.asyncio
    async def test_missing_token(self, config):
        """Test a success without access_token is an error."""
        transport = httpx.MockTransport(
            lambda request: httpx.Response(200, json={"token_type": "Bearer"})
        )

        with pytest.raises(LogtoAuthenticationError, match="access_token"):
            await fetch_access_token(config, transport=transport)

    @pytest.mark.asyncio
    async def test_network_error(self, config):
        """Test an unreachable token endpoint."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("unreachable", request=request)

        with pytest.raises(LogtoNetworkError):
            await fetch_access_token(config, transport=httpx.MockTransport(handler))


class TestCreateApiClient:
    """Tests for create_api_client."""

    @pytest.mark.asyncio
    async def test_client_uses_token(self, config):
        """Test the API client sends the fetched bearer token."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/oidc/token":
                return httpx.Response(200, json={"access_token": "tok"})
            seen["auth"] = request.headers["Authorization"]
            return httpx.Response(200, json=[])

        client = await create_api_client(config, transport=httpx.MockTransport(handler))
        try:
            response = await client.get("/api/email-templates")
        finally:
            await client.aclose()

        assert client.base_url == "https://abc123.logto.app"
        assert response.data == []
        assert seen["auth"] == "Bearer tok"
