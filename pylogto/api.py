"""API client for the Logto Management API."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from .exceptions import (
    LogtoAPIError,
    LogtoAuthenticationError,
    LogtoInvalidResponseError,
    LogtoNetworkError,
    LogtoNotFoundError,
    LogtoPermissionError,
)
from .utils import DEFAULT_TIMEOUT, format_body

logger = logging.getLogger(__name__)


@dataclass
class ApiResponse:
    """Status and decoded JSON body of a successful request.

    ``data`` is None when the server sent no body.
    """

    status: int
    data: Any = None


class LogtoClient:
    """Authenticated client for the Logto Management API."""

    def __init__(
        self,
        base_url: str,
        access_token: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize Logto API client.

        Args:
            base_url: Tenant endpoint, e.g. ``https://abc123.logto.app``
            access_token: Bearer token for the Management API
            timeout: Request timeout in seconds (default: 30.0)
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self.access_token = access_token
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the httpx client."""
        if self._client is None or self._client.is_closed:
            headers = {"Accept": "application/json"}
            if self.access_token:
                headers["Authorization"] = f"Bearer {self.access_token}"
            self._client = httpx.AsyncClient(
                headers=headers,
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        """Close the client and release connections."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> LogtoClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    def _handle_http_error(
        self, response: httpx.Response, method: str, url: str
    ) -> LogtoAPIError:
        """Translate an error response into a LogtoAPIError.

        Args:
            response: The failed response
            method: HTTP method of the request
            url: Full request URL

        Returns:
            Exception to raise, carrying status and body
        """
        status_code = response.status_code
        body = _decode_body(response)
        context = {"status": status_code, "method": method, "url": url, "body": body}

        if status_code == 401:
            return LogtoAuthenticationError(
                "Invalid access token or unauthorized access", **context
            )
        elif status_code == 403:
            return LogtoPermissionError(
                "Access forbidden - check the M2M application roles", **context
            )
        elif status_code == 404:
            return LogtoNotFoundError("Resource not found", **context)

        error_msg = f"API request failed with status {status_code}"
        if isinstance(body, dict):
            msg = body.get("message") or body.get("error") or body.get("detail")
            if msg:
                error_msg = f"{error_msg}: {msg}"
        return LogtoAPIError(error_msg, **context)

    async def request(
        self, method: str, path: str, json: Any = None
    ) -> ApiResponse:
        """Make an API request.

        Nothing is retried: transport errors and error statuses are raised
        immediately.

        Args:
            method: HTTP method
            path: API path, e.g. ``/api/email-templates``
            json: Optional JSON body

        Returns:
            ApiResponse with status and decoded body

        Raises:
            LogtoAPIError: If the request fails
        """
        url = f"{self.base_url}/{path.lstrip('/')}"
        client = self._get_client()
        logger.debug(f"{method} {url}")

        try:
            response = await client.request(method, url, json=json)
        except httpx.RequestError as e:
            raise LogtoNetworkError(
                _network_error_message(e, url), method=method, url=url
            ) from e

        if response.is_error:
            raise self._handle_http_error(response, method, url)

        if not response.content:
            return ApiResponse(status=response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            raise LogtoInvalidResponseError(
                "Invalid JSON response from server",
                status=response.status_code,
                method=method,
                url=url,
                body=response.text,
            ) from e
        return ApiResponse(status=response.status_code, data=data)

    async def get(self, path: str) -> ApiResponse:
        return await self.request("GET", path)

    async def put(self, path: str, json: Any = None) -> ApiResponse:
        return await self.request("PUT", path, json=json)

    async def patch(self, path: str, json: Any = None) -> ApiResponse:
        return await self.request("PATCH", path, json=json)


def _decode_body(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


def _network_error_message(error: httpx.RequestError, url: str) -> str:
    lines = [
        f"Network error: {error}",
        f"URL: {url}",
        "",
        "Note: This appears to be a network error. Please check:",
        "  - Your network connection",
        "  - The Logto API endpoint is accessible",
        "  - Your API credentials are valid",
    ]
    return "\n".join(lines)


def describe_error(error: LogtoAPIError) -> str:
    """Render an error with its request context for operator diagnosis."""
    parts = [str(error)]
    if error.method and error.url:
        parts.append(f"Request: {error.method} {error.url}")
    if error.status is not None:
        parts.append(f"Status: {error.status}")
    if error.body is not None:
        parts.append(f"Response: {format_body(error.body)}")
    return "\n".join(parts)
