"""Machine-to-machine authentication against a Logto tenant."""

import logging
from typing import Optional

import httpx

from .api import LogtoClient
from .config import Config
from .exceptions import LogtoAuthenticationError, LogtoNetworkError
from .utils import DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)

TOKEN_PATH = "/oidc/token"


async def fetch_access_token(
    config: Config,
    timeout: float = DEFAULT_TIMEOUT,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> str:
    """Obtain a Management API access token with client credentials.

    Args:
        config: Tenant configuration
        timeout: Request timeout in seconds
        transport: Optional httpx transport (used by tests)

    Returns:
        Access token string

    Raises:
        LogtoAuthenticationError: If the token endpoint rejects the request
        LogtoNetworkError: If the token endpoint is unreachable
    """
    url = f"{config.endpoint}{TOKEN_PATH}"
    form = {
        "grant_type": "client_credentials",
        "resource": config.resource,
        "scope": "all",
    }
    logger.debug(f"Requesting access token from {url} for {config.resource}")

    async with httpx.AsyncClient(
        timeout=httpx.Timeout(timeout), transport=transport
    ) as client:
        try:
            response = await client.post(
                url, data=form, auth=(config.client_id, config.client_secret)
            )
        except httpx.RequestError as e:
            raise LogtoNetworkError(
                f"Network error while requesting access token: {e}",
                method="POST",
                url=url,
            ) from e

    try:
        payload = response.json() if response.content else {}
    except ValueError:
        payload = {}

    if response.is_error:
        detail = ""
        if isinstance(payload, dict):
            detail = payload.get("error_description") or payload.get("error") or ""
        message = f"Failed to obtain access token (status {response.status_code})"
        if detail:
            message = f"{message}: {detail}"
        raise LogtoAuthenticationError(
            message,
            status=response.status_code,
            method="POST",
            url=url,
            body=payload or response.text,
        )

    token = payload.get("access_token") if isinstance(payload, dict) else None
    if not token:
        raise LogtoAuthenticationError(
            "Token endpoint response did not contain an access_token",
            status=response.status_code,
            method="POST",
            url=url,
            body=payload or response.text,
        )
    return token


async def create_api_client(
    config: Config,
    timeout: float = DEFAULT_TIMEOUT,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> LogtoClient:
    """Create an authenticated Management API client.

    Args:
        config: Tenant configuration
        timeout: Request timeout in seconds
        transport: Optional httpx transport shared by token and API calls

    Returns:
        LogtoClient carrying a bearer token
    """
    token = await fetch_access_token(config, timeout=timeout, transport=transport)
    return LogtoClient(
        config.endpoint, access_token=token, timeout=timeout, transport=transport
    )
