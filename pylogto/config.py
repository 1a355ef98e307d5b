"""Configuration management for pylogto.

Configuration is read once at startup from the process environment,
optionally seeded from a ``.env`` file, and passed explicitly to every
collaborator afterwards.
"""

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from dotenv import dotenv_values

from .exceptions import LogtoConfigError
from .utils import (
    DEFAULT_EMAIL_TEMPLATES_PATH,
    extract_tenant_id,
    normalize_base_url,
    normalize_path,
)

logger = logging.getLogger(__name__)

ENV_ENDPOINT = "LOGTO_ENDPOINT"
ENV_TENANT_ID = "LOGTO_TENANT_ID"
ENV_CLIENT_ID = "LOGTO_M2M_CLIENT_ID"
ENV_CLIENT_SECRET = "LOGTO_M2M_CLIENT_SECRET"
ENV_TEMPLATES_PATH = "LOGTO_EMAIL_TEMPLATES_PATH"


@dataclass(frozen=True)
class Config:
    """Resolved tenant configuration."""

    endpoint: str
    """Base tenant URL without trailing slash"""

    tenant_id: str
    """Tenant id (explicit or derived from a *.logto.app endpoint)"""

    client_id: str
    """Machine-to-machine application id"""

    client_secret: str
    """Machine-to-machine application secret"""

    email_templates_path: str = DEFAULT_EMAIL_TEMPLATES_PATH
    """Management API path segment for email templates, without slashes"""

    @property
    def resource(self) -> str:
        """Management API resource indicator for the tenant."""
        return f"https://{self.tenant_id}.logto.app/api"

    @classmethod
    def from_env(cls, environ: Mapping[str, Optional[str]]) -> "Config":
        """Build a Config from environment style variables.

        Args:
            environ: Mapping of variable names to values

        Returns:
            Config instance

        Raises:
            LogtoConfigError: If a required variable is missing or the tenant
                id cannot be derived
        """
        endpoint = normalize_base_url(_required(environ, ENV_ENDPOINT))
        tenant_id = environ.get(ENV_TENANT_ID) or extract_tenant_id(endpoint)
        if not tenant_id:
            raise LogtoConfigError(
                f"Cannot extract tenant-id from {ENV_ENDPOINT}. "
                f"Please set {ENV_TENANT_ID} explicitly (e.g., for custom domains)."
            )

        client_id = _required(environ, ENV_CLIENT_ID)
        client_secret = _required(environ, ENV_CLIENT_SECRET)
        templates_path = normalize_path(
            environ.get(ENV_TEMPLATES_PATH) or DEFAULT_EMAIL_TEMPLATES_PATH
        )

        return cls(
            endpoint=endpoint,
            tenant_id=tenant_id,
            client_id=client_id,
            client_secret=client_secret,
            email_templates_path=templates_path,
        )


def _required(environ: Mapping[str, Optional[str]], name: str) -> str:
    value = environ.get(name)
    if not value:
        raise LogtoConfigError(f"Missing required env var: {name}")
    return value


def load_config(
    env_file: Union[str, Path, None] = ".env",
    environ: Optional[Mapping[str, str]] = None,
) -> Config:
    """Load configuration from a ``.env`` file and the environment.

    Variables already present in the environment take precedence over the
    values in the ``.env`` file. A missing ``.env`` file is not an error.

    Args:
        env_file: Path to the ``.env`` file (None to skip it)
        environ: Environment mapping (defaults to ``os.environ``)

    Returns:
        Resolved Config
    """
    merged: dict[str, Optional[str]] = {}
    if env_file is not None:
        env_path = Path(env_file)
        if env_path.is_file():
            logger.debug(f"Loading environment from {env_path}")
            merged.update(dotenv_values(env_path))
        else:
            logger.debug(f"No env file at {env_path}, using environment only")

    merged.update(os.environ if environ is None else environ)
    return Config.from_env(merged)
