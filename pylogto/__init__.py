"""pylogto - Manage Logto email templates as code."""

from .api import ApiResponse, LogtoClient
from .auth import create_api_client
from .config import Config, load_config
from .exceptions import (
    ListingUnavailableError,
    LogtoAPIError,
    LogtoAuthenticationError,
    LogtoConfigError,
    LogtoInvalidResponseError,
    LogtoNetworkError,
    LogtoNotFoundError,
    LogtoPermissionError,
    SyncError,
    TemplateStoreError,
    WriteError,
)
from .models import LocalTemplate, RemoteTemplate, TemplateDetails, TemplateSummary

__all__ = [
    "ApiResponse",
    "LogtoClient",
    "create_api_client",
    "Config",
    "load_config",
    "LogtoAPIError",
    "ListingUnavailableError",
    "LogtoAuthenticationError",
    "LogtoConfigError",
    "LogtoInvalidResponseError",
    "LogtoNetworkError",
    "LogtoNotFoundError",
    "LogtoPermissionError",
    "SyncError",
    "TemplateStoreError",
    "WriteError",
    "LocalTemplate",
    "RemoteTemplate",
    "TemplateDetails",
    "TemplateSummary",
]
