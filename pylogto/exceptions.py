"""Exceptions raised by pylogto."""

from typing import Any, Optional


class LogtoAPIError(Exception):
    """Base exception for all pylogto errors.

    HTTP related subclasses carry the request method, URL, response status
    and body so that callers can print full diagnostics.
    """

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        method: Optional[str] = None,
        url: Optional[str] = None,
        body: Any = None,
    ):
        super().__init__(message)
        self.status = status
        self.method = method
        self.url = url
        self.body = body


class LogtoConfigError(LogtoAPIError):
    """Required configuration is missing or invalid."""


class TemplateStoreError(LogtoAPIError):
    """Local template directory is malformed or incomplete."""


class LogtoAuthenticationError(LogtoAPIError):
    """Token acquisition failed or the server rejected the credentials."""


class LogtoPermissionError(LogtoAPIError):
    """Access forbidden for the M2M application."""


class LogtoNotFoundError(LogtoAPIError):
    """Requested resource does not exist."""


class LogtoNetworkError(LogtoAPIError):
    """Transport level failure (DNS, connection refused, timeout...)."""


class LogtoInvalidResponseError(LogtoAPIError):
    """Server answered with a body that could not be decoded."""


class ListingUnavailableError(LogtoAPIError):
    """The email template list endpoint answered 404/405."""


class WriteError(LogtoAPIError):
    """A template write failed or returned an unrecognized response.

    ``attempts`` holds one dict per attempted request with the keys
    ``method``, ``url``, ``status`` and ``body``.
    """

    def __init__(
        self,
        message: str,
        attempts: Optional[list[dict[str, Any]]] = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.attempts = attempts or []


class SyncError(LogtoAPIError):
    """A sync run was aborted by a failing item."""

    def __init__(self, message: str, index: int, key: str, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.index = index
        self.key = key
