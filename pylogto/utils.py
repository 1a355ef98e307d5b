"""Utility functions for pylogto."""

import json
import re
from typing import Any, Optional

# =============================================================================
# Constants
# =============================================================================

DEFAULT_EMAIL_TEMPLATES_PATH: str = "email-templates"

DEFAULT_TIMEOUT: float = 30.0

KEY_SEPARATOR: str = "::"

CONTENT_TYPE_PLAIN: str = "text/plain"
CONTENT_TYPE_HTML: str = "text/html"

# Statuses that mean "this endpoint or verb is not supported here"
UNSUPPORTED_STATUSES: frozenset[int] = frozenset({404, 405})

_TENANT_HOST_RE = re.compile(r"https?://([^.]+)\.logto\.app")


# =============================================================================
# Key and path helpers
# =============================================================================


def make_key(template_type: str, language_tag: str) -> str:
    """Build the pairing key used to match local and remote templates.

    Examples:
        >>> make_key("SignIn", "en")
        'SignIn::en'
    """
    return f"{template_type}{KEY_SEPARATOR}{language_tag}"


def normalize_base_url(value: Optional[str]) -> str:
    """Strip whitespace and trailing slashes from a base URL.

    Examples:
        >>> normalize_base_url(" https://abc.logto.app// ")
        'https://abc.logto.app'
    """
    return (value or "").strip().rstrip("/")


def normalize_path(value: Optional[str]) -> str:
    """Strip whitespace and slashes on both ends of a path segment.

    Examples:
        >>> normalize_path("/email-templates/")
        'email-templates'
    """
    return (value or "").strip().strip("/")


def extract_tenant_id(endpoint: str) -> Optional[str]:
    """Extract the tenant id from a Logto Cloud endpoint.

    Custom domains carry no tenant id and return None.

    Examples:
        >>> extract_tenant_id("https://abc123.logto.app")
        'abc123'
        >>> extract_tenant_id("https://auth.example.com") is None
        True
    """
    match = _TENANT_HOST_RE.match(endpoint)
    if match:
        return match.group(1)
    return None


def parse_csv_set(value: Optional[str]) -> Optional[set[str]]:
    """Parse a comma separated CLI value into a set.

    Empty input (or input with only separators) means "no filter".

    Examples:
        >>> sorted(parse_csv_set("SignIn, Register,"))
        ['Register', 'SignIn']
        >>> parse_csv_set(" , ") is None
        True
    """
    if not value:
        return None
    items = {item.strip() for item in value.split(",") if item.strip()}
    return items or None


# =============================================================================
# Text and content-type helpers
# =============================================================================


def infer_content_type(filename: str) -> Optional[str]:
    """Infer the email content type from a content file name."""
    if filename.endswith(".txt"):
        return CONTENT_TYPE_PLAIN
    if filename.endswith((".html", ".htm")):
        return CONTENT_TYPE_HTML
    return None


def normalize_trailing_newline(text: str) -> str:
    """Drop trailing whitespace and terminate with exactly one newline."""
    return f"{text.rstrip()}\n"


def format_body(body: Any) -> str:
    """Render a response body for error messages."""
    if body is None:
        return "(empty)"
    if isinstance(body, (dict, list)):
        return json.dumps(body, indent=2, ensure_ascii=False)
    return str(body)
