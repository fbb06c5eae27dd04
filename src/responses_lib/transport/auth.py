"""
API key resolution utilities.

Resolves the API key from an explicit value or the environment and builds
the request auth headers.
"""

from __future__ import annotations

import os

from responses_lib.errors import ClassifiedError, ErrorKind

API_KEY_ENV = "OPENAI_API_KEY"


def resolve_api_key(explicit_key: str | None = None) -> str | None:
    """Resolve the API key.

    Resolution order:
    1. Explicit key if provided
    2. OPENAI_API_KEY environment variable

    Returns:
        Resolved API key or None if not found
    """
    if explicit_key:
        return explicit_key
    return os.getenv(API_KEY_ENV) or None


def validate_api_key(key: str) -> str:
    """Reject keys that cannot be sent in a header.

    Raises:
        ClassifiedError: kind INVALID_API_KEY
    """
    stripped = key.strip()
    if not stripped or any(ch.isspace() for ch in stripped) or not stripped.isprintable():
        raise ClassifiedError.simple(ErrorKind.INVALID_API_KEY, "Invalid API key format")
    return stripped


def get_auth_headers(
    api_key: str | None = None,
    organization_id: str | None = None,
) -> dict[str, str]:
    """Build authentication headers.

    Args:
        api_key: Optional explicit API key
        organization_id: Optional organization ID

    Returns:
        Header dictionary

    Raises:
        ClassifiedError: kind API_KEY_NOT_FOUND or INVALID_API_KEY
    """
    key = resolve_api_key(api_key)
    if key is None:
        raise ClassifiedError.simple(
            ErrorKind.API_KEY_NOT_FOUND, "API key not found in environment"
        ).with_hint(f"Pass api_key explicitly or set {API_KEY_ENV}")

    headers = {"Authorization": f"Bearer {validate_api_key(key)}"}
    if organization_id:
        headers["OpenAI-Organization"] = organization_id
    return headers
