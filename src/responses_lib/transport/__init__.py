"""
Transport layer - HTTP client for API communication.

Provides httpx-based transport with:
- Timeout management
- API key resolution
- Classification of every transport and HTTP failure
"""

from responses_lib.transport.auth import get_auth_headers, resolve_api_key
from responses_lib.transport.http import HttpTransport, raise_for_failure

__all__ = [
    "HttpTransport",
    "get_auth_headers",
    "raise_for_failure",
    "resolve_api_key",
]
