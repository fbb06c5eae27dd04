"""
Client layer - User-facing API.

This module provides:
- ResponsesClient: Main entry point for the Responses API
- Responses: `/responses` endpoints with automatic recovery
- ClientConfig: Connection settings
"""

from responses_lib.client.core import ResponsesClient
from responses_lib.client.responses import Responses
from responses_lib.config import ClientConfig

__all__ = [
    "ClientConfig",
    "Responses",
    "ResponsesClient",
]
