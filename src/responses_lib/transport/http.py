"""HTTP transport using httpx for async requests.

Every failure leaving this module is a ClassifiedError:
- httpx exceptions are classified as transport failures
- non-success responses go through the status/body classifier
- undecodable success bodies become JSON errors
"""

from __future__ import annotations

import json as json_module
from importlib.metadata import PackageNotFoundError, version
from typing import Any

import httpx

from responses_lib.config import ClientConfig
from responses_lib.errors import ClassifiedError, ErrorKind
from responses_lib.telemetry import get_logger
from responses_lib.transport.auth import get_auth_headers

logger = get_logger("responses_lib.transport")

_DEFAULT_CONNECT_TIMEOUT = 10.0

_UA_VERSION: str | None = None


def _get_ua_version() -> str:
    """Get package version for User-Agent (cached)."""
    global _UA_VERSION
    if _UA_VERSION is None:
        try:
            _UA_VERSION = version("responses-lib-python")
        except PackageNotFoundError:
            _UA_VERSION = "0.1.0"
    return _UA_VERSION


def raise_for_failure(response: httpx.Response) -> httpx.Response:
    """Return the response if it succeeded, else raise its ClassifiedError.

    Headers are read before the body is decoded.
    """
    if response.is_success:
        return response
    raise ClassifiedError.from_httpx_response(response)


class HttpTransport:
    """HTTP transport for the Responses API.

    Example:
        >>> transport = HttpTransport(ClientConfig.from_env())
        >>> data = await transport.request_json("POST", "/responses", json=payload)
    """

    def __init__(
        self,
        config: ClientConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize HTTP transport.

        Args:
            config: Connection settings
            http_client: Pre-built client to use instead of creating one

        Raises:
            ClassifiedError: If no usable API key is available
        """
        self._config = config
        self._auth_headers = get_auth_headers(config.api_key, config.organization_id)
        self._client = http_client
        self._owns_client = http_client is None

    @property
    def base_url(self) -> str:
        return self._config.base_url.rstrip("/")

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._config.timeout, connect=_DEFAULT_CONNECT_TIMEOUT),
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if this transport created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def _build_headers(self, extra_headers: dict[str, str] | None = None) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": f"responses-lib-python/{_get_ua_version()}",
        }
        headers.update(self._auth_headers)
        if extra_headers:
            headers.update(extra_headers)
        return headers

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        params: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """Perform one HTTP call.

        Returns:
            The successful response

        Raises:
            ClassifiedError: On transport failure or non-success status
        """
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            response = await self._get_client().request(
                method,
                url,
                json=json,
                headers=self._build_headers(headers),
                params=params,
            )
        except httpx.HTTPError as e:
            logger.debug("Transport failure", method=method, url=url, error=str(e))
            raise ClassifiedError.from_transport_error(e, url=url) from e

        if not response.is_success:
            logger.debug(
                "API error response",
                method=method,
                url=url,
                status_code=response.status_code,
            )
        return raise_for_failure(response)

    async def request_json(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Perform one HTTP call and decode its JSON body.

        Raises:
            ClassifiedError: On failure, including an undecodable body (kind JSON)
        """
        response = await self.request(method, path, json=json, params=params)
        try:
            data = json_module.loads(response.content)
        except ValueError as e:
            raise ClassifiedError.simple(ErrorKind.JSON, f"JSON error: {e}") from e
        if not isinstance(data, dict):
            raise ClassifiedError.simple(
                ErrorKind.JSON, f"JSON error: expected an object, got {type(data).__name__}"
            )
        return data

    async def __aenter__(self) -> HttpTransport:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
