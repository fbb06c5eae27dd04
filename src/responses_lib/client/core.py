"""Core ResponsesClient implementation."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from responses_lib.client.responses import Responses
from responses_lib.config import DEFAULT_BASE_URL, ClientConfig
from responses_lib.recovery import RecoveryOrchestrator, RecoveryPolicy
from responses_lib.transport import HttpTransport

if TYPE_CHECKING:
    import httpx


class ResponsesClient:
    """Client for the Responses API.

    Every endpoint call goes through a RecoveryOrchestrator configured with
    the client's RecoveryPolicy.

    Example:
        >>> client = ResponsesClient("sk-...")
        >>> response = await client.responses.create(
        ...     Request(model="gpt-4o-mini", input="Hello!")
        ... )

        >>> # Custom recovery
        >>> client = ResponsesClient.from_env(recovery_policy=RecoveryPolicy.aggressive())
    """

    def __init__(
        self,
        api_key: str | None = None,
        *,
        base_url: str = DEFAULT_BASE_URL,
        organization_id: str | None = None,
        timeout: float | None = None,
        recovery_policy: RecoveryPolicy | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Create a client.

        Args:
            api_key: API key (default: OPENAI_API_KEY)
            base_url: API base URL
            organization_id: Optional organization ID header
            timeout: Request timeout in seconds
            recovery_policy: Recovery policy (default: RecoveryPolicy.default())
            http_client: Pre-built httpx client to send requests with

        Raises:
            ClassifiedError: If no usable API key is available
        """
        config = ClientConfig(api_key=api_key, base_url=base_url, organization_id=organization_id)
        if timeout is not None:
            config = config.model_copy(update={"timeout": timeout})
        self._init(config, recovery_policy, http_client)

    def _init(
        self,
        config: ClientConfig,
        recovery_policy: RecoveryPolicy | None,
        http_client: httpx.AsyncClient | None,
    ) -> None:
        self._config = config
        self._transport = HttpTransport(config, http_client=http_client)
        self._policy = recovery_policy or RecoveryPolicy.default()
        self.responses = Responses(self._transport, RecoveryOrchestrator(self._policy))

    @classmethod
    def from_config(
        cls,
        config: ClientConfig,
        *,
        recovery_policy: RecoveryPolicy | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> ResponsesClient:
        """Create a client from a ClientConfig."""
        client = cls.__new__(cls)
        client._init(config, recovery_policy, http_client)
        return client

    @classmethod
    def from_env(
        cls,
        *,
        base_url: str | None = None,
        recovery_policy: RecoveryPolicy | None = None,
    ) -> ResponsesClient:
        """Create a client from OPENAI_* environment variables.

        The recovery policy defaults to RecoveryPolicy.from_environment().
        """
        return cls.from_config(
            ClientConfig.from_env(base_url=base_url),
            recovery_policy=recovery_policy or RecoveryPolicy.from_environment(),
        )

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def recovery_policy(self) -> RecoveryPolicy:
        return self._policy

    async def close(self) -> None:
        await self._transport.close()

    async def __aenter__(self) -> ResponsesClient:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
