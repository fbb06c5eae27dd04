"""Client configuration."""

from __future__ import annotations

import os
from contextlib import suppress

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_BASE_URL = "https://api.openai.com/v1"
DEFAULT_TIMEOUT = 60.0


class ClientConfig(BaseModel):
    """Connection settings for the Responses API.

    Example:
        >>> config = ClientConfig(api_key="sk-...").with_base_url("https://proxy.local/v1")
    """

    model_config = ConfigDict(frozen=True)

    api_key: str | None = Field(default=None, repr=False)
    base_url: str = DEFAULT_BASE_URL
    organization_id: str | None = None
    timeout: float = DEFAULT_TIMEOUT

    @classmethod
    def from_env(cls, *, base_url: str | None = None) -> ClientConfig:
        """Read OPENAI_API_KEY, OPENAI_BASE_URL, OPENAI_ORG_ID and OPENAI_TIMEOUT_SECS."""
        timeout = DEFAULT_TIMEOUT
        env_timeout = os.getenv("OPENAI_TIMEOUT_SECS")
        if env_timeout:
            with suppress(ValueError):
                timeout = float(env_timeout)
        return cls(
            api_key=os.getenv("OPENAI_API_KEY"),
            base_url=base_url or os.getenv("OPENAI_BASE_URL") or DEFAULT_BASE_URL,
            organization_id=os.getenv("OPENAI_ORG_ID"),
            timeout=timeout,
        )

    def with_base_url(self, base_url: str) -> ClientConfig:
        return self.model_copy(update={"base_url": base_url})

    def with_organization_id(self, organization_id: str) -> ClientConfig:
        return self.model_copy(update={"organization_id": organization_id})
