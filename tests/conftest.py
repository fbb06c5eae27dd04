"""Root pytest fixtures for responses-lib-python tests."""

from __future__ import annotations

import pytest

_ENV_VARS = (
    "OPENAI_API_KEY",
    "OPENAI_BASE_URL",
    "OPENAI_ORG_ID",
    "OPENAI_TIMEOUT_SECS",
    "RESPONSES_RECOVERY_MAX_RETRIES",
    "RESPONSES_RECOVERY_AUTO_RETRY",
    "RESPONSES_RECOVERY_AUTO_PRUNE",
    "RESPONSES_RECOVERY_LOG_RECOVERY",
    "RESPONSES_RECOVERY_RETRY_SCOPE",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's environment out of tests."""
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def api_key(monkeypatch: pytest.MonkeyPatch) -> str:
    """Set a test API key in the environment."""
    key = "sk-test-0123456789abcdefghij"
    monkeypatch.setenv("OPENAI_API_KEY", key)
    return key


class SleepRecorder:
    """Stand-in for asyncio.sleep that records requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def sleeper() -> SleepRecorder:
    return SleepRecorder()
