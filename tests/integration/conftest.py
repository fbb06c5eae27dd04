"""
Integration test helper utilities.

Shared payload builders for mocked Responses API exchanges.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import pytest_httpx

RESPONSES_URL = "https://api.openai.com/v1/responses"


def mock_response(
    text: str = "Hello from the Responses API!",
    response_id: str = "resp_123",
    model: str = "gpt-4o",
    container_id: str | None = None,
) -> dict:
    """Create a completed response object."""
    output: list[dict] = []
    if container_id:
        output.append(
            {
                "type": "code_interpreter_call",
                "id": "ci_1",
                "status": "completed",
                "container_id": container_id,
            }
        )
    output.append(
        {
            "type": "message",
            "id": "msg_1",
            "role": "assistant",
            "content": [{"type": "output_text", "text": text, "annotations": []}],
        }
    )
    return {
        "id": response_id,
        "object": "response",
        "created_at": 1741476542,
        "model": model,
        "status": "completed",
        "output": output,
        "usage": {"input_tokens": 12, "output_tokens": 8, "total_tokens": 20},
    }


def mock_error(message: str, error_type: str = "invalid_request_error", code: str | None = None) -> dict:
    """Create an API error envelope."""
    return {"error": {"message": message, "type": error_type, "code": code, "param": None}}


def setup_container_expired(httpx_mock: pytest_httpx.HTTPXMock) -> None:
    """Register a 400 whose message reports an expired container."""
    httpx_mock.add_response(
        url=RESPONSES_URL,
        method="POST",
        status_code=400,
        json=mock_error("Container is expired."),
    )
