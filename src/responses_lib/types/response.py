"""
Response types for the Responses API.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Response(BaseModel):
    """A response object returned by `POST /responses` and related endpoints."""

    model_config = ConfigDict(extra="allow")

    id: str
    object: str = "response"
    created_at: int | None = None
    model: str | None = None
    status: str | None = None
    output: list[dict[str, Any]] = Field(default_factory=list)
    previous_response_id: str | None = None
    usage: dict[str, Any] | None = None

    @property
    def output_text(self) -> str:
        """Concatenated text of every `output_text` part in message items."""
        parts: list[str] = []
        for item in self.output:
            if item.get("type") != "message":
                continue
            for content in item.get("content") or []:
                if isinstance(content, dict) and content.get("type") == "output_text":
                    parts.append(content.get("text", ""))
        return "".join(parts)

    def container_ids(self) -> list[str]:
        """Container IDs used by code interpreter calls in this response."""
        return [
            item["container_id"]
            for item in self.output
            if item.get("type") == "code_interpreter_call" and item.get("container_id")
        ]


class DeletedResponse(BaseModel):
    """Acknowledgement returned by `DELETE /responses/{id}`."""

    model_config = ConfigDict(extra="allow")

    id: str
    object: str = "response.deleted"
    deleted: bool = True
