"""
Request types for the Responses API.

Only the fields the client inspects are modelled explicitly; anything else
passes through unchanged (extra="allow").
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from responses_lib.types.model import KnownModel


class Container(BaseModel):
    """Execution container configuration for a tool.

    `type="auto"` asks the server to provision a fresh container. A container
    that carries an `id` points at a specific, possibly expired, container.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    type: str = Field(default="auto", description="Provisioning mode")
    id: str | None = Field(default=None, description="Existing container ID")
    file_ids: list[str] | None = Field(default=None, description="Files to mount")

    @classmethod
    def auto(cls, file_ids: list[str] | None = None) -> Container:
        return cls(type="auto", file_ids=file_ids)

    @classmethod
    def default(cls) -> Container:
        return cls(type="default")

    @property
    def is_handle(self) -> bool:
        """Whether this refers to an existing container rather than a new one."""
        return self.id is not None


class Tool(BaseModel):
    """Tool definition for the Responses API."""

    model_config = ConfigDict(extra="allow")

    type: str = Field(description="Tool type")
    name: str | None = None
    description: str | None = None
    parameters: dict[str, Any] | None = None
    vector_store_ids: list[str] | None = None
    container: Container | str | None = Field(
        default=None, description="Container config, or a container ID"
    )

    @classmethod
    def function(
        cls,
        name: str,
        description: str | None = None,
        parameters: dict[str, Any] | None = None,
    ) -> Tool:
        return cls(
            type="function",
            name=name,
            description=description,
            parameters=parameters or {"type": "object", "properties": {}},
        )

    @classmethod
    def code_interpreter(cls, container: Container | str | None = None) -> Tool:
        return cls(type="code_interpreter", container=container or Container.auto())

    @classmethod
    def image_generation(cls, container: Container | None = None) -> Tool:
        return cls(type="image_generation", container=container)

    @classmethod
    def file_search(cls, vector_store_ids: list[str]) -> Tool:
        return cls(type="file_search", vector_store_ids=vector_store_ids)

    @classmethod
    def web_search_preview(cls) -> Tool:
        return cls(type="web_search_preview")


class Request(BaseModel):
    """Request body for `POST /responses`.

    Example:
        >>> request = Request(
        ...     model="gpt-4o-mini",
        ...     input="Calculate 10! using Python.",
        ...     tools=[Tool.code_interpreter()],
        ... )
    """

    model_config = ConfigDict(extra="allow")

    model: str = Field(default=KnownModel.GPT_4O.value)
    input: str | list[dict[str, Any]] = ""
    instructions: str | None = None
    tools: list[Tool] | None = None
    tool_choice: str | dict[str, Any] | None = None
    previous_response_id: str | None = None
    max_output_tokens: int | None = None
    temperature: float | None = None
    top_p: float | None = None
    stream: bool | None = None
    metadata: dict[str, Any] | None = None
    include: list[str] | None = None
    background: bool | None = None

    def to_payload(self) -> dict[str, Any]:
        """Serialize to a JSON-ready dict, omitting unset fields."""
        return self.model_dump(exclude_none=True, mode="json")
