"""
Context pruning: drop references to expired execution containers.

A request that continues a conversation may pin a tool to a container that
has since expired. Pruning rewrites such tools to auto-provision a fresh
container and leaves every other field alone.
"""

from __future__ import annotations

from responses_lib.types.request import Container, Request, Tool

CONTAINER_TOOL_TYPES: frozenset[str] = frozenset({"code_interpreter"})


class ContextPruner:
    """Rewrites requests so a retry does not hit the same expired container.

    Pruning is deterministic, performs no I/O and never mutates its input.
    Applying it to an already-pruned request is a no-op.

    Example:
        >>> pruner = ContextPruner()
        >>> fresh = pruner.prune(request)
    """

    def __init__(self, tool_types: frozenset[str] | None = None) -> None:
        """
        Args:
            tool_types: Tool types whose container config may be reset
        """
        self._tool_types = tool_types if tool_types is not None else CONTAINER_TOOL_TYPES

    def has_stale_reference(self, request: Request) -> bool:
        """Whether any container-bound tool points at a specific container."""
        return any(self._is_stale(tool) for tool in request.tools or [])

    def prune(self, request: Request) -> Request:
        """Return a copy of `request` with container handles reset.

        Args:
            request: Outgoing request

        Returns:
            The pruned copy (or an unchanged copy if nothing was stale)
        """
        pruned = request.model_copy(deep=True)
        if pruned.tools:
            pruned.tools = [self._prune_tool(tool) for tool in pruned.tools]
        return pruned

    def _is_stale(self, tool: Tool) -> bool:
        if tool.type not in self._tool_types:
            return False
        container = tool.container
        if isinstance(container, str):
            return True
        return container is not None and container.is_handle

    def _prune_tool(self, tool: Tool) -> Tool:
        if not self._is_stale(tool):
            return tool
        container = tool.container
        file_ids = container.file_ids if isinstance(container, Container) else None
        return tool.model_copy(update={"container": Container.auto(file_ids=file_ids)})


_default_pruner = ContextPruner()


def prune_expired_context(request: Request) -> Request:
    """Prune a request with the default pruner."""
    return _default_pruner.prune(request)
