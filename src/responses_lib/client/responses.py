"""Responses API endpoints, executed under the client's recovery policy."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from responses_lib.errors import ClassifiedError, ErrorKind
from responses_lib.recovery import (
    RecoveryCallback,
    RecoveryOrchestrator,
    RecoveryPolicy,
    RecoveryResult,
)
from responses_lib.telemetry import bind_log_context
from responses_lib.types import DeletedResponse, Request, Response

if TYPE_CHECKING:
    from responses_lib.transport import HttpTransport


def _parse(model: type[Any], data: dict[str, Any]) -> Any:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise ClassifiedError.simple(
            ErrorKind.JSON, f"JSON error: unexpected {model.__name__} shape: {e}"
        ) from e


class Responses:
    """`/responses` endpoints.

    Calls are executed by a RecoveryOrchestrator, so container expiration and
    transient failures are retried according to the recovery policy.

    Example:
        >>> response = await client.responses.create(request)
        >>> result = await client.responses.create_with_recovery(request)
        >>> if result.had_recovery():
        ...     print(result.recovery_message())
    """

    def __init__(
        self,
        transport: HttpTransport,
        orchestrator: RecoveryOrchestrator | None = None,
    ) -> None:
        self._transport = transport
        self._orchestrator = orchestrator or RecoveryOrchestrator()

    @property
    def recovery_policy(self) -> RecoveryPolicy:
        return self._orchestrator.policy

    def with_recovery_policy(self, policy: RecoveryPolicy) -> Responses:
        """Return a copy of this endpoint using another policy."""
        return Responses(self._transport, self._orchestrator.with_policy(policy))

    def with_recovery_callback(self, callback: RecoveryCallback | None) -> Responses:
        """Return a copy of this endpoint that notifies `callback` before each retry."""
        return Responses(self._transport, self._orchestrator.with_callback(callback))

    # -- single attempts -------------------------------------------------

    async def _create_once(self, request: Request) -> Response:
        data = await self._transport.request_json(
            "POST", "/responses", json=request.to_payload()
        )
        return _parse(Response, data)

    async def _retrieve_once(self, response_id: str) -> Response:
        data = await self._transport.request_json("GET", f"/responses/{response_id}")
        return _parse(Response, data)

    async def _cancel_once(self, response_id: str) -> Response:
        data = await self._transport.request_json("POST", f"/responses/{response_id}/cancel")
        return _parse(Response, data)

    async def _delete_once(self, response_id: str) -> DeletedResponse:
        data = await self._transport.request_json("DELETE", f"/responses/{response_id}")
        return _parse(DeletedResponse, data)

    # -- public API ------------------------------------------------------

    async def create(self, request: Request) -> Response:
        """Create a response.

        Raises:
            ClassifiedError: If the request fails and recovery does not succeed
        """
        with bind_log_context(model=request.model):
            return await self._orchestrator.execute(self._create_once, request)

    async def create_with_recovery(self, request: Request) -> RecoveryResult[Response]:
        """Create a response and report what recovery did.

        Raises:
            ClassifiedError: If the request fails and recovery does not succeed
        """
        with bind_log_context(model=request.model):
            return await self._orchestrator.execute_with_recovery(self._create_once, request)

    async def retrieve(self, response_id: str) -> Response:
        """Retrieve a response by ID."""
        with bind_log_context(response_id=response_id):
            return await self._orchestrator.execute(self._retrieve_once, response_id)

    async def cancel(self, response_id: str) -> Response:
        """Cancel a background response that is still being generated."""
        with bind_log_context(response_id=response_id):
            return await self._orchestrator.execute(self._cancel_once, response_id)

    async def delete(self, response_id: str) -> DeletedResponse:
        """Delete a stored response."""
        with bind_log_context(response_id=response_id):
            return await self._orchestrator.execute(self._delete_once, response_id)

    def prune_expired_context_manual(self, request: Request) -> Request:
        """Reset expired container references in `request` without sending it.

        Intended for callers using a policy without automatic retry, who
        recover by pruning and resending themselves.
        """
        return self._orchestrator.pruner.prune(request)
