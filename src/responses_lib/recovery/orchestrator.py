"""
Recovery orchestrator: execute a call, classify failures, repair and retry.

Each call runs its own attempt loop:
    attempt -> (classify -> prune -> notify -> wait -> attempt)* -> success | give up

Retry state is local to the call, so one orchestrator can be shared by
concurrent tasks.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, Generic, TypeVar

import httpx

from responses_lib.errors import ClassifiedError, MaxRetriesExceededError
from responses_lib.recovery.outcome import RecoveryOutcome, RecoveryResult
from responses_lib.recovery.policy import RecoveryPolicy
from responses_lib.recovery.pruner import ContextPruner
from responses_lib.telemetry import get_logger
from responses_lib.types.request import Request

RecoveryCallback = Callable[[ClassifiedError, int], None]
"""Notified with (error, 1-based attempt number) before each retry."""

SleepFunc = Callable[[float], Awaitable[None]]

T = TypeVar("T")
R = TypeVar("R")

logger = get_logger("responses_lib.recovery")


class RecoveryOrchestrator(Generic[R]):
    """Runs operations under a RecoveryPolicy.

    Example:
        >>> orchestrator = RecoveryOrchestrator(RecoveryPolicy.aggressive())
        >>> response = await orchestrator.execute(send_request, request)
        >>> result = await orchestrator.execute_with_recovery(send_request, request)
        >>> result.outcome.retry_count
        0
    """

    def __init__(
        self,
        policy: RecoveryPolicy | None = None,
        *,
        pruner: ContextPruner | None = None,
        callback: RecoveryCallback | None = None,
        sleep: SleepFunc | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            policy: Recovery policy (default: RecoveryPolicy.default())
            pruner: Context pruner used before container-related retries
            callback: Called with (error, attempt) before each retry
            sleep: Coroutine used to wait between attempts (default: asyncio.sleep)
        """
        self._policy = policy or RecoveryPolicy.default()
        self._pruner = pruner or ContextPruner()
        self._callback = callback
        self._sleep = sleep or asyncio.sleep

    @property
    def policy(self) -> RecoveryPolicy:
        return self._policy

    @property
    def pruner(self) -> ContextPruner:
        return self._pruner

    @property
    def callback(self) -> RecoveryCallback | None:
        return self._callback

    def with_policy(self, policy: RecoveryPolicy) -> RecoveryOrchestrator[R]:
        return RecoveryOrchestrator(
            policy, pruner=self._pruner, callback=self._callback, sleep=self._sleep
        )

    def with_callback(self, callback: RecoveryCallback | None) -> RecoveryOrchestrator[R]:
        return RecoveryOrchestrator(
            self._policy, pruner=self._pruner, callback=callback, sleep=self._sleep
        )

    async def execute(self, operation: Callable[[R], Awaitable[T]], request: R) -> T:
        """Run `operation(request)` with recovery, returning only the value.

        Raises:
            ClassifiedError: The terminal failure
        """
        result = await self.execute_with_recovery(operation, request)
        return result.value

    async def execute_with_recovery(
        self, operation: Callable[[R], Awaitable[T]], request: R
    ) -> RecoveryResult[T]:
        """Run `operation(request)` with recovery, returning value and outcome.

        Args:
            operation: Performs one API call for the given request
            request: Request passed to the operation; pruned copies are used on retry

        Returns:
            RecoveryResult with the value and what recovery did

        Raises:
            ClassifiedError: A non-retryable failure, unchanged
            MaxRetriesExceededError: The retry budget ran out
        """
        retry_count = 0
        first_error: ClassifiedError | None = None
        current = request

        while True:
            try:
                value = await self._attempt(operation, current)
            except ClassifiedError as error:
                if first_error is None:
                    first_error = error

                if not self._should_retry(error):
                    raise

                if retry_count >= self._policy.max_retries:
                    if retry_count == 0:
                        raise
                    outcome = RecoveryOutcome(
                        attempted=True,
                        retry_count=retry_count,
                        successful=False,
                        original_error=first_error.message,
                    )
                    logger.warning(
                        "Recovery gave up",
                        error_class=error.error_class.value,
                        attempts=retry_count + 1,
                    )
                    raise MaxRetriesExceededError(
                        error, attempts=retry_count + 1, outcome=outcome
                    ) from error

                retry_count += 1
                current = self._prepare_retry(error, current)
                delay = self._retry_delay(error)

                if self._policy.log_recovery_attempts:
                    logger.info(
                        "Recovering from failed request",
                        error_class=error.error_class.value,
                        attempt=retry_count,
                        max_retries=self._policy.max_retries,
                        retry_delay=delay,
                        request_id=error.request_id,
                    )
                self._notify(error, retry_count)

                if delay > 0:
                    await self._sleep(delay)
                continue

            outcome = RecoveryOutcome(
                attempted=retry_count > 0,
                retry_count=retry_count,
                successful=True,
                original_error=first_error.message if retry_count and first_error else None,
            )
            if outcome.attempted and self._policy.notify_on_reset:
                logger.info("Request recovered", retry_count=retry_count)
            return RecoveryResult(value=value, outcome=outcome, reset_message=self._reset_message())

    async def _attempt(self, operation: Callable[[R], Awaitable[T]], request: R) -> T:
        try:
            return await operation(request)
        except httpx.HTTPError as e:
            # Operations should raise ClassifiedError; classify stray transport errors here.
            raise ClassifiedError.from_transport_error(e) from e

    def _should_retry(self, error: ClassifiedError) -> bool:
        if self._policy.max_retries == 0:
            return False
        if not error.is_recoverable():
            return False
        return self._policy.admits(error.error_class)

    def _prepare_retry(self, error: ClassifiedError, request: R) -> R:
        if (
            self._policy.auto_prune_expired_containers
            and error.is_container_expired()
            and isinstance(request, Request)
        ):
            pruned: Any = self._pruner.prune(request)
            return pruned
        return request

    def _retry_delay(self, error: ClassifiedError) -> float:
        delay = error.retry_after() or 0.0
        cap = self._policy.max_retry_delay
        if cap is not None:
            delay = min(delay, cap)
        return delay

    def _notify(self, error: ClassifiedError, attempt: int) -> None:
        if self._callback is None:
            return
        try:
            self._callback(error, attempt)
        except Exception:
            logger.exception("Recovery callback failed", attempt=attempt)

    def _reset_message(self) -> str | None:
        if self._policy.notify_on_reset or self._policy.reset_message:
            return self._policy.effective_reset_message
        return None
