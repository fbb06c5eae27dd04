"""Tests for RecoveryOrchestrator."""

from __future__ import annotations

import asyncio
from typing import Any

import httpx
import pytest

from responses_lib.errors import ClassifiedError, ErrorKind, MaxRetriesExceededError
from responses_lib.recovery import (
    DEFAULT_RESET_MESSAGE,
    RecoveryOrchestrator,
    RecoveryPolicy,
    RetryScope,
)
from responses_lib.types import Container, Request, Tool


class ScriptedOperation:
    """Raises queued errors, then returns a value; records every request seen."""

    def __init__(self, *errors: Exception, value: str = "ok") -> None:
        self._errors = list(errors)
        self._value = value
        self.calls: list[Any] = []

    async def __call__(self, request: Any) -> str:
        self.calls.append(request)
        if self._errors:
            raise self._errors.pop(0)
        return self._value


def container_error() -> ClassifiedError:
    return ClassifiedError.container_expired("Container is expired")


def rate_limited() -> ClassifiedError:
    return ClassifiedError.from_response(429, headers={"retry-after": "2"})


def fatal() -> ClassifiedError:
    return ClassifiedError.from_response(
        400, body={"error": {"message": "Unknown parameter: 'foo'", "param": "foo"}}
    )


class TestSuccess:
    """Tests for calls that succeed first time."""

    @pytest.mark.asyncio
    async def test_outcome_empty(self, sleeper: Any) -> None:
        operation = ScriptedOperation()
        orchestrator = RecoveryOrchestrator(sleep=sleeper)
        result = await orchestrator.execute_with_recovery(operation, "req")
        assert result.value == "ok"
        assert result.outcome.attempted is False
        assert result.outcome.retry_count == 0
        assert result.outcome.successful is True
        assert result.outcome.original_error is None
        assert not result.had_recovery()
        assert result.recovery_message() is None
        assert len(operation.calls) == 1
        assert sleeper.delays == []

    @pytest.mark.asyncio
    async def test_execute_returns_value(self, sleeper: Any) -> None:
        orchestrator = RecoveryOrchestrator(sleep=sleeper)
        assert await orchestrator.execute(ScriptedOperation(value="done"), "req") == "done"


class TestNonRetryable:
    """Non-recoverable failures surface unchanged."""

    @pytest.mark.asyncio
    async def test_fatal_error_raised_unchanged(self, sleeper: Any) -> None:
        error = fatal()
        operation = ScriptedOperation(error)
        orchestrator = RecoveryOrchestrator(RecoveryPolicy.aggressive(), sleep=sleeper)
        with pytest.raises(ClassifiedError) as exc_info:
            await orchestrator.execute(operation, "req")
        assert exc_info.value is error
        assert len(operation.calls) == 1

    @pytest.mark.asyncio
    async def test_zero_retries_is_single_attempt(self, sleeper: Any) -> None:
        error = container_error()
        operation = ScriptedOperation(error)
        orchestrator = RecoveryOrchestrator(RecoveryPolicy().with_max_retries(0), sleep=sleeper)
        with pytest.raises(ClassifiedError) as exc_info:
            await orchestrator.execute(operation, "req")
        assert exc_info.value is error
        assert len(operation.calls) == 1

    @pytest.mark.asyncio
    async def test_conservative_never_retries(self, sleeper: Any) -> None:
        operation = ScriptedOperation(rate_limited())
        orchestrator = RecoveryOrchestrator(RecoveryPolicy.conservative(), sleep=sleeper)
        with pytest.raises(ClassifiedError):
            await orchestrator.execute(operation, "req")
        assert len(operation.calls) == 1
        assert sleeper.delays == []

    @pytest.mark.asyncio
    async def test_auto_retry_off_blocks_container_retry(self, sleeper: Any) -> None:
        operation = ScriptedOperation(container_error())
        policy = RecoveryPolicy().with_auto_retry(False).with_max_retries(3)
        orchestrator = RecoveryOrchestrator(policy, sleep=sleeper)
        with pytest.raises(ClassifiedError):
            await orchestrator.execute(operation, "req")
        assert len(operation.calls) == 1

    @pytest.mark.asyncio
    async def test_scope_excludes_class(self, sleeper: Any) -> None:
        operation = ScriptedOperation(rate_limited())
        policy = RecoveryPolicy().with_retry_scope(RetryScope.CONTAINER_ONLY)
        orchestrator = RecoveryOrchestrator(policy, sleep=sleeper)
        with pytest.raises(ClassifiedError):
            await orchestrator.execute(operation, "req")
        assert len(operation.calls) == 1

    @pytest.mark.asyncio
    async def test_other_exceptions_propagate(self, sleeper: Any) -> None:
        operation = ScriptedOperation(KeyError("boom"))
        orchestrator = RecoveryOrchestrator(sleep=sleeper)
        with pytest.raises(KeyError):
            await orchestrator.execute(operation, "req")


class TestRetry:
    """Tests for the retry loop."""

    @pytest.mark.asyncio
    async def test_recovers_after_one_failure(self, sleeper: Any) -> None:
        operation = ScriptedOperation(rate_limited())
        orchestrator = RecoveryOrchestrator(sleep=sleeper)
        result = await orchestrator.execute_with_recovery(operation, "req")
        assert result.value == "ok"
        assert result.outcome.attempted is True
        assert result.outcome.retry_count == 1
        assert result.outcome.successful is True
        assert result.outcome.original_error is not None
        assert "Rate limited" in result.outcome.original_error
        assert len(operation.calls) == 2
        assert sleeper.delays == [2.0]

    @pytest.mark.asyncio
    async def test_attempts_bounded(self, sleeper: Any) -> None:
        errors = [rate_limited() for _ in range(5)]
        operation = ScriptedOperation(*errors)
        orchestrator = RecoveryOrchestrator(RecoveryPolicy().with_max_retries(2), sleep=sleeper)
        with pytest.raises(MaxRetriesExceededError) as exc_info:
            await orchestrator.execute(operation, "req")
        error = exc_info.value
        assert len(operation.calls) == 3
        assert error.attempts == 3
        assert error.last_error is errors[2]
        assert error.error_class is errors[2].error_class
        assert error.outcome is not None
        assert error.outcome.retry_count == 2
        assert error.outcome.successful is False
        assert error.outcome.original_error == errors[0].message

    @pytest.mark.asyncio
    async def test_delay_capped(self, sleeper: Any) -> None:
        operation = ScriptedOperation(ClassifiedError.from_response(503))
        policy = RecoveryPolicy().with_max_retry_delay(0.5)
        await RecoveryOrchestrator(policy, sleep=sleeper).execute(operation, "req")
        assert sleeper.delays == [0.5]

    @pytest.mark.asyncio
    async def test_zero_delay_skips_sleep(self, sleeper: Any) -> None:
        api_expired = ClassifiedError.from_response(
            400, body={"error": {"message": "Container is expired"}}
        )
        operation = ScriptedOperation(api_expired)
        await RecoveryOrchestrator(sleep=sleeper).execute(operation, "req")
        assert len(operation.calls) == 2
        assert sleeper.delays == []

    @pytest.mark.asyncio
    async def test_transport_error_classified(self, sleeper: Any) -> None:
        operation = ScriptedOperation(httpx.ConnectError("refused"))
        result = await RecoveryOrchestrator(sleep=sleeper).execute_with_recovery(operation, "req")
        assert result.outcome.retry_count == 1
        assert sleeper.delays == [3.0]

    @pytest.mark.asyncio
    async def test_status_error_classified_by_response(self, sleeper: Any) -> None:
        request = httpx.Request("POST", "https://api.openai.com/v1/responses")
        response = httpx.Response(503, headers={"retry-after": "1"}, request=request)
        status_error = httpx.HTTPStatusError(
            "Service Unavailable", request=request, response=response
        )
        operation = ScriptedOperation(status_error)
        result = await RecoveryOrchestrator(sleep=sleeper).execute_with_recovery(operation, "req")
        assert result.value == "ok"
        assert len(operation.calls) == 2
        assert sleeper.delays == [1.0]

    @pytest.mark.asyncio
    async def test_transport_error_kind_on_give_up(self, sleeper: Any) -> None:
        operation = ScriptedOperation(httpx.ReadTimeout("slow"), httpx.ReadTimeout("slow"))
        with pytest.raises(MaxRetriesExceededError) as exc_info:
            await RecoveryOrchestrator(sleep=sleeper).execute(operation, "req")
        assert exc_info.value.kind is ErrorKind.TIMEOUT


class TestPruning:
    """Container-expired retries send a pruned request."""

    @staticmethod
    def _request() -> Request:
        return Request(
            input="continue",
            tools=[Tool.code_interpreter("cntr_old")],
            previous_response_id="resp_1",
        )

    @pytest.mark.asyncio
    async def test_retry_uses_pruned_request(self, sleeper: Any) -> None:
        request = self._request()
        operation = ScriptedOperation(container_error())
        await RecoveryOrchestrator(sleep=sleeper).execute(operation, request)
        first, second = operation.calls
        assert first is request
        assert second.tools[0].container == Container.auto()
        assert second.previous_response_id == "resp_1"
        assert request.tools is not None
        assert request.tools[0].container == "cntr_old"

    @pytest.mark.asyncio
    async def test_no_prune_when_disabled(self, sleeper: Any) -> None:
        request = self._request()
        operation = ScriptedOperation(container_error())
        policy = RecoveryPolicy().with_auto_prune(False)
        await RecoveryOrchestrator(policy, sleep=sleeper).execute(operation, request)
        assert operation.calls[1] is request

    @pytest.mark.asyncio
    async def test_no_prune_for_other_errors(self, sleeper: Any) -> None:
        request = self._request()
        operation = ScriptedOperation(rate_limited())
        await RecoveryOrchestrator(sleep=sleeper).execute(operation, request)
        assert operation.calls[1] is request


class TestCallback:
    """Tests for the recovery callback."""

    @pytest.mark.asyncio
    async def test_called_before_each_retry(self, sleeper: Any) -> None:
        seen: list[tuple[ClassifiedError, int]] = []
        errors = [rate_limited(), container_error()]
        operation = ScriptedOperation(*errors)
        orchestrator = RecoveryOrchestrator(
            RecoveryPolicy.aggressive(),
            callback=lambda error, attempt: seen.append((error, attempt)),
            sleep=sleeper,
        )
        await orchestrator.execute(operation, "req")
        assert seen == [(errors[0], 1), (errors[1], 2)]

    @pytest.mark.asyncio
    async def test_not_called_on_first_success(self, sleeper: Any) -> None:
        seen: list[int] = []
        orchestrator = RecoveryOrchestrator(
            callback=lambda error, attempt: seen.append(attempt), sleep=sleeper
        )
        await orchestrator.execute(ScriptedOperation(), "req")
        assert seen == []

    @pytest.mark.asyncio
    async def test_callback_failure_ignored(self, sleeper: Any) -> None:
        def broken(error: ClassifiedError, attempt: int) -> None:
            raise RuntimeError("callback bug")

        operation = ScriptedOperation(rate_limited())
        orchestrator = RecoveryOrchestrator(callback=broken, sleep=sleeper)
        assert await orchestrator.execute(operation, "req") == "ok"

    @pytest.mark.asyncio
    async def test_with_callback_returns_copy(self, sleeper: Any) -> None:
        seen: list[int] = []
        base = RecoveryOrchestrator(sleep=sleeper)
        notified = base.with_callback(lambda error, attempt: seen.append(attempt))
        assert base.callback is None
        await notified.execute(ScriptedOperation(rate_limited()), "req")
        assert seen == [1]
        assert sleeper.delays == [2.0]


class TestResetMessage:
    """Tests for the reset message surfaced after recovery."""

    @pytest.mark.asyncio
    async def test_default_policy_silent(self, sleeper: Any) -> None:
        result = await RecoveryOrchestrator(sleep=sleeper).execute_with_recovery(
            ScriptedOperation(container_error()), "req"
        )
        assert result.had_recovery()
        assert result.recovery_message() is None

    @pytest.mark.asyncio
    async def test_notify_uses_default_message(self, sleeper: Any) -> None:
        policy = RecoveryPolicy().with_notify_on_reset(True)
        result = await RecoveryOrchestrator(policy, sleep=sleeper).execute_with_recovery(
            ScriptedOperation(container_error()), "req"
        )
        assert result.recovery_message() == DEFAULT_RESET_MESSAGE

    @pytest.mark.asyncio
    async def test_custom_message(self, sleeper: Any) -> None:
        result = await RecoveryOrchestrator(
            RecoveryPolicy.aggressive(), sleep=sleeper
        ).execute_with_recovery(ScriptedOperation(container_error()), "req")
        assert result.recovery_message() == (
            "Your session was refreshed to keep things running smoothly."
        )

    @pytest.mark.asyncio
    async def test_no_message_without_recovery(self, sleeper: Any) -> None:
        result = await RecoveryOrchestrator(
            RecoveryPolicy.aggressive(), sleep=sleeper
        ).execute_with_recovery(ScriptedOperation(), "req")
        assert result.recovery_message() is None


class TestWithPolicy:
    """Tests for orchestrator copies."""

    def test_with_policy(self) -> None:
        base = RecoveryOrchestrator()
        changed = base.with_policy(RecoveryPolicy.aggressive())
        assert base.policy == RecoveryPolicy.default()
        assert changed.policy == RecoveryPolicy.aggressive()
        assert changed.pruner is base.pruner


class YieldingSleeper:
    """Records delays and hands control back to the event loop."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        await asyncio.sleep(0)


class TestConcurrentCalls:
    """One orchestrator shared by concurrent calls keeps per-call state apart."""

    @pytest.mark.asyncio
    async def test_outcomes_are_independent(self) -> None:
        sleeper = YieldingSleeper()
        orchestrator = RecoveryOrchestrator(sleep=sleeper)
        retried = ScriptedOperation(rate_limited(), value="retried")
        clean = ScriptedOperation(value="clean")
        first, second = await asyncio.gather(
            orchestrator.execute_with_recovery(retried, "req-a"),
            orchestrator.execute_with_recovery(clean, "req-b"),
        )
        assert first.value == "retried"
        assert first.outcome.retry_count == 1
        assert first.outcome.attempted is True
        assert second.value == "clean"
        assert second.outcome.retry_count == 0
        assert second.outcome.attempted is False
        assert retried.calls == ["req-a", "req-a"]
        assert clean.calls == ["req-b"]
        assert sleeper.delays == [2.0]
        assert orchestrator.policy == RecoveryPolicy.default()

    @pytest.mark.asyncio
    async def test_give_up_does_not_leak_into_other_call(self) -> None:
        orchestrator = RecoveryOrchestrator(sleep=YieldingSleeper())
        failing = ScriptedOperation(rate_limited(), rate_limited())
        clean = ScriptedOperation(container_error(), value="recovered")
        results = await asyncio.gather(
            orchestrator.execute_with_recovery(failing, "req-a"),
            orchestrator.execute_with_recovery(clean, "req-b"),
            return_exceptions=True,
        )
        assert isinstance(results[0], MaxRetriesExceededError)
        assert results[0].attempts == 2
        assert results[1].value == "recovered"
        assert results[1].outcome.retry_count == 1
