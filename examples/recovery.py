#!/usr/bin/env python3
"""
Recovery policy example.

Shows the three ways of handling an expired code execution container:
- automatic retry with the default policy
- aggressive retry with a reset notice and a callback
- manual recovery with the conservative policy

Usage:
    export OPENAI_API_KEY="your-api-key"
    export RESPONSES_RECOVERY_LOG_RECOVERY=true   # optional
    python examples/recovery.py
"""

import asyncio

from responses_lib import (
    ClassifiedError,
    RecoveryPolicy,
    Request,
    ResponsesClient,
    Tool,
)


def _request(container_id: str) -> Request:
    # Pins the tool to a container that has probably expired by now.
    return Request(
        model="gpt-4o-mini",
        input="Plot the squares of 1..10 and describe the curve.",
        tools=[Tool.code_interpreter(container_id)],
    )


async def automatic(container_id: str) -> None:
    print("Default policy (one retry, pruning on)...")
    async with ResponsesClient.from_env() as client:
        result = await client.responses.create_with_recovery(_request(container_id))
        print(f"  recovered: {result.had_recovery()}, retries: {result.outcome.retry_count}")
        print(f"  output: {result.value.output_text[:80]}")


async def aggressive(container_id: str) -> None:
    print("\nAggressive policy with callback...")

    def on_retry(error: ClassifiedError, attempt: int) -> None:
        print(f"  retry {attempt}: {error.error_class.value} ({error.user_message()})")

    async with ResponsesClient.from_env(recovery_policy=RecoveryPolicy.aggressive()) as client:
        responses = client.responses.with_recovery_callback(on_retry)
        result = await responses.create_with_recovery(_request(container_id))
        if message := result.recovery_message():
            print(f"  notice: {message}")


async def manual(container_id: str) -> None:
    print("\nConservative policy (caller recovers)...")
    async with ResponsesClient.from_env(recovery_policy=RecoveryPolicy.conservative()) as client:
        request = _request(container_id)
        try:
            response = await client.responses.create(request)
        except ClassifiedError as e:
            if not e.is_container_expired():
                raise
            print(f"  {e.user_message()}")
            response = await client.responses.create(
                client.responses.prune_expired_context_manual(request)
            )
        print(f"  output: {response.output_text[:80]}")


async def main() -> None:
    stale = "cntr_00000000000000000000000000000000"
    await automatic(stale)
    await aggressive(stale)
    await manual(stale)


if __name__ == "__main__":
    asyncio.run(main())
