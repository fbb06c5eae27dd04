#!/usr/bin/env python3
"""
Basic Responses API example.

Creates a response that uses the code interpreter, then continues the
conversation from it.

Usage:
    export OPENAI_API_KEY="your-api-key"
    python examples/basic_response.py
"""

import asyncio

from responses_lib import Request, ResponsesClient, Tool


async def main() -> None:
    async with ResponsesClient.from_env() as client:
        first = await client.responses.create(
            Request(
                model="gpt-4o-mini",
                input="Calculate 10! using Python.",
                tools=[Tool.code_interpreter()],
            )
        )
        print(f"Response {first.id}: {first.output_text}")
        print(f"Containers used: {first.container_ids()}")

        follow_up = await client.responses.create(
            Request(
                model="gpt-4o-mini",
                input="Now divide it by 7! and show the steps.",
                tools=[Tool.code_interpreter()],
                previous_response_id=first.id,
            )
        )
        print(f"Follow-up: {follow_up.output_text}")


if __name__ == "__main__":
    asyncio.run(main())
