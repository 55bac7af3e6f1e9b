"""Interactive CLI for the Front Door agent."""

from __future__ import annotations

import argparse
import asyncio
import os
import sys

from frontdoor_agent.config.loader import load_config
from frontdoor_agent.config.models import AgentConfig
from frontdoor_agent.infrastructure.llm_client import HttpLLMClient
from frontdoor_agent.infrastructure.state_store import InMemoryStateStore
from frontdoor_agent.infrastructure.submission import (
    HttpSubmissionClient,
    MockSubmissionClient,
    SubmissionClient,
)
from frontdoor_agent.logging_config import setup_logging
from frontdoor_agent.orchestration.runtime import AgentRuntime


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Front Door intake assistant, interactive demo")
    p.add_argument("--config", "-c", required=True, help="Path to agent YAML config")
    p.add_argument("--conversation", "-s", default="cli-conversation", help="Conversation ID")
    p.add_argument("--mock-submit", action="store_true", help="Never call the real ticketing backend")
    p.add_argument("--log-level", default=os.environ.get("LOG_LEVEL", "WARNING"))
    return p.parse_args(argv)


def build_submission_client(config: AgentConfig, force_mock: bool) -> SubmissionClient:
    if force_mock or config.submission.mode == "mock":
        return MockSubmissionClient(url_template=config.submission.tracking_url_template)
    return HttpSubmissionClient(
        api_key=os.environ.get("SUBMISSION_API_KEY") or None,
        timeout=config.submission.timeout_seconds,
    )


async def run_interactive(runtime: AgentRuntime, conversation_id: str) -> None:
    greeting = await runtime.start_session(conversation_id)
    print(greeting)
    print()
    while True:
        try:
            line = input("You: ").strip()
        except EOFError:
            break
        if not line:
            continue
        if line.lower() in ("quit", "exit", "q"):
            print("Goodbye.")
            break
        reply = await runtime.handle_message(conversation_id, line)
        print(f"Agent: {reply}")
        print()


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    setup_logging(args.log_level)
    try:
        config = load_config(args.config)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    base_url = os.environ.get("OPENAI_BASE_URL") or config.llm.base_url or "https://api.openai.com"
    api_key = os.environ.get("OPENAI_API_KEY", "")

    llm = HttpLLMClient(
        base_url=base_url,
        model=config.llm.model,
        api_key=api_key or None,
        temperature=config.llm.temperature,
        timeout=config.llm.timeout_seconds,
    )
    runtime = AgentRuntime(
        config,
        llm,
        InMemoryStateStore(),
        build_submission_client(config, args.mock_submit),
    )

    asyncio.run(run_interactive(runtime, args.conversation))
    return 0


if __name__ == "__main__":
    sys.exit(main())
