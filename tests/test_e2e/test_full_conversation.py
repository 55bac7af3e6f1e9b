"""End-to-end conversations over the shipped config: intake, hand-off, review, reset, failures."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from frontdoor_agent.config.loader import load_config
from frontdoor_agent.config.models import AgentConfig
from frontdoor_agent.domain.completion import completion_percentage, missing_required_fields
from frontdoor_agent.domain.errors import LLMError
from frontdoor_agent.domain.state import Mode
from frontdoor_agent.infrastructure.llm_client import MockLLMClient
from frontdoor_agent.infrastructure.state_store import InMemoryStateStore
from frontdoor_agent.infrastructure.submission import MockSubmissionClient
from frontdoor_agent.orchestration.agent import build_registries
from frontdoor_agent.orchestration.runtime import AgentRuntime

PARTIAL = {
    "title": "Automate Performance Reporting",
    "detailed_description": "Automate the monthly performance report built in Excel using Power BI.",
    "criticality": "mission-critical to have",
}
REST = {
    "strategic_alignment": "Data & Analytics",
    "benefits": "Saves two days of manual work every month",
    "demand_sponsor": "Jane Smith",
    "risk": "Risk to Multiple Teams",
}


@pytest.fixture
def config() -> AgentConfig:
    root = Path(__file__).resolve().parent.parent.parent
    return load_config(root / "configs" / "default_agent.yaml")


def _runtime(config: AgentConfig, responses: list, submitter: MockSubmissionClient | None = None):
    llm = MockLLMClient(responses=responses)
    return AgentRuntime(config, llm, InMemoryStateStore(), submitter), llm


def test_full_request_lifecycle(config: AgentConfig) -> None:
    """Greeting, partial intake, hand-off to a team, confirm, then a fresh request can start."""

    async def run() -> None:
        submitter = MockSubmissionClient(url_template=config.submission.tracking_url_template)
        runtime, llm = _runtime(
            config,
            [
                # Turn 1: chat
                {"next_agent": "chatAgent"},
                "I can help you submit requests to our change teams.",
                # Turn 2: request intent, partial fields
                {"next_agent": "elicitationAgent"},
                {"updates": PARTIAL, "followup_response": "Which strategic priorities does this support?"},
                # Turn 3: remaining fields, team matched in the same turn
                {"next_agent": "elicitationAgent"},
                {"updates": REST, "followup_response": "Thanks, that's everything."},
                {"team_id": "ops_change", "confidence": 95, "reasoning": "Reporting automation"},
                # Turn 4: confirm
                {"next_agent": "reviewAgent"},
                {"action_type": "confirm", "response_to_user": "Submitting now."},
            ],
            submitter,
        )
        conv = "e2e-session"
        fields, _ = build_registries(config)

        assert await runtime.start_session(conv) == config.greeting

        await runtime.handle_message(conv, "What can you do?")
        state = await runtime.get_state(conv)
        assert state.mode == Mode.CHAT

        # partial intake
        reply = await runtime.handle_message(conv, "I need to automate our monthly performance report, it's urgent")
        assert reply == "Which strategic priorities does this support?"
        state = await runtime.get_state(conv)
        assert state.mode == Mode.ELICITATION
        assert state.collected_fields == PARTIAL
        assert completion_percentage(state.collected_fields, fields) == 33
        assert missing_required_fields(state.collected_fields, fields) == list(REST)

        # last fields complete the request; team matched in the same turn
        reply = await runtime.handle_message(conv, "Data & Analytics, saves two days a month, Jane sponsors, multiple teams")
        assert "**Ops Change**" in reply
        # partial request: the supervisor is asked from ELICITATION mode without restated intent
        kind, sent = llm.calls[4]
        assert kind == "structured"
        assert "Current mode: ELICITATION" in sent[0].content
        state = await runtime.get_state(conv)
        assert state.mode == Mode.REVIEW
        assert state.identified_team == "ops_change"
        assert completion_percentage(state.collected_fields, fields) == 78

        # confirm and submit
        reply = await runtime.handle_message(conv, "yes, submit it")
        assert "https://intranet.example.com/sites/OpsChange/Lists/DemandRequests/Item/" in reply
        assert submitter.submissions == [("ops_change", {**PARTIAL, **REST})]
        state = await runtime.get_state(conv)
        assert state.mode == Mode.CHAT
        assert state.collected_fields == {}
        assert state.identified_team is None
        assert state.identified_team_name is None
        assert state.submission_url is None
        assert state.submission_error is None

        assert llm.call_count == 9
        assert [m.role for m in state.messages].count("user") == 4

    asyncio.run(run())


def test_review_modify_updates_and_reoffers_request(config: AgentConfig) -> None:
    """Modify during review re-enters elicitation; a still-complete request is re-matched in the same turn."""

    async def run() -> None:
        runtime, llm = _runtime(
            config,
            [
                {"next_agent": "elicitationAgent"},
                {"updates": {**PARTIAL, **REST}, "followup_response": "Got it all."},
                {"team_id": "ops_change"},
                # modify with the new value
                {"next_agent": "reviewAgent"},
                {"action_type": "modify"},
                {"updates": {"criticality": "important to have"}, "followup_response": "Updated."},
                {"team_id": "ops_change"},
            ],
        )
        conv = "modify"
        await runtime.handle_message(conv, "Full request details ...")

        reply = await runtime.handle_message(conv, "change the criticality to important to have")
        assert "**Ops Change**" in reply
        assert "- **Criticality:** important to have" in reply
        state = await runtime.get_state(conv)
        assert state.mode == Mode.REVIEW
        assert state.identified_team == "ops_change"
        assert state.collected_fields["criticality"] == "important to have"
        assert state.messages[-2].content == "Updated."
        assert [kind for kind, _ in llm.calls[3:]] == ["structured"] * 4
        assert llm.call_count == 7

    asyncio.run(run())



def test_reset_phrase_wipes_everything(config: AgentConfig) -> None:
    """Reset phrase in any case, with surrounding whitespace."""

    async def run() -> None:
        runtime, llm = _runtime(
            config,
            [
                {"next_agent": "elicitationAgent"},
                {"updates": PARTIAL, "followup_response": "Tell me more."},
            ],
        )
        await runtime.start_session("reset")
        await runtime.handle_message("reset", "I need a report automated")

        reply = await runtime.handle_message("reset", "   CLEAR context  ")
        assert reply == config.conversation.reset_notice
        assert llm.call_count == 2

        state = await runtime.get_state("reset")
        assert state.mode == Mode.CHAT
        assert state.collected_fields == {}
        assert len(state.messages) == 1
        assert state.messages[0].content == config.conversation.reset_notice

    asyncio.run(run())


def test_extraction_failure_keeps_collected_fields(config: AgentConfig) -> None:
    """Structured extraction failure leaves collected fields and mode as they were."""

    async def run() -> None:
        runtime, _ = _runtime(
            config,
            [
                {"next_agent": "elicitationAgent"},
                {"updates": PARTIAL, "followup_response": "Which priorities?"},
                {"next_agent": "elicitationAgent"},
                LLMError("model timed out"),
                "Sorry, could you repeat the strategic priorities?",
            ],
        )
        await runtime.handle_message("f", "I need a report automated")
        before = await runtime.get_state("f")

        reply = await runtime.handle_message("f", "Data & Analytics")
        assert reply == "Sorry, could you repeat the strategic priorities?"
        after = await runtime.get_state("f")
        assert after.collected_fields == before.collected_fields
        assert after.mode == before.mode == Mode.ELICITATION

    asyncio.run(run())


def test_submission_failure_allows_retry(config: AgentConfig) -> None:
    async def run() -> None:
        submitter = MockSubmissionClient(fail_with="SharePoint is unavailable")
        runtime, _ = _runtime(
            config,
            [
                {"next_agent": "elicitationAgent"},
                {"updates": {**PARTIAL, **REST}, "followup_response": "Got it."},
                {"team_id": "hyperautomation"},
                {"next_agent": "reviewAgent"},
                {"action_type": "confirm"},
                {"next_agent": "reviewAgent"},
                {"action_type": "confirm"},
            ],
            submitter,
        )
        await runtime.handle_message("retry", "everything at once")

        reply = await runtime.handle_message("retry", "submit")
        assert "SharePoint is unavailable" in reply
        state = await runtime.get_state("retry")
        assert state.mode == Mode.REVIEW
        assert state.submission_error == "SharePoint is unavailable"

        submitter.fail_with = None
        reply = await runtime.handle_message("retry", "try again")
        assert "successfully submitted" in reply
        state = await runtime.get_state("retry")
        assert state.submission_error is None
        assert len(submitter.submissions) == 2

    asyncio.run(run())
