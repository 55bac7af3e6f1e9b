"""Pytest fixtures: mock collaborators, example configs, state factories."""

from __future__ import annotations

from pathlib import Path

import pytest

from frontdoor_agent.config.models import AgentConfig, FieldDefinition, TeamDefinition
from frontdoor_agent.domain.fields import FieldRegistry
from frontdoor_agent.domain.state import ConversationState, Message, Mode
from frontdoor_agent.domain.teams import TeamRegistry
from frontdoor_agent.infrastructure.llm_client import MockLLMClient
from frontdoor_agent.infrastructure.state_store import InMemoryStateStore
from frontdoor_agent.infrastructure.submission import MockSubmissionClient


@pytest.fixture
def minimal_config() -> AgentConfig:
    """Three fields (two required) and two teams."""
    return AgentConfig(
        name="TestAgent",
        greeting="Hi! How can I help?",
        fields=[
            FieldDefinition(name="summary", label="Summary", prompt="What do you need?"),
            FieldDefinition(
                name="urgency",
                label="Urgency",
                type="enum",
                prompt="How urgent is it?",
                enum_values=["low", "high", "not sure"],
            ),
            FieldDefinition(name="notes", label="Notes", required=False, prompt="Anything else?"),
        ],
        teams=[
            TeamDefinition(
                id="reporting",
                name="Reporting Team",
                description="Reports and dashboards",
                keywords=["powerbi", "excel"],
                endpoint="https://tickets.example.com/reporting",
            ),
            TeamDefinition(
                id="automation",
                name="Automation Team",
                description="Workflow automation",
                keywords=["power automate"],
                endpoint="https://tickets.example.com/automation",
            ),
        ],
    )


@pytest.fixture
def field_registry(minimal_config: AgentConfig) -> FieldRegistry:
    return FieldRegistry(minimal_config.fields)


@pytest.fixture
def team_registry(minimal_config: AgentConfig) -> TeamRegistry:
    return TeamRegistry(minimal_config.teams)


@pytest.fixture
def mock_llm() -> MockLLMClient:
    """Mock LLM with no scripted responses."""
    return MockLLMClient()


@pytest.fixture
def state_store() -> InMemoryStateStore:
    return InMemoryStateStore()


@pytest.fixture
def submitter() -> MockSubmissionClient:
    return MockSubmissionClient(url_template="{endpoint}/items/{item_id}")


@pytest.fixture
def review_state() -> ConversationState:
    """Complete request waiting for confirmation."""
    return ConversationState(
        conversation_id="review-conv",
        mode=Mode.REVIEW,
        messages=[
            Message(role="user", content="I need a new sales dashboard"),
            Message(role="assistant", content="This looks like one for the Reporting Team. Submit?"),
        ],
        collected_fields={"summary": "New sales dashboard", "urgency": "high"},
        identified_team="reporting",
        identified_team_name="Reporting Team",
    )


@pytest.fixture
def configs_dir() -> Path:
    return Path(__file__).resolve().parent.parent / "configs"
