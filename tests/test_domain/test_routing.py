"""Mode router: transition table and decision-to-mode rule."""

from __future__ import annotations

import pytest

from frontdoor_agent.domain.errors import RoutingError
from frontdoor_agent.domain.fields import FieldRegistry
from frontdoor_agent.domain.routing import (
    SUPERVISOR_CHOICES,
    TRANSITIONS,
    Node,
    mode_after_decision,
    next_node,
)
from frontdoor_agent.domain.state import ConversationState, Mode

COMPLETE = {"summary": "Dashboard", "urgency": "high"}


def _state(**kwargs) -> ConversationState:
    return ConversationState(conversation_id="r", **kwargs)


@pytest.mark.parametrize(
    "decision, expected",
    [
        (Node.END, Node.END),
        (Node.CHAT, Node.CHAT),
        (Node.ELICITATION, Node.ELICITATION),
        (Node.REVIEW, Node.REVIEW),
    ],
)
def test_supervisor_dispatch(field_registry: FieldRegistry, decision: Node, expected: Node) -> None:
    state = _state(routing_decision=decision.value)
    assert next_node(Node.SUPERVISOR, state, field_registry) == expected


def test_supervisor_unknown_decision_goes_to_chat(field_registry: FieldRegistry) -> None:
    assert next_node(Node.SUPERVISOR, _state(routing_decision="bogus"), field_registry) == Node.CHAT
    assert next_node(Node.SUPERVISOR, _state(), field_registry) == Node.CHAT


def test_chat_and_team_matching_are_terminal(field_registry: FieldRegistry) -> None:
    assert next_node(Node.CHAT, _state(), field_registry) == Node.END
    assert next_node(Node.TEAM_MATCHING, _state(collected_fields=COMPLETE), field_registry) == Node.END


def test_elicitation_hands_off_when_complete(field_registry: FieldRegistry) -> None:
    assert next_node(Node.ELICITATION, _state(collected_fields={"summary": "x"}), field_registry) == Node.END
    assert next_node(Node.ELICITATION, _state(collected_fields=COMPLETE), field_registry) == Node.TEAM_MATCHING


def test_review_returns_to_elicitation_only_on_modify(field_registry: FieldRegistry) -> None:
    assert next_node(Node.REVIEW, _state(mode=Mode.ELICITATION), field_registry) == Node.ELICITATION
    assert next_node(Node.REVIEW, _state(mode=Mode.REVIEW), field_registry) == Node.END
    assert next_node(Node.REVIEW, _state(mode=Mode.CHAT), field_registry) == Node.END


def test_missing_row_raises(field_registry: FieldRegistry) -> None:
    table = tuple(t for t in TRANSITIONS if t.source != Node.CHAT)
    with pytest.raises(RoutingError):
        next_node(Node.CHAT, _state(), field_registry, table=table)


@pytest.mark.parametrize("mode", list(Mode))
def test_mode_after_decision(mode: Mode) -> None:
    assert mode_after_decision(Node.ELICITATION, mode) == Mode.ELICITATION
    assert mode_after_decision(Node.REVIEW, mode) == Mode.REVIEW
    assert mode_after_decision(Node.CHAT, mode) == mode


def test_every_mode_offers_chat() -> None:
    for mode in Mode:
        assert Node.CHAT in SUPERVISOR_CHOICES[mode]
