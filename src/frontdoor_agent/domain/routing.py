"""Mode router: behavior identifiers and the per-turn transition table.

Each row is (source node, condition, target node). ``next_node`` walks the
rows of the source in order and takes the first whose condition holds, so
adding a behavior means adding rows, not branches.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable

from frontdoor_agent.domain.completion import is_complete
from frontdoor_agent.domain.errors import RoutingError
from frontdoor_agent.domain.fields import FieldRegistry
from frontdoor_agent.domain.state import ConversationState, Mode


class Node(str, Enum):
    """Behaviors a turn can pass through, plus the terminal marker."""

    SUPERVISOR = "supervisor"
    CHAT = "chatAgent"
    ELICITATION = "elicitationAgent"
    TEAM_MATCHING = "teamMatching"
    REVIEW = "reviewAgent"
    END = "__end__"


# Destinations the supervisor may offer in each mode; the first is the mode's default.
SUPERVISOR_CHOICES: dict[Mode, tuple[Node, ...]] = {
    Mode.CHAT: (Node.CHAT, Node.ELICITATION),
    Mode.ELICITATION: (Node.ELICITATION, Node.CHAT),
    Mode.REVIEW: (Node.REVIEW, Node.CHAT),
}


def mode_after_decision(decision: Node, current: Mode) -> Mode:
    """Elicitation and review force their mode; chat keeps the in-progress one."""
    if decision == Node.ELICITATION:
        return Mode.ELICITATION
    if decision == Node.REVIEW:
        return Mode.REVIEW
    return current


Condition = Callable[[ConversationState, FieldRegistry], bool]


@dataclass(frozen=True)
class Transition:
    source: Node
    condition: Condition
    target: Node


def _always(state: ConversationState, registry: FieldRegistry) -> bool:
    return True


def _decided(node: Node) -> Condition:
    def check(state: ConversationState, registry: FieldRegistry) -> bool:
        return state.routing_decision == node.value

    return check


def _fields_complete(state: ConversationState, registry: FieldRegistry) -> bool:
    return is_complete(state.collected_fields, registry)


def _fields_incomplete(state: ConversationState, registry: FieldRegistry) -> bool:
    return not is_complete(state.collected_fields, registry)


def _mode_is(mode: Mode) -> Condition:
    def check(state: ConversationState, registry: FieldRegistry) -> bool:
        return state.mode == mode

    return check


TRANSITIONS: tuple[Transition, ...] = (
    Transition(Node.SUPERVISOR, _decided(Node.END), Node.END),
    Transition(Node.SUPERVISOR, _decided(Node.CHAT), Node.CHAT),
    Transition(Node.SUPERVISOR, _decided(Node.ELICITATION), Node.ELICITATION),
    Transition(Node.SUPERVISOR, _decided(Node.REVIEW), Node.REVIEW),
    # anything else the supervisor left behind
    Transition(Node.SUPERVISOR, _always, Node.CHAT),
    Transition(Node.CHAT, _always, Node.END),
    Transition(Node.ELICITATION, _fields_incomplete, Node.END),
    Transition(Node.ELICITATION, _fields_complete, Node.TEAM_MATCHING),
    Transition(Node.TEAM_MATCHING, _always, Node.END),
    Transition(Node.REVIEW, _mode_is(Mode.ELICITATION), Node.ELICITATION),
    Transition(Node.REVIEW, _always, Node.END),
)


def next_node(
    current: Node,
    state: ConversationState,
    registry: FieldRegistry,
    table: tuple[Transition, ...] = TRANSITIONS,
) -> Node:
    """
    Pure transition: first row for ``current`` whose condition holds.
    Raises RoutingError if no row matches (a broken table, not a runtime condition).
    """
    for row in table:
        if row.source == current and row.condition(state, registry):
            return row.target
    raise RoutingError(f"No transition from {current.value}")
