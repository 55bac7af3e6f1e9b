"""Conversation agent: one turn = supervisor, routed behavior, optional follow-on, persist."""

from __future__ import annotations

import logging
from typing import Protocol

from frontdoor_agent.config.models import AgentConfig
from frontdoor_agent.domain.errors import RoutingError
from frontdoor_agent.domain.fields import FieldRegistry
from frontdoor_agent.domain.routing import TRANSITIONS, Node, next_node
from frontdoor_agent.domain.state import ConversationState, Message, StatePatch, apply_patch
from frontdoor_agent.domain.teams import TeamRegistry
from frontdoor_agent.infrastructure.llm_client import LLMClient
from frontdoor_agent.infrastructure.state_store import StateStore
from frontdoor_agent.infrastructure.submission import SubmissionClient
from frontdoor_agent.orchestration.chat import ChatBehavior
from frontdoor_agent.orchestration.elicitation import ElicitationBehavior
from frontdoor_agent.orchestration.review import ReviewBehavior
from frontdoor_agent.orchestration.supervisor import SupervisorBehavior
from frontdoor_agent.orchestration.team_matching import TeamMatchingBehavior

logger = logging.getLogger(__name__)

NO_REPLY = "Sorry, I lost track of that. Could you say it again?"


class Behavior(Protocol):
    async def run(self, state: ConversationState) -> StatePatch:
        ...


def build_registries(config: AgentConfig) -> tuple[FieldRegistry, TeamRegistry]:
    fields = FieldRegistry(
        config.fields,
        unknown_value=config.conversation.unknown_value,
        unknown_satisfies_required=config.conversation.unknown_satisfies_required,
    )
    return fields, TeamRegistry(config.teams)


class ConversationAgent:
    """One agent instance: config + collaborators. Handles one turn at a time."""

    def __init__(
        self,
        config: AgentConfig,
        llm_client: LLMClient,
        state_store: StateStore,
        submission_client: SubmissionClient,
    ) -> None:
        self.config = config
        self.fields, self.teams = build_registries(config)
        self._store = state_store
        self.transitions = TRANSITIONS
        self.behaviors: dict[Node, Behavior] = {
            Node.SUPERVISOR: SupervisorBehavior(llm_client, config.conversation),
            Node.CHAT: ChatBehavior(llm_client),
            Node.ELICITATION: ElicitationBehavior(llm_client, self.fields),
            Node.TEAM_MATCHING: TeamMatchingBehavior(llm_client, self.fields, self.teams),
            Node.REVIEW: ReviewBehavior(llm_client, self.fields, self.teams, submission_client),
        }

    async def start_session(self, conversation_id: str) -> str:
        """
        Initialize a new conversation if it does not exist yet, append the greeting,
        persist state, and return the greeting text.
        """
        greeting = self.config.greeting
        if not await self._store.exists(conversation_id):
            state = ConversationState(conversation_id=conversation_id)
            state.messages.append(Message(role="assistant", content=greeting))
            await self._store.save(conversation_id, state)
        return greeting

    async def handle_message(self, conversation_id: str, user_message: str) -> str:
        """
        Process one user message: load state, run the turn, persist, return the reply.
        Nothing is saved if the turn raises.
        """
        state = await self._store.load(conversation_id)
        state = apply_patch(
            state,
            StatePatch(messages=[Message(role="user", content=user_message)], routing_decision=""),
        )
        state, reply = await self.run_turn(state)
        await self._store.save(conversation_id, state)
        return reply

    async def run_turn(self, state: ConversationState) -> tuple[ConversationState, str]:
        """
        Walk the transition table from the supervisor until the turn ends.
        Each behavior runs at most once per turn, so every hop (review -> elicitation,
        elicitation -> team matching) is taken at most once.
        """
        node = Node.SUPERVISOR
        visited: set[Node] = set()
        reply: str | None = None

        while node != Node.END:
            if node in visited:
                raise RoutingError(f"{node.value} entered twice in one turn")
            visited.add(node)

            patch = await self.behaviors[node].run(state)
            state = apply_patch(state, patch)
            for m in patch.messages:
                if m.role == "assistant":
                    reply = m.content

            target = next_node(node, state, self.fields, self.transitions)
            logger.debug("Transition %s -> %s (mode %s)", node.value, target.value, state.mode.value)
            node = target

        if reply is None:
            logger.warning("Turn in conversation %s produced no reply", state.conversation_id)
            reply = NO_REPLY
        return state, reply

    async def get_state(self, conversation_id: str) -> ConversationState | None:
        """Return current state for the conversation (e.g. for CLI display)."""
        if not await self._store.exists(conversation_id):
            return None
        return await self._store.load(conversation_id)
