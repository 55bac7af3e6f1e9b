"""Supervisor: picks the behavior for the latest user message."""

from __future__ import annotations

import logging

from frontdoor_agent.config.models import ConversationSettings
from frontdoor_agent.domain.errors import LLMError
from frontdoor_agent.domain.routing import SUPERVISOR_CHOICES, Node, mode_after_decision
from frontdoor_agent.domain.schemas import SupervisorDecision
from frontdoor_agent.domain.state import ConversationState, Message, StatePatch, clear_all
from frontdoor_agent.infrastructure.llm_client import LLMClient
from frontdoor_agent.orchestration.prompt_builder import build_supervisor_prompt

logger = logging.getLogger(__name__)


def normalize_command(text: str) -> str:
    return " ".join(text.split()).lower()


class SupervisorBehavior:
    """
    Routes each turn. The reset phrase is matched locally and never reaches
    the model; everything else is a constrained routing question over the
    last few messages. Unusable answers fall back to chat with the mode kept.
    """

    def __init__(self, llm_client: LLMClient, settings: ConversationSettings) -> None:
        self._llm = llm_client
        self._settings = settings

    def is_reset(self, text: str) -> bool:
        return normalize_command(text) == normalize_command(self._settings.reset_phrase)

    async def run(self, state: ConversationState) -> StatePatch:
        if self.is_reset(state.last_user_message()):
            logger.info("Reset phrase received; clearing conversation %s", state.conversation_id)
            patch = clear_all(self._settings.reset_notice)
            return patch.model_copy(update={"routing_decision": Node.END.value})

        choices = SUPERVISOR_CHOICES[state.mode]
        decision = await self._decide(state, choices)
        new_mode = mode_after_decision(decision, state.mode)
        logger.info("Supervisor: mode %s -> %s, routing to %s", state.mode.value, new_mode.value, decision.value)
        return StatePatch(routing_decision=decision.value, mode=new_mode)

    async def _decide(self, state: ConversationState, choices: tuple[Node, ...]) -> Node:
        window = state.messages[-self._settings.supervisor_window :]
        messages = [
            Message(role="system", content=build_supervisor_prompt(state.mode, choices)),
            *window,
        ]
        try:
            result = await self._llm.complete_structured(messages, SupervisorDecision)
        except LLMError:
            logger.exception("Supervisor routing call failed; defaulting to chat")
            return Node.CHAT

        decision = Node(result.next_agent)
        if decision not in choices:
            logger.warning(
                "Supervisor picked %s, not offered in mode %s; defaulting to chat",
                decision.value,
                state.mode.value,
            )
            return Node.CHAT
        return decision
