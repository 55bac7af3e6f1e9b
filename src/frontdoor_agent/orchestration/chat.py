"""Chat behavior: general conversation, mode-aware, no field extraction."""

from __future__ import annotations

import logging

from frontdoor_agent.domain.errors import LLMError
from frontdoor_agent.domain.state import ConversationState, Message, StatePatch
from frontdoor_agent.infrastructure.llm_client import LLMClient
from frontdoor_agent.orchestration.prompt_builder import build_chat_prompt

logger = logging.getLogger(__name__)

CHAT_FALLBACK = "Sorry, I couldn't come up with an answer just now. Could you ask me that again?"


class ChatBehavior:
    def __init__(self, llm_client: LLMClient) -> None:
        self._llm = llm_client

    async def run(self, state: ConversationState) -> StatePatch:
        messages = [Message(role="system", content=build_chat_prompt(state.mode)), *state.messages]
        try:
            reply = await self._llm.complete(messages)
        except LLMError:
            logger.exception("Chat call failed")
            reply = CHAT_FALLBACK
        logger.debug("Chat reply generated in mode %s", state.mode.value)
        return StatePatch().reply(reply)
