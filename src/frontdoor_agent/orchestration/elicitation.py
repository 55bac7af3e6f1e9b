"""Elicitation behavior: extract field values and ask for the rest, in one model call."""

from __future__ import annotations

import logging

from frontdoor_agent.domain.errors import LLMError
from frontdoor_agent.domain.fields import FieldRegistry
from frontdoor_agent.domain.schemas import FieldExtraction
from frontdoor_agent.domain.state import (
    ConversationState,
    Message,
    StatePatch,
    clear_request_context,
)
from frontdoor_agent.infrastructure.llm_client import LLMClient
from frontdoor_agent.orchestration.prompt_builder import (
    build_elicitation_first_prompt,
    build_elicitation_subsequent_prompt,
    build_focus_hint,
)

logger = logging.getLogger(__name__)

ELICITATION_FALLBACK = (
    "Sorry, I had trouble processing that. Could you tell me a bit more about what you need?"
)


class ElicitationBehavior:
    """
    Collects request fields.

    The structured reply carries both the field updates and the follow-up
    question. Valid updates are merged into a copy of the collected fields
    here; the state layer replaces the map wholesale. If the structured
    call fails, an unstructured reply is produced instead (or a canned one if
    that fails too) and the collected fields are left as they were.
    """

    def __init__(self, llm_client: LLMClient, registry: FieldRegistry) -> None:
        self._llm = llm_client
        self._registry = registry

    def _system_prompt(self, state: ConversationState) -> str:
        if not state.collected_fields:
            return build_elicitation_first_prompt(self._registry)
        return build_elicitation_subsequent_prompt(state.collected_fields, self._registry)

    async def run(self, state: ConversationState) -> StatePatch:
        first_entry = not state.collected_fields
        system_prompt = self._system_prompt(state)
        messages = [Message(role="system", content=system_prompt), *state.messages]
        if not first_entry and state.messages and state.messages[-1].role == "user":
            messages.append(Message(role="system", content=build_focus_hint(state.messages[-1].content)))

        try:
            extraction = await self._llm.complete_structured(messages, FieldExtraction)
        except LLMError:
            logger.exception("Field extraction failed; falling back to a plain reply")
            try:
                reply = await self._llm.complete([Message(role="system", content=system_prompt), *state.messages])
            except LLMError:
                logger.exception("Fallback reply failed")
                reply = ELICITATION_FALLBACK
            return StatePatch().reply(reply)

        logger.info("Elicitation reasoning: %s", extraction.reasoning)

        if extraction.user_wants_to_abandon:
            logger.info("User abandoned request in conversation %s", state.conversation_id)
            return clear_request_context().reply(extraction.followup_response)

        updates = self._valid_updates(extraction.updates)
        merged = {**state.collected_fields, **updates}
        logger.info("Elicitation merged %d field update(s)", len(updates))
        logger.debug("Collected fields: %s", merged)
        return StatePatch(collected_fields=merged).reply(extraction.followup_response)

    def _valid_updates(self, updates: dict[str, str | None]) -> dict[str, str]:
        unknown = self._registry.unknown_keys(updates)
        if unknown:
            logger.warning("Discarding updates for unknown fields: %s", ", ".join(unknown))
        return {
            name: value.strip()
            for name, value in updates.items()
            if name not in unknown and self._registry.is_valid_value(value)
        }
