"""Team matching behavior: route the completed request to a team, then invite review."""

from __future__ import annotations

import logging

from frontdoor_agent.domain.errors import LLMError
from frontdoor_agent.domain.fields import FieldRegistry
from frontdoor_agent.domain.schemas import TeamMatch
from frontdoor_agent.domain.state import ConversationState, Message, Mode, StatePatch
from frontdoor_agent.domain.teams import TeamRegistry
from frontdoor_agent.infrastructure.llm_client import LLMClient
from frontdoor_agent.orchestration.prompt_builder import (
    build_no_match_prompt,
    build_review_invitation,
    build_team_matching_prompt,
    format_collected_for_user,
)

logger = logging.getLogger(__name__)

TEAM_MATCHING_FALLBACK = (
    "Sorry, I had trouble working out where your request should go. "
    "Could you describe the issue again, maybe from a slightly different angle?"
)


class TeamMatchingBehavior:
    def __init__(self, llm_client: LLMClient, registry: FieldRegistry, teams: TeamRegistry) -> None:
        self._llm = llm_client
        self._registry = registry
        self._teams = teams

    async def run(self, state: ConversationState) -> StatePatch:
        collected = state.collected_fields
        messages = [
            Message(role="system", content=build_team_matching_prompt(collected, self._registry, self._teams)),
            Message(role="user", content="Which team should handle this request?"),
        ]
        try:
            match = await self._llm.complete_structured(messages, TeamMatch)
        except LLMError:
            logger.exception("Team matching call failed")
            return StatePatch(mode=Mode.CHAT).reply(TEAM_MATCHING_FALLBACK)

        if match.found:
            # An id outside the registry is a contract violation: let it propagate
            team = self._teams.team_by_id(match.team_id.strip())
            logger.info("Matched team %s (confidence %.0f): %s", team.id, match.confidence, match.reasoning)
            summary = format_collected_for_user(collected, self._registry)
            return StatePatch(
                identified_team=team.id,
                identified_team_name=team.name,
                submission_error=None,
                mode=Mode.REVIEW,
            ).reply(build_review_invitation(team.name, summary))

        logger.info("No team matched: %s", match.reasoning)
        try:
            reply = await self._llm.complete(
                [Message(role="system", content=build_no_match_prompt(collected, self._registry)), *state.messages]
            )
        except LLMError:
            logger.exception("No-match reply failed")
            reply = TEAM_MATCHING_FALLBACK
        return StatePatch(mode=Mode.CHAT).reply(reply)
