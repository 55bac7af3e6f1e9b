"""Review behavior: confirm, modify, abandon or clarify the pending request."""

from __future__ import annotations

import logging

from frontdoor_agent.domain.errors import LLMError
from frontdoor_agent.domain.fields import FieldRegistry
from frontdoor_agent.domain.schemas import ReviewAction, ReviewActionType
from frontdoor_agent.domain.state import (
    ConversationState,
    Message,
    Mode,
    StatePatch,
    clear_request_context,
)
from frontdoor_agent.domain.teams import TeamRegistry
from frontdoor_agent.infrastructure.llm_client import LLMClient
from frontdoor_agent.infrastructure.submission import SubmissionClient
from frontdoor_agent.orchestration.prompt_builder import build_review_prompt

logger = logging.getLogger(__name__)

REVIEW_UNCLEAR = (
    "I'm not sure what you'd like to do. Could you let me know if you want to "
    "submit, modify, or cancel this request?"
)
REVIEW_ERROR = (
    "I ran into an issue processing your response. Could you let me know if you want to "
    "confirm, modify, or cancel this request?"
)


def _join(*parts: str) -> str:
    return "\n\n".join(p for p in parts if p)


class ReviewBehavior:
    """
    Acts on the user's answer to the review invitation.

    Never submits or abandons on an unclear answer: classification failures
    and unknown actions keep the request in review and ask again.
    """

    def __init__(
        self,
        llm_client: LLMClient,
        registry: FieldRegistry,
        teams: TeamRegistry,
        submission_client: SubmissionClient,
    ) -> None:
        self._llm = llm_client
        self._registry = registry
        self._teams = teams
        self._submitter = submission_client

    async def run(self, state: ConversationState) -> StatePatch:
        messages = [
            Message(
                role="system",
                content=build_review_prompt(state.collected_fields, self._registry, state.identified_team_name),
            ),
            *state.messages,
        ]
        try:
            action = await self._llm.complete_structured(messages, ReviewAction)
        except LLMError:
            logger.exception("Review classification failed")
            return StatePatch(mode=Mode.REVIEW).reply(REVIEW_ERROR)

        logger.info("Review action: %s (%s)", action.action_type.value, action.reasoning)

        if action.action_type == ReviewActionType.CONFIRM:
            return await self._confirm(state, action)
        if action.action_type == ReviewActionType.MODIFY:
            # Elicitation runs next and writes the reply
            return StatePatch(mode=Mode.ELICITATION)
        if action.action_type == ReviewActionType.ABANDON:
            return clear_request_context().reply(
                _join(action.response_to_user, "Feel free to start a new request anytime!")
            )
        if action.action_type == ReviewActionType.CLARIFY:
            return StatePatch(mode=Mode.REVIEW).reply(action.response_to_user or REVIEW_UNCLEAR)

        logger.error("Unknown review action: %s", action.action_type)
        return StatePatch(mode=Mode.REVIEW).reply(REVIEW_UNCLEAR)

    async def _confirm(self, state: ConversationState, action: ReviewAction) -> StatePatch:
        if not state.identified_team:
            logger.warning("Confirm received without an identified team")
            return StatePatch(mode=Mode.REVIEW).reply(REVIEW_UNCLEAR)

        team = self._teams.team_by_id(state.identified_team)
        self._registry.check_known(state.collected_fields)
        result = await self._submitter.submit(team, state.collected_fields)

        if result.success:
            logger.info("Submitted request to %s: %s", team.id, result.tracking_url)
            return clear_request_context().reply(
                _join(
                    action.response_to_user,
                    f"Your request has been successfully submitted! You can track it here:\n{result.tracking_url}",
                    "Is there anything else I can help you with?",
                )
            )

        logger.warning("Submission to %s failed: %s", team.id, result.error)
        return StatePatch(submission_error=result.error, mode=Mode.REVIEW).reply(
            _join(
                f"I encountered an error while submitting your request: {result.error}",
                "Would you like me to try again?",
            )
        )
