"""Agent runtime: manages multiple concurrent conversations."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from frontdoor_agent.config.models import AgentConfig
from frontdoor_agent.domain.errors import IntakeError
from frontdoor_agent.domain.state import ConversationState, apply_patch, clear_all, clear_request_context
from frontdoor_agent.infrastructure.llm_client import LLMClient
from frontdoor_agent.infrastructure.state_store import StateStore
from frontdoor_agent.infrastructure.submission import MockSubmissionClient, SubmissionClient
from frontdoor_agent.orchestration.agent import ConversationAgent

logger = logging.getLogger(__name__)

TURN_FAILED_REPLY = (
    "Sorry, something went wrong on my side while handling that. "
    "Your request details are still saved, so please try again in a moment."
)


class AgentRuntime:
    """
    Holds config + collaborators; creates one ConversationAgent; routes by conversation id.
    Turns for the same conversation run one at a time; different conversations run freely.
    """

    def __init__(
        self,
        config: AgentConfig,
        llm_client: LLMClient,
        state_store: StateStore,
        submission_client: SubmissionClient | None = None,
    ) -> None:
        self.config = config
        if submission_client is None:
            submission_client = MockSubmissionClient(url_template=config.submission.tracking_url_template)
        self._store = state_store
        self._agent = ConversationAgent(config, llm_client, state_store, submission_client)
        self._locks: dict[str, asyncio.Lock] = {}
        # Turns holding or waiting on each lock; the lock is dropped at zero
        self._lock_users: dict[str, int] = {}

    @property
    def agent(self) -> ConversationAgent:
        return self._agent

    @asynccontextmanager
    async def _lock(self, conversation_id: str) -> AsyncIterator[None]:
        lock = self._locks.get(conversation_id)
        if lock is None:
            lock = self._locks[conversation_id] = asyncio.Lock()
        self._lock_users[conversation_id] = self._lock_users.get(conversation_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[conversation_id] -= 1
            if not self._lock_users[conversation_id]:
                del self._lock_users[conversation_id]
                del self._locks[conversation_id]

    async def start_session(self, conversation_id: str) -> str:
        """
        Start a new conversation and return the greeting message.
        If the conversation already exists, returns the configured greeting.
        """
        async with self._lock(conversation_id):
            return await self._agent.start_session(conversation_id)

    async def handle_message(self, conversation_id: str, user_message: str) -> str:
        """Route message to agent; return assistant reply. A failed turn leaves stored state untouched."""
        async with self._lock(conversation_id):
            try:
                return await self._agent.handle_message(conversation_id, user_message)
            except IntakeError:
                logger.exception("Turn failed for conversation %s", conversation_id)
                return TURN_FAILED_REPLY

    async def clear_context(self, conversation_id: str, include_messages: bool = False) -> ConversationState:
        """Drop the in-progress request, or with include_messages everything including history."""
        async with self._lock(conversation_id):
            state = await self._store.load(conversation_id)
            if include_messages:
                patch = clear_all(self.config.conversation.reset_notice)
            else:
                patch = clear_request_context()
            state = apply_patch(state, patch)
            await self._store.save(conversation_id, state)
            logger.info("Cleared %s for conversation %s", "everything" if include_messages else "request context", conversation_id)
            return state

    async def get_state(self, conversation_id: str) -> ConversationState | None:
        """Get current conversation state (or None)."""
        return await self._agent.get_state(conversation_id)

    def get_greeting(self) -> str:
        """Initial greeting for new conversations (from config)."""
        return self.config.greeting
