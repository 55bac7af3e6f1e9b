"""State store: Protocol + in-memory implementation."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from frontdoor_agent.domain.state import ConversationState


@runtime_checkable
class StateStore(Protocol):
    """Protocol for persisting and loading conversation state per conversation id."""

    async def load(self, conversation_id: str) -> ConversationState:
        """Load state for the conversation, or a fresh default state if none is stored."""
        ...

    async def save(self, conversation_id: str, state: ConversationState) -> None:
        """Persist state for the conversation."""
        ...

    async def exists(self, conversation_id: str) -> bool:
        ...


class InMemoryStateStore:
    """In-memory dict store. Suitable for single process; no persistence."""

    def __init__(self) -> None:
        self._store: dict[str, ConversationState] = {}

    async def load(self, conversation_id: str) -> ConversationState:
        state = self._store.get(conversation_id)
        if state is None:
            return ConversationState(conversation_id=conversation_id)
        # Stored objects are never handed out
        return state.model_copy(deep=True)

    async def save(self, conversation_id: str, state: ConversationState) -> None:
        self._store[conversation_id] = state.model_copy(deep=True)

    async def exists(self, conversation_id: str) -> bool:
        return conversation_id in self._store
