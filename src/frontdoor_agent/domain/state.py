"""Conversation state, state patches and the reducers that apply them."""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field


class Mode(str, Enum):
    """Coarse conversation phase gating which behaviors the supervisor may pick."""

    CHAT = "CHAT"
    ELICITATION = "ELICITATION"
    REVIEW = "REVIEW"


Role = Literal["user", "assistant", "system"]


class Message(BaseModel):
    """A single message in the conversation."""

    role: Role = Field(..., description="user | assistant | system")
    content: str


class ConversationState(BaseModel):
    """Full conversation state for one conversation id."""

    conversation_id: str
    messages: list[Message] = Field(default_factory=list)
    mode: Mode = Mode.CHAT
    # Set by the supervisor, consumed by the router in the same turn
    routing_decision: str = ""
    collected_fields: dict[str, str] = Field(default_factory=dict)
    identified_team: str | None = None
    identified_team_name: str | None = None
    submission_url: str | None = None
    submission_error: str | None = None

    def last_user_message(self) -> str:
        for m in reversed(self.messages):
            if m.role == "user":
                return m.content
        return ""

    def last_assistant_message(self) -> str | None:
        for m in reversed(self.messages):
            if m.role == "assistant":
                return m.content
        return None


class StatePatch(BaseModel):
    """
    Partial update returned by a behavior.

    Only fields explicitly passed to the constructor are applied, so
    ``StatePatch(identified_team=None)`` clears the team while
    ``StatePatch()`` leaves it untouched. ``messages`` are appended unless
    ``replace_messages`` is set. ``collected_fields`` replaces the whole map:
    a behavior that adds values must merge into a copy itself.
    """

    messages: list[Message] = Field(default_factory=list)
    replace_messages: bool = False
    mode: Mode | None = None
    routing_decision: str | None = None
    collected_fields: dict[str, str] | None = None
    identified_team: str | None = None
    identified_team_name: str | None = None
    submission_url: str | None = None
    submission_error: str | None = None

    def reply(self, text: str) -> StatePatch:
        """Return a copy with one assistant message appended."""
        return self.model_copy(
            update={"messages": [*self.messages, Message(role="assistant", content=text)]}
        )


# Fields of StatePatch that map 1:1 onto ConversationState with replace semantics
_REPLACED = (
    "routing_decision",
    "collected_fields",
    "identified_team",
    "identified_team_name",
    "submission_url",
    "submission_error",
)


def apply_patch(state: ConversationState, patch: StatePatch) -> ConversationState:
    """Apply a patch and return the new state. The input state is not mutated."""
    update: dict = {}
    if patch.replace_messages:
        update["messages"] = list(patch.messages)
    elif patch.messages:
        update["messages"] = [*state.messages, *patch.messages]

    if "mode" in patch.model_fields_set:
        update["mode"] = patch.mode or Mode.CHAT

    for name in _REPLACED:
        if name in patch.model_fields_set:
            value = getattr(patch, name)
            if name == "collected_fields":
                value = dict(value or {})
            elif name == "routing_decision":
                value = value or ""
            update[name] = value

    return state.model_copy(update=update, deep=True)


def clear_request_context() -> StatePatch:
    """Drop the in-progress request but keep the conversation history."""
    return StatePatch(
        collected_fields={},
        identified_team=None,
        identified_team_name=None,
        submission_url=None,
        submission_error=None,
        mode=Mode.CHAT,
    )


def clear_all(notice: str) -> StatePatch:
    """Reset everything; history is replaced by a single notice."""
    patch = clear_request_context()
    return patch.model_copy(
        update={
            "messages": [Message(role="assistant", content=notice)],
            "replace_messages": True,
        }
    )
