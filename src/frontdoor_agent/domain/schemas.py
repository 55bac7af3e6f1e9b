"""Structured outputs requested from the language model, one per behavior."""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field


class SupervisorDecision(BaseModel):
    """Which behavior handles the latest user message."""

    next_agent: Literal["chatAgent", "elicitationAgent", "reviewAgent"] = Field(
        ..., description="Exactly one of the offered agent names"
    )


class FieldExtraction(BaseModel):
    """Field updates plus the follow-up reply, produced in a single call."""

    updates: dict[str, str | None] = Field(
        default_factory=dict,
        description="Field name -> extracted value. Null for fields not mentioned.",
    )
    confidence: float = Field(default=100.0, ge=0.0, le=100.0)
    reasoning: str = Field(default="", description="Brief explanation of what was extracted")
    followup_response: str = Field(
        ..., description="Conversational reply acknowledging the input and asking for remaining fields"
    )
    user_wants_to_abandon: bool = Field(default=False, description="True if the user cancels the request")


class TeamMatch(BaseModel):
    """Team selected for the collected request, or none."""

    team_id: str | None = Field(default=None, description="One of the team ids, or null if no team fits")
    confidence: float = Field(default=0.0, ge=0.0, le=100.0)
    reasoning: str = ""

    @property
    def found(self) -> bool:
        return bool(self.team_id and self.team_id.strip()) and self.team_id.strip().lower() not in ("none", "null")


class ReviewActionType(str, Enum):
    CONFIRM = "confirm"
    MODIFY = "modify"
    ABANDON = "abandon"
    CLARIFY = "clarify"


class ReviewAction(BaseModel):
    """What the user wants to do with the reviewed request."""

    action_type: ReviewActionType
    reasoning: str = ""
    response_to_user: str = Field(default="", description="Conversational reply for the chosen action")
