"""Pydantic models for agent configuration. Central contract for registries and settings."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, model_validator


# --- Field definitions ---

FieldType = Literal["string", "enum", "multi-select"]


class FieldDefinition(BaseModel):
    """One request field the assistant elicits from the user."""

    model_config = {"frozen": True}

    name: str = Field(..., min_length=1, description="Unique field key (e.g. title, risk)")
    label: str = Field(..., description="User-facing label")
    type: FieldType = Field(default="string", description="free text, single enum or multi-select")
    required: bool = True
    description: str = Field(default="", description="Internal description shown to the model")
    prompt: str = Field(default="", description="Question to ask the user for this field")
    enum_values: list[str] = Field(default_factory=list)
    examples: list[str] = Field(default_factory=list)
    # Extra instruction for the model when extracting this field
    extraction_rule: str | None = None

    @model_validator(mode="after")
    def _check_invariants(self) -> FieldDefinition:
        if self.required and not self.prompt.strip():
            raise ValueError(f"Required field '{self.name}' must have a prompt")
        if self.type in ("enum", "multi-select") and not self.enum_values:
            raise ValueError(f"Field '{self.name}' of type {self.type} needs enum_values")
        return self


# --- Team definitions ---


class TeamDefinition(BaseModel):
    """A team that can receive submitted requests."""

    model_config = {"frozen": True}

    id: str = Field(..., min_length=1)
    name: str
    description: str = ""
    keywords: list[str] = Field(default_factory=list)
    endpoint: str = Field(..., description="Where submissions for this team are sent")
    list_title: str = Field(default="Demand Requests")


# --- Conversation behaviour ---


class ConversationSettings(BaseModel):
    """Knobs for the turn loop."""

    reset_phrase: str = Field(default="clear context", description="Debug phrase that wipes the conversation")
    reset_notice: str = Field(default="Context cleared. Let's start fresh! How can I help you today?")
    supervisor_window: int = Field(default=6, ge=1, description="Trailing messages shown to the supervisor")
    # Whether an explicit "I don't know" answer satisfies a required field
    unknown_satisfies_required: bool = True
    unknown_value: str = "not sure"


class LLMSettings(BaseModel):
    base_url: str | None = Field(default=None, description="OpenAI-compatible endpoint; env can override")
    model: str = "gpt-4o-mini"
    temperature: float | None = Field(default=None, ge=0.0, le=2.0)
    timeout_seconds: float = Field(default=60.0, gt=0)


class SubmissionSettings(BaseModel):
    mode: Literal["mock", "http"] = "mock"
    timeout_seconds: float = Field(default=30.0, gt=0)
    tracking_url_template: str = Field(
        default="{endpoint}/Lists/DemandRequests/Item/{item_id}",
        description="Used by the mock backend to build tracking URLs",
    )


# --- Top-level agent config ---


class AgentConfig(BaseModel):
    """Full agent configuration loaded from YAML."""

    name: str = Field(default="Front Door Assistant", description="Agent display name")
    greeting: str = Field(default="Hello! I'm the Front Door assistant. How can I help you today?")
    fields: list[FieldDefinition] = Field(..., min_length=1, description="Request fields, in display order")
    teams: list[TeamDefinition] = Field(..., min_length=1)
    conversation: ConversationSettings = Field(default_factory=ConversationSettings)
    llm: LLMSettings = Field(default_factory=LLMSettings)
    submission: SubmissionSettings = Field(default_factory=SubmissionSettings)

    @model_validator(mode="after")
    def _check_registries(self) -> AgentConfig:
        names = [f.name for f in self.fields]
        if len(names) != len(set(names)):
            raise ValueError("Field names must be unique")
        if not any(f.required for f in self.fields):
            raise ValueError("At least one field must be required")
        ids = [t.id for t in self.teams]
        if len(ids) != len(set(ids)):
            raise ValueError("Team ids must be unique")
        return self
