"""Configuration loading and validation."""

from frontdoor_agent.config.models import (
    AgentConfig,
    ConversationSettings,
    FieldDefinition,
    LLMSettings,
    SubmissionSettings,
    TeamDefinition,
)
from frontdoor_agent.config.loader import load_config

__all__ = [
    "AgentConfig",
    "ConversationSettings",
    "FieldDefinition",
    "LLMSettings",
    "SubmissionSettings",
    "TeamDefinition",
    "load_config",
]
