"""Load agent config from YAML and check the cross-section settings."""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from frontdoor_agent.config.models import AgentConfig

logger = logging.getLogger(__name__)


def check_config(config: AgentConfig) -> list[str]:
    """
    Checks that span the conversation settings and the field list.

    Raises ValueError when the reset phrase is blank, since no user message
    could ever match it. Returns warnings for required enum fields that do
    not offer the configured unknown value while unknown answers count as
    satisfying: the model has no listed value to record "not sure" with.
    """
    settings = config.conversation
    if not " ".join(settings.reset_phrase.split()):
        raise ValueError("Invalid config: conversation.reset_phrase must not be blank")

    warnings: list[str] = []
    if settings.unknown_satisfies_required:
        unknown = settings.unknown_value.strip().lower()
        for f in config.fields:
            if f.required and f.type == "enum" and unknown not in (v.strip().lower() for v in f.enum_values):
                warnings.append(f"Field '{f.name}' has no '{settings.unknown_value}' option")
    return warnings


def load_config(path: str | Path) -> AgentConfig:
    """
    Load a YAML file into AgentConfig.
    Raises FileNotFoundError, yaml.YAMLError, or ValueError on invalid config.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    if data is None:
        raise ValueError("Config file is empty")

    try:
        config = AgentConfig.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Invalid config: {e}") from e

    for warning in check_config(config):
        logger.warning("%s: %s", path.name, warning)

    logger.info(
        "Loaded config %s: %d fields (%d required), teams %s",
        path.name,
        len(config.fields),
        sum(1 for f in config.fields if f.required),
        ", ".join(t.id for t in config.teams),
    )
    return config
