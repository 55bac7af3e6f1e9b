"""Error taxonomy for the intake core."""

from __future__ import annotations


class IntakeError(Exception):
    """Base class for errors raised by the intake core."""


class LLMError(IntakeError):
    """The language-model collaborator failed (network, provider, empty reply)."""


class StructuredOutputError(LLMError):
    """The model reply did not conform to the requested output shape."""


class UnknownTeamError(IntakeError):
    """A team id is not in the team registry. Indicates a prompt/config mismatch."""

    def __init__(self, team_id: str) -> None:
        super().__init__(f"Unknown team: {team_id!r}")
        self.team_id = team_id


class UnknownFieldError(IntakeError):
    """Collected fields contain a key that is not a registered field."""

    def __init__(self, names: list[str]) -> None:
        super().__init__(f"Unknown field(s): {', '.join(names)}")
        self.names = names


class RoutingError(IntakeError):
    """The transition table cannot continue from the current node."""
