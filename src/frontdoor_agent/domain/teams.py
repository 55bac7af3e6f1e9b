"""Team registry: static catalog with the id -> definition selection contract."""

from __future__ import annotations

from typing import Iterable

from frontdoor_agent.config.models import TeamDefinition
from frontdoor_agent.domain.errors import UnknownTeamError


class TeamRegistry:
    def __init__(self, teams: Iterable[TeamDefinition]) -> None:
        self._teams: tuple[TeamDefinition, ...] = tuple(teams)
        self._by_id = {t.id: t for t in self._teams}

    @property
    def teams(self) -> tuple[TeamDefinition, ...]:
        return self._teams

    def team_ids(self) -> list[str]:
        return [t.id for t in self._teams]

    def team_by_id(self, team_id: str) -> TeamDefinition:
        """Resolve a team id. Raises UnknownTeamError if it is not registered."""
        try:
            return self._by_id[team_id]
        except KeyError:
            raise UnknownTeamError(team_id) from None
