"""Escalation team directory."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from pydantic import BaseModel, ConfigDict

from medtriage.core.config import TeamConfig
from medtriage.dispatch.types import ContactMethod


class EscalationTeam(BaseModel):
    """A named group with one or more contact methods."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    priority: str = "P1"
    response_time: str = "30 minutes"
    contacts: tuple[ContactMethod, ...] = ()

    @property
    def primary_contact(self) -> ContactMethod | None:
        """The contact marked primary, else the first listed, else None."""
        for contact in self.contacts:
            if contact.primary:
                return contact
        return self.contacts[0] if self.contacts else None

    @classmethod
    def from_config(cls, team_id: str, config: TeamConfig) -> EscalationTeam:
        return cls(
            id=team_id,
            name=config.name,
            priority=config.priority,
            response_time=config.response_time,
            contacts=tuple(
                ContactMethod(type=c.type, value=c.value, primary=c.primary)
                for c in config.contacts
            ),
        )


class TeamDirectory:
    """Lookup of escalation teams by id."""

    def __init__(self, teams: Iterable[EscalationTeam] = ()) -> None:
        self._teams: dict[str, EscalationTeam] = {t.id: t for t in teams}

    @classmethod
    def from_config(cls, teams: Mapping[str, TeamConfig]) -> TeamDirectory:
        return cls(EscalationTeam.from_config(tid, cfg) for tid, cfg in teams.items())

    def get(self, team_id: str) -> EscalationTeam | None:
        return self._teams.get(team_id)

    def add(self, team: EscalationTeam) -> None:
        self._teams[team.id] = team

    def __contains__(self, team_id: object) -> bool:
        return team_id in self._teams

    def __len__(self) -> int:
        return len(self._teams)

    @property
    def team_ids(self) -> list[str]:
        return list(self._teams)
