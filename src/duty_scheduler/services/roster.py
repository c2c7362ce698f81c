"""Read-only member roster loaded from a JSON file."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from duty_scheduler.schemas.schedule import Member

logger = logging.getLogger(__name__)

_MEMBERS = TypeAdapter(list[Member])


@dataclass(frozen=True)
class Roster:
    """Members shared by every team plus per-team member lists."""

    members: list[Member] = field(default_factory=list)
    teams: dict[str, list[Member]] = field(default_factory=dict)

    def members_for(self, team_key: str) -> list[Member]:
        return list(self.teams.get(team_key) or self.members)


def parse_roster(payload: object) -> Roster:
    if not isinstance(payload, dict):
        raise ValueError("roster must be a JSON object")
    members = _MEMBERS.validate_python(payload.get("members", []))
    raw_teams = payload.get("teams") or {}
    if not isinstance(raw_teams, dict):
        raise ValueError("roster teams must map team keys to member lists")
    teams = {str(team): _MEMBERS.validate_python(team_members) for team, team_members in raw_teams.items()}
    return Roster(members=members, teams=teams)


def load_roster(path: str | Path | None) -> Roster:
    """Load the roster at *path*; a missing or malformed file yields an empty roster."""

    if not path:
        return Roster()
    try:
        with Path(path).open("r", encoding="utf-8") as handle:
            return parse_roster(json.load(handle))
    except FileNotFoundError:
        logger.warning("Roster file %s not found, using an empty roster", path)
    except (OSError, ValueError, ValidationError):
        logger.warning("Roster file %s is unreadable, using an empty roster", path, exc_info=True)
    return Roster()
