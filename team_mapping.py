"""
Team Mapping Module

Resolves agents to the sales team they belong to. The roster is configuration
data: it is loaded once (normally from a JSON file named by
DASHBOARD_TEAMS_FILE) and handed to a TeamResolver, which is read-only from
then on. Tests and alternative deployments simply build a resolver from a
different roster.

Roster file format:

    [
      {
        "name": "Team Example",
        "lead": "Alex Lead",
        "members": [{"name": "Jane Doe", "email": "jane.doe@example.com"}]
      }
    ]

Usage:
    from team_mapping import Team, TeamMember, TeamResolver, load_team_roster

    resolver = TeamResolver(load_team_roster("teams.json"))
    resolver.resolve_team("Jane.Doe@example.com")       # "Team Example"
    resolver.resolve_team_lead("someone@else.com")      # "Unknown"
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

from constants import UNKNOWN_TEAM_LEAD

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TeamMember:
    """A team member and the identifier (e-mail) records use for them."""
    name: str
    identifier: str


@dataclass(frozen=True)
class Team:
    """A team, its lead and its members."""
    name: str
    lead: str
    members: Tuple[TeamMember, ...] = ()


class TeamResolver:
    """Case-insensitive lookup from agent identifier to team.

    An identifier listed under more than one team resolves to the first team
    in roster order; the duplicate is logged when the resolver is built.
    """

    def __init__(self, teams: Iterable[Team] = ()):
        self._teams: Tuple[Team, ...] = tuple(teams)
        self._by_identifier: Dict[str, Team] = {}

        for team in self._teams:
            for member in team.members:
                key = member.identifier.strip().lower()
                if not key:
                    continue
                if key in self._by_identifier:
                    logger.warning(
                        f"{member.identifier} is listed in both "
                        f"'{self._by_identifier[key].name}' and '{team.name}'; "
                        f"keeping '{self._by_identifier[key].name}'"
                    )
                    continue
                self._by_identifier[key] = team

    @property
    def teams(self) -> Tuple[Team, ...]:
        return self._teams

    def _lookup(self, identifier: Optional[str]) -> Optional[Team]:
        if not identifier:
            return None
        return self._by_identifier.get(identifier.strip().lower())

    def resolve_team(self, identifier: Optional[str]) -> Optional[str]:
        """Team name for an agent, or None when the agent is in no team."""
        team = self._lookup(identifier)
        return team.name if team else None

    def resolve_team_lead(self, identifier: Optional[str]) -> str:
        """Team lead for an agent, or "Unknown" when the agent is in no team."""
        team = self._lookup(identifier)
        return team.lead if team else UNKNOWN_TEAM_LEAD

    def __len__(self) -> int:
        return len(self._by_identifier)


def teams_from_dicts(data: Any) -> List[Team]:
    """Build teams from the parsed roster JSON.

    Raises:
        ValueError: If the roster does not have the expected shape.
    """
    if not isinstance(data, list):
        raise ValueError("Team roster must be a list of teams")

    teams: List[Team] = []
    for index, raw_team in enumerate(data):
        if not isinstance(raw_team, dict) or not raw_team.get("name"):
            raise ValueError(f"Team entry {index} must be an object with a 'name'")

        raw_members = raw_team.get("members") or []
        if not isinstance(raw_members, list):
            raise ValueError(f"Team '{raw_team['name']}': 'members' must be a list")

        members = []
        for raw_member in raw_members:
            if not isinstance(raw_member, dict) or not raw_member.get("email"):
                raise ValueError(f"Team '{raw_team['name']}': every member needs an 'email'")
            members.append(TeamMember(
                name=str(raw_member.get("name", "")),
                identifier=str(raw_member["email"]),
            ))

        teams.append(Team(
            name=str(raw_team["name"]),
            lead=str(raw_team.get("lead", "")),
            members=tuple(members),
        ))

    return teams


def load_team_roster(file_path: str) -> List[Team]:
    """Load the team roster from a JSON file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file is not valid JSON or has the wrong shape.
    """
    with open(file_path, 'r', encoding='utf-8') as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Team roster {file_path} is not valid JSON: {e}") from e

    teams = teams_from_dicts(data)
    logger.info(
        f"Loaded {len(teams)} teams with "
        f"{sum(len(t.members) for t in teams)} members from {file_path}"
    )
    return teams
