"""
Football match requests and results from football-data.org.
"""

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

import requests

from .config import DEFAULT_FOOTBALL_DATA_URL

ABBREVIATIONS_RE = re.compile(r"\b(FC|AS|CF|RC)\b")

# Checked in this order; the first separator found in the text wins
SEPARATORS = ["/", " VS ", " VS. ", " - "]

INSTRUCTION = (
    "Please write the team names in the format: \n name1 / name2 \n"
    "Example: Manchester City / West Bromwich Albion"
)


def remove_abbreviations(text: str) -> str:
    """Strip club abbreviations (FC, AS, CF, RC)."""
    return ABBREVIATIONS_RE.sub("", text).strip()


def normalize_team_name(name: str) -> str:
    """Canonical team name: no abbreviations, no whitespace, upper case."""
    return re.sub(r"\s", "", remove_abbreviations(name.upper()))


def parse_match_request(text: str) -> Optional[Tuple[str, str]]:
    """
    Extract two normalized team names from free text.

    Returns:
        (home, away) or None if the text is not a match request
    """
    uc_text = text.strip().upper()
    for separator in SEPARATORS:
        if separator in uc_text:
            parts = uc_text.split(separator)
            if len(parts) != 2:
                return None
            home, away = (normalize_team_name(p) for p in parts)
            if not home or not away:
                return None
            return home, away
    return None


def feed_name_for(home: str, away: str, date: datetime) -> str:
    """Fact key of a match result, e.g. ``_CHELSEA_ARSENAL_01-05-2017``."""
    return f"_{normalize_team_name(home)}_{normalize_team_name(away)}_{date.astimezone(timezone.utc):%d-%m-%Y}"


def parse_fixture_date(value: str) -> datetime:
    """Parse an ISO 8601 UTC timestamp as returned by the API."""
    date = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if date.tzinfo is None:
        date = date.replace(tzinfo=timezone.utc)
    return date


@dataclass
class Fixture:
    """A finished or scheduled match."""
    home_team_name: str
    away_team_name: str
    date: datetime
    goals_home_team: Optional[int] = None
    goals_away_team: Optional[int] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Fixture":
        result = data.get("result") or {}
        return cls(
            home_team_name=data["homeTeamName"],
            away_team_name=data["awayTeamName"],
            date=parse_fixture_date(data["date"]),
            goals_home_team=result.get("goalsHomeTeam"),
            goals_away_team=result.get("goalsAwayTeam"),
        )

    @property
    def home(self) -> str:
        return normalize_team_name(self.home_team_name)

    @property
    def away(self) -> str:
        return normalize_team_name(self.away_team_name)

    @property
    def feed_name(self) -> str:
        return feed_name_for(self.home_team_name, self.away_team_name, self.date)

    def matches(self, team1: str, team2: str) -> bool:
        """True if the fixture is between the two teams, in either order."""
        return (self.home, self.away) in ((team1, team2), (team2, team1))

    def outcome(self) -> str:
        """'draw' or the name of the winning team."""
        if self.goals_home_team == self.goals_away_team:
            return "draw"
        if (self.goals_home_team or 0) > (self.goals_away_team or 0):
            return remove_abbreviations(self.home_team_name)
        return remove_abbreviations(self.away_team_name)

    def describe(self) -> str:
        """Human readable line, e.g. ``Chelsea VS Arsenal 01-May-2017, Chelsea won``."""
        result = self.outcome()
        return (
            f"{remove_abbreviations(self.home_team_name)} VS {remove_abbreviations(self.away_team_name)} "
            f"{self.date.astimezone(timezone.utc):%d-%B-%Y}, "
            + ("draw" if result == "draw" else f"{result} won")
        )


def find_fixture(fixtures: List[Fixture], team1: str, team2: str) -> Optional[Fixture]:
    """Most recent fixture between two normalized team names."""
    for fixture in reversed(fixtures):
        if fixture.matches(team1, team2):
            return fixture
    return None


class FootballDataClient:
    """Client for the football-data.org fixtures endpoint."""

    def __init__(self, api_key: str, url: str = DEFAULT_FOOTBALL_DATA_URL, timeout: int = 30):
        self.api_key = api_key
        self.url = url
        self.timeout = timeout

    def fetch_recent_fixtures(self) -> Tuple[List[Fixture], str]:
        """
        Fetch fixtures of the past three days.

        Returns:
            (fixtures, raw response body)

        Raises:
            requests.RequestException: on network errors or non-200 status
        """
        response = requests.get(
            self.url,
            headers={"X-Auth-Token": self.api_key},
            timeout=self.timeout,
        )
        response.raise_for_status()
        body = response.text
        data = response.json()

        fixtures = [Fixture.from_api(f) for f in data.get("fixtures", [])]
        return fixtures, body
