"""
Tests for match request parsing and the football-data.org client.
"""

from datetime import datetime, timezone
from unittest.mock import Mock, patch

import pytest
import requests

from football_oracle.football import (
    Fixture, FootballDataClient, feed_name_for, find_fixture,
    normalize_team_name, parse_match_request, remove_abbreviations,
)

API_FIXTURES = {
    "count": 2,
    "fixtures": [
        {
            "date": "2017-04-29T14:00:00Z",
            "homeTeamName": "Arsenal FC",
            "awayTeamName": "Chelsea FC",
            "result": {"goalsHomeTeam": 1, "goalsAwayTeam": 1},
        },
        {
            "date": "2017-05-01T19:00:00Z",
            "homeTeamName": "Chelsea FC",
            "awayTeamName": "Arsenal FC",
            "result": {"goalsHomeTeam": 0, "goalsAwayTeam": 2},
        },
    ],
}


@pytest.mark.parametrize("text", [
    "Chelsea / Arsenal",
    "chelsea fc vs arsenal",
    "Chelsea VS. Arsenal FC",
    "  Chelsea - Arsenal ",
])
def test_parse_match_request_formats(text):
    assert parse_match_request(text) == ("CHELSEA", "ARSENAL")


def test_multi_word_team_names_lose_whitespace():
    assert parse_match_request("Manchester City / West Bromwich Albion") == (
        "MANCHESTERCITY", "WESTBROMWICHALBION"
    )


@pytest.mark.parametrize("text", ["hello", "a / b / c", " / Arsenal"])
def test_non_match_text_is_rejected(text):
    assert parse_match_request(text) is None


def test_abbreviations_are_removed_only_as_words():
    assert remove_abbreviations("FC Barcelona") == "Barcelona"
    assert normalize_team_name("Racing Club de Lens RC") == "RACINGCLUBDELENS"
    assert normalize_team_name("Fcastle") == "FCASTLE"


def test_feed_name_uses_utc_date():
    date = datetime(2017, 5, 1, 23, 30, tzinfo=timezone.utc)
    assert feed_name_for("Chelsea FC", "Arsenal FC", date) == "_CHELSEA_ARSENAL_01-05-2017"


def test_fixture_outcome_and_description():
    fixtures = [Fixture.from_api(f) for f in API_FIXTURES["fixtures"]]

    assert fixtures[0].outcome() == "draw"
    assert fixtures[1].outcome() == "Arsenal"
    assert fixtures[1].feed_name == "_CHELSEA_ARSENAL_01-05-2017"
    assert fixtures[1].describe() == "Chelsea VS Arsenal 01-May-2017, Arsenal won"
    assert fixtures[0].describe() == "Arsenal VS Chelsea 29-April-2017, draw"


def test_find_fixture_prefers_most_recent_in_either_order():
    fixtures = [Fixture.from_api(f) for f in API_FIXTURES["fixtures"]]

    assert find_fixture(fixtures, "ARSENAL", "CHELSEA") is fixtures[1]
    assert find_fixture(fixtures, "CHELSEA", "LIVERPOOL") is None


def test_client_sends_api_key_and_parses_fixtures():
    response = Mock()
    response.text = "raw-body"
    response.json.return_value = API_FIXTURES

    with patch("football_oracle.football.requests.get", return_value=response) as get:
        fixtures, body = FootballDataClient(api_key="secret", url="http://example.test/fixtures").fetch_recent_fixtures()

    get.assert_called_once_with(
        "http://example.test/fixtures", headers={"X-Auth-Token": "secret"}, timeout=30
    )
    response.raise_for_status.assert_called_once()
    assert body == "raw-body"
    assert [f.home for f in fixtures] == ["ARSENAL", "CHELSEA"]


def test_client_propagates_http_errors():
    response = Mock()
    response.raise_for_status.side_effect = requests.HTTPError("403 Forbidden")

    with patch("football_oracle.football.requests.get", return_value=response):
        with pytest.raises(requests.HTTPError):
            FootballDataClient(api_key="bad").fetch_recent_fixtures()
