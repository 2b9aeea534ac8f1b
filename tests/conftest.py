# tests/conftest.py
# Shared builders for engine tests.

import pytest

from torneo_backend.core.competition_config import normalize_competition
from torneo_backend.models import Competition, CompetitionFormat, Match, Team, replace_match


@pytest.fixture
def make_teams():
    def _make_teams(count, division_id=1, start_id=1):
        return [
            Team(id=start_id + i, name=f"Team {start_id + i:02d}", division_id=division_id)
            for i in range(count)
        ]
    return _make_teams


@pytest.fixture
def score():
    """Sets a result directly, bypassing result validation (for bracket fixtures)."""
    def _score(match, home, away, penalties_winner_id=None):
        return replace_match(match, home_score=home, away_score=away, penalties_winner_id=penalties_winner_id)
    return _score


@pytest.fixture
def regular_match():
    def _regular_match(home_id, away_id, home_score=None, away_score=None, division_id=1, matchday=1, **extra):
        return Match(
            division_id=division_id,
            matchday=matchday,
            home_team_id=home_id,
            away_team_id=away_id,
            home_score=home_score,
            away_score=away_score,
            **extra,
        )
    return _regular_match


@pytest.fixture
def cup_config():
    def _cup_config(zones_count=4, two_legged=False):
        return normalize_competition(Competition(
            id=1,
            division_id=1,
            format=CompetitionFormat.CUP,
            zones_count=zones_count,
            two_legged_knockout=two_legged,
        ))
    return _cup_config
