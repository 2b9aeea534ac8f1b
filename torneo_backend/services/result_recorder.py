# torneo_backend/services/result_recorder.py
"""
Result recording and validation.

Scores and penalty shootouts are validated here, when they are entered.
The bracket assumes every stored match already passed these checks.
"""

from typing import Iterable, Optional, Tuple

from torneo_backend.core.exceptions import InvalidResultException
from torneo_backend.core.logging_config import get_logger
from torneo_backend.models.match_model import (
    Match,
    MatchStatus,
    PenaltyShootout,
    is_knockout,
    is_played,
    replace_match,
)
from torneo_backend.models.team_model import Team

logger = get_logger(__name__)


def _check_goals(value, label: str) -> int:
    if value is None:
        raise InvalidResultException(f"{label} is missing: both scores must be entered together.")
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidResultException(f"{label} must be a non-negative integer, got {value!r}.")
    return value


def check_match_scope(match: Match, teams: Iterable[Team]) -> None:
    """Both teams of a match must exist and play in the match's division."""
    divisions = {team.id: team.division_id for team in teams}
    for team_id in (match.home_team_id, match.away_team_id):
        if divisions.get(team_id) != match.division_id:
            raise InvalidResultException(
                f"Team {team_id} does not play in division {match.division_id}."
            )


def decisive_score(match: Match, first_leg: Optional[Match] = None) -> Tuple[int, int]:
    """
    Goals (home, away) that decide the tie, from the point of view of `match`.
    For a second leg with its first leg supplied this is the aggregate.
    """
    home, away = match.home_score, match.away_score
    if first_leg is not None:
        # The first leg was played with home/away reversed
        home += first_leg.away_score
        away += first_leg.home_score
    return home, away


def _check_first_leg(match: Match, first_leg: Match) -> None:
    if first_leg.is_first_leg is not True or match.is_first_leg is not False:
        raise InvalidResultException("First leg must be a first leg and the match its second leg.")
    if (first_leg.home_team_id, first_leg.away_team_id) != (match.away_team_id, match.home_team_id):
        raise InvalidResultException("First leg was not played between the same two teams.")
    if not is_played(first_leg):
        raise InvalidResultException("First leg has no result yet.")


def _check_shootout(match: Match, penalties: PenaltyShootout, first_leg: Optional[Match]) -> None:
    fields = (penalties.winner_team_id, penalties.home_penalties, penalties.away_penalties)
    if any(value is None for value in fields):
        raise InvalidResultException("A shootout needs a winner and both penalty scores.")

    if not is_knockout(match):
        raise InvalidResultException("Only knockout matches can be decided on penalties.")
    if match.is_first_leg is True:
        raise InvalidResultException("A first leg cannot be decided on penalties.")
    if match.is_first_leg is False and first_leg is None:
        raise InvalidResultException("A second leg shootout needs the first leg to check the aggregate.")

    home, away = decisive_score(match, first_leg)
    if home != away:
        raise InvalidResultException(f"Shootout recorded but the tie is not level ({home}-{away}).")

    home_pens = _check_goals(penalties.home_penalties, "Home penalties")
    away_pens = _check_goals(penalties.away_penalties, "Away penalties")
    if penalties.winner_team_id == match.home_team_id:
        winner_pens, loser_pens = home_pens, away_pens
    elif penalties.winner_team_id == match.away_team_id:
        winner_pens, loser_pens = away_pens, home_pens
    else:
        raise InvalidResultException(f"Shootout winner {penalties.winner_team_id} did not play this match.")
    if winner_pens <= loser_pens:
        raise InvalidResultException("Shootout winner must have scored more penalties.")


def record_result(
    match: Match,
    home_score: Optional[int],
    away_score: Optional[int],
    penalties: Optional[PenaltyShootout] = None,
    first_leg: Optional[Match] = None,
    teams: Optional[Iterable[Team]] = None,
) -> Match:
    """
    Returns a copy of `match` with its result recorded and status set to completed.

    Args:
        match: The match being scored
        home_score: Goals of the home team (regulation plus extra time)
        away_score: Goals of the away team
        penalties: Shootout result, only for a knockout match level on its decisive leg
        first_leg: First leg of a two-legged tie, when scoring its second leg
        teams: Optional team snapshot to check that both teams play in the match's division

    Raises:
        InvalidResultException: when any part of the result is malformed; nothing is recorded
    """
    home_score = _check_goals(home_score, "Home score")
    away_score = _check_goals(away_score, "Away score")
    if teams is not None:
        check_match_scope(match, teams)

    scored = replace_match(match, home_score=home_score, away_score=away_score)
    if first_leg is not None:
        _check_first_leg(scored, first_leg)

    has_shootout = penalties is not None and any(
        value is not None
        for value in (penalties.winner_team_id, penalties.home_penalties, penalties.away_penalties)
    )
    if has_shootout:
        _check_shootout(scored, penalties, first_leg)

    logger.debug(f"Result recorded for match {match.id}: {home_score}-{away_score}")
    return replace_match(
        scored,
        status=MatchStatus.COMPLETED,
        penalties_winner_id=penalties.winner_team_id if has_shootout else None,
        penalties_home=penalties.home_penalties if has_shootout else None,
        penalties_away=penalties.away_penalties if has_shootout else None,
    )


def clear_result(match: Match) -> Match:
    """Returns an unplayed copy of the match (scores and shootout removed)."""
    return replace_match(
        match,
        home_score=None,
        away_score=None,
        penalties_winner_id=None,
        penalties_home=None,
        penalties_away=None,
        status=MatchStatus.PENDING,
    )
