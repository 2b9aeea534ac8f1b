import pytest

from torneo_backend.core.exceptions import InvalidResultException, TorneoException
from torneo_backend.models import FixtureKind, Match, MatchStatus, PenaltyShootout, Team, is_played
from torneo_backend.services.result_recorder import check_match_scope, clear_result, record_result


def _knockout(home=1, away=2, is_first_leg=None, matchday=2, kind=FixtureKind.SEMI_FINAL):
    return Match(
        id=10, division_id=1, competition_id=1, matchday=matchday,
        home_team_id=home, away_team_id=away, fixture_kind=kind, is_first_leg=is_first_leg,
    )


def test_record_result_returns_completed_copy(regular_match):
    match = regular_match(1, 2)

    recorded = record_result(match, 2, 1)

    assert (recorded.home_score, recorded.away_score) == (2, 1)
    assert recorded.status == MatchStatus.COMPLETED
    assert recorded.penalties_winner_id is None
    assert not is_played(match)


@pytest.mark.parametrize("home, away", [(None, 1), (1, None), (-1, 0), (0, 1.5), (True, 0), ("2", 1)])
def test_malformed_scores_are_rejected(regular_match, home, away):
    with pytest.raises(InvalidResultException):
        record_result(regular_match(1, 2), home, away)


def test_result_errors_share_the_package_base(regular_match):
    with pytest.raises(TorneoException):
        record_result(regular_match(1, 2), -3, 0)


def test_teams_must_play_in_the_match_division(regular_match):
    teams = [Team(id=1, name="A", division_id=1), Team(id=2, name="B", division_id=2)]
    with pytest.raises(InvalidResultException):
        record_result(regular_match(1, 2), 1, 0, teams=teams)
    with pytest.raises(InvalidResultException):
        check_match_scope(regular_match(1, 3), teams)

    check_match_scope(regular_match(1, 2, division_id=1), [Team(id=1, name="A", division_id=1), Team(id=2, name="B", division_id=1)])


def test_shootout_on_level_knockout():
    recorded = record_result(_knockout(), 1, 1, penalties=PenaltyShootout(winner_team_id=2, home_penalties=3, away_penalties=4))

    assert recorded.penalties_winner_id == 2
    assert (recorded.penalties_home, recorded.penalties_away) == (3, 4)
    assert recorded.status == MatchStatus.COMPLETED


def test_empty_shootout_is_ignored():
    recorded = record_result(_knockout(), 2, 0, penalties=PenaltyShootout())
    assert recorded.penalties_winner_id is None


@pytest.mark.parametrize(
    "penalties",
    [
        PenaltyShootout(winner_team_id=2, home_penalties=3),                     # incomplete
        PenaltyShootout(winner_team_id=9, home_penalties=3, away_penalties=4),   # not a participant
        PenaltyShootout(winner_team_id=2, home_penalties=4, away_penalties=3),   # winner scored fewer
        PenaltyShootout(winner_team_id=2, home_penalties=4, away_penalties=4),   # level shootout
        PenaltyShootout(winner_team_id=2, home_penalties=-1, away_penalties=2),  # negative
    ],
)
def test_invalid_shootouts_are_rejected(penalties):
    with pytest.raises(InvalidResultException):
        record_result(_knockout(), 1, 1, penalties=penalties)


def test_shootout_needs_level_score():
    with pytest.raises(InvalidResultException):
        record_result(_knockout(), 2, 1, penalties=PenaltyShootout(winner_team_id=1, home_penalties=5, away_penalties=4))


def test_shootout_only_in_knockout(regular_match):
    with pytest.raises(InvalidResultException):
        record_result(regular_match(1, 2), 0, 0, penalties=PenaltyShootout(winner_team_id=1, home_penalties=5, away_penalties=4))


def test_first_leg_cannot_take_shootout():
    with pytest.raises(InvalidResultException):
        record_result(
            _knockout(is_first_leg=True), 0, 0,
            penalties=PenaltyShootout(winner_team_id=1, home_penalties=5, away_penalties=4),
        )


def test_second_leg_shootout_uses_aggregate():
    first = record_result(_knockout(1, 2, is_first_leg=True), 2, 1)
    second = _knockout(2, 1, is_first_leg=False, matchday=3)
    shootout = PenaltyShootout(winner_team_id=2, home_penalties=5, away_penalties=3)

    # 1-0 in the second leg levels the tie at 2-2 on aggregate
    recorded = record_result(second, 1, 0, penalties=shootout, first_leg=first)
    assert recorded.penalties_winner_id == 2

    # Level on the day but not on aggregate
    with pytest.raises(InvalidResultException):
        record_result(second, 1, 1, penalties=shootout, first_leg=first)

    # Aggregate cannot be checked without the first leg
    with pytest.raises(InvalidResultException):
        record_result(second, 1, 0, penalties=shootout)


def test_first_leg_must_match_the_tie():
    second = _knockout(2, 1, is_first_leg=False, matchday=3)
    unplayed = _knockout(1, 2, is_first_leg=True)
    other_teams = record_result(_knockout(1, 3, is_first_leg=True), 1, 0)

    with pytest.raises(InvalidResultException):
        record_result(second, 1, 0, first_leg=unplayed)
    with pytest.raises(InvalidResultException):
        record_result(second, 1, 0, first_leg=other_teams)


def test_clear_result_resets_match():
    recorded = record_result(_knockout(), 0, 0, penalties=PenaltyShootout(winner_team_id=1, home_penalties=4, away_penalties=2))

    cleared = clear_result(recorded)

    assert not is_played(cleared)
    assert cleared.status == MatchStatus.PENDING
    assert cleared.penalties_winner_id is None
    assert (cleared.penalties_home, cleared.penalties_away) == (None, None)
    assert cleared.home_team_id == 1 and cleared.matchday == 2
