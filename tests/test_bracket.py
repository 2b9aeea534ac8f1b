import pytest

from torneo_backend.core.exceptions import InvalidBracketException, InvalidConfigurationException
from torneo_backend.models import BracketStatus, Competition, CompetitionFormat, FixtureKind, Match
from torneo_backend.services.bracket import (
    advance_bracket,
    bracket_rounds,
    find_champion,
    group_ties,
    progress_cup,
    seed_knockout,
)
from torneo_backend.services.generate_fixtures import generate_competition_fixtures, generate_group_stage


@pytest.fixture
def group_stage(make_teams, score):
    """8 teams in 4 finished groups: winners 1-4, runners-up 5-8."""
    teams = make_teams(8)
    fixtures = generate_group_stage(teams, division_id=1, competition_id=1, group_count=4)
    return teams, [score(m, 2, 0) for m in fixtures]


def _knockout(kind, pairs, matchday=2):
    return [
        Match(division_id=1, competition_id=1, matchday=matchday, home_team_id=h, away_team_id=a, fixture_kind=kind)
        for h, a in pairs
    ]


def test_seed_creates_first_round_after_group_stage(group_stage, cup_config):
    teams, matches = group_stage
    update = seed_knockout(cup_config(), teams, matches)

    assert update.status == BracketStatus.SEEDED
    assert update.round_kind == FixtureKind.QUARTER_FINAL
    assert [(m.home_team_id, m.away_team_id) for m in update.new_matches] == [(1, 4), (2, 3), (5, 8), (6, 7)]
    assert {m.matchday for m in update.new_matches} == {2}
    assert all(m.fixture_kind == FixtureKind.QUARTER_FINAL and m.is_first_leg is None for m in update.new_matches)


def test_seed_waits_for_unfinished_groups(make_teams, cup_config):
    teams = make_teams(8)
    matches = generate_group_stage(teams, division_id=1, competition_id=1, group_count=4)

    update = seed_knockout(cup_config(), teams, matches)

    assert update.status == BracketStatus.WAITING
    assert update.new_matches == []


def test_seed_is_a_no_op_once_knockouts_exist(group_stage, cup_config):
    teams, matches = group_stage
    matches = matches + seed_knockout(cup_config(), teams, matches).new_matches

    update = seed_knockout(cup_config(), teams, matches)

    assert update.status == BracketStatus.WAITING
    assert not update.changed


def test_advance_pairs_consecutive_winners(cup_config, score):
    quarters = _knockout(FixtureKind.QUARTER_FINAL, [(1, 4), (2, 3), (5, 8), (6, 7)])
    played = [score(quarters[0], 1, 0), score(quarters[1], 0, 2), score(quarters[2], 3, 1), score(quarters[3], 0, 1)]

    update = advance_bracket(cup_config(), played)

    assert update.status == BracketStatus.ADVANCED
    assert update.round_kind == FixtureKind.SEMI_FINAL
    assert [(m.home_team_id, m.away_team_id) for m in update.new_matches] == [(1, 3), (5, 7)]
    assert {m.matchday for m in update.new_matches} == {3}


def test_advance_waits_for_unplayed_round(cup_config, score):
    quarters = _knockout(FixtureKind.QUARTER_FINAL, [(1, 4), (2, 3), (5, 8), (6, 7)])
    partial = [score(quarters[0], 1, 0)] + quarters[1:]

    update = advance_bracket(cup_config(), partial)

    assert update.status == BracketStatus.WAITING
    assert update.round_kind == FixtureKind.QUARTER_FINAL


def test_level_tie_halts_until_shootout_recorded(cup_config, score):
    semis = _knockout(FixtureKind.SEMI_FINAL, [(1, 2), (3, 4)])
    level = [score(semis[0], 1, 1), score(semis[1], 2, 0)]

    for _ in range(3):
        update = advance_bracket(cup_config(), level)
        assert update.status == BracketStatus.WAITING
        assert update.new_matches == []

    decided = [score(semis[0], 1, 1, penalties_winner_id=2), level[1]]
    update = advance_bracket(cup_config(), decided)

    assert update.status == BracketStatus.ADVANCED
    assert update.round_kind == FixtureKind.FINAL
    assert [(m.home_team_id, m.away_team_id) for m in update.new_matches] == [(2, 3)]


def test_advance_skips_rounds_already_created(cup_config, score):
    semis = [score(m, 1, 0) for m in _knockout(FixtureKind.SEMI_FINAL, [(1, 2), (3, 4)])]
    final = _knockout(FixtureKind.FINAL, [(1, 3)], matchday=3)

    update = advance_bracket(cup_config(), semis + final)

    assert update.status == BracketStatus.WAITING
    assert update.round_kind == FixtureKind.FINAL


def test_final_produces_champion(cup_config, score):
    semis = [score(m, 1, 0) for m in _knockout(FixtureKind.SEMI_FINAL, [(1, 2), (3, 4)])]
    final = [score(m, 0, 0, penalties_winner_id=3) for m in _knockout(FixtureKind.FINAL, [(1, 3)], matchday=3)]

    update = advance_bracket(cup_config(), semis + final)

    assert update.status == BracketStatus.COMPLETE
    assert update.champion_id == 3
    assert find_champion(semis + final) == 3
    assert find_champion(semis) is None


def test_two_legged_seed_and_aggregate(group_stage, cup_config, score):
    teams, matches = group_stage
    config = cup_config(two_legged=True)

    seeded = seed_knockout(config, teams, matches).new_matches
    first_legs = [m for m in seeded if m.is_first_leg is True]
    second_legs = [m for m in seeded if m.is_first_leg is False]
    assert len(first_legs) == len(second_legs) == 4
    assert {m.matchday for m in first_legs} == {2}
    assert {m.matchday for m in second_legs} == {3}
    assert [(m.home_team_id, m.away_team_id) for m in second_legs] == [(4, 1), (3, 2), (8, 5), (7, 6)]

    # 1 v 4: 1-2 then 2-2 -> 4 wins 4-3 on aggregate
    # 2 v 3: 1-0 then 1-0 -> level 1-1, 3 wins the shootout of the second leg
    results = {
        (1, 4): (1, 2), (4, 1): (2, 2),
        (2, 3): (1, 0), (3, 2): (1, 0),
        (5, 8): (3, 0), (8, 5): (0, 0),
        (6, 7): (0, 1), (7, 6): (0, 0),
    }
    played = []
    for m in seeded:
        home, away = results[(m.home_team_id, m.away_team_id)]
        winner = 3 if (m.home_team_id, m.away_team_id) == (3, 2) else None
        played.append(score(m, home, away, penalties_winner_id=winner))

    update = advance_bracket(config, matches + played)

    assert update.status == BracketStatus.ADVANCED
    assert update.round_kind == FixtureKind.SEMI_FINAL
    assert [(m.home_team_id, m.away_team_id, m.is_first_leg) for m in update.new_matches] == [
        (4, 3, True), (5, 7, True), (3, 4, False), (7, 5, False),
    ]
    assert [m.matchday for m in update.new_matches] == [4, 4, 5, 5]


def test_two_legged_level_aggregate_without_shootout_waits(cup_config, score):
    first = Match(division_id=1, competition_id=1, matchday=2, home_team_id=1, away_team_id=2,
                  fixture_kind=FixtureKind.FINAL, is_first_leg=True)
    second = Match(division_id=1, competition_id=1, matchday=3, home_team_id=2, away_team_id=1,
                   fixture_kind=FixtureKind.FINAL, is_first_leg=False)

    update = advance_bracket(cup_config(two_legged=True), [score(first, 2, 1), score(second, 1, 0)])

    assert update.status == BracketStatus.WAITING
    assert find_champion([score(first, 2, 1), score(second, 1, 0)]) is None


def test_second_leg_without_first_leg_is_rejected():
    orphan = Match(division_id=1, matchday=3, home_team_id=2, away_team_id=1,
                   fixture_kind=FixtureKind.FINAL, is_first_leg=False)
    with pytest.raises(InvalidBracketException):
        group_ties([orphan])


def test_progress_cup_seeds_then_advances(group_stage, score):
    teams, matches = group_stage
    cup = Competition(id=1, division_id=1, format=CompetitionFormat.CUP, zones_count=4)

    seeded = progress_cup(cup, teams, matches)
    assert seeded.status == BracketStatus.SEEDED

    played = [score(m, 1, 0) for m in seeded.new_matches]
    advanced = progress_cup(cup, teams, matches + played)
    assert advanced.status == BracketStatus.ADVANCED
    assert advanced.round_kind == FixtureKind.SEMI_FINAL

    rounds = bracket_rounds(matches + played + advanced.new_matches)
    assert [r.kind for r in rounds] == [FixtureKind.QUARTER_FINAL, FixtureKind.SEMI_FINAL]


def test_progress_cup_ignores_leagues(make_teams):
    league = Competition(id=1, division_id=1, format=CompetitionFormat.LEAGUE)
    update = progress_cup(league, make_teams(4), [])
    assert update.status == BracketStatus.WAITING


def test_eight_group_cup_runs_to_a_champion(make_teams, score):
    teams = make_teams(16)
    cup = Competition(id=1, division_id=1, format=CompetitionFormat.CUP, zones_count=8)
    matches = [score(m, 1, 0) for m in generate_competition_fixtures(cup, teams)]

    steps = []
    for _ in range(6):
        update = progress_cup(cup, teams, matches)
        steps.append((update.status, update.round_kind))
        if update.status == BracketStatus.COMPLETE:
            break
        matches += [score(m, 1, 0) for m in update.new_matches]

    assert steps == [
        (BracketStatus.SEEDED, FixtureKind.ROUND_OF_16),
        (BracketStatus.ADVANCED, FixtureKind.QUARTER_FINAL),
        (BracketStatus.ADVANCED, FixtureKind.SEMI_FINAL),
        (BracketStatus.ADVANCED, FixtureKind.FINAL),
        (BracketStatus.COMPLETE, FixtureKind.FINAL),
    ]
    assert find_champion(matches) == 1


def test_six_group_cup_is_rejected_before_any_fixture(make_teams):
    teams = make_teams(12)
    cup = Competition(id=1, division_id=1, format=CompetitionFormat.CUP, zones_count=6)

    with pytest.raises(InvalidConfigurationException):
        generate_competition_fixtures(cup, teams)
    with pytest.raises(InvalidConfigurationException):
        progress_cup(cup, teams, [])
