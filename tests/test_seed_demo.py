from sqlmodel import select

from torneo_backend.core.database import get_sync_engine, get_sync_session, init_db
from torneo_backend.models import CompetitionFormat, FixtureKind, Match, MovementLogEntry, Team, is_played
from torneo_backend.seed.seed_demo import build_demo_tournament, save_demo_tournament


def test_demo_season_runs_to_the_end():
    demo = build_demo_tournament(seed=7)

    cup = next(c for c in demo["competitions"] if c.format == CompetitionFormat.CUP)
    cup_team_ids = {t.id for t in demo["teams"] if t.division_id == cup.division_id}
    assert demo["champion_id"] in cup_team_ids

    assert all(is_played(m) for m in demo["matches"])
    finals = [m for m in demo["matches"] if m.fixture_kind == FixtureKind.FINAL]
    assert len(finals) == 1

    movements = demo["movements"]
    assert movements.applied
    assert len(movements.moved_team_ids()) == 4
    assert set(movements.movement_log) == {1, 2}


def test_demo_is_reproducible():
    first = build_demo_tournament(seed=3)
    second = build_demo_tournament(seed=3)
    assert first["champion_id"] == second["champion_id"]
    assert first["movements"].moved_team_ids() == second["movements"].moved_team_ids()


def test_demo_snapshot_can_be_stored():
    demo = build_demo_tournament(seed=7)
    engine = get_sync_engine("sqlite://")
    init_db(engine)

    with get_sync_session(engine) as session:
        saved = save_demo_tournament(demo, session)
        assert saved == 3 + len(demo["teams"]) + 3 + len(demo["matches"]) + 2

        stored_teams = session.exec(select(Team)).all()
        assert {t.id: t.division_id for t in stored_teams} == {t.id: t.division_id for t in demo["teams"]}
        assert len(session.exec(select(Match)).all()) == len(demo["matches"])
        assert len(session.exec(select(MovementLogEntry)).all()) == 2
