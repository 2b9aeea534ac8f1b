# torneo_backend/seed/seed_demo.py
# Builds a sample season in memory and runs every engine step on it:
# fixtures -> results -> tables -> cup bracket -> promotion/relegation.

import random
from datetime import date
from typing import Dict, List

from torneo_backend.core.database import get_sync_engine, get_sync_session, init_db, save_records
from torneo_backend.core.logging_config import setup_logging
from torneo_backend.models import (
    BracketStatus,
    Competition,
    CompetitionFormat,
    Division,
    Match,
    MovementSettings,
    PenaltyShootout,
    Team,
    is_knockout,
)
from torneo_backend.services.bracket import progress_cup
from torneo_backend.services.generate_fixtures import assign_match_dates, generate_competition_fixtures
from torneo_backend.services.movements import apply_movements, log_entries
from torneo_backend.services.result_recorder import record_result
from torneo_backend.services.standings import calculate_standings

# ==========================================
# DEMO CONFIGURATION
# ==========================================
DEMO_CONFIG = {
    "divisions": [
        {"name": "Primera", "format": "league", "teams": 6},
        {"name": "Segunda", "format": "league", "teams": 6},
        {"name": "Copa", "format": "cup", "teams": 8, "zones": 2},
    ],
    "movements": {"promotions_per_division": 2, "relegations_per_division": 2},
    "season_start": date(2026, 9, 1),
    "season_end": date(2026, 12, 20),
}


def _score(rng: random.Random, match: Match, first_legs: Dict[tuple, Match]) -> Match:
    """Random result; level knockout ties get a shootout."""
    home, away = rng.randint(0, 3), rng.randint(0, 3)
    first_leg = None
    if is_knockout(match) and match.is_first_leg is False:
        first_leg = first_legs.get((match.away_team_id, match.home_team_id))

    penalties = None
    if is_knockout(match) and match.is_first_leg is not True:
        aggregate_home = home + (first_leg.away_score if first_leg else 0)
        aggregate_away = away + (first_leg.home_score if first_leg else 0)
        if aggregate_home == aggregate_away:
            winner = rng.choice([match.home_team_id, match.away_team_id])
            penalties = PenaltyShootout(
                winner_team_id=winner,
                home_penalties=5 if winner == match.home_team_id else 4,
                away_penalties=5 if winner == match.away_team_id else 4,
            )
    return record_result(match, home, away, penalties=penalties, first_leg=first_leg)


def _play_all(rng: random.Random, matches: List[Match]) -> List[Match]:
    played: List[Match] = []
    first_legs: Dict[tuple, Match] = {}
    for match in sorted(matches, key=lambda m: m.matchday):
        if match.home_score is None:
            match = _score(rng, match, first_legs)
        if match.is_first_leg is True:
            first_legs[(match.home_team_id, match.away_team_id)] = match
        played.append(match)
    return played


def build_demo_tournament(seed: int = 7) -> dict:
    """
    Runs a full demo season.
    Returns the final snapshot: divisions, competitions, teams, matches, champion and movements.
    """
    rng = random.Random(seed)
    divisions: List[Division] = []
    competitions: List[Competition] = []
    teams: List[Team] = []
    matches: List[Match] = []

    next_team_id = 1
    for position, entry in enumerate(DEMO_CONFIG["divisions"]):
        division = Division(id=position + 1, name=entry["name"], position=position)
        competition = Competition(
            id=position + 1,
            division_id=division.id,
            name=entry["name"],
            format=CompetitionFormat(entry["format"]),
            zones_count=entry.get("zones"),
            end_date=DEMO_CONFIG["season_end"],
        )
        division_teams = [
            Team(id=next_team_id + i, name=f"{entry['name']} FC {i + 1}", division_id=division.id)
            for i in range(entry["teams"])
        ]
        next_team_id += entry["teams"]

        # Shuffle for a random draw, then schedule and play the opening fixtures
        draw = division_teams[:]
        rng.shuffle(draw)
        fixtures = assign_match_dates(
            generate_competition_fixtures(competition, draw),
            DEMO_CONFIG["season_start"],
            DEMO_CONFIG["season_end"],
        )
        fixtures = _play_all(rng, fixtures)
        print(f"📅 {division.name}: {len(fixtures)} matches generated and played")

        divisions.append(division)
        competitions.append(competition)
        teams += division_teams
        matches += fixtures

    # 🏆 Cup: seed and advance until there is a champion
    cup = next(c for c in competitions if c.format == CompetitionFormat.CUP)
    cup_teams = [t for t in teams if t.division_id == cup.division_id]
    champion_id = None
    while True:
        cup_matches = [m for m in matches if m.competition_id == cup.id]
        update = progress_cup(cup, cup_teams, cup_matches)
        if update.status == BracketStatus.COMPLETE:
            champion_id = update.champion_id
            break
        if not update.changed:
            print(f"⚠️ Cup stopped: {update.reason}")
            break
        matches += _play_all(rng, update.new_matches)
        print(f"✅ Cup {update.round_kind.value}: {len(update.new_matches)} matches played")

    for division in divisions[:2]:
        table = calculate_standings(
            [t for t in teams if t.division_id == division.id],
            [m for m in matches if m.division_id == division.id],
        )
        print(f"📊 {division.name} leader: team {table[0].team_id} ({table[0].points} pts)")

    # ⬆️⬇️ Promotion/relegation between the two leagues
    result = apply_movements(
        divisions,
        competitions,
        teams,
        matches,
        MovementSettings(**DEMO_CONFIG["movements"]),
        {},
        today=DEMO_CONFIG["season_end"],
    )
    print(f"🔁 Movements: {result.moved_team_ids() if result.applied else result.reason}")

    return {
        "divisions": divisions,
        "competitions": competitions,
        "teams": result.teams,
        "matches": matches,
        "champion_id": champion_id,
        "movements": result,
    }


def save_demo_tournament(demo: dict, session) -> int:
    """Stores a demo snapshot (records only) through the given session."""
    return save_records(
        session,
        demo["divisions"],
        demo["teams"],
        demo["competitions"],
        demo["matches"],
        log_entries(demo["movements"].movement_log),
    )


if __name__ == "__main__":
    setup_logging(level="INFO")
    demo = build_demo_tournament()
    engine = get_sync_engine()
    init_db(engine)
    with get_sync_session(engine) as session:
        save_demo_tournament(demo, session)
    print(f"🎉 Demo complete! Cup champion: team {demo['champion_id']}")
