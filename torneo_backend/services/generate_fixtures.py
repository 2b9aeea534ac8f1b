# torneo_backend/services/generate_fixtures.py
# Service for generating round-robin fixtures (single or double, optionally split into groups).

from datetime import date, datetime, timedelta
from typing import Dict, List, Optional, Sequence

from torneo_backend.core.competition_config import normalize_competition, validate_group_count
from torneo_backend.core.config import (
    AM_KICKOFF,
    BYE,
    GROUP_LABEL_PREFIX,
    MATCHDAY_WEEKDAYS,
    PM_KICKOFF,
)
from torneo_backend.core.exceptions import InvalidConfigurationException
from torneo_backend.core.logging_config import get_logger
from torneo_backend.models.competition_model import Competition
from torneo_backend.models.match_model import FixtureKind, Match, replace_match
from torneo_backend.models.team_model import Team

logger = get_logger(__name__)


def _check_teams(teams: Sequence[Team], division_id: int, max_teams: Optional[int] = None) -> None:
    if len(teams) < 2:
        raise InvalidConfigurationException("Not enough teams to generate fixtures (need at least 2).")
    if max_teams is not None and len(teams) > max_teams:
        raise InvalidConfigurationException(f"{len(teams)} teams exceed the team cap of {max_teams}.")
    seen = set()
    for team in teams:
        if team.division_id != division_id:
            raise InvalidConfigurationException(
                f"Team {team.name} belongs to division {team.division_id}, not {division_id}."
            )
        if team.id in seen:
            raise InvalidConfigurationException(f"Team {team.name} is listed twice.")
        seen.add(team.id)


def generate_round_robin(
    teams: Sequence[Team],
    division_id: int,
    competition_id: Optional[int] = None,
    double_round_robin: bool = False,
    zone: Optional[str] = None,
    max_teams: Optional[int] = None,
) -> List[Match]:
    """
    Generates an unscored round-robin for the given teams.
    - The caller decides the order of `teams` (shuffle before calling for a random draw)
    - Odd team counts get a bye: one team rests each matchday
    - Double round-robin adds the mirrored second leg after the first
    """
    _check_teams(teams, division_id, max_teams)

    # =====================================
    # ROUND-ROBIN FIXTURE GENERATION
    # =====================================
    # Algorithm: "Circle Method" for round-robin scheduling
    rotated: List[Optional[Team]] = list(teams)
    if len(rotated) % 2 != 0:
        rotated.append(BYE)  # Add a dummy "bye" if odd number of teams

    num_rounds = len(rotated) - 1
    half = len(rotated) // 2

    fixtures: List[Match] = []
    for r in range(num_rounds):
        for i in range(half):
            home = rotated[i]
            away = rotated[-i - 1]

            if home is BYE or away is BYE:
                continue  # Skip bye pairings

            fixtures.append(Match(
                division_id=division_id,
                competition_id=competition_id,
                matchday=r + 1,
                home_team_id=home.id,
                away_team_id=away.id,
                fixture_kind=FixtureKind.REGULAR,
                zone=zone,
                is_first_leg=True if double_round_robin else None,
            ))

        # Rotate teams (keep the first team fixed)
        rotated = [rotated[0]] + [rotated[-1]] + rotated[1:-1]

    if double_round_robin:
        # Second leg: same pairings, home/away swapped, after the whole first leg
        fixtures += [
            replace_match(
                fx,
                home_team_id=fx.away_team_id,
                away_team_id=fx.home_team_id,
                matchday=fx.matchday + num_rounds,
                is_first_leg=False,
            )
            for fx in list(fixtures)
        ]

    zone_suffix = f" ({zone})" if zone else ""
    matchdays = num_rounds * (2 if double_round_robin else 1)
    logger.debug(f"Generated {len(fixtures)} fixtures for division {division_id}{zone_suffix} over {matchdays} matchdays")
    return fixtures


def group_label(index: int) -> str:
    """0 -> "Grupo A", 1 -> "Grupo B", ..."""
    return f"{GROUP_LABEL_PREFIX} {chr(ord('A') + index)}"


def split_into_groups(teams: Sequence[Team], count: int) -> List[List[Team]]:
    """Deals teams into `count` groups: team i goes to group i mod count."""
    groups: List[List[Team]] = [[] for _ in range(count)]
    for index, team in enumerate(teams):
        groups[index % count].append(team)
    return groups


def generate_group_stage(
    teams: Sequence[Team],
    division_id: int,
    competition_id: Optional[int],
    group_count: int,
    double_round_robin: bool = False,
    require_even: bool = True,
    max_teams: Optional[int] = None,
) -> List[Match]:
    """
    Splits the teams into labelled groups and schedules a round-robin in each.
    The group count is validated before anything is generated.
    """
    _check_teams(teams, division_id, max_teams)
    validate_group_count(group_count, len(teams), require_even=require_even)

    fixtures: List[Match] = []
    for index, group in enumerate(split_into_groups(teams, group_count)):
        fixtures += generate_round_robin(
            group,
            division_id,
            competition_id=competition_id,
            double_round_robin=double_round_robin,
            zone=group_label(index),
        )

    logger.info(f"Group stage generated: {group_count} groups, {len(fixtures)} matches")
    return fixtures


def generate_competition_fixtures(competition: Competition, teams: Sequence[Team]) -> List[Match]:
    """
    Generates the opening fixtures of a competition.
    - League: one round-robin with every team
    - Cup: the group stage (the bracket is created later from its results)
    """
    config = normalize_competition(competition)
    if config.is_cup:
        return generate_group_stage(
            teams,
            config.division_id,
            config.competition_id,
            config.zones_count,
            double_round_robin=config.double_round_robin,
            max_teams=config.max_teams,
        )
    return generate_round_robin(
        teams,
        config.division_id,
        competition_id=config.competition_id,
        double_round_robin=config.double_round_robin,
        max_teams=config.max_teams,
    )


def assign_match_dates(
    matches: Sequence[Match], start_date: date, end_date: Optional[date] = None
) -> List[Match]:
    """
    Gives every match a kickoff time, one calendar day per matchday.
    - Matchdays are played on Tue/Thu/Sat/Sun, in rotation, from start_date on
    - Matches of a matchday alternate between the AM and PM slot
    - A schedule running past end_date is rejected
    """
    matchday_dates: Dict[int, date] = {}
    current_date = start_date
    for index, matchday in enumerate(sorted({m.matchday for m in matches})):
        weekday = MATCHDAY_WEEKDAYS[index % len(MATCHDAY_WEEKDAYS)]

        # Advance to the correct weekday
        while current_date.strftime("%A") != weekday:
            current_date += timedelta(days=1)

        if end_date is not None and current_date > end_date:
            raise InvalidConfigurationException(
                f"Matchday {matchday} falls on {current_date}, after the competition ends ({end_date})."
            )
        matchday_dates[matchday] = current_date
        current_date += timedelta(days=1)

    dated: List[Match] = []
    slot_counter: Dict[int, int] = {}
    for match in matches:
        slot = slot_counter.get(match.matchday, 0)
        slot_counter[match.matchday] = slot + 1

        # Pick AM or PM slot
        hour, minute = AM_KICKOFF if slot % 2 == 0 else PM_KICKOFF
        day = matchday_dates[match.matchday]
        dated.append(replace_match(match, match_time=datetime(day.year, day.month, day.day, hour, minute)))
    return dated
