# torneo_backend/core/competition_config.py
"""
competition_config.py
---------------------
Turns a stored Competition (where most settings are optional) into a
CompetitionConfig where every setting is filled in. The engine only ever
reads the normalized value.
"""

from typing import Iterable, List, Optional

from torneo_backend.core.config import (
    DEFAULT_POINTS_DRAW,
    DEFAULT_POINTS_LOSS,
    DEFAULT_POINTS_WIN,
    DEFAULT_TIEBREAKERS,
    MIN_GROUP_COUNT,
    TIEBREAKER_COUNT,
)
from torneo_backend.core.exceptions import InvalidConfigurationException
from torneo_backend.models.competition_model import (
    Competition,
    CompetitionConfig,
    CompetitionFormat,
    Tiebreaker,
)


def normalize_tiebreakers(raw: Optional[Iterable[str]]) -> List[Tiebreaker]:
    """
    Returns exactly TIEBREAKER_COUNT distinct criteria.
    - Unknown names and duplicates are dropped (first occurrence wins)
    - Missing slots are padded from DEFAULT_TIEBREAKERS
    - Extra criteria are truncated
    """
    known = {criterion.value for criterion in Tiebreaker}
    normalized: List[Tiebreaker] = []
    for name in list(raw or []) + DEFAULT_TIEBREAKERS:
        value = name.value if isinstance(name, Tiebreaker) else name
        if value not in known:
            continue
        criterion = Tiebreaker(value)
        if criterion not in normalized:
            normalized.append(criterion)
    return normalized[:TIEBREAKER_COUNT]


def _points(value: Optional[int], default: int, label: str) -> int:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidConfigurationException(f"{label} must be a non-negative integer, got {value!r}.")
    return value


def normalize_competition(competition: Competition) -> CompetitionConfig:
    """Fills every optional competition setting with its default."""
    zones_count = competition.zones_count if competition.zones_count is not None else MIN_GROUP_COUNT
    if competition.max_teams is not None and competition.max_teams < 2:
        raise InvalidConfigurationException(
            f"Team cap must allow at least 2 teams, got {competition.max_teams}."
        )
    if competition.start_date and competition.end_date and competition.end_date < competition.start_date:
        raise InvalidConfigurationException("Competition ends before it starts.")

    competition_format = CompetitionFormat(competition.format or CompetitionFormat.LEAGUE)
    if competition_format == CompetitionFormat.CUP and not _is_power_of_two(zones_count):
        raise InvalidConfigurationException(
            f"A cup bracket cannot be built from {zones_count} groups: use 2, 4, 8, ... groups."
        )

    return CompetitionConfig(
        competition_id=competition.id,
        division_id=competition.division_id,
        format=competition_format,
        points_win=_points(competition.points_win, DEFAULT_POINTS_WIN, "Points for a win"),
        points_draw=_points(competition.points_draw, DEFAULT_POINTS_DRAW, "Points for a draw"),
        points_loss=_points(competition.points_loss, DEFAULT_POINTS_LOSS, "Points for a loss"),
        tiebreakers=normalize_tiebreakers(competition.tiebreakers),
        max_teams=competition.max_teams,
        zones_count=zones_count,
        double_round_robin=bool(competition.double_round_robin),
        two_legged_knockout=bool(competition.two_legged_knockout),
        start_date=competition.start_date,
        end_date=competition.end_date,
    )


def default_config(division_id: int) -> CompetitionConfig:
    """Configuration for a division without a competition record (plain league, defaults)."""
    return normalize_competition(Competition(division_id=division_id))


def _is_power_of_two(value: int) -> bool:
    return value > 0 and value & (value - 1) == 0


def validate_group_count(count: int, team_count: int, require_even: bool = True) -> int:
    """
    Checks a group stage split before any fixture is created.
    - At least MIN_GROUP_COUNT groups
    - When the groups feed a knockout bracket, a power of two: every group sends two
      qualifiers, so the first round has `count` ties and must halve down to a final
    - Every group gets at least two teams
    """
    if count < MIN_GROUP_COUNT:
        raise InvalidConfigurationException(f"A group stage needs at least {MIN_GROUP_COUNT} groups, got {count}.")
    if require_even and count % 2 != 0:
        raise InvalidConfigurationException(f"Cup group stages need an even number of groups, got {count}.")
    if require_even and not _is_power_of_two(count):
        raise InvalidConfigurationException(
            f"Cup group stages need a power-of-two number of groups (2, 4, 8, ...), got {count}."
        )
    if count > team_count // 2:
        raise InvalidConfigurationException(
            f"{team_count} teams cannot fill {count} groups of at least 2 teams."
        )
    return count
