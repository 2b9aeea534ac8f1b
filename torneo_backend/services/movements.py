# torneo_backend/services/movements.py
"""
Promotion/relegation between consecutive divisions.

For every upper/lower pair whose seasons are both finished:
  - Bottom N of the upper division are relegated
  - Top M of the lower division are promoted

Each division's finished state has a fingerprint (end date or
"matches-complete-N"). Pairs whose fingerprint is already in the movement log
are skipped, so re-running against the same season moves nobody. The run
returns new team and log collections together, or the inputs untouched.
"""

from datetime import date
from typing import Dict, List, Optional, Sequence

from torneo_backend.core.competition_config import default_config, normalize_competition
from torneo_backend.core.logging_config import get_logger
from torneo_backend.models.competition_model import Competition, CompetitionConfig, CompetitionFormat
from torneo_backend.models.division_model import Division
from torneo_backend.models.match_model import Match, MatchStatus, is_played
from torneo_backend.models.movement_model import (
    MovementDetail,
    MovementLogEntry,
    MovementResult,
    MovementSettings,
)
from torneo_backend.models.team_model import Team, move_team
from torneo_backend.services.standings import standings_for_config

logger = get_logger(__name__)


def primary_competition(
    division_id: int, competitions: Sequence[Competition], apply_to_cups: bool = False
) -> Optional[Competition]:
    """First competition of the division that takes part in movements (leagues only unless cups apply)."""
    for competition in competitions:
        if competition.division_id != division_id:
            continue
        if apply_to_cups or CompetitionFormat(competition.format) == CompetitionFormat.LEAGUE:
            return competition
    return None


def division_matches(
    division_id: int, competition: Optional[Competition], matches: Sequence[Match]
) -> List[Match]:
    """Matches of the division that belong to its primary competition (or to no competition)."""
    return [
        match for match in matches
        if match.division_id == division_id
        and (match.competition_id is None or (competition is not None and match.competition_id == competition.id))
    ]


def is_division_finished(competition: Optional[Competition], matches: Sequence[Match], today: date) -> bool:
    """Finished once the end date has passed, or once every match is played or marked completed."""
    if competition is not None and competition.end_date is not None and today > competition.end_date:
        return True
    if not matches:
        return False
    return all(is_played(match) or match.status == MatchStatus.COMPLETED for match in matches)


def division_finish_key(competition: Optional[Competition], matches: Sequence[Match], today: date) -> str:
    """Fingerprint of a finished season, or "" while it is still running."""
    if not is_division_finished(competition, matches, today):
        return ""
    if competition is not None and competition.end_date is not None:
        return competition.end_date.isoformat()
    return f"matches-complete-{len(matches)}"


def _division_config(division: Division, competition: Optional[Competition]) -> CompetitionConfig:
    if competition is None:
        return default_config(division.id)
    return normalize_competition(competition)


def apply_movements(
    divisions: Sequence[Division],
    competitions: Sequence[Competition],
    teams: Sequence[Team],
    matches: Sequence[Match],
    settings: MovementSettings,
    movement_log: Dict[int, str],
    today: date,
) -> MovementResult:
    """
    Computes promotions and relegations for every newly finished division pair.

    Args:
        divisions: All divisions; ordered by position (0 = top tier)
        competitions: All competitions; the first eligible one per division is used
        teams: Current team snapshot
        matches: Current match snapshot
        settings: Promotion/relegation counts per division pair
        movement_log: division_id -> fingerprint of the last season movements were applied to
        today: Caller's current date, used for end-date checks

    Returns:
        MovementResult. `applied` is False (with a reason) when there is nothing to do.
    """
    unchanged = dict(movement_log)

    # 1. Nothing configured
    if settings.promotions_per_division == 0 and settings.relegations_per_division == 0:
        return MovementResult(applied=False, teams=list(teams), movement_log=unchanged,
                              reason="No promotions or relegations configured.")

    # 2. Divisions taking part, top tier first
    primaries = {
        division.id: primary_competition(division.id, competitions, settings.apply_to_cups)
        for division in divisions
    }
    if sum(1 for competition in primaries.values() if competition is not None) < 2:
        return MovementResult(applied=False, teams=list(teams), movement_log=unchanged,
                              reason="At least 2 eligible divisions are needed.")

    # Pairs are always adjacent tiers. A division without an eligible competition
    # is judged on its matches outside any competition.
    ordered = sorted(divisions, key=lambda d: d.position)
    matches_by_division = {
        division.id: division_matches(division.id, primaries[division.id], matches)
        for division in ordered
    }

    moves: Dict[int, int] = {}
    details: List[MovementDetail] = []
    next_log = dict(movement_log)

    # 3. Process each division boundary
    for upper, lower in zip(ordered, ordered[1:]):
        upper_competition, lower_competition = primaries[upper.id], primaries[lower.id]
        upper_matches, lower_matches = matches_by_division[upper.id], matches_by_division[lower.id]

        upper_key = division_finish_key(upper_competition, upper_matches, today)
        lower_key = division_finish_key(lower_competition, lower_matches, today)
        if not upper_key or not lower_key:
            continue
        if movement_log.get(upper.id) == upper_key or movement_log.get(lower.id) == lower_key:
            logger.debug(f"Movements already applied between {upper.name} and {lower.name}")
            continue

        upper_teams = [team for team in teams if team.division_id == upper.id]
        lower_teams = [team for team in teams if team.division_id == lower.id]
        if not upper_teams or not lower_teams:
            continue

        upper_standings = standings_for_config(upper_teams, upper_matches, _division_config(upper, upper_competition))
        lower_standings = standings_for_config(lower_teams, lower_matches, _division_config(lower, lower_competition))

        # Counts are clamped to the teams available
        relegate_count = min(settings.relegations_per_division, len(upper_standings))
        promote_count = min(settings.promotions_per_division, len(lower_standings))
        relegated_ids = [s.team_id for s in upper_standings[-relegate_count:]] if relegate_count > 0 else []
        promoted_ids = [s.team_id for s in lower_standings[:promote_count]] if promote_count > 0 else []
        if not relegated_ids and not promoted_ids:
            continue

        for team_id in relegated_ids:
            moves[team_id] = lower.id
        for team_id in promoted_ids:
            moves[team_id] = upper.id
        next_log[upper.id] = upper_key
        next_log[lower.id] = lower_key

        details.append(MovementDetail(
            upper_division_id=upper.id,
            lower_division_id=lower.id,
            promoted=[team for team in lower_teams if team.id in promoted_ids],
            relegated=[team for team in upper_teams if team.id in relegated_ids],
        ))
        logger.info(
            f"{upper.name} <-> {lower.name}: {len(promoted_ids)} promoted, {len(relegated_ids)} relegated"
        )

    if not details:
        return MovementResult(applied=False, teams=list(teams), movement_log=unchanged,
                              reason="No newly finished division pairs.")

    # 4. Apply every move at once
    new_teams = [move_team(team, moves[team.id]) if team.id in moves else team for team in teams]
    logger.info(f"✅ Movements applied: {len(moves)} teams changed division")
    return MovementResult(applied=True, teams=new_teams, movement_log=next_log, details=details)


def log_entries(movement_log: Dict[int, str]) -> List[MovementLogEntry]:
    """Movement log map as records for the persistence layer."""
    return [
        MovementLogEntry(division_id=division_id, fingerprint=fingerprint)
        for division_id, fingerprint in sorted(movement_log.items())
    ]
