# torneo_backend/services/standings.py
# Computes ranked league tables from a snapshot of teams and matches.

from typing import Dict, Iterable, List, Optional

from torneo_backend.core.config import DEFAULT_POINTS_DRAW, DEFAULT_POINTS_LOSS, DEFAULT_POINTS_WIN
from torneo_backend.core.competition_config import normalize_tiebreakers
from torneo_backend.models.competition_model import CompetitionConfig, Tiebreaker
from torneo_backend.models.match_model import Match, is_played
from torneo_backend.models.standing_model import Standing
from torneo_backend.models.team_model import Team

# Sort key per criterion. Every key sorts descending except goals against.
TIEBREAK_KEYS = {
    Tiebreaker.POINTS: lambda s: -s.points,
    Tiebreaker.GOAL_DIFFERENCE: lambda s: -s.goal_difference,
    Tiebreaker.GOALS_FOR: lambda s: -s.goals_for,
    Tiebreaker.GOALS_AGAINST: lambda s: s.goals_against,
}


def calculate_standings(
    teams: Iterable[Team],
    matches: Iterable[Match],
    points_win: int = DEFAULT_POINTS_WIN,
    points_draw: int = DEFAULT_POINTS_DRAW,
    points_loss: int = DEFAULT_POINTS_LOSS,
    tiebreakers: Optional[Iterable[str]] = None,
) -> List[Standing]:
    """
    Calculate and return the ranked table for the given teams.

    - Only played matches (both scores present) count
    - Matches naming a team outside `teams` are skipped, they belong to another table
    - Teams still level after every tiebreaker keep their order in `teams`
    """
    # 1. One zeroed row per team, in input order
    table: Dict[int, Standing] = {}
    for team in teams:
        table.setdefault(team.id, Standing(team_id=team.id))

    # 2. Accumulate played matches
    for match in matches:
        if not is_played(match):
            continue
        home = table.get(match.home_team_id)
        away = table.get(match.away_team_id)
        if home is None or away is None:
            continue

        home.played += 1
        away.played += 1
        home.goals_for += match.home_score
        home.goals_against += match.away_score
        away.goals_for += match.away_score
        away.goals_against += match.home_score

        if match.home_score > match.away_score:
            home.won += 1
            away.lost += 1
            home.points += points_win
            away.points += points_loss
        elif match.home_score < match.away_score:
            away.won += 1
            home.lost += 1
            away.points += points_win
            home.points += points_loss
        else:
            home.drawn += 1
            away.drawn += 1
            home.points += points_draw
            away.points += points_draw

    # 3. Compute GD and sort (sorted() is stable, so full ties keep input order)
    for standing in table.values():
        standing.goal_difference = standing.goals_for - standing.goals_against

    criteria = normalize_tiebreakers(tiebreakers)
    return sorted(
        table.values(),
        key=lambda s: tuple(TIEBREAK_KEYS[criterion](s) for criterion in criteria),
    )


def standings_for_config(
    teams: Iterable[Team], matches: Iterable[Match], config: CompetitionConfig
) -> List[Standing]:
    """Same as calculate_standings, with scoring and tiebreakers taken from a competition."""
    return calculate_standings(
        teams,
        matches,
        points_win=config.points_win,
        points_draw=config.points_draw,
        points_loss=config.points_loss,
        tiebreakers=config.tiebreakers,
    )
