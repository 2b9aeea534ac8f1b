# torneo_backend/services/bracket.py
"""
Knockout bracket progression.

The bracket has no state of its own: every call looks at the competition's
matches, finds the furthest round that can move forward and returns the
matches of the next round. Nothing is created while a round is still being
played or a tie is level without a shootout winner.

Round order: round-of-64 -> round-of-32 -> round-of-16 -> quarter-final -> semi-final -> final
"""

from typing import Dict, List, Optional, Sequence, Tuple

from torneo_backend.core.competition_config import normalize_competition
from torneo_backend.core.exceptions import InvalidBracketException
from torneo_backend.core.logging_config import get_logger
from torneo_backend.models.bracket_model import BracketRound, BracketStatus, BracketUpdate
from torneo_backend.models.competition_model import Competition, CompetitionConfig
from torneo_backend.models.match_model import (
    KNOCKOUT_ORDER,
    FixtureKind,
    Match,
    is_knockout,
    is_played,
    round_kind_for,
)
from torneo_backend.models.team_model import Team
from torneo_backend.services.group_qualifiers import collect_zones, resolve_qualifiers

logger = get_logger(__name__)


class Tie:
    """One knockout pairing: a single match, or a first leg and its second leg."""

    def __init__(self, first: Match, second: Optional[Match] = None):
        self.first = first
        self.second = second

    @property
    def legs(self) -> List[Match]:
        return [self.first] if self.second is None else [self.first, self.second]

    @property
    def played(self) -> bool:
        return all(is_played(leg) for leg in self.legs)

    def winner(self) -> Optional[int]:
        """
        Team that goes through, or None while undecided.
        More goals (on aggregate for two legs) wins; level ties need the shootout
        winner recorded on the deciding match. Nothing is ever guessed.
        """
        if not self.played:
            return None
        home_id, away_id = self.first.home_team_id, self.first.away_team_id
        home_goals, away_goals = self.first.home_score, self.first.away_score
        if self.second is not None:
            # Second leg is played with home/away reversed
            home_goals += self.second.away_score
            away_goals += self.second.home_score

        if home_goals > away_goals:
            return home_id
        if away_goals > home_goals:
            return away_id

        deciding = self.second or self.first
        if deciding.penalties_winner_id in (home_id, away_id):
            return deciding.penalties_winner_id
        return None


def knockout_matches(matches: Sequence[Match]) -> List[Match]:
    """Knockout matches in bracket order (by matchday, then as stored)."""
    return sorted((m for m in matches if is_knockout(m)), key=lambda m: m.matchday)


def bracket_rounds(matches: Sequence[Match]) -> List[BracketRound]:
    """Existing knockout rounds in playing order, for display."""
    by_kind = _rounds_by_kind(matches)
    return [BracketRound(kind=kind, matches=by_kind[kind]) for kind in KNOCKOUT_ORDER if kind in by_kind]


def _rounds_by_kind(matches: Sequence[Match]) -> Dict[FixtureKind, List[Match]]:
    rounds: Dict[FixtureKind, List[Match]] = {}
    for match in knockout_matches(matches):
        rounds.setdefault(FixtureKind(match.fixture_kind), []).append(match)
    return rounds


def group_ties(round_matches: Sequence[Match]) -> List[Tie]:
    """
    Groups the matches of one round into ties, in bracket order.
    A first leg is joined with the second leg between the same teams, reversed.
    """
    second_legs = [m for m in round_matches if m.is_first_leg is False]
    ties: List[Tie] = []
    for match in round_matches:
        if match.is_first_leg is False:
            continue
        if match.is_first_leg is None:
            ties.append(Tie(match))
            continue
        second = next(
            (
                leg for leg in second_legs
                if (leg.home_team_id, leg.away_team_id) == (match.away_team_id, match.home_team_id)
            ),
            None,
        )
        if second is None:
            raise InvalidBracketException(
                f"First leg {match.home_team_id} v {match.away_team_id} has no second leg."
            )
        second_legs.remove(second)
        ties.append(Tie(match, second))

    if second_legs:
        raise InvalidBracketException(f"{len(second_legs)} second leg(s) without a first leg.")
    return ties


def next_matchday(matches: Sequence[Match]) -> int:
    return max((m.matchday for m in matches), default=0) + 1


def build_round(
    pairs: Sequence[Tuple[int, int]],
    kind: FixtureKind,
    matchday: int,
    config: CompetitionConfig,
) -> List[Match]:
    """
    Matches for one knockout round.
    Two-legged ties get their first leg on `matchday` and the reversed second leg on the day after.
    """
    first_legs: List[Match] = []
    second_legs: List[Match] = []
    for home_id, away_id in pairs:
        first_legs.append(Match(
            division_id=config.division_id,
            competition_id=config.competition_id,
            matchday=matchday,
            home_team_id=home_id,
            away_team_id=away_id,
            fixture_kind=kind,
            is_first_leg=True if config.two_legged_knockout else None,
        ))
        if config.two_legged_knockout:
            second_legs.append(Match(
                division_id=config.division_id,
                competition_id=config.competition_id,
                matchday=matchday + 1,
                home_team_id=away_id,
                away_team_id=home_id,
                fixture_kind=kind,
                is_first_leg=False,
            ))
    return first_legs + second_legs


# =====================================
# SEED: group stage -> first knockout round
# =====================================
def seed_knockout(config: CompetitionConfig, teams: Sequence[Team], matches: Sequence[Match]) -> BracketUpdate:
    """
    Creates the first knockout round from the group stage qualifiers.
    Waits while any group is unfinished; does nothing once knockout matches exist.
    """
    if knockout_matches(matches):
        return BracketUpdate(status=BracketStatus.WAITING, reason="Knockout stage already seeded.")

    qualifiers = resolve_qualifiers(collect_zones(teams, matches, config.zones_count), config)
    if not qualifiers.complete:
        return BracketUpdate(status=BracketStatus.WAITING, reason="Group stage not finished.")
    if not qualifiers.pairs:
        return BracketUpdate(status=BracketStatus.WAITING, reason="No complete qualifier pairs to seed.")

    kind = round_kind_for(len(qualifiers.pairs))
    new_matches = build_round(
        [(pair.home.team_id, pair.away.team_id) for pair in qualifiers.pairs],
        kind,
        next_matchday(matches),
        config,
    )
    logger.info(f"✅ Knockout stage seeded: {kind.value} with {len(qualifiers.pairs)} ties")
    return BracketUpdate(status=BracketStatus.SEEDED, round_kind=kind, new_matches=new_matches)


# =====================================
# ADVANCE: fully played round -> next round
# =====================================
def advance_bracket(config: CompetitionConfig, matches: Sequence[Match]) -> BracketUpdate:
    """
    Creates the next knockout round once the current one is fully played and decided.
    Safe to call repeatedly: returns WAITING (no new matches) until there is something to create,
    and COMPLETE once the final has a winner.
    """
    rounds = _rounds_by_kind(matches)
    if not rounds:
        return BracketUpdate(status=BracketStatus.WAITING, reason="No knockout matches yet.")

    for kind in KNOCKOUT_ORDER:
        if kind not in rounds:
            continue

        ties = group_ties(rounds[kind])
        if not all(tie.played for tie in ties):
            return BracketUpdate(status=BracketStatus.WAITING, round_kind=kind, reason=f"{kind.value} not fully played.")

        winners = [tie.winner() for tie in ties]
        if any(winner is None for winner in winners):
            logger.warning(f"Cannot advance past {kind.value}: a level tie has no shootout winner")
            return BracketUpdate(
                status=BracketStatus.WAITING,
                round_kind=kind,
                reason=f"{kind.value} has a level tie without a shootout winner.",
            )

        if kind == FixtureKind.FINAL or len(winners) == 1:
            return BracketUpdate(status=BracketStatus.COMPLETE, round_kind=kind, champion_id=winners[0])

        if len(winners) % 2 != 0:
            logger.warning(f"Cannot pair {len(winners)} winners of {kind.value}")
            return BracketUpdate(
                status=BracketStatus.WAITING,
                round_kind=kind,
                reason=f"{kind.value} produced an odd number of winners.",
            )

        next_kind = round_kind_for(len(winners) // 2)
        if KNOCKOUT_ORDER.index(next_kind) <= KNOCKOUT_ORDER.index(kind):
            raise InvalidBracketException(f"{len(ties)} ties do not fit in a {kind.value} round.")
        if next_kind in rounds:
            continue  # Already created, look further down the bracket

        # Pair consecutive winners: 1st v 2nd, 3rd v 4th, ...
        pairs = [(winners[i], winners[i + 1]) for i in range(0, len(winners), 2)]
        new_matches = build_round(pairs, next_kind, next_matchday(matches), config)
        logger.info(f"✅ Advanced {kind.value} -> {next_kind.value} ({len(pairs)} ties)")
        return BracketUpdate(status=BracketStatus.ADVANCED, round_kind=next_kind, new_matches=new_matches)

    return BracketUpdate(status=BracketStatus.WAITING, reason="Nothing to advance.")


def progress_cup(competition: Competition, teams: Sequence[Team], matches: Sequence[Match]) -> BracketUpdate:
    """Seeds the bracket when no knockout match exists yet, otherwise advances it."""
    config = normalize_competition(competition)
    if not config.is_cup:
        return BracketUpdate(status=BracketStatus.WAITING, reason="Competition is not a cup.")
    if knockout_matches(matches):
        return advance_bracket(config, matches)
    return seed_knockout(config, teams, matches)


def find_champion(matches: Sequence[Match]) -> Optional[int]:
    """Winner of the final, or None while it is unplayed or undecided."""
    finals = _rounds_by_kind(matches).get(FixtureKind.FINAL)
    if not finals:
        return None
    ties = group_ties(finals)
    return ties[0].winner() if len(ties) == 1 else None
