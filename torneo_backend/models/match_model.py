# torneo_backend/models/match_model.py
# Defines the Match model (fixtures and results), fixture kinds and the knockout order table.

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel
from sqlmodel import SQLModel, Field


class FixtureKind(str, Enum):
    """Regular (round-robin) fixture or one of the knockout rounds."""
    REGULAR = "regular"
    ROUND_OF_64 = "round-of-64"
    ROUND_OF_32 = "round-of-32"
    ROUND_OF_16 = "round-of-16"
    QUARTER_FINAL = "quarter-final"
    SEMI_FINAL = "semi-final"
    FINAL = "final"


# Knockout rounds in the order they are played
KNOCKOUT_ORDER = (
    FixtureKind.ROUND_OF_64,
    FixtureKind.ROUND_OF_32,
    FixtureKind.ROUND_OF_16,
    FixtureKind.QUARTER_FINAL,
    FixtureKind.SEMI_FINAL,
    FixtureKind.FINAL,
)

# Smallest number of ties that opens each knockout round
ROUND_SIZES = (
    (32, FixtureKind.ROUND_OF_64),
    (16, FixtureKind.ROUND_OF_32),
    (8, FixtureKind.ROUND_OF_16),
    (4, FixtureKind.QUARTER_FINAL),
    (2, FixtureKind.SEMI_FINAL),
    (1, FixtureKind.FINAL),
)


class MatchStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    SUSPENDED = "suspended"


class Match(SQLModel, table=True):
    """
    A scheduled match between two teams of the same division.
    A match is played once both scores are present, whatever its status says.
    """
    id: Optional[int] = Field(default=None, primary_key=True)

    # Foreign keys
    division_id: int = Field(foreign_key="division.id")
    competition_id: Optional[int] = Field(default=None, foreign_key="competition.id")
    home_team_id: int = Field(foreign_key="team.id")
    away_team_id: int = Field(foreign_key="team.id")

    # Fixture details
    matchday: int                                          # Round index, not a calendar date
    fixture_kind: FixtureKind = Field(default=FixtureKind.REGULAR)
    zone: Optional[str] = None                             # Group label ("Grupo A")
    is_first_leg: Optional[bool] = None                    # Set on home/away pairs only
    status: Optional[MatchStatus] = None
    match_time: Optional[datetime] = None                  # Scheduled kickoff

    # Result
    home_score: Optional[int] = None
    away_score: Optional[int] = None

    # Penalty shootout (knockout ties level after the decisive leg)
    penalties_winner_id: Optional[int] = Field(default=None, foreign_key="team.id")
    penalties_home: Optional[int] = None
    penalties_away: Optional[int] = None


class PenaltyShootout(BaseModel):
    """Shootout result as entered with a score."""
    winner_team_id: Optional[int] = None
    home_penalties: Optional[int] = None
    away_penalties: Optional[int] = None


def replace_match(match: Match, **changes) -> Match:
    """Returns a copy of the match with the given fields changed."""
    data = match.model_dump()
    data.update(changes)
    return Match(**data)


def is_played(match: Match) -> bool:
    """A match counts as played when both scores are present."""
    return match.home_score is not None and match.away_score is not None


def is_knockout(match: Match) -> bool:
    return match.fixture_kind != FixtureKind.REGULAR


def round_kind_for(tie_count: int) -> FixtureKind:
    """Knockout round kind for a round made of tie_count ties."""
    for size, kind in ROUND_SIZES:
        if tie_count >= size:
            return kind
    return FixtureKind.FINAL
