# torneo_backend/models/competition_model.py
# Defines the Competition record and its fully-populated configuration value.

from datetime import date
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel
from sqlmodel import SQLModel, Field, Column, JSON


class CompetitionFormat(str, Enum):
    """How a competition is played."""
    LEAGUE = "league"  # Round-robin table only
    CUP = "cup"        # Group stage followed by a knockout bracket


class Tiebreaker(str, Enum):
    """Criteria used to rank teams level on the previous criteria."""
    POINTS = "points"
    GOAL_DIFFERENCE = "goalDifference"
    GOALS_FOR = "goalsFor"
    GOALS_AGAINST = "goalsAgainst"  # Fewer conceded ranks higher


class Competition(SQLModel, table=True):
    """
    A league or cup hosted by a division.
    Optional fields are filled in by normalize_competition() before the engine uses them.
    """
    id: Optional[int] = Field(default=None, primary_key=True)
    division_id: int = Field(foreign_key="division.id")
    name: str = ""
    format: CompetitionFormat = Field(default=CompetitionFormat.LEAGUE)

    # Scoring
    points_win: Optional[int] = None
    points_draw: Optional[int] = None
    points_loss: Optional[int] = None
    tiebreakers: Optional[List[str]] = Field(default=None, sa_column=Column(JSON))

    # Format options
    max_teams: Optional[int] = None
    zones_count: Optional[int] = None               # Groups in a cup's group stage
    double_round_robin: Optional[bool] = None       # Home and away round-robin
    two_legged_knockout: Optional[bool] = None      # Knockout ties over two legs

    # Date window
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class CompetitionConfig(BaseModel):
    """Normalized competition settings: every field is populated."""
    competition_id: Optional[int]
    division_id: int
    format: CompetitionFormat
    points_win: int
    points_draw: int
    points_loss: int
    tiebreakers: List[Tiebreaker]
    max_teams: Optional[int]
    zones_count: int
    double_round_robin: bool
    two_legged_knockout: bool
    start_date: Optional[date]
    end_date: Optional[date]

    class Config:
        frozen = True

    @property
    def is_cup(self) -> bool:
        return self.format == CompetitionFormat.CUP
