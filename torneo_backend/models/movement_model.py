# torneo_backend/models/movement_model.py
# Defines the movement log record and the promotion/relegation schemas.

import math
from typing import Dict, List

from pydantic import BaseModel, field_validator
from sqlmodel import SQLModel, Field

from torneo_backend.models.team_model import Team


class MovementLogEntry(SQLModel, table=True):
    """
    Last finished state of a division that movements were applied to.
    Re-running movements against the same fingerprint changes nothing.
    """
    division_id: int = Field(primary_key=True, foreign_key="division.id")
    fingerprint: str  # Competition end date or "matches-complete-N"


class MovementSettings(BaseModel):
    """Promotion/relegation settings, shared by every adjacent division pair."""
    promotions_per_division: int = 0
    relegations_per_division: int = 0
    apply_to_cups: bool = False

    @field_validator("promotions_per_division", "relegations_per_division", mode="before")
    @classmethod
    def clamp_count(cls, value):
        # Counts are floored and never negative
        try:
            count = math.floor(float(value or 0))
        except (TypeError, ValueError, OverflowError):
            raise ValueError(f"Movement count must be a number, got {value!r}")
        return max(0, count)


class MovementDetail(BaseModel):
    """Teams exchanged between one upper/lower division pair."""
    upper_division_id: int
    lower_division_id: int
    promoted: List[Team]
    relegated: List[Team]


class MovementResult(BaseModel):
    """
    Outcome of a movements run.
    When applied is False, teams and movement_log are the inputs unchanged.
    """
    applied: bool
    teams: List[Team]
    movement_log: Dict[int, str]
    details: List[MovementDetail] = []
    reason: str = ""

    def moved_team_ids(self) -> Dict[int, int]:
        """team_id -> new division_id for every team that changed division."""
        moves: Dict[int, int] = {}
        for detail in self.details:
            for team in detail.relegated:
                moves[team.id] = detail.lower_division_id
            for team in detail.promoted:
                moves[team.id] = detail.upper_division_id
        return moves
