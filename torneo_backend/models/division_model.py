# torneo_backend/models/division_model.py
# Defines the Division model (one tier of the promotion/relegation pyramid).

from typing import Optional
from sqlmodel import SQLModel, Field


class Division(SQLModel, table=True):
    """
    A division in the tournament hierarchy.
    Lower position = higher tier (position 0 is the top division).
    """
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    position: int = Field(default=0, ge=0)  # Index in the promotion/relegation order
