# torneo_backend/models/team_model.py
# Defines the Team model. The engine only ever changes a team's division (movements).

from typing import Optional
from sqlmodel import SQLModel, Field


class Team(SQLModel, table=True):
    """Represents a club entered in one division."""
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    division_id: int = Field(foreign_key="division.id")  # Owning division


def move_team(team: Team, division_id: int) -> Team:
    """Returns a copy of the team assigned to another division (the input is left untouched)."""
    return Team(id=team.id, name=team.name, division_id=division_id)
