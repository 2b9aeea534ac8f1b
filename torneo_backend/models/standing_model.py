# torneo_backend/models/standing_model.py
# Standing rows are derived from matches on demand and never stored.

from pydantic import BaseModel


class Standing(BaseModel):
    """One row of a league table."""
    team_id: int
    played: int = 0
    won: int = 0
    drawn: int = 0
    lost: int = 0
    goals_for: int = 0
    goals_against: int = 0
    goal_difference: int = 0
    points: int = 0
