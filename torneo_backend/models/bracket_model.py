# torneo_backend/models/bracket_model.py
# Schemas exchanged between the group stage and the knockout bracket.

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel

from torneo_backend.models.match_model import FixtureKind, Match
from torneo_backend.models.standing_model import Standing
from torneo_backend.models.team_model import Team


class Zone(BaseModel):
    """A group of teams with its own round-robin matches."""
    label: str
    teams: List[Team]
    matches: List[Match] = []


class ZoneTable(BaseModel):
    label: str
    standings: List[Standing]
    complete: bool  # At least one match and every match played


class Qualifier(BaseModel):
    """A knockout slot such as "1ro Grupo A". team_id stays None until the zone is decided."""
    label: str
    team_id: Optional[int] = None


class KnockoutPair(BaseModel):
    home: Qualifier
    away: Qualifier


class QualifierResult(BaseModel):
    tables: List[ZoneTable]
    qualifiers: List[Qualifier]
    pairs: List[KnockoutPair]  # Empty until every zone is complete

    @property
    def complete(self) -> bool:
        return bool(self.tables) and all(table.complete for table in self.tables)


class BracketStatus(str, Enum):
    SEEDED = "seeded"      # First knockout round created
    ADVANCED = "advanced"  # Next knockout round created
    WAITING = "waiting"    # Nothing to do until more results arrive
    COMPLETE = "complete"  # Final played and decided


class BracketUpdate(BaseModel):
    """Outcome of a bracket step. new_matches is empty for WAITING and COMPLETE."""
    status: BracketStatus
    round_kind: Optional[FixtureKind] = None
    new_matches: List[Match] = []
    champion_id: Optional[int] = None
    reason: str = ""

    @property
    def changed(self) -> bool:
        return bool(self.new_matches)


class BracketRound(BaseModel):
    """Existing knockout matches of one round, in bracket order."""
    kind: FixtureKind
    matches: List[Match]
