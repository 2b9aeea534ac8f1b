# torneo_backend/models/__init__.py
# Centralized imports for all records and schemas

# Division and teams
from .division_model import Division
from .team_model import Team, move_team

# Competition
from .competition_model import Competition, CompetitionConfig, CompetitionFormat, Tiebreaker

# Match and results
from .match_model import (
    Match, MatchStatus, FixtureKind, PenaltyShootout, KNOCKOUT_ORDER,
    replace_match, is_played, is_knockout, round_kind_for
)

# Standings (derived, never stored)
from .standing_model import Standing

# Group stage and bracket schemas
from .bracket_model import (
    Zone, ZoneTable, Qualifier, KnockoutPair, QualifierResult,
    BracketStatus, BracketUpdate, BracketRound
)

# Promotion/relegation
from .movement_model import MovementLogEntry, MovementSettings, MovementDetail, MovementResult
