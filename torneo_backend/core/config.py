# torneo_backend/core/config.py

# =====================================
# Global configuration for the tournament engine
# =====================================

# ⚽ Default scoring weights (used when a competition leaves them blank)
DEFAULT_POINTS_WIN = 3
DEFAULT_POINTS_DRAW = 1
DEFAULT_POINTS_LOSS = 0

# 📊 Default tiebreak order. A normalized list always holds exactly this many criteria.
DEFAULT_TIEBREAKERS = ["points", "goalDifference", "goalsFor"]
TIEBREAKER_COUNT = 3

# 🏆 Group stage labels
GROUP_LABEL_PREFIX = "Grupo"           # Zones are named "Grupo A", "Grupo B", ...
MIN_GROUP_COUNT = 2
QUALIFIER_LABELS = ["1ro", "2do"]      # Positions that qualify from each zone
PAIRING_CHUNK_SIZE = 4                 # Qualifiers are paired (1st v 4th, 2nd v 3rd) per chunk

# 🔁 Placeholder appended to odd-sized team lists by the circle method
BYE = None

# 📅 Match date assignment (kickoff slots rotate through these weekdays)
MATCHDAY_WEEKDAYS = ["Tuesday", "Thursday", "Saturday", "Sunday"]
AM_KICKOFF = (10, 0)   # AM matches: 10:00
PM_KICKOFF = (18, 0)   # PM matches: 18:00
