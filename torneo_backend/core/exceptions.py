# torneo_backend/core/exceptions.py
"""Exceptions raised by the tournament engine.

Only rejected operations raise. Deferred states (group stage still running,
round not fully played, nothing new to move) are returned as results instead.
"""


# ========== Base Exception ==========


class TorneoException(Exception):
    """Base exception for all tournament engine errors."""

    pass


# ========== Configuration Exceptions ==========


class ConfigurationException(TorneoException):
    """Base exception for configuration errors."""

    pass


class InvalidConfigurationException(ConfigurationException):
    """Raised when competition, group or scheduling options are invalid."""

    pass


# ========== Result Exceptions ==========


class ResultException(TorneoException):
    """Base exception for result recording errors."""

    pass


class InvalidResultException(ResultException):
    """Raised when a score or shootout cannot be recorded on a match."""

    pass


# ========== Bracket Exceptions ==========


class BracketException(TorneoException):
    """Base exception for knockout bracket errors."""

    pass


class InvalidBracketException(BracketException):
    """Raised when stored knockout matches cannot form a bracket."""

    pass
