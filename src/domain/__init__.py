"""Matchmaking and rating domain modules."""

from domain.common import (
    Candidate,
    CompletionOutcome,
    Match,
    MatchCompletion,
    MatchResult,
    Player,
    PlayerUpdate,
    TeamSide,
    TeamSuggestion,
)
from domain.errors import (
    ConcurrencyConflict,
    ConstraintViolation,
    InconsistentStateError,
    MatchmakingError,
    PersistenceError,
    ValidationError,
)

__all__ = [
    "Candidate",
    "CompletionOutcome",
    "ConcurrencyConflict",
    "ConstraintViolation",
    "InconsistentStateError",
    "Match",
    "MatchCompletion",
    "MatchResult",
    "MatchmakingError",
    "PersistenceError",
    "Player",
    "PlayerUpdate",
    "TeamSide",
    "TeamSuggestion",
    "ValidationError",
]
