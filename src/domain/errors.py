"""Error taxonomy for matchmaking and match lifecycle operations."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from domain.common import MatchCompletion


class MatchmakingError(Exception):
    """Base class for all errors reported to callers."""


class ValidationError(MatchmakingError, ValueError):
    """Caller input cannot form a valid suggestion or match; no state was mutated."""


class ConstraintViolation(MatchmakingError):
    """A candidate split breaks the anchor pairing rule. Internal to the search."""


class ConcurrencyConflict(MatchmakingError):
    """A match was completed or cancelled after it already left the pending state."""

    def __init__(self, match_id: int, message: str | None = None) -> None:
        super().__init__(message or f"match_id={match_id} is no longer pending")
        self.match_id = match_id


class PersistenceError(MatchmakingError):
    """The persistence collaborator failed a read or write."""


class InconsistentStateError(PersistenceError):
    """A non-atomic completion stored the match result but not the player updates.

    `completion` holds the already computed ratings; retry with those numbers
    instead of recomputing.
    """

    def __init__(self, message: str, completion: MatchCompletion) -> None:
        super().__init__(message)
        self.completion = completion


__all__ = [
    "ConcurrencyConflict",
    "ConstraintViolation",
    "InconsistentStateError",
    "MatchmakingError",
    "PersistenceError",
    "ValidationError",
]
