"""Shared types for matchmaking and rating updates."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class MatchResult(str, Enum):
    """Lifecycle state of one match; the value is what gets persisted."""

    PENDING = "pending"
    TEAM_A_WON = "A"
    TEAM_B_WON = "B"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self is not MatchResult.PENDING

    @classmethod
    def from_column(cls, value: str | None) -> MatchResult:
        """Map a nullable `match.result` column value to a result."""
        if value is None:
            return cls.PENDING
        return cls(value)

    def to_column(self) -> str | None:
        return None if self is MatchResult.PENDING else self.value


class TeamSide(str, Enum):
    """Which side of a match won."""

    A = "A"
    B = "B"

    @property
    def result(self) -> MatchResult:
        return MatchResult.TEAM_A_WON if self is TeamSide.A else MatchResult.TEAM_B_WON


@dataclass(frozen=True)
class Player:
    """Roster entry with its current rating and win/loss counters."""

    id: int
    name: str
    elo: int
    win: int = 0
    total: int = 0

    @property
    def win_rate(self) -> float | None:
        if self.total <= 0:
            return None
        return self.win / self.total


@dataclass(frozen=True)
class Candidate:
    """A player plus the rating captured when it was sampled."""

    player: Player
    rating: int

    @classmethod
    def from_player(cls, player: Player) -> Candidate:
        return cls(player=player, rating=player.elo)


@dataclass(frozen=True)
class Match:
    """One match with creation-time and (after completion) post-match snapshots."""

    id: int
    created_at: datetime
    team_a_players: tuple[int, ...]
    team_b_players: tuple[int, ...]
    team_a_elos: tuple[int, ...]
    team_b_elos: tuple[int, ...]
    result: MatchResult = MatchResult.PENDING
    team_a_new_elos: tuple[int, ...] | None = None
    team_b_new_elos: tuple[int, ...] | None = None

    @property
    def is_pending(self) -> bool:
        return self.result is MatchResult.PENDING

    @property
    def player_ids(self) -> tuple[int, ...]:
        return self.team_a_players + self.team_b_players


@dataclass(frozen=True)
class PlayerUpdate:
    """Row written back to the roster after a completed match."""

    id: int
    elo: int
    win: int
    total: int


@dataclass(frozen=True)
class MatchCompletion:
    """Computed outcome of a completion, reused verbatim on any write retry."""

    match_id: int
    result: MatchResult
    team_a_new_elos: tuple[int, ...]
    team_b_new_elos: tuple[int, ...]
    player_updates: tuple[PlayerUpdate, ...]


@dataclass(frozen=True)
class TeamSuggestion:
    """Proposed two-team split for a pool of available players."""

    team_a: tuple[Player, ...]
    team_b: tuple[Player, ...]
    diff: float = 0.0
    target: float = 0.0
    within_tolerance: int = 0

    @property
    def team_a_ids(self) -> tuple[int, ...]:
        return tuple(player.id for player in self.team_a)

    @property
    def team_b_ids(self) -> tuple[int, ...]:
        return tuple(player.id for player in self.team_b)


@dataclass(frozen=True)
class CompletionOutcome:
    """Updated match and player records returned by a completion."""

    match: Match
    players: tuple[PlayerUpdate, ...]


__all__ = [
    "Candidate",
    "CompletionOutcome",
    "Match",
    "MatchCompletion",
    "MatchResult",
    "Player",
    "PlayerUpdate",
    "TeamSide",
    "TeamSuggestion",
]
