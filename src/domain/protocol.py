"""Contract for the persistence collaborator used by the match lifecycle."""

from __future__ import annotations

from collections.abc import Sequence
from contextlib import AbstractContextManager
from typing import Protocol, runtime_checkable

from domain.common import Match, MatchResult, Player, PlayerUpdate


@runtime_checkable
class MatchStore(Protocol):
    """Durable owner of player and match records.

    `atomic` is True when everything done inside `unit_of_work()` commits or
    rolls back together.
    """

    atomic: bool

    def unit_of_work(self) -> AbstractContextManager[None]: ...

    def fetch_players(self) -> list[Player]: ...

    def fetch_matches(self, limit: int) -> list[Match]: ...

    def fetch_match(self, match_id: int) -> Match | None: ...

    def fetch_match_count(self) -> int: ...

    def fetch_pending_match_ids(self) -> list[int]:
        """Ids of every match whose result is still unset, oldest first."""
        ...

    def create_match(
        self,
        team_a_ids: Sequence[int],
        team_a_elos: Sequence[int],
        team_b_ids: Sequence[int],
        team_b_elos: Sequence[int],
    ) -> Match: ...

    def update_match_result(
        self,
        match_id: int,
        result: MatchResult,
        team_a_new_elos: Sequence[int] | None,
        team_b_new_elos: Sequence[int] | None,
    ) -> Match:
        """Move a pending match to `result`; raise ConcurrencyConflict if it is not pending."""
        ...

    def upsert_players(self, updates: Sequence[PlayerUpdate]) -> None: ...

    def add_player(self, name: str, elo: int) -> Player: ...


__all__ = ["MatchStore"]
