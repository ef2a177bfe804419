"""Match lifecycle: suggestion, creation, completion and cancellation."""

from __future__ import annotations

import logging
import random
from collections.abc import Mapping, Sequence

from domain.common import (
    CompletionOutcome,
    Match,
    MatchCompletion,
    MatchResult,
    Player,
    PlayerUpdate,
    TeamSide,
    TeamSuggestion,
)
from domain.config import MatchmakingConfig
from domain.errors import (
    ConcurrencyConflict,
    InconsistentStateError,
    PersistenceError,
    ValidationError,
)
from domain.matchmaking.partition import partition_candidates
from domain.matchmaking.sampler import available_players, sample_candidates
from domain.protocol import MatchStore
from domain.ratings.elo.calculator import EloParameters, calculate_team_ratings

logger = logging.getLogger(__name__)


def compute_completion(
    match: Match,
    winning_side: TeamSide,
    roster: Mapping[int, Player],
    params: EloParameters,
) -> MatchCompletion:
    """Compute new ratings and counters for every participant of `match`.

    Ratings come from the creation-time snapshots on the match; win/total
    counters continue from the roster's current records (zero for players no
    longer on the roster).
    """
    if len(match.team_a_players) != len(match.team_a_elos) or len(match.team_b_players) != len(
        match.team_b_elos
    ):
        raise ValidationError(f"match_id={match.id} has rating snapshots misaligned with its teams")
    if not match.team_a_players or not match.team_b_players:
        raise ValidationError(f"match_id={match.id} has an empty team")

    team_a_won = winning_side is TeamSide.A
    team_a_new_elos = calculate_team_ratings(match.team_a_elos, match.team_b_elos, team_a_won, params)
    team_b_new_elos = calculate_team_ratings(
        match.team_b_elos, match.team_a_elos, not team_a_won, params
    )

    updates: list[PlayerUpdate] = []
    for player_ids, new_elos, won in (
        (match.team_a_players, team_a_new_elos, team_a_won),
        (match.team_b_players, team_b_new_elos, not team_a_won),
    ):
        for player_id, new_elo in zip(player_ids, new_elos):
            current = roster.get(player_id)
            base_win = current.win if current is not None else 0
            base_total = current.total if current is not None else 0
            updates.append(
                PlayerUpdate(
                    id=player_id,
                    elo=new_elo,
                    win=base_win + (1 if won else 0),
                    total=base_total + 1,
                )
            )

    return MatchCompletion(
        match_id=match.id,
        result=winning_side.result,
        team_a_new_elos=team_a_new_elos,
        team_b_new_elos=team_b_new_elos,
        player_updates=tuple(updates),
    )


class MatchLifecycle:
    """Caller-facing matchmaking operations on top of a `MatchStore`."""

    def __init__(
        self,
        store: MatchStore,
        config: MatchmakingConfig | None = None,
        *,
        rng: random.Random | None = None,
    ) -> None:
        self.store = store
        self.config = config or MatchmakingConfig()
        self.rng = rng or random.Random()

    def leaderboard(self) -> list[Player]:
        """Players ordered by rating, highest first."""
        return self.store.fetch_players()

    def history(self, limit: int | None = None) -> list[Match]:
        """Most recent matches first."""
        return self.store.fetch_matches(limit or self.config.history_limit)

    def match_count(self) -> int:
        return self.store.fetch_match_count()

    def get_match(self, match_id: int) -> Match:
        match = self.store.fetch_match(match_id)
        if match is None:
            raise ValidationError(f"match_id={match_id} not found")
        return match

    def suggest_teams(
        self,
        available_player_ids: Sequence[int],
        tolerance: float | None = None,
    ) -> TeamSuggestion:
        """Sample available players and split them into two balanced teams."""
        players = self.store.fetch_players()
        pool = available_players(players, available_player_ids)
        if len(pool) < 2:
            raise ValidationError(
                f"at least 2 available players are required to suggest teams, got {len(pool)}"
            )

        candidates = sample_candidates(
            players,
            available_player_ids,
            rng=self.rng,
            bound=self.config.max_candidates,
        )
        team_a, team_b, result = partition_candidates(
            candidates,
            tolerance=self.config.tolerance if tolerance is None else tolerance,
            rng=self.rng,
            anchor_player_ids=self.config.anchor_player_ids,
            max_candidates=self.config.max_candidates,
        )
        return TeamSuggestion(
            team_a=tuple(candidate.player for candidate in team_a),
            team_b=tuple(candidate.player for candidate in team_b),
            diff=result.diff,
            target=result.target,
            within_tolerance=result.within_tolerance,
        )

    def start_match(self, team_a_ids: Sequence[int], team_b_ids: Sequence[int]) -> Match:
        """Create a pending match, snapshotting every participant's current rating."""
        team_a_ids = list(team_a_ids)
        team_b_ids = list(team_b_ids)
        if not team_a_ids or not team_b_ids:
            raise ValidationError("both teams need at least one player")
        if len(set(team_a_ids)) != len(team_a_ids) or len(set(team_b_ids)) != len(team_b_ids):
            raise ValidationError("a player is listed twice on the same team")
        overlap = set(team_a_ids) & set(team_b_ids)
        if overlap:
            raise ValidationError(f"players {sorted(overlap)} are on both teams")
        if abs(len(team_a_ids) - len(team_b_ids)) > 1:
            raise ValidationError(
                f"team sizes {len(team_a_ids)} and {len(team_b_ids)} differ by more than one"
            )

        roster = {player.id: player for player in self.store.fetch_players()}
        unknown = [player_id for player_id in team_a_ids + team_b_ids if player_id not in roster]
        if unknown:
            raise ValidationError(f"unknown player ids {unknown}")

        if not self.config.allow_concurrent_matches:
            pending = self.store.fetch_pending_match_ids()
            if pending:
                raise ValidationError(f"match_id={pending[0]} is still pending")

        match = self.store.create_match(
            team_a_ids,
            [roster[player_id].elo for player_id in team_a_ids],
            team_b_ids,
            [roster[player_id].elo for player_id in team_b_ids],
        )
        logger.info(
            "created match_id=%s team_a=%s team_b=%s",
            match.id,
            list(match.team_a_players),
            list(match.team_b_players),
        )
        return match

    def complete_match(self, match: Match, winning_side: TeamSide | str) -> CompletionOutcome:
        """Apply the result of a pending match to the match and its players."""
        side = TeamSide(winning_side)
        self._ensure_pending(match)

        roster = {player.id: player for player in self.store.fetch_players()}
        completion = compute_completion(match, side, roster, self.config.elo)

        with self.store.unit_of_work():
            updated_match = self.store.update_match_result(
                match.id,
                completion.result,
                completion.team_a_new_elos,
                completion.team_b_new_elos,
            )
            try:
                self.store.upsert_players(completion.player_updates)
            except PersistenceError as exc:
                if self.store.atomic:
                    raise
                raise InconsistentStateError(
                    f"match_id={match.id} stored result={completion.result.value} "
                    "but player ratings were not updated",
                    completion,
                ) from exc

        logger.info(
            "completed match_id=%s result=%s team_a_new_elos=%s team_b_new_elos=%s",
            match.id,
            completion.result.value,
            list(completion.team_a_new_elos),
            list(completion.team_b_new_elos),
        )
        return CompletionOutcome(match=updated_match, players=completion.player_updates)

    def retry_player_updates(self, completion: MatchCompletion) -> None:
        """Re-write the player rows of a partially applied completion without recomputing."""
        with self.store.unit_of_work():
            self.store.upsert_players(completion.player_updates)
        logger.info("re-applied player updates for match_id=%s", completion.match_id)

    def cancel_match(self, match: Match) -> Match:
        """Mark a pending match as cancelled; ratings and counters are untouched."""
        self._ensure_pending(match)
        with self.store.unit_of_work():
            updated_match = self.store.update_match_result(
                match.id, MatchResult.CANCELLED, None, None
            )
        logger.info("cancelled match_id=%s", match.id)
        return updated_match

    def _ensure_pending(self, match: Match) -> None:
        if not match.is_pending:
            logger.warning(
                "rejected transition for match_id=%s already result=%s",
                match.id,
                match.result.value,
            )
            raise ConcurrencyConflict(match.id)


__all__ = ["MatchLifecycle", "compute_completion"]
