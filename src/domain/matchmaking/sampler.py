"""Random candidate selection ahead of the partition search."""

from __future__ import annotations

import random
from collections.abc import Iterable, Sequence

from domain.common import Candidate, Player

MAX_CANDIDATES = 10


def available_players(players: Sequence[Player], available_ids: Iterable[int]) -> list[Player]:
    """Roster players whose id is marked available, in roster order."""
    wanted = set(available_ids)
    return [player for player in players if player.id in wanted]


def sample_candidates(
    players: Sequence[Player],
    available_ids: Iterable[int],
    *,
    rng: random.Random,
    bound: int = MAX_CANDIDATES,
) -> list[Candidate]:
    """Draw `min(|available|, bound)` players uniformly without replacement.

    Fewer than two available players cannot form teams and yields an empty
    list.
    """
    if bound < 2:
        raise ValueError(f"bound must be >= 2, got {bound}")

    pool = available_players(players, available_ids)
    if len(pool) < 2:
        return []

    drawn = rng.sample(pool, min(len(pool), bound))
    return [Candidate.from_player(player) for player in drawn]


__all__ = ["MAX_CANDIDATES", "available_players", "sample_candidates"]
