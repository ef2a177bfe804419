"""Balanced two-team partition search over a bounded candidate pool."""

from __future__ import annotations

import logging
import random
from collections.abc import Collection, Sequence
from dataclasses import dataclass
from math import ceil, inf

from domain.common import Candidate
from domain.errors import ConstraintViolation, ValidationError
from domain.matchmaking.sampler import MAX_CANDIDATES

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PartitionResult:
    """Index-level split of the candidate list; both teams keep candidate order."""

    team_a: tuple[int, ...]
    team_b: tuple[int, ...]
    diff: float
    target: float
    within_tolerance: int = 0


def _check_pairing(chosen: tuple[int, ...], anchors: tuple[int, int] | None) -> None:
    if anchors is None:
        return
    first_in_a = anchors[0] in chosen
    second_in_a = anchors[1] in chosen
    if first_in_a != second_in_a:
        raise ConstraintViolation(f"anchor indexes {anchors} split by subset {chosen}")


def search_partition(
    ratings: Sequence[float],
    *,
    tolerance: float,
    rng: random.Random,
    anchor_indexes: tuple[int, int] | None = None,
    max_candidates: int = MAX_CANDIDATES,
) -> PartitionResult:
    """Choose team A of size ceil(n/2) whose rating sum is closest to its fair share.

    Subsets are enumerated include-before-exclude over indexes 0..n-1, so the
    first subset reaching the minimal diff wins ties. When any valid subset
    lies within `tolerance`, one of those is drawn from `rng` instead; a zero
    tolerance always returns the minimal one.
    """
    n = len(ratings)
    if n > max_candidates:
        raise ValidationError(
            f"partition search is bounded to {max_candidates} candidates, got {n}"
        )
    if tolerance < 0:
        raise ValidationError(f"tolerance must be >= 0, got {tolerance}")
    if n < 2:
        return PartitionResult(team_a=(), team_b=(), diff=0.0, target=0.0)
    if anchor_indexes is not None:
        if anchor_indexes[0] == anchor_indexes[1] or not all(
            0 <= index < n for index in anchor_indexes
        ):
            raise ValueError(f"invalid anchor indexes {anchor_indexes} for {n} candidates")

    size_a = ceil(n / 2)
    target = sum(ratings) * size_a / n

    best: tuple[int, ...] | None = None
    best_diff = inf
    within_tolerance: list[tuple[int, ...]] = []

    # (next index, chosen indexes, chosen rating sum)
    frontier: list[tuple[int, tuple[int, ...], float]] = [(0, (), 0.0)]
    while frontier:
        index, chosen, chosen_sum = frontier.pop()

        if len(chosen) == size_a:
            try:
                _check_pairing(chosen, anchor_indexes)
            except ConstraintViolation:
                continue
            diff = abs(chosen_sum - target)
            if diff <= tolerance:
                within_tolerance.append(chosen)
            if diff < best_diff:
                best_diff = diff
                best = chosen
            continue

        if index >= n:
            continue
        if size_a - len(chosen) > n - index:
            continue

        # LIFO: push exclude first so the include branch is explored first.
        frontier.append((index + 1, chosen, chosen_sum))
        frontier.append((index + 1, chosen + (index,), chosen_sum + ratings[index]))

    if best is None:
        raise ValidationError("anchor players cannot be kept together with only two candidates")

    if tolerance > 0 and within_tolerance:
        pick = rng.choice(within_tolerance)
    else:
        pick = best

    chosen_set = set(pick)
    team_a = tuple(i for i in range(n) if i in chosen_set)
    team_b = tuple(i for i in range(n) if i not in chosen_set)
    diff = abs(sum(ratings[i] for i in team_a) - target)
    logger.debug(
        "partition n=%d target=%.2f diff=%.2f best_diff=%.2f within_tolerance=%d",
        n,
        target,
        diff,
        best_diff,
        len(within_tolerance),
    )
    return PartitionResult(
        team_a=team_a,
        team_b=team_b,
        diff=diff,
        target=target,
        within_tolerance=len(within_tolerance),
    )


def anchor_indexes_for(
    candidates: Sequence[Candidate],
    anchor_player_ids: Collection[int],
) -> tuple[int, int] | None:
    """Candidate indexes of the anchor pair, or None unless both are present."""
    if len(anchor_player_ids) != 2:
        return None
    positions = {candidate.player.id: index for index, candidate in enumerate(candidates)}
    indexes = [positions[player_id] for player_id in anchor_player_ids if player_id in positions]
    if len(indexes) != 2:
        return None
    return indexes[0], indexes[1]


def partition_candidates(
    candidates: Sequence[Candidate],
    *,
    tolerance: float,
    rng: random.Random,
    anchor_player_ids: Collection[int] = (),
    max_candidates: int = MAX_CANDIDATES,
) -> tuple[list[Candidate], list[Candidate], PartitionResult]:
    """Run the search on sampled candidates and map indexes back to candidates."""
    result = search_partition(
        [candidate.rating for candidate in candidates],
        tolerance=tolerance,
        rng=rng,
        anchor_indexes=anchor_indexes_for(candidates, anchor_player_ids),
        max_candidates=max_candidates,
    )
    team_a = [candidates[index] for index in result.team_a]
    team_b = [candidates[index] for index in result.team_b]
    return team_a, team_b, result


__all__ = [
    "PartitionResult",
    "anchor_indexes_for",
    "partition_candidates",
    "search_partition",
]
