"""Team suggestion: candidate sampling and partition search."""

from domain.matchmaking.partition import (
    PartitionResult,
    anchor_indexes_for,
    partition_candidates,
    search_partition,
)
from domain.matchmaking.sampler import MAX_CANDIDATES, available_players, sample_candidates

__all__ = [
    "MAX_CANDIDATES",
    "PartitionResult",
    "anchor_indexes_for",
    "available_players",
    "partition_candidates",
    "sample_candidates",
    "search_partition",
]
