"""Per-player Elo update against the opposing team's mean rating."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from math import floor


@dataclass(frozen=True)
class EloParameters:
    k_factor: float = 15.0
    scale_factor: float = 400.0
    initial_elo: int = 1500


def calculate_expected_score(rating: float, opponent_rating: float, scale_factor: float = 400.0) -> float:
    """Compute the Elo expected score for one side."""
    return 1.0 / (1.0 + 10.0 ** ((opponent_rating - rating) / scale_factor))


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going toward positive infinity."""
    return int(floor(value + 0.5))


def team_mean_rating(ratings: Sequence[float]) -> float:
    """Mean of a team's rating snapshot."""
    if not ratings:
        raise ValueError("Cannot compute the mean rating of an empty team")
    return sum(ratings) / len(ratings)


def calculate_new_rating(
    rating: float,
    opponent_rating: float,
    won: bool,
    params: EloParameters,
) -> int:
    """Return the updated integer rating after one result.

    `opponent_rating` is the mean of the opposing team's creation-time
    snapshot, never the live ratings.
    """
    expected = calculate_expected_score(rating, opponent_rating, params.scale_factor)
    actual = 1.0 if won else 0.0
    return round_half_up(rating + params.k_factor * (actual - expected))


def calculate_team_ratings(
    team_elos: Sequence[int],
    opponent_elos: Sequence[int],
    won: bool,
    params: EloParameters,
) -> tuple[int, ...]:
    """Apply the update to every member of one team, index-aligned with `team_elos`."""
    opponent_mean = team_mean_rating(opponent_elos)
    return tuple(
        calculate_new_rating(rating, opponent_mean, won, params) for rating in team_elos
    )


__all__ = [
    "EloParameters",
    "calculate_expected_score",
    "calculate_new_rating",
    "calculate_team_ratings",
    "round_half_up",
    "team_mean_rating",
]
