"""Elo rating formula."""

from domain.ratings.elo.calculator import (
    EloParameters,
    calculate_expected_score,
    calculate_new_rating,
    calculate_team_ratings,
    round_half_up,
    team_mean_rating,
)

__all__ = [
    "EloParameters",
    "calculate_expected_score",
    "calculate_new_rating",
    "calculate_team_ratings",
    "round_half_up",
    "team_mean_rating",
]
