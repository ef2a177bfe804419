"""Rating-update modules."""

from domain.ratings.elo import EloParameters, calculate_expected_score, calculate_new_rating

__all__ = ["EloParameters", "calculate_expected_score", "calculate_new_rating"]
