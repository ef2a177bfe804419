"""Unit tests for the balanced partition search."""

from __future__ import annotations

import random
from itertools import combinations
from math import ceil

import pytest

from domain.common import Candidate, Player
from domain.errors import ValidationError
from domain.matchmaking.partition import (
    anchor_indexes_for,
    partition_candidates,
    search_partition,
)


def _brute_force_best(
    ratings: list[int],
    anchors: tuple[int, int] | None = None,
) -> tuple[tuple[int, ...], float]:
    n = len(ratings)
    size_a = ceil(n / 2)
    target = sum(ratings) * size_a / n
    best: tuple[int, ...] = ()
    best_diff = float("inf")
    for subset in combinations(range(n), size_a):
        if anchors is not None and ((anchors[0] in subset) != (anchors[1] in subset)):
            continue
        diff = abs(sum(ratings[i] for i in subset) - target)
        if diff < best_diff:
            best, best_diff = subset, diff
    return best, best_diff


def _candidates(ratings: list[int]) -> list[Candidate]:
    return [
        Candidate.from_player(Player(id=index + 1, name=f"P{index + 1}", elo=rating))
        for index, rating in enumerate(ratings)
    ]


def test_four_player_scenario_picks_first_minimal_split() -> None:
    result = search_partition([1500, 1600, 1400, 1550], tolerance=0.0, rng=random.Random(0))

    assert result.target == pytest.approx(3025.0)
    assert result.diff == pytest.approx(25.0)
    assert result.team_a == (0, 3)
    assert result.team_b == (1, 2)


@pytest.mark.parametrize("n", range(2, 11))
def test_sizes_cover_pool_and_differ_by_at_most_one(n: int) -> None:
    rng = random.Random(n)
    ratings = [rng.randint(1200, 1800) for _ in range(n)]
    result = search_partition(ratings, tolerance=30.0, rng=rng)

    assert len(result.team_a) + len(result.team_b) == n
    assert len(result.team_a) == ceil(n / 2)
    assert abs(len(result.team_a) - len(result.team_b)) <= 1
    assert sorted(result.team_a + result.team_b) == list(range(n))


@pytest.mark.parametrize("seed", range(12))
def test_zero_tolerance_matches_brute_force_minimum(seed: int) -> None:
    rng = random.Random(seed)
    n = rng.randint(2, 10)
    ratings = [rng.randint(1000, 2000) for _ in range(n)]

    result = search_partition(ratings, tolerance=0.0, rng=random.Random(99))
    expected_subset, expected_diff = _brute_force_best(ratings)

    assert result.diff == pytest.approx(expected_diff)
    assert result.team_a == expected_subset


@pytest.mark.parametrize("seed", range(8))
def test_zero_tolerance_matches_brute_force_with_anchors(seed: int) -> None:
    rng = random.Random(100 + seed)
    n = rng.randint(3, 10)
    ratings = [rng.randint(1000, 2000) for _ in range(n)]
    anchors = (0, n - 1)

    result = search_partition(ratings, tolerance=0.0, rng=random.Random(5), anchor_indexes=anchors)
    expected_subset, expected_diff = _brute_force_best(ratings, anchors)

    assert result.diff == pytest.approx(expected_diff)
    assert result.team_a == expected_subset


def test_zero_tolerance_is_deterministic_across_random_sources() -> None:
    ratings = [1600, 1500, 1450, 1550, 1400, 1500]
    results = {
        search_partition(ratings, tolerance=0.0, rng=random.Random(seed)).team_a
        for seed in range(25)
    }
    assert results == {(0, 1, 4)}


def test_all_equal_ratings_zero_tolerance_returns_first_subset() -> None:
    result = search_partition([1500, 1500, 1500, 1500], tolerance=0.0, rng=random.Random(3))
    assert result.team_a == (0, 1)
    assert result.team_b == (2, 3)


def test_tolerance_allows_varied_splits_within_bound() -> None:
    ratings = [1500, 1520, 1480, 1510, 1490, 1500]
    tolerance = 40.0
    splits = set()
    for seed in range(30):
        result = search_partition(ratings, tolerance=tolerance, rng=random.Random(seed))
        assert result.diff <= tolerance
        assert result.within_tolerance > 1
        splits.add(result.team_a)

    assert len(splits) > 1


def test_tolerance_falls_back_to_best_when_nothing_is_close_enough() -> None:
    ratings = [1000, 2000, 1500, 1900]
    result = search_partition(ratings, tolerance=1.0, rng=random.Random(4))
    expected_subset, expected_diff = _brute_force_best(ratings)

    assert result.within_tolerance == 0
    assert result.team_a == expected_subset
    assert result.diff == pytest.approx(expected_diff)


@pytest.mark.parametrize("seed", range(10))
def test_anchor_pair_always_lands_on_the_same_team(seed: int) -> None:
    rng = random.Random(seed)
    n = rng.randint(3, 10)
    ratings = [rng.randint(1200, 1800) for _ in range(n)]
    first, second = rng.sample(range(n), 2)

    result = search_partition(
        ratings,
        tolerance=50.0,
        rng=rng,
        anchor_indexes=(first, second),
    )

    assert (first in result.team_a) == (second in result.team_a)


def test_odd_pool_makes_team_a_larger() -> None:
    result = search_partition([1500, 1400, 1600, 1550, 1450], tolerance=0.0, rng=random.Random(0))
    assert len(result.team_a) == 3
    assert len(result.team_b) == 2


def test_fewer_than_two_candidates_returns_empty_teams() -> None:
    for ratings in ([], [1500]):
        result = search_partition(ratings, tolerance=0.0, rng=random.Random(0))
        assert result.team_a == ()
        assert result.team_b == ()


def test_two_anchors_alone_cannot_be_split_into_teams() -> None:
    with pytest.raises(ValidationError):
        search_partition([1500, 1600], tolerance=0.0, rng=random.Random(0), anchor_indexes=(0, 1))


def test_oversized_pool_is_rejected() -> None:
    with pytest.raises(ValidationError):
        search_partition([1500] * 11, tolerance=0.0, rng=random.Random(0))


def test_negative_tolerance_is_rejected() -> None:
    with pytest.raises(ValidationError):
        search_partition([1500, 1600], tolerance=-1.0, rng=random.Random(0))


def test_anchor_indexes_require_both_anchors_in_pool() -> None:
    candidates = _candidates([1500, 1600, 1400, 1550])

    assert anchor_indexes_for(candidates, (2, 4)) == (1, 3)
    assert anchor_indexes_for(candidates, (2, 99)) is None
    assert anchor_indexes_for(candidates, ()) is None


def test_partition_candidates_maps_back_to_players() -> None:
    candidates = _candidates([1500, 1600, 1400, 1550])
    team_a, team_b, result = partition_candidates(
        candidates,
        tolerance=0.0,
        rng=random.Random(0),
    )

    assert [candidate.player.name for candidate in team_a] == ["P1", "P4"]
    assert [candidate.player.name for candidate in team_b] == ["P2", "P3"]
    assert result.diff == pytest.approx(25.0)


def test_partition_candidates_keeps_anchor_players_together() -> None:
    candidates = _candidates([1500, 1600, 1400, 1550])
    team_a, team_b, _ = partition_candidates(
        candidates,
        tolerance=0.0,
        rng=random.Random(0),
        anchor_player_ids=(1, 2),
    )

    team_a_ids = {candidate.player.id for candidate in team_a}
    assert ({1, 2} <= team_a_ids) or not ({1, 2} & team_a_ids)
    assert len(team_a) + len(team_b) == 4
