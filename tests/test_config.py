"""Tests for TOML-based matchmaking config loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from domain.config import DEFAULT_CONFIG_PATH, MatchmakingConfig, load_matchmaking_config


def test_load_matchmaking_config_from_file(tmp_path: Path) -> None:
    config_path = tmp_path / "league.toml"
    config_path.write_text(
        """
[system]
name = "league"
description = "Thursday league"

[elo]
k_factor = 24.0
scale_factor = 420.0
initial_elo = 1200

[matchmaking]
max_candidates = 8
tolerance = 10.5
anchor_player_ids = [3, 7]
allow_concurrent_matches = true
history_limit = 50
""".strip()
    )

    config = load_matchmaking_config(config_path)

    assert config.name == "league"
    assert config.description == "Thursday league"
    assert config.file_path == config_path
    assert config.elo.k_factor == pytest.approx(24.0)
    assert config.elo.scale_factor == pytest.approx(420.0)
    assert config.elo.initial_elo == 1200
    assert config.max_candidates == 8
    assert config.tolerance == pytest.approx(10.5)
    assert config.anchor_player_ids == (3, 7)
    assert config.allow_concurrent_matches is True
    assert config.history_limit == 50
    assert config.as_config_json()["anchor_player_ids"] == [3, 7]


def test_missing_sections_use_defaults(tmp_path: Path) -> None:
    config_path = tmp_path / "minimal.toml"
    config_path.write_text('[system]\nname = "minimal"\n')

    config = load_matchmaking_config(config_path)

    assert config.elo.k_factor == pytest.approx(15.0)
    assert config.max_candidates == 10
    assert config.tolerance == pytest.approx(20.0)
    assert config.anchor_player_ids == ()
    assert config.allow_concurrent_matches is False


def test_repository_default_config_loads() -> None:
    config = load_matchmaking_config(DEFAULT_CONFIG_PATH)
    defaults = MatchmakingConfig()

    assert config.name == "default"
    assert config.elo == defaults.elo
    assert config.max_candidates == defaults.max_candidates
    assert config.tolerance == pytest.approx(defaults.tolerance)


@pytest.mark.parametrize(
    ("body", "message"),
    [
        ('[system]\nname = ""\n', "name is required"),
        ('[system]\nname = "x"\n[elo]\nk_factor = 0\n', "k_factor"),
        ('[system]\nname = "x"\n[elo]\nscale_factor = -1\n', "scale_factor"),
        ('[system]\nname = "x"\n[matchmaking]\nmax_candidates = 12\n', "max_candidates"),
        ('[system]\nname = "x"\n[matchmaking]\nmax_candidates = 1\n', "max_candidates"),
        ('[system]\nname = "x"\n[matchmaking]\ntolerance = -0.5\n', "tolerance"),
        ('[system]\nname = "x"\n[matchmaking]\nanchor_player_ids = [1]\n', "anchor_player_ids"),
        ('[system]\nname = "x"\n[matchmaking]\nanchor_player_ids = [4, 4]\n', "anchor_player_ids"),
        ('[system]\nname = "x"\n[matchmaking]\nanchor_player_ids = 4\n', "anchor_player_ids"),
        ('[system]\nname = "x"\n[matchmaking]\nhistory_limit = 0\n', "history_limit"),
    ],
)
def test_invalid_values_are_rejected(tmp_path: Path, body: str, message: str) -> None:
    config_path = tmp_path / "bad.toml"
    config_path.write_text(body)

    with pytest.raises(ValueError, match=message):
        load_matchmaking_config(config_path)


def test_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_matchmaking_config(tmp_path / "nope.toml")
