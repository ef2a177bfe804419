"""Load matchmaking settings from TOML files."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
import tomllib

from domain.matchmaking.sampler import MAX_CANDIDATES
from domain.ratings.elo.calculator import EloParameters

ROOT_DIR = Path(__file__).resolve().parents[2]
DEFAULT_CONFIG_PATH = ROOT_DIR / "configs" / "matchmaking" / "default.toml"


@dataclass(frozen=True)
class MatchmakingConfig:
    """Rating constants and team-suggestion settings for one deployment."""

    name: str = "default"
    description: str | None = None
    file_path: Path | None = None
    elo: EloParameters = field(default_factory=EloParameters)
    max_candidates: int = MAX_CANDIDATES
    tolerance: float = 20.0
    anchor_player_ids: tuple[int, ...] = ()
    allow_concurrent_matches: bool = False
    history_limit: int = 20

    def as_config_json(self) -> dict[str, Any]:
        return {
            "k_factor": self.elo.k_factor,
            "scale_factor": self.elo.scale_factor,
            "initial_elo": self.elo.initial_elo,
            "max_candidates": self.max_candidates,
            "tolerance": self.tolerance,
            "anchor_player_ids": list(self.anchor_player_ids),
            "allow_concurrent_matches": self.allow_concurrent_matches,
            "history_limit": self.history_limit,
        }


def load_matchmaking_config(file_path: Path) -> MatchmakingConfig:
    """Load and validate one matchmaking TOML config file."""
    if not file_path.exists():
        raise FileNotFoundError(f"Config file not found: {file_path}")
    if not file_path.is_file():
        raise ValueError(f"Config path is not a file: {file_path}")

    with file_path.open("rb") as file:
        raw = tomllib.load(file)
    return _parse_matchmaking_config(raw, file_path)


def _parse_matchmaking_config(raw: dict[str, Any], file_path: Path) -> MatchmakingConfig:
    system_raw = raw.get("system", {})
    elo_raw = raw.get("elo", {})
    matchmaking_raw = raw.get("matchmaking", {})

    name = str(system_raw.get("name", "")).strip()
    if not name:
        raise ValueError(f"{file_path}: [system].name is required")

    description_value = system_raw.get("description")
    description = None if description_value is None else str(description_value)

    elo = EloParameters(
        k_factor=float(elo_raw.get("k_factor", 15.0)),
        scale_factor=float(elo_raw.get("scale_factor", 400.0)),
        initial_elo=int(elo_raw.get("initial_elo", 1500)),
    )

    anchors_raw = matchmaking_raw.get("anchor_player_ids", [])
    if not isinstance(anchors_raw, list):
        raise ValueError(f"{file_path}: [matchmaking].anchor_player_ids must be a list")

    config = MatchmakingConfig(
        name=name,
        description=description,
        file_path=file_path,
        elo=elo,
        max_candidates=int(matchmaking_raw.get("max_candidates", MAX_CANDIDATES)),
        tolerance=float(matchmaking_raw.get("tolerance", 20.0)),
        anchor_player_ids=tuple(int(player_id) for player_id in anchors_raw),
        allow_concurrent_matches=bool(matchmaking_raw.get("allow_concurrent_matches", False)),
        history_limit=int(matchmaking_raw.get("history_limit", 20)),
    )
    _validate_config(file_path=file_path, config=config)
    return config


def _validate_config(*, file_path: Path, config: MatchmakingConfig) -> None:
    if config.elo.k_factor <= 0.0:
        raise ValueError(f"{file_path}: [elo].k_factor must be > 0")
    if config.elo.scale_factor <= 0.0:
        raise ValueError(f"{file_path}: [elo].scale_factor must be > 0")
    if config.elo.initial_elo <= 0:
        raise ValueError(f"{file_path}: [elo].initial_elo must be > 0")
    if config.max_candidates < 2 or config.max_candidates > MAX_CANDIDATES:
        raise ValueError(
            f"{file_path}: [matchmaking].max_candidates must be between 2 and {MAX_CANDIDATES}"
        )
    if config.tolerance < 0.0:
        raise ValueError(f"{file_path}: [matchmaking].tolerance must be >= 0")
    if config.anchor_player_ids and (
        len(config.anchor_player_ids) != 2
        or config.anchor_player_ids[0] == config.anchor_player_ids[1]
    ):
        raise ValueError(
            f"{file_path}: [matchmaking].anchor_player_ids must be empty or two distinct ids"
        )
    if config.history_limit <= 0:
        raise ValueError(f"{file_path}: [matchmaking].history_limit must be > 0")


__all__ = [
    "DEFAULT_CONFIG_PATH",
    "MatchmakingConfig",
    "load_matchmaking_config",
]
