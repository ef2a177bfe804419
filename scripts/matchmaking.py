#!/usr/bin/env python3
"""Suggest balanced teams and record match results."""

from __future__ import annotations

import random
import sys
from pathlib import Path
from typing import Annotated, Optional

import typer

ROOT_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = ROOT_DIR / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from db import DEFAULT_DB_URL, create_db_engine, create_session_factory
from domain.common import Match, Player, TeamSide
from domain.config import DEFAULT_CONFIG_PATH, load_matchmaking_config
from domain.errors import MatchmakingError
from domain.lifecycle import MatchLifecycle
from repositories import SqlAlchemyMatchStore, ensure_schema

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Team balancing and match result commands.",
)

DbUrlOption = Annotated[
    str,
    typer.Option("--db-url", help="Database URL. Defaults to the local teambalancer postgres instance."),
]
ConfigOption = Annotated[
    Path,
    typer.Option("--config", help="Matchmaking TOML config file."),
]


def _build_lifecycle(db_url: str, config_path: Path, seed: int | None = None) -> MatchLifecycle:
    config = load_matchmaking_config(config_path)
    engine = create_db_engine(db_url)
    ensure_schema(engine)
    store = SqlAlchemyMatchStore(create_session_factory(engine))
    return MatchLifecycle(store, config, rng=random.Random(seed))


def _fail(exc: MatchmakingError) -> None:
    typer.echo(f"error: {exc}", err=True)
    raise typer.Exit(code=1)


def _team_line(label: str, players: tuple[Player, ...] | list[Player]) -> str:
    mean_elo = sum(player.elo for player in players) / len(players) if players else 0.0
    names = ", ".join(player.name for player in players)
    return f"team {label} (avg {round(mean_elo)}): {names}"


def _echo_match(match: Match, names: dict[int, str]) -> None:
    status = "in game" if match.is_pending else f"result={match.result.value}"
    team_a = ", ".join(names.get(player_id, str(player_id)) for player_id in match.team_a_players)
    team_b = ", ".join(names.get(player_id, str(player_id)) for player_id in match.team_b_players)
    typer.echo(f"#{match.id} {match.created_at:%Y-%m-%d %H:%M} {status}")
    typer.echo(f"    A: {team_a}")
    typer.echo(f"    B: {team_b}")


@app.command("init-db")
def init_db(db_url: DbUrlOption = DEFAULT_DB_URL) -> None:
    """Create the players and matches tables."""
    ensure_schema(create_db_engine(db_url))
    typer.echo("schema ready")


@app.command("add-player")
def add_player(
    name: Annotated[str, typer.Argument(help="Display name.")],
    elo: Annotated[Optional[int], typer.Option("--elo", help="Starting rating.")] = None,
    db_url: DbUrlOption = DEFAULT_DB_URL,
    config_path: ConfigOption = DEFAULT_CONFIG_PATH,
) -> None:
    """Add a player to the roster."""
    lifecycle = _build_lifecycle(db_url, config_path)
    starting_elo = lifecycle.config.elo.initial_elo if elo is None else elo
    if starting_elo <= 0:
        raise typer.BadParameter("--elo must be greater than 0")
    try:
        player = lifecycle.store.add_player(name, starting_elo)
    except MatchmakingError as exc:
        _fail(exc)
        return
    typer.echo(f"added player_id={player.id} name={player.name} elo={player.elo}")


@app.command("leaderboard")
def leaderboard(
    db_url: DbUrlOption = DEFAULT_DB_URL,
    config_path: ConfigOption = DEFAULT_CONFIG_PATH,
) -> None:
    """Print players by rating with wins and win rate."""
    lifecycle = _build_lifecycle(db_url, config_path)
    players = lifecycle.leaderboard()
    if not players:
        typer.echo("No players yet.")
        return
    for index, player in enumerate(players, start=1):
        win_rate = "-" if player.win_rate is None else f"{player.win_rate * 100:.1f}%"
        typer.echo(
            f"{index:2d}. {player.name:<20} elo={player.elo:5d} "
            f"wins={player.win:4d} win_rate={win_rate:>6}"
        )


@app.command("history")
def history(
    limit: Annotated[
        Optional[int],
        typer.Option("--limit", help="Number of matches to show. Defaults to the config value."),
    ] = None,
    db_url: DbUrlOption = DEFAULT_DB_URL,
    config_path: ConfigOption = DEFAULT_CONFIG_PATH,
) -> None:
    """Print recent matches, newest first."""
    if limit is not None and limit <= 0:
        raise typer.BadParameter("--limit must be greater than 0")
    lifecycle = _build_lifecycle(db_url, config_path)
    matches = lifecycle.history(limit)
    typer.echo(f"matches_total={lifecycle.match_count()}")
    if not matches:
        typer.echo("No matches yet. Add your first one!")
        return
    names = {player.id: player.name for player in lifecycle.leaderboard()}
    for match in matches:
        _echo_match(match, names)


@app.command("suggest")
def suggest(
    player_ids: Annotated[
        list[int],
        typer.Option("--player", "-p", help="Available player id; repeat for each player."),
    ],
    tolerance: Annotated[
        Optional[float],
        typer.Option("--tolerance", help="Allowed imbalance before shuffling among near-best splits."),
    ] = None,
    seed: Annotated[Optional[int], typer.Option("--seed", help="Random seed.")] = None,
    start: Annotated[bool, typer.Option("--start", help="Start a match with the suggestion.")] = False,
    db_url: DbUrlOption = DEFAULT_DB_URL,
    config_path: ConfigOption = DEFAULT_CONFIG_PATH,
) -> None:
    """Suggest two balanced teams from the available players."""
    if tolerance is not None and tolerance < 0:
        raise typer.BadParameter("--tolerance must be >= 0")
    lifecycle = _build_lifecycle(db_url, config_path, seed)
    try:
        suggestion = lifecycle.suggest_teams(player_ids, tolerance)
        typer.echo(_team_line("A", suggestion.team_a))
        typer.echo(_team_line("B", suggestion.team_b))
        typer.echo(
            f"target={suggestion.target:.1f} diff={suggestion.diff:.1f} "
            f"within_tolerance={suggestion.within_tolerance}"
        )
        if start:
            match = lifecycle.start_match(suggestion.team_a_ids, suggestion.team_b_ids)
            typer.echo(f"started match_id={match.id}")
    except MatchmakingError as exc:
        _fail(exc)


@app.command("start")
def start_match(
    team_a: Annotated[list[int], typer.Option("--team-a", help="Team A player id; repeatable.")],
    team_b: Annotated[list[int], typer.Option("--team-b", help="Team B player id; repeatable.")],
    db_url: DbUrlOption = DEFAULT_DB_URL,
    config_path: ConfigOption = DEFAULT_CONFIG_PATH,
) -> None:
    """Start a match with manually chosen teams."""
    lifecycle = _build_lifecycle(db_url, config_path)
    try:
        match = lifecycle.start_match(team_a, team_b)
    except MatchmakingError as exc:
        _fail(exc)
        return
    typer.echo(f"started match_id={match.id}")


@app.command("complete")
def complete_match(
    match_id: Annotated[int, typer.Argument(help="Pending match id.")],
    winner: Annotated[TeamSide, typer.Option("--winner", help="Winning side.")],
    db_url: DbUrlOption = DEFAULT_DB_URL,
    config_path: ConfigOption = DEFAULT_CONFIG_PATH,
) -> None:
    """Record the winner of a pending match and update ratings."""
    lifecycle = _build_lifecycle(db_url, config_path)
    try:
        outcome = lifecycle.complete_match(lifecycle.get_match(match_id), winner)
    except MatchmakingError as exc:
        _fail(exc)
        return
    typer.echo(f"completed match_id={outcome.match.id} result={outcome.match.result.value}")
    for update in outcome.players:
        typer.echo(f"  player_id={update.id} elo={update.elo} wins={update.win} total={update.total}")


@app.command("cancel")
def cancel_match(
    match_id: Annotated[int, typer.Argument(help="Pending match id.")],
    db_url: DbUrlOption = DEFAULT_DB_URL,
    config_path: ConfigOption = DEFAULT_CONFIG_PATH,
) -> None:
    """Cancel a pending match without touching ratings."""
    lifecycle = _build_lifecycle(db_url, config_path)
    try:
        match = lifecycle.cancel_match(lifecycle.get_match(match_id))
    except MatchmakingError as exc:
        _fail(exc)
        return
    typer.echo(f"cancelled match_id={match.id}")


if __name__ == "__main__":
    app()
