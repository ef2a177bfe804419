"""SQLAlchemy persistence for players and matches."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from contextlib import contextmanager

from sqlalchemy import func, select, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from domain.common import Match, MatchResult, Player, PlayerUpdate
from domain.errors import ConcurrencyConflict, PersistenceError, ValidationError
from models import Base
from models import Match as MatchRow
from models import Player as PlayerRow

logger = logging.getLogger(__name__)


def ensure_schema(engine: Engine) -> None:
    """Create the players and matches tables if they do not exist."""
    Base.metadata.create_all(bind=engine, tables=[PlayerRow.__table__, MatchRow.__table__])


def _player_from_row(row: PlayerRow) -> Player:
    return Player(id=row.id, name=row.name, elo=row.elo, win=row.win, total=row.total)


def _match_from_row(row: MatchRow) -> Match:
    return Match(
        id=row.id,
        created_at=row.created_at,
        team_a_players=tuple(row.team_a_players),
        team_b_players=tuple(row.team_b_players),
        team_a_elos=tuple(row.team_a_elos),
        team_b_elos=tuple(row.team_b_elos),
        result=MatchResult.from_column(row.result),
        team_a_new_elos=None if row.team_a_new_elos is None else tuple(row.team_a_new_elos),
        team_b_new_elos=None if row.team_b_new_elos is None else tuple(row.team_b_new_elos),
    )


class SqlAlchemyMatchStore:
    """Match store backed by one database; a unit of work is one transaction."""

    atomic = True

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self.session_factory = session_factory
        self._session: Session | None = None

    @contextmanager
    def unit_of_work(self) -> Iterator[None]:
        """Run every store call inside the block in a single transaction."""
        if self._session is not None:
            yield
            return

        try:
            with self.session_factory.begin() as session:
                self._session = session
                try:
                    yield
                finally:
                    self._session = None
        except SQLAlchemyError as exc:
            raise PersistenceError(f"transaction failed: {exc}") from exc

    @contextmanager
    def _session_scope(self) -> Iterator[Session]:
        try:
            if self._session is not None:
                yield self._session
            else:
                with self.session_factory.begin() as session:
                    yield session
        except SQLAlchemyError as exc:
            raise PersistenceError(f"database operation failed: {exc}") from exc

    def fetch_players(self) -> list[Player]:
        with self._session_scope() as session:
            rows = session.scalars(
                select(PlayerRow).order_by(PlayerRow.elo.desc(), PlayerRow.id)
            ).all()
            return [_player_from_row(row) for row in rows]

    def fetch_matches(self, limit: int) -> list[Match]:
        with self._session_scope() as session:
            rows = session.scalars(
                select(MatchRow)
                .order_by(MatchRow.created_at.desc(), MatchRow.id.desc())
                .limit(limit)
            ).all()
            return [_match_from_row(row) for row in rows]

    def fetch_match(self, match_id: int) -> Match | None:
        with self._session_scope() as session:
            row = session.get(MatchRow, match_id)
            return None if row is None else _match_from_row(row)

    def fetch_match_count(self) -> int:
        with self._session_scope() as session:
            result = session.scalar(select(func.count()).select_from(MatchRow))
            return int(result or 0)

    def fetch_pending_match_ids(self) -> list[int]:
        with self._session_scope() as session:
            ids = session.scalars(
                select(MatchRow.id)
                .where(MatchRow.result.is_(None))
                .order_by(MatchRow.created_at, MatchRow.id)
            ).all()
            return [int(match_id) for match_id in ids]

    def create_match(
        self,
        team_a_ids: Sequence[int],
        team_a_elos: Sequence[int],
        team_b_ids: Sequence[int],
        team_b_elos: Sequence[int],
    ) -> Match:
        if len(team_a_ids) != len(team_a_elos) or len(team_b_ids) != len(team_b_elos):
            raise ValidationError("rating snapshots must be index-aligned with team ids")

        with self._session_scope() as session:
            row = MatchRow(
                team_a_players=list(team_a_ids),
                team_a_elos=list(team_a_elos),
                team_b_players=list(team_b_ids),
                team_b_elos=list(team_b_elos),
                result=None,
            )
            session.add(row)
            session.flush()
            return _match_from_row(row)

    def update_match_result(
        self,
        match_id: int,
        result: MatchResult,
        team_a_new_elos: Sequence[int] | None,
        team_b_new_elos: Sequence[int] | None,
    ) -> Match:
        """Conditionally move a pending match to `result`.

        The UPDATE only matches rows whose result is still NULL, so of two
        racing completions exactly one changes the row.
        """
        if result is MatchResult.PENDING:
            raise ValidationError("a match cannot be moved back to pending")

        with self._session_scope() as session:
            statement = (
                update(MatchRow)
                .where(MatchRow.id == match_id, MatchRow.result.is_(None))
                .values(
                    result=result.to_column(),
                    team_a_new_elos=None if team_a_new_elos is None else list(team_a_new_elos),
                    team_b_new_elos=None if team_b_new_elos is None else list(team_b_new_elos),
                )
                .execution_options(synchronize_session=False)
            )
            updated = session.execute(statement).rowcount
            if updated == 0:
                existing = session.get(MatchRow, match_id)
                if existing is None:
                    raise PersistenceError(f"match_id={match_id} not found")
                logger.warning(
                    "match_id=%s already has result=%s; refusing %s",
                    match_id,
                    existing.result,
                    result.value,
                )
                raise ConcurrencyConflict(match_id)

            row = session.execute(
                select(MatchRow)
                .where(MatchRow.id == match_id)
                .execution_options(populate_existing=True)
            ).scalar_one()
            return _match_from_row(row)

    def upsert_players(self, updates: Sequence[PlayerUpdate]) -> None:
        if not updates:
            return

        with self._session_scope() as session:
            ids = [player_update.id for player_update in updates]
            rows = {
                row.id: row
                for row in session.scalars(select(PlayerRow).where(PlayerRow.id.in_(ids))).all()
            }
            missing = [player_id for player_id in ids if player_id not in rows]
            if missing:
                raise PersistenceError(f"player ids {missing} not found")

            for player_update in updates:
                row = rows[player_update.id]
                row.elo = player_update.elo
                row.win = player_update.win
                row.total = player_update.total
            session.flush()

    def add_player(self, name: str, elo: int) -> Player:
        with self._session_scope() as session:
            row = PlayerRow(name=name, elo=elo, win=0, total=0)
            session.add(row)
            session.flush()
            return _player_from_row(row)


__all__ = ["SqlAlchemyMatchStore", "ensure_schema"]
