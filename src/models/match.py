"""matches table model."""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import JSON, CheckConstraint, DateTime, Index, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base

IdList = JSON(none_as_null=True).with_variant(JSONB(none_as_null=True), "postgresql")


def _utcnow() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


class Match(Base):
    """One match: team rosters, creation-time rating snapshots and result.

    `result` is NULL while the match is pending.
    """

    __tablename__ = "matches"
    __table_args__ = (
        CheckConstraint(
            "result IS NULL OR result IN ('A', 'B', 'cancelled')",
            name="ck_matches_result",
        ),
        Index("idx_matches_created_at", "created_at"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        nullable=False,
        default=_utcnow,
    )
    team_a_players: Mapped[list[int]] = mapped_column(IdList, nullable=False)
    team_b_players: Mapped[list[int]] = mapped_column(IdList, nullable=False)
    team_a_elos: Mapped[list[int]] = mapped_column(IdList, nullable=False)
    team_b_elos: Mapped[list[int]] = mapped_column(IdList, nullable=False)
    result: Mapped[str | None] = mapped_column(String(16), nullable=True)
    team_a_new_elos: Mapped[list[int] | None] = mapped_column(IdList, nullable=True)
    team_b_new_elos: Mapped[list[int] | None] = mapped_column(IdList, nullable=True)
