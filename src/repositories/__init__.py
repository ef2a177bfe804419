"""Database repository helpers."""

from repositories.match_store import SqlAlchemyMatchStore, ensure_schema

__all__ = ["SqlAlchemyMatchStore", "ensure_schema"]
