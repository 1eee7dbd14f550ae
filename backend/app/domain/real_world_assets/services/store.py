from __future__ import annotations

from typing import Any, TypeVar

from sqlalchemy import and_, delete, insert, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session
from structlog.stdlib import BoundLogger

from app.core.db.base import Base
from app.core.logging import get_logger
from app.shared.exceptions import MissingTargetRow

ModelT = TypeVar("ModelT", bound=Base)


def _where(model: type[Base], key: dict[str, Any]):
    table = model.__table__
    return and_(*(table.c[column] == value for column, value in key.items()))


# Rows per multi-row INSERT; keeps bound parameters under backend limits.
INSERT_BATCH_SIZE = 500


def _batches(rows: list[dict[str, Any]]) -> list[list[dict[str, Any]]]:
    """Split rows into multi-row VALUES batches; each batch shares one column set."""
    by_columns: dict[tuple[str, ...], list[dict[str, Any]]] = {}
    for row in rows:
        by_columns.setdefault(tuple(sorted(row)), []).append(row)
    return [
        group[start : start + INSERT_BATCH_SIZE]
        for group in by_columns.values()
        for start in range(0, len(group), INSERT_BATCH_SIZE)
    ]


class ProjectionStore:
    """
    Natural-key CRUD over the read model, bound to the caller's Session.

    Writes go through Core statements so they behave the same for one row or
    many; reads always refresh the identity map. Nothing here commits: the
    caller owns the transaction boundary.
    """

    def __init__(self, db: Session, *, log: BoundLogger | None = None) -> None:
        self.db = db
        self.log = log or get_logger("rwa.store")

    @property
    def dialect(self) -> str:
        return self.db.get_bind().dialect.name

    def find_one(self, model: type[ModelT], **key: Any) -> ModelT | None:
        self.db.flush()
        stmt = select(model).where(_where(model, key)).execution_options(populate_existing=True)
        return self.db.execute(stmt).scalars().first()

    def find_all(self, model: type[ModelT], **key: Any) -> list[ModelT]:
        self.db.flush()
        stmt = select(model).where(_where(model, key)).execution_options(populate_existing=True)
        return list(self.db.execute(stmt).scalars().all())

    def upsert(self, model: type[ModelT], key: dict[str, Any], fields: dict[str, Any]) -> ModelT:
        row = self.find_one(model, **key)
        if row is None:
            row = model(**key, **fields)
            self.db.add(row)
        else:
            for attr, value in fields.items():
                setattr(row, attr, value)
        self.db.flush()
        return row

    def create_many(
        self,
        model: type[Base],
        rows: list[dict[str, Any]],
        *,
        skip_duplicates: bool = True,
    ) -> int:
        """Insert rows; with `skip_duplicates` rows whose primary key already exists are left untouched."""
        if not rows:
            return 0
        self.db.flush()
        table = model.__table__

        if not skip_duplicates:
            self.db.execute(insert(table), rows)
            return len(rows)

        if self.dialect in ("postgresql", "sqlite"):
            dialect_insert = postgresql.insert if self.dialect == "postgresql" else sqlite.insert
            inserted = 0
            for batch in _batches(rows):
                stmt = dialect_insert(table).values(batch).on_conflict_do_nothing()
                inserted += self.db.execute(stmt).rowcount or 0
            return inserted

        pk_columns = [c.key for c in table.primary_key.columns]
        inserted = 0
        for row in rows:
            if self.find_one(model, **{c: row[c] for c in pk_columns}) is None:
                self.db.execute(insert(table).values(**row))
                inserted += 1
        return inserted

    def create(self, model: type[Base], row: dict[str, Any]) -> bool:
        return self.create_many(model, [row]) == 1

    def update(self, model: type[Base], key: dict[str, Any], fields: dict[str, Any]) -> None:
        self.db.flush()
        if not fields:
            if self.find_one(model, **key) is None:
                raise MissingTargetRow(model.__name__, key)
            return
        result = self.db.execute(update(model.__table__).where(_where(model, key)).values(**fields))
        if result.rowcount == 0:
            raise MissingTargetRow(model.__name__, key)

    def delete(self, model: type[ModelT], key: dict[str, Any]) -> ModelT:
        row = self.find_one(model, **key)
        if row is None:
            raise MissingTargetRow(model.__name__, key)
        self.db.execute(delete(model.__table__).where(_where(model, key)))
        self._evict(model)
        return row

    def delete_many(self, model: type[Base], **filters: Any) -> int:
        self.db.flush()
        stmt = delete(model.__table__)
        if filters:
            stmt = stmt.where(_where(model, filters))
        deleted = self.db.execute(stmt).rowcount or 0
        if deleted:
            self._evict(model)
        return deleted

    def _evict(self, model: type[Base]) -> None:
        # Core deletes bypass the identity map; drop loaded instances so a later
        # insert of the same key does not collide with a ghost.
        for obj in [o for o in self.db.identity_map.values() if isinstance(o, model)]:
            self.db.expunge(obj)
