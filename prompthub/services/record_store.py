"""
Record store used by the version store and the provider registry.

Every call runs in its own session and commits on success, so a sequence of
calls is NOT atomic. Callers that need all-or-nothing semantics compose the
calls with compensating deletes (see services/saga.py).
"""
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from prompthub.core.errors import StoreConflict, StoreError
from prompthub.db.base import Base

logger = logging.getLogger(__name__)


class RecordStore:
    """SQLAlchemy-backed implementation of insert/update/select/delete."""

    def __init__(self, session_factory, metadata=None):
        self._session_factory = session_factory
        self._metadata = metadata if metadata is not None else Base.metadata

    def insert(self, table: str, record: Dict[str, Any]) -> Dict[str, Any]:
        """Insert one record and return it with generated fields filled in."""
        t = self._table(table)
        stmt = insert(t).values(**record).returning(*t.c)
        rows = self._execute(table, "insert", stmt, write=True)
        return rows[0]

    def update(self, table: str, filters: Dict[str, Any], patch: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Apply patch to every matching record; returns the affected records."""
        t = self._table(table)
        stmt = update(t).where(*self._where(t, filters)).values(**patch).returning(*t.c)
        return self._execute(table, "update", stmt, write=True)

    def select(
        self,
        table: str,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        t = self._table(table)
        stmt = select(t).where(*self._where(t, filters or {}))
        if order_by:
            column = self._column(t, order_by)
            stmt = stmt.order_by(column.desc() if descending else column.asc())
        if limit is not None:
            stmt = stmt.limit(limit)
        return self._execute(table, "select", stmt)

    def delete(self, table: str, filters: Dict[str, Any]) -> int:
        """Delete matching records; returns the number of rows removed."""
        if not filters:
            # Unfiltered deletes are never part of a compensation
            raise StoreError(f"Refusing to delete from {table} without a filter")
        t = self._table(table)
        stmt = delete(t).where(*self._where(t, filters))
        try:
            with self._session_factory() as db:
                result = db.execute(stmt)
                db.commit()
                return result.rowcount
        except SQLAlchemyError as e:
            raise self._wrap(table, "delete", e) from e

    # --- internals ---

    def _table(self, name):
        table = self._metadata.tables.get(name)
        if table is None:
            raise StoreError(f"Unknown table: {name}")
        return table

    def _column(self, table, name):
        if name not in table.c:
            raise StoreError(f"Unknown column {name} on {table.name}")
        return table.c[name]

    def _where(self, table, filters):
        conditions = []
        for name, value in filters.items():
            column = self._column(table, name)
            if isinstance(value, (list, tuple, set)):
                conditions.append(column.in_(list(value)))
            elif value is None:
                conditions.append(column.is_(None))
            else:
                conditions.append(column == value)
        return conditions

    def _execute(self, table, operation, stmt, write=False):
        try:
            with self._session_factory() as db:
                rows = [dict(row) for row in db.execute(stmt).mappings().all()]
                if write:
                    db.commit()
                return rows
        except SQLAlchemyError as e:
            raise self._wrap(table, operation, e) from e

    def _wrap(self, table, operation, error):
        detail = str(getattr(error, "orig", None) or error)
        logger.error("Store %s on %s failed: %s", operation, table, detail)
        if isinstance(error, IntegrityError) and ("unique" in detail.lower() or "duplicate" in detail.lower()):
            return StoreConflict(f"{operation} on {table} conflicts with an existing record: {detail}")
        return StoreError(f"{operation} on {table} failed: {detail}")
