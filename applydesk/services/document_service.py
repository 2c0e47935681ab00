"""Table-style document store over MongoDB collections."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, NamedTuple, Optional

from pymongo import ASCENDING, DESCENDING
from pymongo.database import Database

from applydesk.database import remote_errors
from applydesk.errors import RemoteError

logger = logging.getLogger(__name__)

# Filters are equality predicates on owner id and/or record id only.
FILTER_KEYS = frozenset({"id", "user_id"})

Row = Dict[str, Any]


class Ordering(NamedTuple):
    column: str
    descending: bool = True


def _check_filter(table: str, filter: Dict[str, Any]) -> None:
    if not filter:
        raise RemoteError(f"Refusing unfiltered access to {table}.", reason="invalid_filter")
    unknown = set(filter) - FILTER_KEYS
    if unknown:
        raise RemoteError(
            f"Unsupported filter on {table}: {', '.join(sorted(unknown))}",
            reason="invalid_filter",
        )


def _clean(row: Dict[str, Any]) -> Row:
    row.pop("_id", None)
    return row


class DocumentStore:
    """Async ``select``/``insert``/``update``/``upsert``/``delete`` over named tables."""

    def __init__(self, db: Database) -> None:
        self._db = db

    async def select(
        self,
        table: str,
        filter: Dict[str, Any],
        ordering: Optional[Ordering] = None,
    ) -> List[Row]:
        _check_filter(table, filter)
        return await asyncio.to_thread(self._select, table, dict(filter), ordering)

    async def insert(self, table: str, row: Row) -> Row:
        return await asyncio.to_thread(self._insert, table, dict(row))

    async def update(self, table: str, patch: Row, filter: Dict[str, Any]) -> List[Row]:
        """Apply ``patch`` to every matching row and return the updated rows."""
        _check_filter(table, filter)
        return await asyncio.to_thread(self._update, table, dict(patch), dict(filter))

    async def upsert(self, table: str, row: Row, conflict_key: str) -> None:
        """Insert ``row``, or replace the existing row sharing ``conflict_key`` wholesale."""
        if conflict_key not in row:
            raise RemoteError(f"Row is missing conflict key {conflict_key!r}.", reason="invalid_row")
        await asyncio.to_thread(self._upsert, table, dict(row), conflict_key)

    async def delete(self, table: str, filter: Dict[str, Any]) -> int:
        _check_filter(table, filter)
        return await asyncio.to_thread(self._delete, table, dict(filter))

    def _select(self, table: str, filter: Dict[str, Any], ordering: Optional[Ordering]) -> List[Row]:
        with remote_errors(f"select {table}"):
            cursor = self._db[table].find(filter)
            if ordering is not None:
                cursor = cursor.sort(ordering.column, DESCENDING if ordering.descending else ASCENDING)
            return [_clean(row) for row in cursor]

    def _insert(self, table: str, row: Row) -> Row:
        with remote_errors(f"insert {table}"):
            self._db[table].insert_one(row)
        return _clean(row)

    def _update(self, table: str, patch: Row, filter: Dict[str, Any]) -> List[Row]:
        with remote_errors(f"update {table}"):
            collection = self._db[table]
            result = collection.update_many(filter, {"$set": patch})
            if result.matched_count == 0:
                return []
            return [_clean(row) for row in collection.find(filter)]

    def _upsert(self, table: str, row: Row, conflict_key: str) -> None:
        with remote_errors(f"upsert {table}"):
            self._db[table].replace_one({conflict_key: row[conflict_key]}, row, upsert=True)

    def _delete(self, table: str, filter: Dict[str, Any]) -> int:
        with remote_errors(f"delete {table}"):
            result = self._db[table].delete_many(filter)
        logger.debug("Deleted %d row(s) from %s", result.deleted_count, table)
        return result.deleted_count
