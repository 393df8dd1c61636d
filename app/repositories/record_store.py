"""
Key-value record store.

Five logical tables (users, properties, applications, payments, rental
agreements) addressed by primary key, with scan-with-filter for everything
else. No operation spans more than one record.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional
from sqlalchemy import select, delete, update
from sqlalchemy.exc import SQLAlchemyError
from app.database import Database
from app.models.record import RecordRow
from app.utils.pagination import encode_cursor, decode_cursor
import asyncio
import enum
import logging
import weakref

logger = logging.getLogger(__name__)

Item = Dict[str, Any]
Predicate = Callable[[Item], bool]


class RecordStoreError(Exception):
    """The store could not complete an operation."""


class RecordNotFoundError(RecordStoreError):
    """Update addressed a key that does not exist."""


class ConditionFailedError(RecordStoreError):
    """A conditional update found an attribute with an unexpected value."""

    def __init__(self, table: str, key: str, attribute: str, expected: Any, actual: Any):
        super().__init__(
            f"Condition failed on {table}/{key}: {attribute} is {actual!r}, expected {expected!r}"
        )
        self.attribute = attribute
        self.expected = expected
        self.actual = actual


@dataclass
class ScanResult:
    """One page of a scan. `count` covers every match, not just this page."""
    items: List[Item] = field(default_factory=list)
    count: int = 0
    next_cursor: Optional[str] = None


def _plain(value: Any) -> Any:
    return value.value if isinstance(value, enum.Enum) else value


def _check_condition(table: str, key: str, item: Item, condition: Optional[Mapping[str, Any]]) -> None:
    for attribute, expected in (condition or {}).items():
        expected = _plain(expected)
        if item.get(attribute) != expected:
            raise ConditionFailedError(table, key, attribute, expected, item.get(attribute))


def _condition_clauses(condition: Optional[Mapping[str, Any]]) -> list:
    """SQL equivalents of a condition, compared on the JSON document."""
    clauses = []
    for attribute, expected in (condition or {}).items():
        expected = _plain(expected)
        element = RecordRow.data[attribute]
        if isinstance(expected, bool):
            clauses.append(element.as_boolean() == expected)
        elif isinstance(expected, int):
            clauses.append(element.as_integer() == expected)
        elif isinstance(expected, float):
            clauses.append(element.as_float() == expected)
        elif isinstance(expected, str):
            clauses.append(element.as_string() == expected)
        else:
            raise ValueError(f"Cannot condition on {attribute}={expected!r}")
    return clauses


class RecordStore(ABC):
    """Contract every record store backend satisfies."""

    @abstractmethod
    async def get(self, table: str, key: str) -> Optional[Item]:
        ...

    @abstractmethod
    async def put(self, table: str, item: Item) -> Item:
        ...

    @abstractmethod
    async def update(
        self,
        table: str,
        key: str,
        fields: Mapping[str, Any],
        condition: Optional[Mapping[str, Any]] = None
    ) -> Item:
        ...

    @abstractmethod
    async def delete(self, table: str, key: str) -> bool:
        ...

    @abstractmethod
    async def scan(
        self,
        table: str,
        filters: Optional[Mapping[str, Any]] = None,
        predicate: Optional[Predicate] = None,
        limit: Optional[int] = None,
        cursor: Optional[str] = None
    ) -> ScanResult:
        ...


class SQLRecordStore(RecordStore):
    """
    Record store keeping each document as a JSON row.

    Each call runs in its own session and commits on its own, so a sequence
    of calls has no atomicity across records.
    Writes to one key take turns within the process; across processes the
    conditional UPDATE is what keeps two writers from both succeeding.
    """

    def __init__(self, database: Database):
        self.database = database
        self._locks: "weakref.WeakValueDictionary[tuple, asyncio.Lock]" = weakref.WeakValueDictionary()

    def _key_lock(self, table: str, key: str) -> asyncio.Lock:
        lock = self._locks.get((table, key))
        if lock is None:
            lock = asyncio.Lock()
            self._locks[(table, key)] = lock
        return lock

    async def get(self, table: str, key: str) -> Optional[Item]:
        try:
            async with self.database.session() as session:
                row = await self._fetch(session, table, key)
                return dict(row.data) if row else None
        except SQLAlchemyError as e:
            logger.error(f"Failed to get {table}/{key}: {e}")
            raise RecordStoreError(f"Failed to read from {table}") from e

    async def put(self, table: str, item: Item) -> Item:
        """Insert or replace a document keyed by its `id`."""
        if not item.get("id"):
            raise ValueError("Item must carry an 'id'")
        key = str(item["id"])
        try:
            async with self._key_lock(table, key):
                async with self.database.session() as session:
                    row = await self._fetch(session, table, key)
                    if row:
                        row.data = dict(item)
                    else:
                        session.add(RecordRow(table_name=table, key=key, data=dict(item)))
                    await session.commit()
            logger.debug(f"Put {table}/{key}")
            return dict(item)
        except SQLAlchemyError as e:
            logger.error(f"Failed to put {table}/{key}: {e}")
            raise RecordStoreError(f"Failed to write to {table}") from e

    async def update(
        self,
        table: str,
        key: str,
        fields: Mapping[str, Any],
        condition: Optional[Mapping[str, Any]] = None
    ) -> Item:
        """
        Merge `fields` into the stored document and return the new document.

        A field set to None is removed. `condition` maps attributes to the
        values they must currently hold for the write to happen; they are
        repeated in the UPDATE's WHERE clause, so a writer that changed the
        record after our read makes the statement match no row.

        Raises:
            RecordNotFoundError: If the key does not exist
            ConditionFailedError: If a condition does not hold
        """
        clauses = _condition_clauses(condition)
        try:
            async with self._key_lock(table, key):
                async with self.database.session() as session:
                    row = await self._fetch(session, table, key)
                    if row is None:
                        raise RecordNotFoundError(f"{table}/{key} does not exist")

                    current = dict(row.data)
                    _check_condition(table, key, current, condition)

                    for attribute, value in fields.items():
                        if value is None:
                            current.pop(attribute, None)
                        else:
                            current[attribute] = _plain(value)

                    result = await session.execute(
                        update(RecordRow)
                        .where(RecordRow.table_name == table, RecordRow.key == key, *clauses)
                        .values(data=current)
                        .execution_options(synchronize_session=False)
                    )
                    written = result.rowcount > 0
                    if written:
                        await session.commit()

                if not written:
                    # Changed or deleted between our read and our write
                    latest = await self.get(table, key)
                    if latest is None:
                        raise RecordNotFoundError(f"{table}/{key} does not exist")
                    _check_condition(table, key, latest, condition)
                    attribute, expected = next(iter((condition or {}).items()), ("*", None))
                    raise ConditionFailedError(table, key, attribute, _plain(expected), latest.get(attribute))

            logger.debug(f"Updated {table}/{key}: {sorted(fields)}")
            return current
        except SQLAlchemyError as e:
            logger.error(f"Failed to update {table}/{key}: {e}")
            raise RecordStoreError(f"Failed to update {table}") from e

    async def delete(self, table: str, key: str) -> bool:
        try:
            async with self.database.session() as session:
                result = await session.execute(
                    delete(RecordRow).where(RecordRow.table_name == table, RecordRow.key == key)
                )
                await session.commit()
            return result.rowcount > 0
        except SQLAlchemyError as e:
            logger.error(f"Failed to delete {table}/{key}: {e}")
            raise RecordStoreError(f"Failed to delete from {table}") from e

    async def scan(
        self,
        table: str,
        filters: Optional[Mapping[str, Any]] = None,
        predicate: Optional[Predicate] = None,
        limit: Optional[int] = None,
        cursor: Optional[str] = None
    ) -> ScanResult:
        """
        Scan a table in insertion order.

        String equality filters run in SQL; other filter values and the
        optional `predicate` are applied to the loaded documents. `cursor`
        resumes after the last document of a previous page.
        """
        start_after = decode_cursor(cursor)
        query = select(RecordRow).where(RecordRow.table_name == table).order_by(RecordRow.seq)

        python_filters: Dict[str, Any] = {}
        for attribute, value in (filters or {}).items():
            value = _plain(value)
            if isinstance(value, str):
                query = query.where(RecordRow.data[attribute].as_string() == value)
            else:
                python_filters[attribute] = value

        try:
            async with self.database.session() as session:
                rows = (await session.execute(query)).scalars().all()
        except SQLAlchemyError as e:
            logger.error(f"Failed to scan {table}: {e}")
            raise RecordStoreError(f"Failed to scan {table}") from e

        matches = []
        for row in rows:
            item = row.data
            if any(item.get(k) != v for k, v in python_filters.items()):
                continue
            if predicate and not predicate(item):
                continue
            matches.append((row.seq, dict(item)))

        page = [m for m in matches if start_after is None or m[0] > start_after]
        next_cursor = None
        if limit is not None and len(page) > limit:
            page = page[:limit]
            next_cursor = encode_cursor(page[-1][0])

        return ScanResult(items=[item for _, item in page], count=len(matches), next_cursor=next_cursor)

    async def _fetch(self, session, table: str, key: str) -> Optional[RecordRow]:
        query = select(RecordRow).where(RecordRow.table_name == table, RecordRow.key == key)
        result = await session.execute(query)
        return result.scalar_one_or_none()
