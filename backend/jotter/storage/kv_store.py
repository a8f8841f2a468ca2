"""
Jotter Backend: Key-Value Store
================================

What:  Abstract key-value contract plus the SQL-table implementation.
How:   Values are JSON documents (dicts, lists, scalars). Each operation runs in
       its own short session and commits before returning; there are no
       multi-key transactions.
Who:   Used by NotesRepository and ProfileRepository. Tests substitute an
       in-memory implementation of the same interface.

Concurrency:
    Writes are last-writer-wins. The store performs no locking and no
    optimistic-concurrency check, so a concurrent update and delete of the
    same key can race.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from jotter.database import get_session_factory
from jotter.exceptions import StorageError
from jotter.models.kv_entry import KeyValueEntry

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """
    Durable mapping from string key to JSON value.

    Contract:
        - get() returns None for absent keys (never raises for "not found")
        - set() inserts or overwrites
        - delete() is a no-op for absent keys
        - get_by_prefix() returns values (not keys) whose key starts with prefix,
          in key order
        - Implementation failures are wrapped in StorageError
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        ...

    @abstractmethod
    async def set(self, key: str, value: Any) -> None:
        ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        ...

    @abstractmethod
    async def get_by_prefix(self, prefix: str) -> List[Any]:
        ...


class SqlKeyValueStore(KeyValueStore):
    """
    KeyValueStore backed by the `kv_store` table through async SQLAlchemy.

    Args:
        session_factory: Override the process-wide factory (used in tests).
    """

    def __init__(self, session_factory: Optional[async_sessionmaker[AsyncSession]] = None):
        self._session_factory = session_factory

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        if self._session_factory is None:
            self._session_factory = get_session_factory()
        return self._session_factory

    async def get(self, key: str) -> Optional[Any]:
        try:
            async with self.session_factory() as session:
                entry = await session.get(KeyValueEntry, key)
                return entry.value if entry is not None else None
        except SQLAlchemyError as e:
            logger.error("kv get failed for key %s: %s", key, str(e))
            raise StorageError(context={"operation": "get", "key": key})

    async def set(self, key: str, value: Any) -> None:
        try:
            async with self.session_factory() as session:
                # merge() selects by primary key, then inserts or updates
                await session.merge(KeyValueEntry(key=key, value=value))
                await session.commit()
        except SQLAlchemyError as e:
            logger.error("kv set failed for key %s: %s", key, str(e))
            raise StorageError(context={"operation": "set", "key": key})

    async def delete(self, key: str) -> None:
        try:
            async with self.session_factory() as session:
                await session.execute(delete(KeyValueEntry).where(KeyValueEntry.key == key))
                await session.commit()
        except SQLAlchemyError as e:
            logger.error("kv delete failed for key %s: %s", key, str(e))
            raise StorageError(context={"operation": "delete", "key": key})

    async def get_by_prefix(self, prefix: str) -> List[Any]:
        """
        Return every value whose key starts with `prefix`.

        autoescape=True makes `%` and `_` in the prefix match literally.
        """
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    select(KeyValueEntry.value)
                    .where(KeyValueEntry.key.startswith(prefix, autoescape=True))
                    .order_by(KeyValueEntry.key)
                )
                return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("kv prefix scan failed for %s: %s", prefix, str(e))
            raise StorageError(context={"operation": "get_by_prefix", "prefix": prefix})

