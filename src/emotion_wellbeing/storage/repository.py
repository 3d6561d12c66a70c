"""Key-value preference stores used to persist the session token.

Two implementations share the :class:`PreferenceStore` contract:

* :class:`PreferenceRepository` — SQLite-backed (SQLAlchemy async), the default.
* :class:`MemoryPreferenceStore` — process-local dict, for tests and embedding.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from sqlalchemy import delete, select

from emotion_wellbeing.config import get_settings
from emotion_wellbeing.storage.database import PreferenceRow, get_session_factory


class PreferenceStore(ABC):
    """String-valued settings scoped to one namespace."""

    namespace: str

    @abstractmethod
    async def get_string(self, key: str) -> str | None:
        """Return the stored value, or ``None`` when the key is absent."""

    @abstractmethod
    async def put_string(self, key: str, value: str) -> None:
        """Insert or overwrite ``key``."""

    @abstractmethod
    async def remove(self, key: str) -> bool:
        """Delete ``key``.  Returns whether anything was removed."""


class MemoryPreferenceStore(PreferenceStore):
    def __init__(self, namespace: str = "auth") -> None:
        self.namespace = namespace
        self._values: dict[str, str] = {}

    async def get_string(self, key: str) -> str | None:
        return self._values.get(key)

    async def put_string(self, key: str, value: str) -> None:
        self._values[key] = value

    async def remove(self, key: str) -> bool:
        return self._values.pop(key, None) is not None


class PreferenceRepository(PreferenceStore):
    """CRUD operations for :class:`PreferenceRow` within one namespace."""

    def __init__(self, namespace: str | None = None, database_url: str | None = None) -> None:
        self.namespace = namespace or get_settings().preference_namespace
        self._factory = get_session_factory(database_url)

    async def _get_row(self, session, key: str) -> PreferenceRow | None:
        stmt = select(PreferenceRow).where(
            PreferenceRow.namespace == self.namespace,
            PreferenceRow.key == key,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_string(self, key: str) -> str | None:
        async with self._factory() as session:
            row = await self._get_row(session, key)
            return row.value if row is not None else None

    async def put_string(self, key: str, value: str) -> None:
        async with self._factory() as session:
            row = await self._get_row(session, key)
            if row is not None:
                row.value = value
                row.updated_at = datetime.utcnow()
            else:
                session.add(PreferenceRow(namespace=self.namespace, key=key, value=value))
            await session.commit()

    async def remove(self, key: str) -> bool:
        async with self._factory() as session:
            stmt = delete(PreferenceRow).where(
                PreferenceRow.namespace == self.namespace,
                PreferenceRow.key == key,
            )
            result = await session.execute(stmt)
            await session.commit()
            return (result.rowcount or 0) > 0
