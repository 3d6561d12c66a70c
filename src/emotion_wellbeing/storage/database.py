"""SQLAlchemy async engine, session factory, and the preference table."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from sqlalchemy import DateTime, Integer, String, Text, UniqueConstraint, func
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from emotion_wellbeing.config import get_settings


# ── Base ──────────────────────────────────────────────────────

class Base(DeclarativeBase):
    """Shared declarative base for all ORM models."""


# ── ORM tables ────────────────────────────────────────────────

class PreferenceRow(Base):
    """One string value in the application-scoped key-value store."""

    __tablename__ = "preferences"
    __table_args__ = (UniqueConstraint("namespace", "key", name="uq_preferences_namespace_key"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    namespace: Mapped[str] = mapped_column(String(64), index=True)
    key: Mapped[str] = mapped_column(String(128))
    value: Mapped[str] = mapped_column(Text)
    updated_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())


# ── Engine & session ──────────────────────────────────────────

_engines: dict[str, AsyncEngine] = {}


def _get_engine(database_url: str | None = None) -> AsyncEngine:
    url = database_url or get_settings().database_url
    engine = _engines.get(url)
    if engine is None:
        engine = create_async_engine(url, echo=False)
        _engines[url] = engine
    return engine


def get_session_factory(database_url: str | None = None) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(_get_engine(database_url), expire_on_commit=False)


async def init_db(database_url: str | None = None) -> None:
    """Create all tables (idempotent)."""
    url = database_url or get_settings().database_url
    if url.startswith("sqlite"):
        # URL format: sqlite+aiosqlite:///path/to/db
        db_path = Path(url.split("///", 1)[-1])
        db_path.parent.mkdir(parents=True, exist_ok=True)

    engine = _get_engine(url)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engines() -> None:
    """Close every pooled connection (shutdown / test teardown)."""
    for engine in list(_engines.values()):
        await engine.dispose()
    _engines.clear()
