"""
tests/conftest.py — Shared Test Fixtures
=========================================
"""

from __future__ import annotations

from datetime import UTC, datetime

import pytest
from sqlalchemy import Engine, create_engine, func, select
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from inkwell.constants import DEFAULT_ACHIEVEMENTS
from inkwell.database.models import Base, JournalEntry, User, UserAchievement
from inkwell.engine.catalog import AchievementCatalog, build_catalog

# "Today" for every clock-dependent test: 2024-01-03, mid-afternoon UTC.
FIXED_NOW = datetime(2024, 1, 3, 15, 0, 0, tzinfo=UTC)


def fixed_clock() -> datetime:
    return FIXED_NOW


@pytest.fixture
def db_engine() -> Engine:
    """In-memory SQLite engine with all Inkwell tables.

    Uses StaticPool so every session (and thread) sees the same in-memory
    database.
    """
    engine = create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture
def file_engine(tmp_path) -> Engine:
    """File-backed SQLite engine with a real connection pool.

    Each thread gets its own connection and its own transaction, which the
    concurrency tests need (a StaticPool would share one connection).
    """
    engine = create_engine(
        f"sqlite:///{tmp_path / 'inkwell-test.db'}",
        echo=False,
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def catalog() -> AchievementCatalog:
    """The built-in default catalog."""
    return build_catalog(DEFAULT_ACHIEVEMENTS)


# ---------------------------------------------------------------------------
# Seeding helpers
# ---------------------------------------------------------------------------
def seed_user(engine: Engine, user_id: int = 1, username: str | None = None) -> None:
    with Session(engine) as session:
        session.add(User(id=user_id, username=username or f"writer{user_id}"))
        session.commit()


def seed_entries(engine: Engine, user_id: int, *timestamps: datetime) -> None:
    with Session(engine) as session:
        for ts in timestamps:
            session.add(JournalEntry(author_id=user_id, content="entry", created_at=ts))
        session.commit()


def grant_count(engine: Engine, user_id: int, code: str | None = None) -> int:
    stmt = select(func.count()).select_from(UserAchievement).where(
        UserAchievement.user_id == user_id
    )
    if code is not None:
        stmt = stmt.where(UserAchievement.achievement_code == code)
    with Session(engine) as session:
        return session.scalar(stmt) or 0


def points_of(engine: Engine, user_id: int) -> int:
    with Session(engine) as session:
        return session.scalar(select(User.total_points).where(User.id == user_id)) or 0
