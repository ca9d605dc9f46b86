"""
inkwell.database.models — SQLAlchemy 2.0 Data Models
=====================================================

Tables:
- users             — Journaling members and their points balance
- journal_entries   — Entries; the gamification core reads ``created_at`` only
- user_achievements — Grant records, one per (user, achievement code)

The achievement catalog itself is static configuration and has no table;
grant rows reference it by ``achievement_code``.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    BigInteger,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------
class Base(DeclarativeBase):
    """Shared base for all Inkwell ORM models."""


# ---------------------------------------------------------------------------
# Users — one row per member
# ---------------------------------------------------------------------------
class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    username: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    # Mutated only by AwardCommitter, increments only
    total_points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    # Relationships
    entries: Mapped[list[JournalEntry]] = relationship(
        back_populates="author", cascade="all, delete-orphan"
    )
    achievements: Mapped[list[UserAchievement]] = relationship(
        back_populates="user", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<User id={self.id} name={self.username!r} points={self.total_points}>"


# ---------------------------------------------------------------------------
# JournalEntry — owned by the journaling subsystem
# ---------------------------------------------------------------------------
class JournalEntry(Base):
    __tablename__ = "journal_entries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    author_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    author: Mapped[User] = relationship(back_populates="entries")

    __table_args__ = (
        Index("ix_journal_entries_author_created", "author_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<JournalEntry id={self.id} author={self.author_id} at={self.created_at}>"


# ---------------------------------------------------------------------------
# UserAchievement — grant records
# ---------------------------------------------------------------------------
class UserAchievement(Base):
    """The durable fact that a user earned an achievement.

    The composite primary key is what makes awarding exactly-once: two
    concurrent commits for the same pair cannot both insert.
    """
    __tablename__ = "user_achievements"

    user_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    achievement_code: Mapped[str] = mapped_column(String(64), primary_key=True)
    earned_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    user: Mapped[User] = relationship(back_populates="achievements")

    def __repr__(self) -> str:
        return f"<UserAchievement user={self.user_id} code={self.achievement_code!r}>"
