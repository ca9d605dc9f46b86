"""
inkwell.services.grant_store — Grant Records & Points Balance
==============================================================

Persistence for the two pieces of mutable shared state in the
gamification core: ``user_achievements`` rows and ``users.total_points``.

The write methods take an open :class:`Session` so the caller
(:class:`~inkwell.services.award_committer.AwardCommitter`, the only
writer) can run both inside one transaction.  The read methods open their
own short-lived sessions.

Grants are inserted with ``INSERT … ON CONFLICT DO NOTHING`` on the
``(user_id, achievement_code)`` primary key.  The database decides who wins
a race; there is no read-then-insert window.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import insert, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from inkwell.database.models import User, UserAchievement
from inkwell.errors import DataUnavailable, UnknownUser

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = logging.getLogger(__name__)

# Dialects whose insert() supports on_conflict_do_nothing()
_CONFLICT_AWARE_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class SqlGrantStore:
    """SQLAlchemy-backed grant records and points balances."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    # -----------------------------------------------------------------------
    # Writes — called inside the committer's transaction
    # -----------------------------------------------------------------------
    def insert_grant_if_absent(
        self,
        session: Session,
        user_id: int,
        code: str,
        earned_at: datetime,
    ) -> bool:
        """Insert the grant record; return False if it already existed."""
        values = {
            "user_id": user_id,
            "achievement_code": code,
            "earned_at": earned_at,
        }
        conn = session.connection()
        make_insert = _CONFLICT_AWARE_INSERTS.get(conn.dialect.name)

        if make_insert is not None:
            stmt = (
                make_insert(UserAchievement)
                .values(**values)
                .on_conflict_do_nothing(
                    index_elements=[UserAchievement.user_id, UserAchievement.achievement_code],
                )
            )
            return conn.execute(stmt).rowcount == 1

        # Other dialects: let the primary key reject the duplicate inside a
        # SAVEPOINT so the outer transaction stays usable.
        try:
            with session.begin_nested():
                conn.execute(insert(UserAchievement).values(**values))
        except IntegrityError:
            return False
        return True

    def increment_points(self, session: Session, user_id: int, amount: int) -> None:
        """Add *amount* to the user's balance in a single UPDATE.

        Raises
        ------
        ValueError
            If *amount* is negative (balances never decrease).
        UnknownUser
            If no ``users`` row matched.
        """
        if amount < 0:
            raise ValueError(f"Points increment must be >= 0, got {amount}")
        result = session.connection().execute(
            update(User)
            .where(User.id == user_id)
            .values(total_points=User.total_points + amount)
        )
        if result.rowcount == 0:
            raise UnknownUser(user_id)

    # -----------------------------------------------------------------------
    # Reads
    # -----------------------------------------------------------------------
    def list_grants(self, user_id: int) -> dict[str, datetime]:
        """Map of achievement code → ``earned_at`` for the user."""
        try:
            with Session(self._engine) as session:
                rows = session.execute(
                    select(UserAchievement.achievement_code, UserAchievement.earned_at)
                    .where(UserAchievement.user_id == user_id)
                ).all()
        except SQLAlchemyError as exc:
            logger.warning("Grant read failed for user %d: %s", user_id, exc)
            raise DataUnavailable("list_grants", user_id) from exc
        return {row.achievement_code: row.earned_at for row in rows}

    def get_points_balance(self, user_id: int) -> int:
        """Current ``total_points``; 0 for an unknown user."""
        try:
            with Session(self._engine) as session:
                balance = session.scalar(
                    select(User.total_points).where(User.id == user_id)
                )
        except SQLAlchemyError as exc:
            logger.warning("Points read failed for user %d: %s", user_id, exc)
            raise DataUnavailable("get_points_balance", user_id) from exc
        return balance or 0
