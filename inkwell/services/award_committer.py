"""
inkwell.services.award_committer — Atomic, Exactly-once Awarding
=================================================================

The **only** writer of grant records and points.  One call to
:meth:`AwardCommitter.commit` is one database transaction:

    1. ``INSERT … ON CONFLICT DO NOTHING`` the grant record.
    2. Zero rows inserted → someone already holds it → rollback,
       ``ALREADY_AWARDED``.  The balance is untouched.
    3. Otherwise ``UPDATE users SET total_points = total_points + points``.
    4. COMMIT.  Any failure in 1–4 rolls back both statements → ``FAILED``.
       That covers store bugs as well as database errors; nothing escapes
       :meth:`AwardCommitter.commit` except an interrupt.

Either both the grant and the points land, or neither does.  Concurrent
commits for the same pair are arbitrated by the primary key alone; no
application-level locking is involved.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Protocol

from sqlalchemy.orm import Session

from inkwell.engine.stats import utc_now
from inkwell.errors import AlreadyAwarded, CommitFailed, InkwellError

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = logging.getLogger(__name__)


class GrantWriter(Protocol):
    """Write half of the grant store, used within one session."""

    def insert_grant_if_absent(
        self, session: Session, user_id: int, code: str, earned_at: datetime,
    ) -> bool: ...

    def increment_points(self, session: Session, user_id: int, amount: int) -> None: ...


class CommitStatus(enum.StrEnum):
    AWARDED = "awarded"
    ALREADY_AWARDED = "already_awarded"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class CommitResult:
    """Outcome of one :meth:`AwardCommitter.commit` call.

    ``error`` is set for ``ALREADY_AWARDED`` (an :class:`AlreadyAwarded`)
    and ``FAILED`` (a :class:`CommitFailed` chained to the underlying
    exception).
    """

    status: CommitStatus
    user_id: int
    code: str
    points: int = 0
    error: InkwellError | None = None

    @property
    def awarded(self) -> bool:
        return self.status is CommitStatus.AWARDED


class AwardCommitter:
    """Commits one achievement grant + points award per call."""

    def __init__(
        self,
        engine: Engine,
        store: GrantWriter,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._engine = engine
        self._store = store
        self._clock = clock

    def commit(self, user_id: int, code: str, points: int) -> CommitResult:
        earned_at = self._clock()

        with Session(self._engine) as session:
            try:
                inserted = self._store.insert_grant_if_absent(
                    session, user_id, code, earned_at,
                )
                if not inserted:
                    session.rollback()
                    logger.debug(
                        "Achievement %s already held by user %d — skipped",
                        code, user_id,
                    )
                    return CommitResult(
                        CommitStatus.ALREADY_AWARDED, user_id, code,
                        error=AlreadyAwarded(user_id, code),
                    )

                self._store.increment_points(session, user_id, points)
                session.commit()
            except Exception as exc:
                session.rollback()
                failure = CommitFailed(user_id, code, str(exc))
                failure.__cause__ = exc
                return CommitResult(CommitStatus.FAILED, user_id, code, error=failure)

        logger.info("Achievement awarded: %s (+%d pts) to user %d", code, points, user_id)
        return CommitResult(CommitStatus.AWARDED, user_id, code, points=points)
