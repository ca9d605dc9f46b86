"""
inkwell.services.gamification_service — Evaluate & Award Orchestrator
======================================================================

The single externally callable operation of the gamification core:
:meth:`GamificationEngine.evaluate_and_award`.  Called on every status
request and right after every new journal entry.

Pipeline:

1. Load the user's earned achievement codes.
2. Compute stats (entry count + streak) from the entry feed.
3. Diff the full catalog against stats and earned codes.
4. Commit each newly-qualifying achievement in catalog order.  A failed
   commit is logged and skipped; the next call retries it naturally
   because earned codes are re-read every time.
5. Re-read points and grants and build the :class:`StatusSnapshot`.

Nothing is cached between calls.  Calling twice with no new entries in
between returns equal snapshots and writes nothing the second time.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Protocol

from inkwell.engine import achievements
from inkwell.engine.catalog import AchievementCatalog
from inkwell.engine.stats import StatsProvider, UserStatsSnapshot, to_utc, utc_now
from inkwell.services.award_committer import AwardCommitter, CommitStatus
from inkwell.services.entry_feed import SqlEntryFeed
from inkwell.services.grant_store import SqlGrantStore

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = logging.getLogger(__name__)


class GrantReader(Protocol):
    """Read half of the grant store."""

    def list_grants(self, user_id: int) -> dict[str, datetime]: ...

    def get_points_balance(self, user_id: int) -> int: ...


# ---------------------------------------------------------------------------
# Read model
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class AchievementStatus:
    code: str
    name: str
    description: str
    icon: str
    points: int
    is_earned: bool
    earned_at: datetime | None = None

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "name": self.name,
            "description": self.description,
            "icon": self.icon,
            "points": self.points,
            "isEarned": self.is_earned,
            "earnedAt": self.earned_at.isoformat() if self.earned_at else None,
        }


@dataclass(frozen=True, slots=True)
class StatusSnapshot:
    """Full gamification view of one user — every catalog entry included."""

    total_points: int
    total_entries: int
    current_streak: int
    longest_streak: int
    last_entry_at: datetime | None
    achievements: tuple[AchievementStatus, ...]

    @property
    def earned_codes(self) -> set[str]:
        return {a.code for a in self.achievements if a.is_earned}

    def to_dict(self) -> dict:
        """JSON-shaped payload for the HTTP layer (camelCase keys)."""
        return {
            "totalPoints": self.total_points,
            "totalEntries": self.total_entries,
            "currentStreak": self.current_streak,
            "longestStreak": self.longest_streak,
            "lastEntryAt": self.last_entry_at.isoformat() if self.last_entry_at else None,
            "achievements": [a.to_dict() for a in self.achievements],
        }


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------
class GamificationEngine:
    """Composes stats, evaluation, and awarding for one user at a time.

    Holds no per-user state, so one instance serves concurrent requests.
    """

    def __init__(
        self,
        catalog: AchievementCatalog,
        stats_provider: StatsProvider,
        grants: GrantReader,
        committer: AwardCommitter,
    ) -> None:
        self.catalog = catalog
        self._stats = stats_provider
        self._grants = grants
        self._committer = committer

    @classmethod
    def from_engine(
        cls,
        engine: Engine,
        catalog: AchievementCatalog,
        clock: Callable[[], datetime] = utc_now,
    ) -> GamificationEngine:
        """Wire the SQLAlchemy-backed collaborators around *engine*."""
        store = SqlGrantStore(engine)
        return cls(
            catalog=catalog,
            stats_provider=StatsProvider(SqlEntryFeed(engine), clock=clock),
            grants=store,
            committer=AwardCommitter(engine, store, clock=clock),
        )

    def evaluate_and_award(self, user_id: int) -> StatusSnapshot:
        """Award every newly-qualifying achievement and return the snapshot.

        Raises
        ------
        DataUnavailable
            If stats or grants cannot be read.  Raised before any commit
            when it happens in steps 1–2.
        """
        earned_codes = set(self._grants.list_grants(user_id))
        stats = self._stats.compute(user_id)

        for definition in achievements.diff(stats, self.catalog, earned_codes):
            result = self._committer.commit(user_id, definition.code, definition.points)
            if result.status is CommitStatus.FAILED:
                logger.error(
                    "Commit failed for %s (user %d) — will retry on next evaluation",
                    definition.code, user_id,
                    exc_info=result.error,
                )

        return self.snapshot(user_id, stats)

    def snapshot(
        self,
        user_id: int,
        stats: UserStatsSnapshot | None = None,
    ) -> StatusSnapshot:
        """Build the read model without attempting any awards."""
        if stats is None:
            stats = self._stats.compute(user_id)
        total_points = self._grants.get_points_balance(user_id)
        earned = self._grants.list_grants(user_id)

        statuses = tuple(
            AchievementStatus(
                code=d.code,
                name=d.name,
                description=d.description,
                icon=d.icon,
                points=d.points,
                is_earned=d.code in earned,
                earned_at=to_utc(earned[d.code]) if d.code in earned else None,
            )
            for d in self.catalog
        )
        return StatusSnapshot(
            total_points=total_points,
            total_entries=stats.total_entries,
            current_streak=stats.current_streak,
            longest_streak=stats.longest_streak,
            last_entry_at=stats.last_entry_at,
            achievements=statuses,
        )
