"""
inkwell.engine.stats — Journaling Statistics & Streak Derivation
=================================================================

Computes a user's ``total_entries`` and ``current_streak`` from the raw
entry timestamp feed.  Nothing here is cached or persisted: every call
re-derives the streak from the feed, so it can never drift from the
entries it describes.

Streak rule (all dates are UTC calendar dates)::

    dates = distinct entry dates, newest first
    if dates[0] is not today or yesterday:     streak = 0
    else: count dates[0], dates[1], … while each is exactly one day
          before its predecessor; stop at the first gap.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from typing import Protocol

logger = logging.getLogger(__name__)

_ONE_DAY = timedelta(days=1)


class EntryFeed(Protocol):
    """Read-only view of a user's journal entries."""

    def list_entry_timestamps(self, user_id: int) -> list[datetime]: ...

    def count_entries(self, user_id: int) -> int: ...


@dataclass(frozen=True, slots=True)
class UserStatsSnapshot:
    """Statistics the achievement rules are evaluated against.

    ``longest_streak`` and ``last_entry_at`` are display-only; no rule
    reads them.
    """

    total_entries: int = 0
    current_streak: int = 0
    longest_streak: int = 0
    last_entry_at: datetime | None = None


def utc_now() -> datetime:
    return datetime.now(UTC)


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------
def to_utc(moment: datetime) -> datetime:
    """Normalize *moment* to an aware UTC datetime.

    Naive values (SQLite drops tzinfo) are taken to already be UTC.
    """
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC)


def distinct_entry_dates(timestamps: Iterable[datetime]) -> list[date]:
    """Distinct UTC calendar dates, newest first."""
    return sorted({to_utc(ts).date() for ts in timestamps}, reverse=True)


def current_streak(timestamps: Iterable[datetime], today: date) -> int:
    """Consecutive-day run ending at the most recent entry date.

    Zero unless that date is exactly *today* or the day before; a
    future-dated entry does not count as either.
    """
    dates = distinct_entry_dates(timestamps)
    if not dates:
        return 0
    if dates[0] not in (today, today - _ONE_DAY):
        return 0

    streak = 1
    for newer, older in zip(dates, dates[1:]):
        if newer - older != _ONE_DAY:
            break
        streak += 1
    return streak


def longest_streak(timestamps: Iterable[datetime]) -> int:
    """Longest consecutive-day run anywhere in the history."""
    dates = distinct_entry_dates(timestamps)
    if not dates:
        return 0

    best = run = 1
    for newer, older in zip(dates, dates[1:]):
        run = run + 1 if newer - older == _ONE_DAY else 1
        best = max(best, run)
    return best


# ---------------------------------------------------------------------------
# Provider
# ---------------------------------------------------------------------------
class StatsProvider:
    """Computes :class:`UserStatsSnapshot` for a user from an :class:`EntryFeed`.

    Parameters
    ----------
    feed : Entry feed implementation.  Its
        :class:`~inkwell.errors.DataUnavailable` errors propagate unchanged.
    clock : Returns the current instant; "today" is its UTC date.
    """

    def __init__(
        self,
        feed: EntryFeed,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._feed = feed
        self._clock = clock

    def today(self) -> date:
        return to_utc(self._clock()).date()

    def compute(self, user_id: int) -> UserStatsSnapshot:
        total = self._feed.count_entries(user_id)
        timestamps = self._feed.list_entry_timestamps(user_id)

        stats = UserStatsSnapshot(
            total_entries=total,
            current_streak=current_streak(timestamps, self.today()),
            longest_streak=longest_streak(timestamps),
            last_entry_at=max((to_utc(ts) for ts in timestamps), default=None),
        )
        logger.debug(
            "Stats for user %d: %d entries, streak %d (longest %d)",
            user_id, stats.total_entries, stats.current_streak, stats.longest_streak,
        )
        return stats
