"""
tests/test_gamification_service.py — evaluate_and_award Integration Tests
==========================================================================

Runs the full pipeline (entry feed → stats → diff → commit → snapshot)
against SQLite via the shared conftest fixtures.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from conftest import FIXED_NOW, fixed_clock, grant_count, points_of, seed_entries, seed_user
from inkwell.engine.catalog import build_catalog
from inkwell.engine.stats import StatsProvider
from inkwell.errors import DataUnavailable
from inkwell.services.award_committer import AwardCommitter
from inkwell.services.entry_feed import SqlEntryFeed
from inkwell.services.gamification_service import GamificationEngine
from inkwell.services.grant_store import SqlGrantStore


def _days_back(n: int) -> list[datetime]:
    """One entry per day for the last *n* days, ending today."""
    return [FIXED_NOW - timedelta(days=i) for i in range(n)]


class _FlakyStore(SqlGrantStore):
    """Fails the grant insert for ``failing_code`` while ``broken`` is set."""

    def __init__(self, engine, failing_code: str, error: Exception | None = None) -> None:
        super().__init__(engine)
        self.failing_code = failing_code
        self.broken = True
        self.error = error or OperationalError(
            "INSERT INTO user_achievements", {}, Exception("disk I/O error"),
        )

    def insert_grant_if_absent(self, session, user_id, code, earned_at):
        if self.broken and code == self.failing_code:
            raise self.error
        return super().insert_grant_if_absent(session, user_id, code, earned_at)


def _wire(engine, catalog, store=None, committer=None) -> GamificationEngine:
    store = store or SqlGrantStore(engine)
    return GamificationEngine(
        catalog=catalog,
        stats_provider=StatsProvider(SqlEntryFeed(engine), clock=fixed_clock),
        grants=store,
        committer=committer or AwardCommitter(engine, store, clock=fixed_clock),
    )


@pytest.fixture
def gamification(db_engine, catalog):
    return GamificationEngine.from_engine(db_engine, catalog, clock=fixed_clock)


# ---------------------------------------------------------------------------
# Scenarios
# ---------------------------------------------------------------------------
class TestEvaluateAndAward:
    def test_first_entry_awards_only_first_entry(self, db_engine):
        catalog = build_catalog([
            {"code": "FIRST_ENTRY", "metric": "TOTAL_ENTRIES", "threshold": 1, "points": 10},
            {"code": "3_DAY_STREAK", "metric": "STREAK_DAYS", "threshold": 3, "points": 25},
        ])
        seed_user(db_engine, 1)
        seed_entries(db_engine, 1, FIXED_NOW)

        snapshot = GamificationEngine.from_engine(
            db_engine, catalog, clock=fixed_clock,
        ).evaluate_and_award(1)

        assert snapshot.total_points == 10
        assert snapshot.total_entries == 1
        assert snapshot.current_streak == 1
        assert snapshot.earned_codes == {"FIRST_ENTRY"}

    def test_snapshot_lists_full_catalog(self, db_engine, gamification, catalog):
        seed_user(db_engine, 1)
        seed_entries(db_engine, 1, FIXED_NOW)

        snapshot = gamification.evaluate_and_award(1)

        assert [a.code for a in snapshot.achievements] == catalog.codes()
        first, *rest = snapshot.achievements
        assert first.is_earned and first.earned_at is not None
        assert first.earned_at.tzinfo is not None
        assert all(not a.is_earned and a.earned_at is None for a in rest)

    def test_streak_and_count_achievements_together(self, db_engine, gamification):
        seed_user(db_engine, 1)
        seed_entries(db_engine, 1, *_days_back(7))

        snapshot = gamification.evaluate_and_award(1)

        assert snapshot.current_streak == 7
        assert snapshot.earned_codes == {"FIRST_ENTRY", "3_DAY_STREAK", "WEEKLY_STREAK"}
        assert snapshot.total_points == 10 + 25 + 75

    def test_unknown_user_gets_empty_snapshot(self, gamification):
        snapshot = gamification.evaluate_and_award(999)
        assert snapshot.total_points == 0
        assert snapshot.total_entries == 0
        assert snapshot.earned_codes == set()

    def test_to_dict_shape(self, db_engine, gamification):
        seed_user(db_engine, 1)
        seed_entries(db_engine, 1, FIXED_NOW)

        payload = gamification.evaluate_and_award(1).to_dict()

        assert set(payload) == {
            "totalPoints", "totalEntries", "currentStreak",
            "longestStreak", "lastEntryAt", "achievements",
        }
        first = payload["achievements"][0]
        assert set(first) == {
            "code", "name", "description", "icon", "points", "isEarned", "earnedAt",
        }
        assert first["code"] == "FIRST_ENTRY"
        assert first["isEarned"] is True
        assert first["earnedAt"].startswith("2024-01-03T15:00:00")
        assert payload["achievements"][1]["earnedAt"] is None


# ---------------------------------------------------------------------------
# Idempotence & monotonicity
# ---------------------------------------------------------------------------
class TestIdempotence:
    def test_second_call_is_identical_and_writes_nothing(self, db_engine, catalog):
        seed_user(db_engine, 1)
        seed_entries(db_engine, 1, *_days_back(3))

        store = SqlGrantStore(db_engine)
        spy = MagicMock(wraps=AwardCommitter(db_engine, store, clock=fixed_clock))
        gamification = _wire(db_engine, catalog, store=store, committer=spy)

        first = gamification.evaluate_and_award(1)
        commits_after_first = spy.commit.call_count
        second = gamification.evaluate_and_award(1)

        assert first == second
        assert commits_after_first == 2          # FIRST_ENTRY, 3_DAY_STREAK
        assert spy.commit.call_count == commits_after_first
        assert grant_count(db_engine, 1) == 2
        assert points_of(db_engine, 1) == 35

    def test_points_never_decrease(self, db_engine, gamification):
        seed_user(db_engine, 1)
        balances = []
        for day in range(10):
            seed_entries(db_engine, 1, FIXED_NOW - timedelta(days=9 - day))
            balances.append(gamification.evaluate_and_award(1).total_points)

        assert balances == sorted(balances)
        assert balances[-1] == 10 + 25 + 50 + 75

    def test_broken_streak_keeps_points(self, db_engine, catalog):
        seed_user(db_engine, 1)
        seed_entries(db_engine, 1, *_days_back(3))
        before = GamificationEngine.from_engine(db_engine, catalog, clock=fixed_clock)
        assert before.evaluate_and_award(1).total_points == 35

        # A week later the streak has lapsed; earned achievements stay earned
        later = GamificationEngine.from_engine(
            db_engine, catalog, clock=lambda: FIXED_NOW + timedelta(days=7),
        )
        snapshot = later.evaluate_and_award(1)
        assert snapshot.current_streak == 0
        assert snapshot.total_points == 35
        assert "3_DAY_STREAK" in snapshot.earned_codes


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------
class TestFailures:
    def test_failed_commit_does_not_abort_the_rest(self, db_engine, catalog, caplog):
        seed_user(db_engine, 1)
        seed_entries(db_engine, 1, *[FIXED_NOW - timedelta(minutes=i) for i in range(10)])
        store = _FlakyStore(db_engine, failing_code="FIRST_ENTRY")
        gamification = _wire(db_engine, catalog, store=store)

        with caplog.at_level(logging.ERROR):
            snapshot = gamification.evaluate_and_award(1)

        assert snapshot.earned_codes == {"10_ENTRIES"}
        assert snapshot.total_points == 50
        assert any("FIRST_ENTRY" in r.getMessage() for r in caplog.records)

    def test_non_database_error_does_not_abort_the_rest(self, db_engine, catalog):
        seed_user(db_engine, 1)
        seed_entries(db_engine, 1, *[FIXED_NOW - timedelta(minutes=i) for i in range(10)])
        store = _FlakyStore(
            db_engine, failing_code="FIRST_ENTRY", error=TypeError("unexpected payload"),
        )
        gamification = _wire(db_engine, catalog, store=store)

        snapshot = gamification.evaluate_and_award(1)

        assert snapshot.earned_codes == {"10_ENTRIES"}
        assert snapshot.total_points == 50
        assert grant_count(db_engine, 1, "FIRST_ENTRY") == 0

    def test_failed_award_self_heals_on_next_call(self, db_engine, catalog):
        seed_user(db_engine, 1)
        seed_entries(db_engine, 1, FIXED_NOW)
        store = _FlakyStore(db_engine, failing_code="FIRST_ENTRY")
        gamification = _wire(db_engine, catalog, store=store)

        assert gamification.evaluate_and_award(1).total_points == 0

        store.broken = False
        healed = gamification.evaluate_and_award(1)
        assert healed.earned_codes == {"FIRST_ENTRY"}
        assert healed.total_points == 10

    def test_stats_failure_aborts_before_writes(self, catalog):
        feed = MagicMock()
        feed.count_entries.side_effect = DataUnavailable("count_entries", 1)
        grants = MagicMock()
        grants.list_grants.return_value = {}
        committer = MagicMock()
        gamification = GamificationEngine(
            catalog=catalog,
            stats_provider=StatsProvider(feed, clock=fixed_clock),
            grants=grants,
            committer=committer,
        )

        with pytest.raises(DataUnavailable):
            gamification.evaluate_and_award(1)
        committer.commit.assert_not_called()

    def test_grant_read_failure_aborts(self, catalog):
        grants = MagicMock()
        grants.list_grants.side_effect = DataUnavailable("list_grants", 1)
        committer = MagicMock()
        gamification = GamificationEngine(
            catalog=catalog,
            stats_provider=MagicMock(),
            grants=grants,
            committer=committer,
        )

        with pytest.raises(DataUnavailable):
            gamification.evaluate_and_award(1)
        committer.commit.assert_not_called()


# ---------------------------------------------------------------------------
# Concurrency
# ---------------------------------------------------------------------------
class TestConcurrentEvaluations:
    def test_concurrent_calls_award_once(self, file_engine, catalog):
        workers = 6
        seed_user(file_engine, 1)
        seed_entries(file_engine, 1, datetime(2024, 1, 3, 9, 0, tzinfo=UTC))
        gamification = GamificationEngine.from_engine(file_engine, catalog, clock=fixed_clock)
        barrier = threading.Barrier(workers)

        def _call():
            barrier.wait()
            return gamification.evaluate_and_award(1)

        with ThreadPoolExecutor(max_workers=workers) as pool:
            snapshots = [f.result() for f in [pool.submit(_call) for _ in range(workers)]]

        assert grant_count(file_engine, 1, "FIRST_ENTRY") == 1
        assert points_of(file_engine, 1) == 10
        # A sibling's commit may still be in flight when a snapshot is read
        assert {s.total_points for s in snapshots} <= {0, 10}

        settled = gamification.evaluate_and_award(1)
        assert settled.total_points == 10
        assert settled.earned_codes == {"FIRST_ENTRY"}
