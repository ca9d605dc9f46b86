"""
inkwell.services.entry_feed — Read-only Journal Entry Feed
===========================================================

SQLAlchemy implementation of :class:`~inkwell.engine.stats.EntryFeed`.
Any database failure while reading becomes
:class:`~inkwell.errors.DataUnavailable`, which aborts the evaluation
before any writes happen.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from inkwell.database.models import JournalEntry
from inkwell.errors import DataUnavailable

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = logging.getLogger(__name__)


class SqlEntryFeed:
    """Entry timestamps and counts straight from ``journal_entries``."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def list_entry_timestamps(self, user_id: int) -> list[datetime]:
        try:
            with Session(self._engine) as session:
                rows = session.scalars(
                    select(JournalEntry.created_at)
                    .where(JournalEntry.author_id == user_id)
                    .order_by(JournalEntry.created_at.desc())
                ).all()
        except SQLAlchemyError as exc:
            logger.warning("Entry feed read failed for user %d: %s", user_id, exc)
            raise DataUnavailable("list_entry_timestamps", user_id) from exc
        return list(rows)

    def count_entries(self, user_id: int) -> int:
        try:
            with Session(self._engine) as session:
                total = session.scalar(
                    select(func.count())
                    .select_from(JournalEntry)
                    .where(JournalEntry.author_id == user_id)
                )
        except SQLAlchemyError as exc:
            logger.warning("Entry count failed for user %d: %s", user_id, exc)
            raise DataUnavailable("count_entries", user_id) from exc
        return total or 0
