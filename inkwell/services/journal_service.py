"""
inkwell.services.journal_service — Record Journal Entries
==========================================================

Thin collaborator for the journaling subsystem: inserts an entry so the
caller can immediately re-run ``evaluate_and_award`` for its author.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING

from inkwell.database.engine import get_session
from inkwell.database.models import JournalEntry, User
from inkwell.engine.stats import to_utc, utc_now
from inkwell.errors import UnknownUser

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = logging.getLogger(__name__)


def record_entry(
    engine: Engine,
    user_id: int,
    content: str,
    created_at: datetime | None = None,
) -> dict:
    """Insert a journal entry for *user_id* and return it as a plain dict.

    *created_at* defaults to now; aware values are stored as UTC.

    Raises
    ------
    UnknownUser
        If the author has no ``users`` row.
    """
    created_at = to_utc(created_at or utc_now())

    with get_session(engine) as session:
        if session.get(User, user_id) is None:
            raise UnknownUser(user_id)
        entry = JournalEntry(author_id=user_id, content=content, created_at=created_at)
        session.add(entry)
        session.flush()
        payload = {
            "id": entry.id,
            "authorId": entry.author_id,
            "content": entry.content,
            "createdAt": created_at.isoformat(),
        }

    logger.info("Journal entry %d recorded for user %d", payload["id"], user_id)
    return payload
