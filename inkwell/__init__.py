"""
Inkwell — Gamification Engine for a Social Journaling Platform
===============================================================
Rewards consistent journaling with points and unlockable achievements.
Streaks are derived fresh from entry timestamps on every call, qualifying
achievements are diffed against what the user already holds, and each
award is committed exactly once.

Package layout::

    inkwell/
    ├── __main__.py        # ``python -m inkwell`` → uvicorn
    ├── config.py          # YAML → typed Python config
    ├── constants.py       # Built-in achievement catalog
    ├── errors.py          # Exception taxonomy
    ├── database/
    │   ├── engine.py      # SQLAlchemy engine + async helper
    │   └── models.py      # users, journal_entries, user_achievements
    ├── engine/
    │   ├── stats.py       # Entry counts + streak derivation
    │   ├── catalog.py     # Validated, points-ordered achievement rules
    │   └── achievements.py # Metric handlers + diff
    ├── services/
    │   ├── entry_feed.py       # Read-only entry timestamp feed
    │   ├── grant_store.py      # Grant records + points balance
    │   ├── award_committer.py  # Atomic exactly-once awarding
    │   ├── gamification_service.py  # evaluate_and_award orchestrator
    │   └── journal_service.py  # Record an entry (thin collaborator)
    └── api/
        ├── main.py        # FastAPI app
        ├── deps.py        # Dependency providers
        └── routes/        # Gamification + catalog endpoints
"""

__version__ = "0.1.0"
