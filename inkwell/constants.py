"""
inkwell.constants — Shared Constants
=====================================

Built-in achievement catalog used when ``config.yaml`` does not declare an
``achievements:`` list, plus presentation constants shared by the API and
the entry point.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Default achievement catalog
# ---------------------------------------------------------------------------
# Same shape as the ``achievements:`` entries in config.yaml, so both go
# through the same validation in :func:`inkwell.engine.catalog.build_catalog`.
DEFAULT_ACHIEVEMENTS: list[dict[str, object]] = [
    {
        "code": "FIRST_ENTRY",
        "name": "First Words",
        "description": "Write your first journal entry",
        "icon": "\u270d\ufe0f",   # ✍️
        "metric": "TOTAL_ENTRIES",
        "threshold": 1,
        "points": 10,
    },
    {
        "code": "3_DAY_STREAK",
        "name": "Warming Up",
        "description": "Journal three days in a row",
        "icon": "\U0001f525",       # 🔥
        "metric": "STREAK_DAYS",
        "threshold": 3,
        "points": 25,
    },
    {
        "code": "10_ENTRIES",
        "name": "Journal Enthusiast",
        "description": "Write ten journal entries",
        "icon": "\U0001f4d4",       # 📔
        "metric": "TOTAL_ENTRIES",
        "threshold": 10,
        "points": 50,
    },
    {
        "code": "WEEKLY_STREAK",
        "name": "Seven Sunrises",
        "description": "Journal every day for a week",
        "icon": "\U0001f4c5",       # 📅
        "metric": "STREAK_DAYS",
        "threshold": 7,
        "points": 75,
    },
    {
        "code": "MONTHLY_STREAK",
        "name": "Habit Formed",
        "description": "Journal every day for thirty days",
        "icon": "\U0001f3c6",       # 🏆
        "metric": "STREAK_DAYS",
        "threshold": 30,
        "points": 300,
    },
]

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
LOG_FORMAT = "%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s"
LOG_DATEFMT = "%H:%M:%S"
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
