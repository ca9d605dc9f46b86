"""
inkwell.api.deps — FastAPI dependency injection
================================================
"""

from __future__ import annotations

import os
from functools import lru_cache

from sqlalchemy import Engine

from inkwell.config import InkwellConfig, load_config
from inkwell.database.engine import create_db_engine
from inkwell.services.gamification_service import GamificationEngine


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    return create_db_engine()


@lru_cache(maxsize=1)
def get_config() -> InkwellConfig:
    return load_config(os.getenv("INKWELL_CONFIG", "config.yaml"))


@lru_cache(maxsize=1)
def get_gamification() -> GamificationEngine:
    """Process-wide engine; stateless per user, so safe to share."""
    return GamificationEngine.from_engine(get_engine(), get_config().achievements)
