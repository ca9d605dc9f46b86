"""
inkwell.api.routes.gamification — Status, entry hook & catalog endpoints
=========================================================================
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy import Engine

from inkwell.api.deps import get_config, get_engine, get_gamification
from inkwell.config import InkwellConfig
from inkwell.database.engine import run_db
from inkwell.errors import DataUnavailable, UnknownUser
from inkwell.services import journal_service
from inkwell.services.gamification_service import GamificationEngine, StatusSnapshot

router = APIRouter(tags=["gamification"])
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------
class EntryCreate(BaseModel):
    content: str = Field(min_length=1, max_length=20_000)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
async def _evaluate(gamification: GamificationEngine, user_id: int) -> StatusSnapshot:
    """Run evaluate_and_award off the event loop; map store outages to 503."""
    try:
        return await run_db(gamification.evaluate_and_award, user_id)
    except DataUnavailable:
        logger.exception("Gamification status unavailable for user %d", user_id)
        raise HTTPException(
            status.HTTP_503_SERVICE_UNAVAILABLE,
            "Service temporarily unavailable",
        )


# ---------------------------------------------------------------------------
# GET /users/{user_id}/gamification
# ---------------------------------------------------------------------------
@router.get("/users/{user_id}/gamification")
async def get_gamification_status(
    user_id: int,
    gamification: GamificationEngine = Depends(get_gamification),
):
    """Points, streak and the full achievement list (earned or not)."""
    snapshot = await _evaluate(gamification, user_id)
    return snapshot.to_dict()


# ---------------------------------------------------------------------------
# POST /users/{user_id}/entries
# ---------------------------------------------------------------------------
@router.post("/users/{user_id}/entries", status_code=status.HTTP_201_CREATED)
async def create_entry(
    user_id: int,
    body: EntryCreate,
    engine: Engine = Depends(get_engine),
    gamification: GamificationEngine = Depends(get_gamification),
):
    """Record an entry, then re-evaluate achievements for its author."""
    try:
        entry = await run_db(journal_service.record_entry, engine, user_id, body.content)
    except UnknownUser:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "User not found")

    snapshot = await _evaluate(gamification, user_id)
    return {"entry": entry, "status": snapshot.to_dict()}


# ---------------------------------------------------------------------------
# GET /achievements
# ---------------------------------------------------------------------------
@router.get("/achievements")
def list_achievements(cfg: InkwellConfig = Depends(get_config)):
    return {
        "achievements": [
            {
                "code": d.code,
                "name": d.name,
                "description": d.description,
                "icon": d.icon,
                "metric": d.metric.value,
                "threshold": d.threshold,
                "points": d.points,
            }
            for d in cfg.achievements
        ]
    }
