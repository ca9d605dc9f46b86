"""
inkwell.api.main — FastAPI application entry point
===================================================

Run with::

    uvicorn inkwell.api.main:app --reload --port 8000

or ``python -m inkwell``.
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

load_dotenv()

from inkwell import __version__  # noqa: E402
from inkwell.api.deps import get_config, get_engine  # noqa: E402
from inkwell.api.routes.gamification import router as gamification_router  # noqa: E402

logger = logging.getLogger(__name__)


def _cors_origins() -> list[str]:
    """Resolve allowed CORS origins from env with safe defaults.

    Priority:
      1) CORS_ALLOW_ORIGINS (comma-separated)
      2) FRONTEND_URL (single origin)
    """
    raw = os.getenv("CORS_ALLOW_ORIGINS", "").strip()
    if raw:
        return [origin.strip().rstrip("/") for origin in raw.split(",") if origin.strip()]

    frontend_url = os.getenv("FRONTEND_URL", "").strip()
    if frontend_url:
        return [frontend_url.rstrip("/")]

    return []


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle — validate config and warm the DB engine.

    A bad achievement catalog raises ConfigurationError here, so the
    process never starts serving with broken rules.
    """
    cfg = get_config()
    engine = get_engine()
    logger.info(
        "%s API started — %d achievements, engine ready (%s)",
        cfg.app_name, len(cfg.achievements), engine.url.database,
    )
    yield
    logger.info("%s API shutting down", cfg.app_name)


app = FastAPI(
    title="Inkwell Gamification API",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Mount routers
app.include_router(gamification_router, prefix="/api")


@app.get("/api/health")
def health():
    return {"status": "ok"}
