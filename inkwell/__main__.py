"""
inkwell.__main__ — Entry point for ``python -m inkwell``
=========================================================

Wiring:
1. Load .env (DATABASE_URL and friends).
2. Load config.yaml and validate the achievement catalog.
3. Create the SQLAlchemy engine and ensure tables exist.
4. Serve the FastAPI app with uvicorn (blocking).
"""

from __future__ import annotations

import logging
import os

import uvicorn
from dotenv import load_dotenv

from inkwell.config import load_config
from inkwell.constants import LOG_DATEFMT, LOG_FORMAT
from inkwell.database.engine import create_db_engine, init_db

logger = logging.getLogger("inkwell")


def main() -> None:
    """Bootstrap and run the Inkwell API."""

    # 1. Environment variables.
    load_dotenv()

    # 2. Configuration (fatal on a bad catalog).
    cfg = load_config(os.getenv("INKWELL_CONFIG", "config.yaml"))
    logging.basicConfig(level=cfg.log_level, format=LOG_FORMAT, datefmt=LOG_DATEFMT)
    logger.info("Config loaded — %s, %d achievements", cfg.app_name, len(cfg.achievements))

    # 3. Database.
    engine = create_db_engine()
    init_db(engine)
    engine.dispose()

    # 4. API (blocks until Ctrl+C or SIGTERM).
    logger.info("Starting %s on port %d…", cfg.app_name, cfg.api_port)
    uvicorn.run(
        "inkwell.api.main:app",
        host="0.0.0.0",
        port=cfg.api_port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
