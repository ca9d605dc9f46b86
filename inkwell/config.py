"""
inkwell.config — YAML Configuration Loader
===========================================

Reads ``config.yaml`` for application identity, the API port, the log level
and, optionally, the achievement catalog.  Secrets and infrastructure
(``DATABASE_URL``) come from the environment via ``.env``.

Usage::

    from inkwell.config import load_config

    cfg = load_config()            # reads ./config.yaml by default
    print(cfg.app_name)            # "Inkwell"
    print(len(cfg.achievements))   # 5

The catalog is validated here, once, at process start.  A malformed or
duplicated achievement raises :class:`~inkwell.errors.ConfigurationError`
before the API accepts any request.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import yaml

from inkwell.constants import DEFAULT_ACHIEVEMENTS, VALID_LOG_LEVELS
from inkwell.engine.catalog import AchievementCatalog, build_catalog
from inkwell.errors import ConfigurationError


# ---------------------------------------------------------------------------
# Typed settings object
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class InkwellConfig:
    """Immutable configuration loaded from ``config.yaml``."""

    # Identity
    app_name: str

    # API
    api_port: int

    # Achievement rules (validated, points-ordered)
    achievements: AchievementCatalog

    # Optional
    log_level: str = "INFO"


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def load_config(path: str | Path = "config.yaml") -> InkwellConfig:
    """Read *path* and return an :class:`InkwellConfig` instance.

    Raises
    ------
    FileNotFoundError
        If the YAML file doesn't exist.
    KeyError
        If a required key is missing from the YAML file.
    ConfigurationError
        If ``achievements`` or ``log_level`` is malformed.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {config_path.resolve()}\n"
            "Hint: copy config.yaml.example → config.yaml and edit it."
        )

    with open(config_path, encoding="utf-8") as fh:
        raw: dict = yaml.safe_load(fh) or {}

    entries = raw.get("achievements")
    if entries is None:
        entries = DEFAULT_ACHIEVEMENTS
    elif not isinstance(entries, list):
        raise ConfigurationError("'achievements' must be a list of mappings")

    log_level = str(raw.get("log_level", "INFO")).upper()
    if log_level not in VALID_LOG_LEVELS:
        raise ConfigurationError(
            f"Invalid log_level {raw.get('log_level')!r}; expected one of {VALID_LOG_LEVELS}"
        )

    return InkwellConfig(
        app_name=raw["app_name"],
        api_port=int(raw["api_port"]),
        achievements=build_catalog(entries),
        log_level=log_level,
    )
