"""
inkwell.engine.catalog — Achievement Catalog
=============================================

The fixed rule set every evaluation runs against.  Definitions are loaded
once at process start (from ``config.yaml`` or the built-in defaults) and
never mutated afterwards.

Ordering is ascending by ``points``; ties keep declaration order.  The
evaluator and the status snapshot both follow this order, so commit
sequencing is deterministic.

This module is pure calculation — no database I/O.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass

from inkwell.errors import ConfigurationError

logger = logging.getLogger(__name__)


class AchievementMetric(enum.StrEnum):
    """The statistic an achievement threshold is compared against."""
    TOTAL_ENTRIES = "TOTAL_ENTRIES"
    STREAK_DAYS = "STREAK_DAYS"


@dataclass(frozen=True, slots=True)
class AchievementDefinition:
    """One immutable achievement rule.

    Parameters
    ----------
    code : Globally unique identifier (e.g. ``"FIRST_ENTRY"``).
    metric : Which statistic the threshold applies to.
    threshold : Minimum metric value that qualifies.  Always > 0.
    points : Points added to the user's balance when granted.
    name, description, icon : Display-only fields.
    """

    code: str
    metric: AchievementMetric
    threshold: int
    points: int
    name: str = ""
    description: str = ""
    icon: str = ""


class AchievementCatalog:
    """Validated, points-ordered collection of :class:`AchievementDefinition`.

    Raises :class:`~inkwell.errors.ConfigurationError` on construction if
    any code is duplicated.  Individual definitions are validated by
    :func:`parse_definition`.
    """

    def __init__(self, definitions: Iterable[AchievementDefinition]) -> None:
        seen: set[str] = set()
        ordered: list[AchievementDefinition] = []
        for definition in definitions:
            if definition.code in seen:
                raise ConfigurationError(
                    f"Duplicate achievement code: {definition.code!r}"
                )
            seen.add(definition.code)
            ordered.append(definition)

        # sorted() is stable, so equal-points entries keep declaration order
        self._definitions: tuple[AchievementDefinition, ...] = tuple(
            sorted(ordered, key=lambda d: d.points)
        )
        self._by_code: dict[str, AchievementDefinition] = {
            d.code: d for d in self._definitions
        }

    def all(self) -> tuple[AchievementDefinition, ...]:
        return self._definitions

    def get(self, code: str) -> AchievementDefinition | None:
        return self._by_code.get(code)

    def codes(self) -> list[str]:
        return [d.code for d in self._definitions]

    def __len__(self) -> int:
        return len(self._definitions)

    def __iter__(self) -> Iterator[AchievementDefinition]:
        return iter(self._definitions)

    def __contains__(self, code: object) -> bool:
        return code in self._by_code

    def __repr__(self) -> str:
        return f"<AchievementCatalog codes={self.codes()!r}>"


# ---------------------------------------------------------------------------
# Parsing & validation
# ---------------------------------------------------------------------------
def _require_int(raw: Mapping, key: str, code: str) -> int:
    value = raw.get(key)
    # bool is an int subclass; "threshold: yes" is a typo, not a number
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(
            f"Achievement {code!r}: {key!r} must be an integer, got {value!r}"
        )
    return value


def parse_definition(raw: Mapping) -> AchievementDefinition:
    """Validate one raw mapping (YAML entry) into a definition.

    Raises
    ------
    ConfigurationError
        If ``code`` is missing/blank, ``metric`` is unknown, ``threshold``
        is not a positive integer, or ``points`` is not a non-negative
        integer.
    """
    if not isinstance(raw, Mapping):
        raise ConfigurationError(f"Achievement entry must be a mapping, got {raw!r}")

    code = raw.get("code")
    if not isinstance(code, str) or not code.strip():
        raise ConfigurationError(f"Achievement entry has no code: {dict(raw)!r}")
    code = code.strip()

    try:
        metric = AchievementMetric(str(raw.get("metric", "")).upper())
    except ValueError:
        raise ConfigurationError(
            f"Achievement {code!r}: unknown metric {raw.get('metric')!r} "
            f"(expected one of {[m.value for m in AchievementMetric]})"
        ) from None

    threshold = _require_int(raw, "threshold", code)
    if threshold <= 0:
        raise ConfigurationError(
            f"Achievement {code!r}: threshold must be > 0, got {threshold}"
        )

    points = _require_int(raw, "points", code)
    if points < 0:
        raise ConfigurationError(
            f"Achievement {code!r}: points must be >= 0, got {points}"
        )

    return AchievementDefinition(
        code=code,
        metric=metric,
        threshold=threshold,
        points=points,
        name=str(raw.get("name") or code),
        description=str(raw.get("description") or ""),
        icon=str(raw.get("icon") or ""),
    )


def build_catalog(entries: Iterable[Mapping]) -> AchievementCatalog:
    """Build an :class:`AchievementCatalog` from raw mappings.

    An empty catalog is rejected: a gamification layer with nothing to earn
    is always a configuration mistake.
    """
    catalog = AchievementCatalog(parse_definition(raw) for raw in entries)
    if not len(catalog):
        raise ConfigurationError("Achievement catalog is empty")
    logger.info("Achievement catalog loaded — %d definitions", len(catalog))
    return catalog
