"""
inkwell.engine.achievements — Achievement Evaluation
=====================================================

Handler-registry evaluation of achievement rules.  Each
:class:`AchievementMetric` maps to a pure handler that receives the rule's
threshold and the user's :class:`UserStatsSnapshot`.

This module is pure calculation — no database I/O.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from inkwell.engine.catalog import AchievementCatalog, AchievementDefinition, AchievementMetric
from inkwell.engine.stats import UserStatsSnapshot

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Metric handlers — pure functions (threshold, stats) → bool
# ---------------------------------------------------------------------------
def _check_total_entries(threshold: int, stats: UserStatsSnapshot) -> bool:
    return stats.total_entries >= threshold


def _check_streak_days(threshold: int, stats: UserStatsSnapshot) -> bool:
    return stats.current_streak >= threshold


METRIC_HANDLERS: dict[str, Callable[[int, UserStatsSnapshot], bool]] = {
    AchievementMetric.TOTAL_ENTRIES: _check_total_entries,
    AchievementMetric.STREAK_DAYS: _check_streak_days,
}


def qualifies(definition: AchievementDefinition, stats: UserStatsSnapshot) -> bool:
    """True if *stats* satisfies *definition*'s threshold."""
    handler = METRIC_HANDLERS.get(definition.metric)
    if handler is None:
        # Catalog validation rejects unknown metrics, so this is unreachable
        # for definitions built through build_catalog().
        return False
    return handler(definition.threshold, stats)


# ---------------------------------------------------------------------------
# Main diff function
# ---------------------------------------------------------------------------
def diff(
    stats: UserStatsSnapshot,
    catalog: AchievementCatalog | Iterable[AchievementDefinition],
    earned_codes: set[str],
) -> list[AchievementDefinition]:
    """Return the achievements that newly qualify.

    Parameters
    ----------
    stats : The user's current statistics.
    catalog : Full achievement catalog (iterated in catalog order, i.e.
        ascending points).
    earned_codes : Codes the user already holds.

    Returns
    -------
    Definitions that qualify and are not yet earned, in catalog order.
    """
    newly_qualifying: list[AchievementDefinition] = []

    for definition in catalog:
        if definition.code in earned_codes:
            continue
        if qualifies(definition, stats):
            newly_qualifying.append(definition)
            logger.debug(
                "Achievement qualifies: %s (%s >= %d)",
                definition.code, definition.metric.value, definition.threshold,
            )

    return newly_qualifying
