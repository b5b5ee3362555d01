"""Gamification Engine - Pure logic for achievement evaluation and XP levels.

This engine provides stateless, pure Python functions for:
- Seeding stored achievements from the static catalog (idempotent)
- Achievement criterion checks against pre-computed EngineStats
- The evaluate() reducer: (stats, achievements) -> (achievements, xp_delta)
- XP ledger updates, level calculation, level progress and tiers

ARCHITECTURE: Pure logic. Every achievement reads exactly one metric from
EngineStats (built by StatisticsEngine.build_stats()). Inputs are never
mutated; updated copies are returned for the caller to persist.

Unlock Rules:
- progress = metric value clamped to [0, criteria]
- unlock happens once, on the first evaluation where progress reaches a
  positive criteria; unlocked achievements are never re-evaluated
- the XP reward is paid exactly once, on that transition
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import TYPE_CHECKING

from .. import const
from ..achievement_catalog import ACHIEVEMENT_CATALOG
from ..utils.dt_utils import dt_now_utc
from ..utils.math_utils import calculate_percentage, clamp, round_ratio, safe_ratio

if TYPE_CHECKING:
    from ..type_defs import (
        AchievementData,
        AchievementKey,
        CriterionResult,
        EngineStats,
        EvaluationResult,
        ProgressLedger,
    )


# =============================================================================
# GAMIFICATION ENGINE
# =============================================================================


class GamificationEngine:
    """Pure logic engine for achievements and levels.

    All methods are static - no instance state.

    Evaluation Flow:
        1. Caller builds EngineStats with StatisticsEngine.build_stats()
        2. evaluate() checks each locked achievement and returns updated
           copies plus the XP earned by new unlocks
        3. apply_to_ledger() folds the XP into the progress ledger
        4. Caller persists both snapshots
    """

    # =========================================================================
    # SEEDING
    # =========================================================================

    @staticmethod
    def seed_achievements(
        existing: Iterable[AchievementData] | None = None,
    ) -> list[AchievementData]:
        """Merge the static catalog into the stored achievements.

        Stored entries keep their progress and unlocked state; any static
        fields they lack are filled from the catalog. Catalog entries not yet
        stored are appended with zero progress. Calling this on its own
        output returns an equal list.

        Args:
            existing: Previously stored achievements (may be None or empty)

        Returns:
            A new list of achievements, stored entries first.
        """
        catalog = {entry[const.DATA_ACHIEVEMENT_KEY]: entry for entry in ACHIEVEMENT_CATALOG}
        seeded: list[AchievementData] = []
        seen: set[str] = set()

        for achievement in existing or []:
            key = achievement.get(const.DATA_ACHIEVEMENT_KEY)
            if key in seen:
                const.LOGGER.warning("Dropping duplicate stored achievement %s", key)
                continue
            seen.add(key)
            seeded.append({**catalog.get(key, {}), **achievement})  # type: ignore[typeddict-item]

        added = 0
        for key, entry in catalog.items():
            if key in seen:
                continue
            seeded.append(
                {
                    **entry,
                    const.DATA_ACHIEVEMENT_PROGRESS: 0,
                    const.DATA_ACHIEVEMENT_UNLOCKED: False,
                    const.DATA_ACHIEVEMENT_UNLOCKED_AT: None,
                }  # type: ignore[typeddict-item]
            )
            added += 1

        if added:
            const.LOGGER.debug("Seeded %d new achievements", added)
        return seeded

    # =========================================================================
    # CRITERION EVALUATION
    # =========================================================================

    @staticmethod
    def metric_value(stats: EngineStats, achievement: AchievementData) -> int:
        """Read the achievement's metric from stats.

        Unknown categories and metrics a category may not read are logged at
        warning level and evaluate to 0.
        """
        category = achievement.get(const.DATA_ACHIEVEMENT_CATEGORY)
        metric = achievement.get(const.DATA_ACHIEVEMENT_METRIC)
        allowed = const.CATEGORY_METRICS.get(category)
        if allowed is None:
            const.LOGGER.warning(
                "Unknown achievement category: %s for achievement %s",
                category,
                achievement.get(const.DATA_ACHIEVEMENT_KEY),
            )
            return 0
        if metric not in allowed:
            const.LOGGER.warning(
                "Unknown metric: %s for %s achievement %s",
                metric,
                category,
                achievement.get(const.DATA_ACHIEVEMENT_KEY),
            )
            return 0
        return int(stats.get(metric, 0))

    @classmethod
    def evaluate_achievement(
        cls,
        stats: EngineStats,
        achievement: AchievementData,
    ) -> EvaluationResult:
        """Check one achievement against stats without changing it.

        Args:
            stats: Pre-computed EngineStats
            achievement: Stored achievement

        Returns:
            EvaluationResult with the metric value, progress and whether the
            criterion is met. A non-positive criteria is never met.
        """
        threshold = int(achievement.get(const.DATA_ACHIEVEMENT_CRITERIA, 0))
        metric = str(achievement.get(const.DATA_ACHIEVEMENT_METRIC, "unknown"))
        current_value = cls.metric_value(stats, achievement)

        if threshold <= 0:
            met = False
            progress = 0.0
            reason = f"Invalid criteria: {threshold}"
        else:
            met = current_value >= threshold
            progress = min(1.0, safe_ratio(current_value, threshold))
            reason = (
                f"{metric}: {current_value}/{threshold} "
                f"({calculate_percentage(min(current_value, threshold), threshold)}%)"
            )

        return cls._make_result(
            achievement_key=achievement.get(const.DATA_ACHIEVEMENT_KEY, "unknown"),
            achievement_name=achievement.get(
                const.DATA_ACHIEVEMENT_NAME, "Unknown Achievement"
            ),
            criteria_met=met,
            already_unlocked=bool(achievement.get(const.DATA_ACHIEVEMENT_UNLOCKED)),
            criterion=cls._make_criterion_result(
                metric=metric,
                met=met,
                progress=progress,
                threshold=threshold,
                current_value=current_value,
                reason=reason,
            ),
        )

    # =========================================================================
    # REDUCER
    # =========================================================================

    @classmethod
    def evaluate(
        cls,
        stats: EngineStats,
        achievements: Iterable[AchievementData],
        now: datetime | None = None,
    ) -> tuple[list[AchievementData], int]:
        """Apply stats to achievements.

        Args:
            stats: Pre-computed EngineStats
            achievements: Stored achievements (not mutated)
            now: Unlock timestamp (defaults to now, UTC)

        Returns:
            (updated achievements in input order, XP earned by new unlocks).
            Re-running with the same stats yields an equal list and 0 XP.
        """
        now = now or dt_now_utc()
        updated: list[AchievementData] = []
        xp_delta = 0

        for achievement in achievements:
            new_achievement: AchievementData = dict(achievement)  # type: ignore[assignment]
            if achievement.get(const.DATA_ACHIEVEMENT_UNLOCKED):
                updated.append(new_achievement)
                continue

            result = cls.evaluate_achievement(stats, achievement)
            criterion = result["criterion"]
            new_achievement[const.DATA_ACHIEVEMENT_PROGRESS] = int(
                clamp(criterion["current_value"], 0, max(criterion["threshold"], 0))
            )
            if result["criteria_met"]:
                reward = int(achievement.get(const.DATA_ACHIEVEMENT_XP_REWARD, 0))
                new_achievement[const.DATA_ACHIEVEMENT_UNLOCKED] = True
                new_achievement[const.DATA_ACHIEVEMENT_UNLOCKED_AT] = now
                xp_delta += reward
                const.LOGGER.debug(
                    "Achievement unlocked: %s (+%d XP)",
                    result["achievement_key"],
                    reward,
                )
            updated.append(new_achievement)

        return updated, xp_delta

    @staticmethod
    def newly_unlocked(
        before: Iterable[AchievementData], after: Iterable[AchievementData]
    ) -> list[AchievementKey]:
        """Return keys that are unlocked in `after` but not in `before`."""
        previously = {
            a.get(const.DATA_ACHIEVEMENT_KEY)
            for a in before
            if a.get(const.DATA_ACHIEVEMENT_UNLOCKED)
        }
        return [
            a[const.DATA_ACHIEVEMENT_KEY]
            for a in after
            if a.get(const.DATA_ACHIEVEMENT_UNLOCKED)
            and a.get(const.DATA_ACHIEVEMENT_KEY) not in previously
        ]

    # =========================================================================
    # LEVELS & LEDGER
    # =========================================================================

    @staticmethod
    def xp_required_for_level(level: int) -> int:
        """Return total XP needed to reach `level`.

        Examples:
            xp_required_for_level(1) → 0
            xp_required_for_level(2) → 141
            xp_required_for_level(3) → 259
        """
        if level <= const.LEVEL_MIN:
            return 0
        return int(const.LEVEL_XP_BASE * level**const.LEVEL_XP_EXPONENT)

    @classmethod
    def calculate_level(cls, total_xp: int) -> int:
        """Return the highest level whose XP requirement is met."""
        level = const.LEVEL_MIN
        while cls.xp_required_for_level(level + 1) <= total_xp:
            level += 1
        return level

    @classmethod
    def xp_to_next_level(cls, total_xp: int) -> int:
        """Return the XP still needed to reach the next level."""
        level = cls.calculate_level(total_xp)
        return cls.xp_required_for_level(level + 1) - total_xp

    @classmethod
    def xp_in_current_level(cls, total_xp: int) -> int:
        """Return the XP earned since the current level was reached."""
        return total_xp - cls.xp_required_for_level(cls.calculate_level(total_xp))

    @classmethod
    def xp_needed_for_current_level(cls, total_xp: int) -> int:
        """Return the XP span of the current level."""
        level = cls.calculate_level(total_xp)
        return cls.xp_required_for_level(level + 1) - cls.xp_required_for_level(level)

    @classmethod
    def level_progress(cls, total_xp: int) -> float:
        """Return progress through the current level as a 0-1 fraction.

        Examples:
            level_progress(0) → 0.0
            level_progress(200) → 0.5   # level 2 spans 141..259
        """
        span = cls.xp_needed_for_current_level(total_xp)
        if span <= 0:
            return 1.0
        return round_ratio(cls.xp_in_current_level(total_xp) / span)

    @staticmethod
    def level_tier(level: int) -> str:
        """Return the tier name for a level (LEVEL_TIER_*)."""
        for min_level, tier in const.LEVEL_TIERS:
            if level >= min_level:
                return tier
        return const.LEVEL_TIER_BRONZE

    @classmethod
    def apply_to_ledger(
        cls,
        ledger: ProgressLedger | None,
        xp_delta: int,
        newly_unlocked: Iterable[AchievementKey] = (),
    ) -> ProgressLedger:
        """Return a new ledger with XP added and the level recomputed.

        Args:
            ledger: Current ledger (None starts a fresh one)
            xp_delta: XP earned (from evaluate())
            newly_unlocked: Keys to append to recently_unlocked

        Returns:
            New ProgressLedger; the input is not mutated.
        """
        ledger = ledger or {}  # type: ignore[assignment]
        total_xp = int(ledger.get(const.DATA_LEDGER_TOTAL_XP, 0)) + xp_delta
        recently = list(ledger.get(const.DATA_LEDGER_RECENTLY_UNLOCKED, []))
        for key in newly_unlocked:
            if key not in recently:
                recently.append(key)

        level = cls.calculate_level(total_xp)
        previous_level = ledger.get(const.DATA_LEDGER_LEVEL, const.LEVEL_MIN)
        if level > previous_level:
            const.LOGGER.debug("Level up: %s -> %s", previous_level, level)

        return {
            const.DATA_LEDGER_TOTAL_XP: total_xp,
            const.DATA_LEDGER_LEVEL: level,
            const.DATA_LEDGER_RECENTLY_UNLOCKED: recently,
        }  # type: ignore[return-value]

    # =========================================================================
    # HELPER METHODS
    # =========================================================================

    @staticmethod
    def _make_result(
        achievement_key: str,
        achievement_name: str,
        criteria_met: bool,
        already_unlocked: bool,
        criterion: CriterionResult,
    ) -> EvaluationResult:
        """Create a standardized EvaluationResult."""
        return {
            "achievement_key": achievement_key,
            "achievement_name": achievement_name,
            "criteria_met": criteria_met,
            "already_unlocked": already_unlocked,
            "criterion": criterion,
        }

    @staticmethod
    def _make_criterion_result(
        metric: str,
        met: bool,
        progress: float,
        threshold: int,
        current_value: int,
        reason: str = "",
    ) -> CriterionResult:
        """Create a standardized CriterionResult.

        Args:
            metric: METRIC_* key that was read
            met: Whether this criterion is satisfied
            progress: Progress toward threshold (0.0-1.0)
            threshold: Target value to reach
            current_value: Current achieved value
            reason: Human-readable explanation

        Returns:
            CriterionResult TypedDict
        """
        return {
            "metric": metric,
            "met": met,
            "progress": progress,
            "threshold": threshold,
            "current_value": current_value,
            "reason": reason,
        }

