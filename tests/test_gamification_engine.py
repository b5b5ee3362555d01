"""Unit tests for GamificationEngine - achievements, XP and levels.

These tests verify the stateless evaluation logic:
- seed_achievements() bootstrap and idempotence
- evaluate_achievement() criterion checks and unknown-metric handling
- evaluate() reducer: clamping, one-time unlocks, XP, no input mutation
- Level curve and progress ledger updates
- Static catalog consistency
"""

from __future__ import annotations

import copy
from datetime import UTC, datetime
import logging

import pytest

from numu import const
from numu.achievement_catalog import ACHIEVEMENT_CATALOG, ACHIEVEMENT_KEYS
from numu.engines.gamification_engine import GamificationEngine
from tests.helpers import make_achievement

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=UTC)


def make_stats(**overrides: int) -> dict[str, int]:
    """Create EngineStats with every metric at 0 unless overridden."""
    stats = dict.fromkeys(set().union(*const.CATEGORY_METRICS.values()), 0)
    stats.update(overrides)
    return stats


def by_key(achievements: list) -> dict:
    """Index achievements by key."""
    return {a[const.DATA_ACHIEVEMENT_KEY]: a for a in achievements}


# =============================================================================
# Test Class: seed_achievements()
# =============================================================================


class TestSeedAchievements:
    """Tests for the catalog bootstrap step."""

    def test_seed_from_empty(self) -> None:
        """Seeding nothing yields the whole catalog at zero progress."""
        seeded = GamificationEngine.seed_achievements()
        assert [a[const.DATA_ACHIEVEMENT_KEY] for a in seeded] == list(ACHIEVEMENT_KEYS)
        assert all(a[const.DATA_ACHIEVEMENT_PROGRESS] == 0 for a in seeded)
        assert not any(a[const.DATA_ACHIEVEMENT_UNLOCKED] for a in seeded)
        assert all(a[const.DATA_ACHIEVEMENT_UNLOCKED_AT] is None for a in seeded)

    def test_idempotent(self) -> None:
        """Seeding its own output changes nothing."""
        once = GamificationEngine.seed_achievements([])
        twice = GamificationEngine.seed_achievements(once)
        assert twice == once

    def test_existing_progress_kept(self) -> None:
        """Stored progress and unlock state survive; missing fields are filled."""
        stored = [
            {
                const.DATA_ACHIEVEMENT_KEY: "week_warrior",
                const.DATA_ACHIEVEMENT_PROGRESS: 5,
                const.DATA_ACHIEVEMENT_UNLOCKED: False,
                const.DATA_ACHIEVEMENT_UNLOCKED_AT: None,
            },
            {
                const.DATA_ACHIEVEMENT_KEY: "first_steps",
                const.DATA_ACHIEVEMENT_PROGRESS: 1,
                const.DATA_ACHIEVEMENT_UNLOCKED: True,
                const.DATA_ACHIEVEMENT_UNLOCKED_AT: NOW,
            },
        ]
        seeded = GamificationEngine.seed_achievements(stored)
        assert len(seeded) == len(ACHIEVEMENT_CATALOG)
        assert seeded[0][const.DATA_ACHIEVEMENT_KEY] == "week_warrior"
        assert seeded[0][const.DATA_ACHIEVEMENT_PROGRESS] == 5
        assert seeded[0][const.DATA_ACHIEVEMENT_METRIC] == const.METRIC_BEST_STREAK
        assert seeded[1][const.DATA_ACHIEVEMENT_UNLOCKED_AT] == NOW
        assert stored[0] == {
            const.DATA_ACHIEVEMENT_KEY: "week_warrior",
            const.DATA_ACHIEVEMENT_PROGRESS: 5,
            const.DATA_ACHIEVEMENT_UNLOCKED: False,
            const.DATA_ACHIEVEMENT_UNLOCKED_AT: None,
        }

    def test_non_catalog_entries_kept(self) -> None:
        """Custom stored achievements are preserved."""
        custom = make_achievement("custom_goal")
        seeded = GamificationEngine.seed_achievements([custom])
        assert seeded[0] == custom
        assert len(seeded) == len(ACHIEVEMENT_CATALOG) + 1

    def test_duplicate_stored_keys_dropped(self, caplog) -> None:
        """A key stored twice is kept once."""
        stored = [make_achievement("dup"), make_achievement("dup", progress=3)]
        with caplog.at_level(logging.WARNING, logger="numu"):
            seeded = GamificationEngine.seed_achievements(stored)
        assert [a[const.DATA_ACHIEVEMENT_KEY] for a in seeded].count("dup") == 1
        assert "duplicate" in caplog.text


# =============================================================================
# Test Class: evaluate_achievement()
# =============================================================================


class TestEvaluateAchievement:
    """Tests for the single-achievement criterion check."""

    def test_met(self) -> None:
        """A metric at or above criteria meets it."""
        result = GamificationEngine.evaluate_achievement(
            make_stats(best_streak=10), make_achievement(criteria=7)
        )
        assert result["criteria_met"] is True
        assert result["criterion"]["current_value"] == 10
        assert result["criterion"]["progress"] == 1.0
        assert result["already_unlocked"] is False

    def test_not_met(self) -> None:
        """Partial progress is reported as a fraction."""
        result = GamificationEngine.evaluate_achievement(
            make_stats(best_streak=3), make_achievement(criteria=7)
        )
        assert result["criteria_met"] is False
        assert result["criterion"]["progress"] == pytest.approx(3 / 7)
        assert "3/7" in result["criterion"]["reason"]

    def test_missing_metric_in_stats(self) -> None:
        """Stats lacking the metric read as 0."""
        result = GamificationEngine.evaluate_achievement({}, make_achievement())
        assert result["criterion"]["current_value"] == 0

    def test_metric_not_allowed_for_category(self, caplog) -> None:
        """A metric the category may not read is logged and evaluates to 0."""
        achievement = make_achievement(
            metric=const.METRIC_TOTAL_COMPLETIONS,
            category=const.ACHIEVEMENT_CATEGORY_STREAK,
            criteria=1,
        )
        with caplog.at_level(logging.WARNING, logger="numu"):
            result = GamificationEngine.evaluate_achievement(
                make_stats(total_completions=50), achievement
            )
        assert result["criteria_met"] is False
        assert result["criterion"]["current_value"] == 0
        assert "Unknown metric" in caplog.text

    def test_unknown_category(self, caplog) -> None:
        """Unknown categories are logged and evaluate to 0."""
        achievement = make_achievement(category="test", criteria=1)
        with caplog.at_level(logging.WARNING, logger="numu"):
            result = GamificationEngine.evaluate_achievement(
                make_stats(best_streak=5), achievement
            )
        assert result["criteria_met"] is False
        assert "Unknown achievement category" in caplog.text

    @pytest.mark.parametrize("criteria", [0, -5])
    def test_non_positive_criteria_never_met(self, criteria: int) -> None:
        """A non-positive threshold can never be met."""
        result = GamificationEngine.evaluate_achievement(
            make_stats(best_streak=100), make_achievement(criteria=criteria)
        )
        assert result["criteria_met"] is False
        assert result["criterion"]["progress"] == 0.0


# =============================================================================
# Test Class: evaluate()
# =============================================================================


class TestEvaluate:
    """Tests for the evaluate() reducer."""

    def test_unlock_awards_xp(self) -> None:
        """Crossing the threshold unlocks and pays the reward."""
        achievements = [make_achievement(criteria=7, xp_reward=50)]
        updated, xp = GamificationEngine.evaluate(
            make_stats(best_streak=9), achievements, now=NOW
        )
        assert xp == 50
        assert updated[0][const.DATA_ACHIEVEMENT_UNLOCKED] is True
        assert updated[0][const.DATA_ACHIEVEMENT_UNLOCKED_AT] == NOW
        assert updated[0][const.DATA_ACHIEVEMENT_PROGRESS] == 7

    def test_progress_without_unlock(self) -> None:
        """Below the threshold only progress changes."""
        updated, xp = GamificationEngine.evaluate(
            make_stats(best_streak=4), [make_achievement(criteria=7)], now=NOW
        )
        assert xp == 0
        assert updated[0][const.DATA_ACHIEVEMENT_PROGRESS] == 4
        assert updated[0][const.DATA_ACHIEVEMENT_UNLOCKED] is False

    def test_input_not_mutated(self) -> None:
        """The caller's list and dicts are left untouched."""
        achievements = [make_achievement(criteria=1)]
        snapshot = copy.deepcopy(achievements)
        GamificationEngine.evaluate(make_stats(best_streak=5), achievements, now=NOW)
        assert achievements == snapshot

    def test_idempotent(self) -> None:
        """A second run with the same stats pays nothing and changes nothing."""
        stats = make_stats(best_streak=30, systems_created=3, total_completions=12)
        first, xp_first = GamificationEngine.evaluate(
            stats, GamificationEngine.seed_achievements(), now=NOW
        )
        second, xp_second = GamificationEngine.evaluate(stats, first, now=NOW)
        assert xp_first > 0
        assert xp_second == 0
        assert second == first

    def test_already_unlocked_untouched(self) -> None:
        """Unlocked achievements keep progress and timestamp when stats drop."""
        achievement = make_achievement(
            criteria=7, progress=7, unlocked=True, unlocked_at=NOW
        )
        updated, xp = GamificationEngine.evaluate(
            make_stats(best_streak=0), [achievement], now=datetime(2026, 1, 1, tzinfo=UTC)
        )
        assert xp == 0
        assert updated[0] == achievement

    def test_progress_clamped_to_zero(self) -> None:
        """Negative metric values clamp to 0."""
        updated, _ = GamificationEngine.evaluate(
            make_stats(best_streak=-3), [make_achievement()], now=NOW
        )
        assert updated[0][const.DATA_ACHIEVEMENT_PROGRESS] == 0

    def test_zero_criteria_never_unlocks(self) -> None:
        """criteria == 0 never unlocks, even with a large metric."""
        updated, xp = GamificationEngine.evaluate(
            make_stats(best_streak=100), [make_achievement(criteria=0)], now=NOW
        )
        assert xp == 0
        assert updated[0][const.DATA_ACHIEVEMENT_UNLOCKED] is False
        assert updated[0][const.DATA_ACHIEVEMENT_PROGRESS] == 0

    def test_catalog_unlocks(self) -> None:
        """A seven-day streak and one system unlock three catalog entries."""
        updated, xp = GamificationEngine.evaluate(
            make_stats(best_streak=7, systems_created=1),
            GamificationEngine.seed_achievements(),
            now=NOW,
        )
        unlocked = {
            key for key, a in by_key(updated).items() if a[const.DATA_ACHIEVEMENT_UNLOCKED]
        }
        assert unlocked == {"first_steps", "week_warrior", "system_builder"}
        assert xp == 10 + 50 + 25
        assert by_key(updated)["month_master"][const.DATA_ACHIEVEMENT_PROGRESS] == 7

    def test_windowed_consistency(self) -> None:
        """Consistency achievements read their own window's metric."""
        updated, _ = GamificationEngine.evaluate(
            make_stats(consistency_percent_7d=100, consistency_percent_30d=85),
            GamificationEngine.seed_achievements(),
            now=NOW,
        )
        index = by_key(updated)
        assert index["perfection"][const.DATA_ACHIEVEMENT_UNLOCKED]
        assert index["habit_starter"][const.DATA_ACHIEVEMENT_UNLOCKED]
        assert index["solid_foundation"][const.DATA_ACHIEVEMENT_UNLOCKED]
        assert not index["elite_performer"][const.DATA_ACHIEVEMENT_UNLOCKED]
        assert not index["getting_there"][const.DATA_ACHIEVEMENT_UNLOCKED]

    def test_default_now_is_aware(self) -> None:
        """Without `now`, the unlock time is an aware UTC datetime."""
        updated, _ = GamificationEngine.evaluate(
            make_stats(best_streak=1), [make_achievement(criteria=1)]
        )
        unlocked_at = updated[0][const.DATA_ACHIEVEMENT_UNLOCKED_AT]
        assert isinstance(unlocked_at, datetime)
        assert unlocked_at.tzinfo is not None

    def test_newly_unlocked(self) -> None:
        """Only keys that flipped are reported."""
        before = [
            make_achievement("a", criteria=1),
            make_achievement("b", criteria=1, unlocked=True, unlocked_at=NOW),
            make_achievement("c", criteria=50),
        ]
        after, _ = GamificationEngine.evaluate(make_stats(best_streak=5), before, now=NOW)
        assert GamificationEngine.newly_unlocked(before, after) == ["a"]


# =============================================================================
# Test Class: levels and ledger
# =============================================================================


class TestLevels:
    """Tests for the XP level curve."""

    @pytest.mark.parametrize(
        ("level", "xp"),
        [(1, 0), (2, 141), (3, 259), (4, 400), (10, 1581)],
    )
    def test_xp_required(self, level: int, xp: int) -> None:
        """XP for level N is int(50 * N ** 1.5)."""
        assert GamificationEngine.xp_required_for_level(level) == xp

    @pytest.mark.parametrize(
        ("xp", "level"),
        [(0, 1), (140, 1), (141, 2), (258, 2), (259, 3), (10000, 34)],
    )
    def test_calculate_level(self, xp: int, level: int) -> None:
        """The level is the highest one whose requirement is met."""
        assert GamificationEngine.calculate_level(xp) == level

    @pytest.mark.parametrize(
        ("xp", "to_next", "in_level", "span", "progress"),
        [
            (0, 141, 0, 141, 0.0),
            (100, 41, 100, 141, 0.7092),
            (141, 118, 0, 118, 0.0),
            (200, 59, 59, 118, 0.5),
            (258, 1, 117, 118, 0.9915),
        ],
    )
    def test_progress_within_level(
        self, xp: int, to_next: int, in_level: int, span: int, progress: float
    ) -> None:
        """XP helpers describe the position inside the current level."""
        assert GamificationEngine.xp_to_next_level(xp) == to_next
        assert GamificationEngine.xp_in_current_level(xp) == in_level
        assert GamificationEngine.xp_needed_for_current_level(xp) == span
        assert GamificationEngine.level_progress(xp) == progress

    @pytest.mark.parametrize(
        ("level", "tier"),
        [
            (1, const.LEVEL_TIER_BRONZE),
            (9, const.LEVEL_TIER_BRONZE),
            (10, const.LEVEL_TIER_SILVER),
            (24, const.LEVEL_TIER_SILVER),
            (25, const.LEVEL_TIER_GOLD),
            (50, const.LEVEL_TIER_PLATINUM),
            (99, const.LEVEL_TIER_PLATINUM),
            (100, const.LEVEL_TIER_DIAMOND),
            (250, const.LEVEL_TIER_DIAMOND),
        ],
    )
    def test_level_tier(self, level: int, tier: str) -> None:
        """Tiers change at levels 10, 25, 50 and 100."""
        assert GamificationEngine.level_tier(level) == tier


class TestApplyToLedger:
    """Tests for GamificationEngine.apply_to_ledger()."""

    def test_fresh_ledger(self) -> None:
        """None starts a new ledger."""
        ledger = GamificationEngine.apply_to_ledger(None, 150, ["week_warrior"])
        assert ledger == {
            const.DATA_LEDGER_TOTAL_XP: 150,
            const.DATA_LEDGER_LEVEL: 2,
            const.DATA_LEDGER_RECENTLY_UNLOCKED: ["week_warrior"],
        }

    def test_accumulates_without_duplicates(self) -> None:
        """XP adds up and recently unlocked keys stay unique."""
        ledger = {
            const.DATA_LEDGER_TOTAL_XP: 100,
            const.DATA_LEDGER_LEVEL: 1,
            const.DATA_LEDGER_RECENTLY_UNLOCKED: ["first_steps"],
        }
        original = copy.deepcopy(ledger)
        updated = GamificationEngine.apply_to_ledger(
            ledger, 200, ["first_steps", "month_master"]
        )
        assert updated[const.DATA_LEDGER_TOTAL_XP] == 300
        assert updated[const.DATA_LEDGER_LEVEL] == 3
        assert updated[const.DATA_LEDGER_RECENTLY_UNLOCKED] == ["first_steps", "month_master"]
        assert ledger == original

    def test_zero_delta(self) -> None:
        """A zero delta keeps totals and level."""
        ledger = GamificationEngine.apply_to_ledger(None, 0)
        assert ledger[const.DATA_LEDGER_TOTAL_XP] == 0
        assert ledger[const.DATA_LEDGER_LEVEL] == const.LEVEL_MIN


# =============================================================================
# Test Class: catalog
# =============================================================================


class TestAchievementCatalog:
    """Consistency checks on the static catalog."""

    def test_keys_unique(self) -> None:
        """Every catalog key is unique."""
        assert len(set(ACHIEVEMENT_KEYS)) == len(ACHIEVEMENT_KEYS)

    @pytest.mark.parametrize(
        "entry", ACHIEVEMENT_CATALOG, ids=lambda e: e[const.DATA_ACHIEVEMENT_KEY]
    )
    def test_entry_is_evaluable(self, entry) -> None:
        """Each entry reads a metric its category allows, with a positive threshold."""
        category = entry[const.DATA_ACHIEVEMENT_CATEGORY]
        assert entry[const.DATA_ACHIEVEMENT_METRIC] in const.CATEGORY_METRICS[category]
        assert entry[const.DATA_ACHIEVEMENT_CRITERIA] > 0
        assert entry[const.DATA_ACHIEVEMENT_XP_REWARD] > 0
