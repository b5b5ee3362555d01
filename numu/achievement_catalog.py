# File: achievement_catalog.py
"""Static catalog of Numu achievements.

Each entry names the EngineStats metric it reads and the threshold that
unlocks it. GamificationEngine.seed_achievements() turns the catalog into
stored AchievementData records; catalog order is display order.

Windowed consistency achievements carry their window in the metric name
(METRIC_CONSISTENCY_PERCENT_7D etc.).
"""

from typing import Any, Final

from . import const


def _entry(
    key: str,
    name: str,
    description: str,
    category: str,
    metric: str,
    criteria: int,
    xp_reward: int,
    tier: str,
    badge: str,
) -> dict[str, Any]:
    return {
        const.DATA_ACHIEVEMENT_KEY: key,
        const.DATA_ACHIEVEMENT_NAME: name,
        const.DATA_ACHIEVEMENT_DESCRIPTION: description,
        const.DATA_ACHIEVEMENT_CATEGORY: category,
        const.DATA_ACHIEVEMENT_METRIC: metric,
        const.DATA_ACHIEVEMENT_CRITERIA: criteria,
        const.DATA_ACHIEVEMENT_XP_REWARD: xp_reward,
        const.DATA_ACHIEVEMENT_TIER: tier,
        const.DATA_ACHIEVEMENT_BADGE: badge,
    }


_STREAK = const.ACHIEVEMENT_CATEGORY_STREAK
_SYSTEM = const.ACHIEVEMENT_CATEGORY_SYSTEM
_TASK = const.ACHIEVEMENT_CATEGORY_TASK
_CONSISTENCY = const.ACHIEVEMENT_CATEGORY_CONSISTENCY
_SPECIAL = const.ACHIEVEMENT_CATEGORY_SPECIAL

_BRONZE = const.ACHIEVEMENT_TIER_BRONZE
_SILVER = const.ACHIEVEMENT_TIER_SILVER
_GOLD = const.ACHIEVEMENT_TIER_GOLD
_PLATINUM = const.ACHIEVEMENT_TIER_PLATINUM
_DIAMOND = const.ACHIEVEMENT_TIER_DIAMOND

ACHIEVEMENT_CATALOG: Final[tuple[dict[str, Any], ...]] = (
    # Streaks
    _entry("first_steps", "First Steps", "Complete a 1-day streak",
           _STREAK, const.METRIC_BEST_STREAK, 1, 10, _BRONZE, "🌱"),
    _entry("week_warrior", "Week Warrior", "Complete a 7-day streak",
           _STREAK, const.METRIC_BEST_STREAK, 7, 50, _BRONZE, "💪"),
    _entry("month_master", "Month Master", "Complete a 30-day streak",
           _STREAK, const.METRIC_BEST_STREAK, 30, 200, _SILVER, "⭐"),
    _entry("century_club", "Century Club", "Complete a 100-day streak",
           _STREAK, const.METRIC_BEST_STREAK, 100, 1000, _GOLD, "💎"),
    _entry("year_legend", "Year Legend", "Complete a 365-day streak",
           _STREAK, const.METRIC_BEST_STREAK, 365, 5000, _PLATINUM, "👑"),
    _entry("unbreakable", "Unbreakable", "Complete a 500-day streak",
           _STREAK, const.METRIC_BEST_STREAK, 500, 10000, _DIAMOND, "🏆"),
    _entry("weekly_habit", "Weekly Habit", "Complete 4 weeks of weekly target",
           _STREAK, const.METRIC_WEEKLY_TARGET_STREAK, 4, 100, _BRONZE, "📅"),
    _entry("consistent_climber", "Consistent Climber",
           "Complete 12 weeks of weekly target",
           _STREAK, const.METRIC_WEEKLY_TARGET_STREAK, 12, 500, _GOLD, "⛰️"),
    # Systems
    _entry("system_builder", "System Builder", "Create your first system",
           _SYSTEM, const.METRIC_SYSTEMS_CREATED, 1, 25, _BRONZE, "🏗️"),
    _entry("multi_tasker", "Multi-Tasker", "Create 3 systems",
           _SYSTEM, const.METRIC_SYSTEMS_CREATED, 3, 75, _BRONZE, "🎨"),
    _entry("life_designer", "Life Designer", "Create 5 systems",
           _SYSTEM, const.METRIC_SYSTEMS_CREATED, 5, 150, _SILVER, "🌟"),
    _entry("master_architect", "Master Architect", "Create 10 systems",
           _SYSTEM, const.METRIC_SYSTEMS_CREATED, 10, 500, _GOLD, "🏛️"),
    _entry("perfect_day", "Perfect Day", "Complete all tasks in a system for 1 day",
           _SYSTEM, const.METRIC_PERFECT_DAY_STREAK, 1, 50, _BRONZE, "✨"),
    _entry("perfect_week", "Perfect Week",
           "Complete all tasks in a system for 7 days",
           _SYSTEM, const.METRIC_PERFECT_DAY_STREAK, 7, 250, _SILVER, "🌈"),
    _entry("system_champion", "System Champion",
           "Reach 90% consistency in any system",
           _SYSTEM, const.METRIC_CONSISTENCY_PERCENT, 90, 300, _GOLD, "🥇"),
    # Tasks
    _entry("task_master", "Task Master", "Complete 10 tasks total",
           _TASK, const.METRIC_TOTAL_COMPLETIONS, 10, 20, _BRONZE, "✔️"),
    _entry("century_of_tasks", "Century of Tasks", "Complete 100 tasks total",
           _TASK, const.METRIC_TOTAL_COMPLETIONS, 100, 100, _SILVER, "💯"),
    _entry("thousand_strong", "Thousand Strong", "Complete 1000 tasks total",
           _TASK, const.METRIC_TOTAL_COMPLETIONS, 1000, 1000, _PLATINUM, "🎯"),
    # Consistency
    _entry("habit_starter", "Habit Starter", "Reach 50% consistency for 1 week",
           _CONSISTENCY, const.METRIC_CONSISTENCY_PERCENT_7D, 50, 25, _BRONZE, "🌱"),
    _entry("getting_there", "Getting There", "Reach 70% consistency for 2 weeks",
           _CONSISTENCY, const.METRIC_CONSISTENCY_PERCENT_14D, 70, 75, _BRONZE, "🌿"),
    _entry("solid_foundation", "Solid Foundation",
           "Reach 80% consistency for 1 month",
           _CONSISTENCY, const.METRIC_CONSISTENCY_PERCENT_30D, 80, 200, _SILVER, "🌳"),
    _entry("elite_performer", "Elite Performer",
           "Reach 90% consistency for 1 month",
           _CONSISTENCY, const.METRIC_CONSISTENCY_PERCENT_30D, 90, 500, _GOLD, "🌲"),
    _entry("perfection", "Perfection", "Reach 100% consistency for 1 week",
           _CONSISTENCY, const.METRIC_CONSISTENCY_PERCENT_7D, 100, 300, _PLATINUM, "💎"),
    # Special
    _entry("comeback_kid", "Comeback Kid", "Return after a 7+ day break",
           _SPECIAL, const.METRIC_COMEBACKS, 1, 50, _BRONZE, "🔄"),
    _entry("habit_breaker", "Habit Breaker",
           "Complete 30 days of a negative habit reduction",
           _SPECIAL, const.METRIC_NEGATIVE_HABIT_DAYS, 30, 300, _SILVER, "🚫"),
    _entry("time_reducer", "Time Reducer", "Reduce a negative habit to target limit",
           _SPECIAL, const.METRIC_LIMITS_REACHED, 1, 500, _GOLD, "⏰"),
    _entry("organized", "Organized", "Set cue time for 5 tasks",
           _SPECIAL, const.METRIC_CUE_TIME_TASKS, 5, 75, _BRONZE, "⏰"),
)  # fmt: skip

ACHIEVEMENT_KEYS: Final[tuple[str, ...]] = tuple(
    entry[const.DATA_ACHIEVEMENT_KEY] for entry in ACHIEVEMENT_CATALOG
)
