# File: const.py
"""Constants for the Numu consistency engine.

This file centralizes data keys, enum-like string values, and the tunable
defaults used by the schedule, streak, statistics and gamification engines.
"""

import logging
from typing import Final

# ------------------------------------------------------------------------------------------------
# General
# ------------------------------------------------------------------------------------------------
# Logger
LOGGER = logging.getLogger(__package__)

# ------------------------------------------------------------------------------------------------
# Weekdays
# ------------------------------------------------------------------------------------------------
# Weekday numbers follow the source calendar convention: 1 = Sunday ... 7 = Saturday
WEEKDAY_SUNDAY = 1
WEEKDAY_MONDAY = 2
WEEKDAY_TUESDAY = 3
WEEKDAY_WEDNESDAY = 4
WEEKDAY_THURSDAY = 5
WEEKDAY_FRIDAY = 6
WEEKDAY_SATURDAY = 7

WEEKDAY_NUMBERS: Final[frozenset[int]] = frozenset(range(1, 8))
WEEKDAY_SHORT_NAMES: Final[dict[int, str]] = {
    WEEKDAY_SUNDAY: "Sun",
    WEEKDAY_MONDAY: "Mon",
    WEEKDAY_TUESDAY: "Tue",
    WEEKDAY_WEDNESDAY: "Wed",
    WEEKDAY_THURSDAY: "Thu",
    WEEKDAY_FRIDAY: "Fri",
    WEEKDAY_SATURDAY: "Sat",
}
WORKWEEK_DAYS: Final[frozenset[int]] = frozenset(
    {
        WEEKDAY_MONDAY,
        WEEKDAY_TUESDAY,
        WEEKDAY_WEDNESDAY,
        WEEKDAY_THURSDAY,
        WEEKDAY_FRIDAY,
    }
)
WEEKEND_DAYS: Final[frozenset[int]] = frozenset({WEEKDAY_SATURDAY, WEEKDAY_SUNDAY})

# ------------------------------------------------------------------------------------------------
# Frequency (stored form)
# ------------------------------------------------------------------------------------------------
FREQUENCY_DAILY = "daily"
FREQUENCY_WEEKDAYS = "weekdays"
FREQUENCY_WEEKENDS = "weekends"
FREQUENCY_SPECIFIC_DAYS = "specific_days"
FREQUENCY_WEEKLY_TARGET = "weekly_target"

FREQUENCY_TYPES: Final[tuple[str, ...]] = (
    FREQUENCY_DAILY,
    FREQUENCY_WEEKDAYS,
    FREQUENCY_WEEKENDS,
    FREQUENCY_SPECIFIC_DAYS,
    FREQUENCY_WEEKLY_TARGET,
)

DATA_FREQUENCY_TYPE = "type"
DATA_FREQUENCY_DAYS = "days"
DATA_FREQUENCY_TIMES = "times"

# ------------------------------------------------------------------------------------------------
# Entity Data Keys
# ------------------------------------------------------------------------------------------------
DATA_INTERNAL_ID = "internal_id"
DATA_NAME = "name"
DATA_CREATED_AT = "created_at"

# Systems
DATA_SYSTEM_CATEGORY = "category"
DATA_SYSTEM_TASK_IDS = "task_ids"

# Tasks
DATA_TASK_SYSTEM_ID = "system_id"
DATA_TASK_FREQUENCY = "frequency"
DATA_TASK_HABIT_TYPE = "habit_type"
DATA_TASK_CUE_TIME = "cue_time"
DATA_TASK_TIME_LIMIT = "time_limit"

# Logs
DATA_LOG_TASK_ID = "task_id"
DATA_LOG_DATE = "date"
DATA_LOG_NOTE = "note"
DATA_LOG_SATISFACTION = "satisfaction"
DATA_LOG_MINUTES_SPENT = "minutes_spent"
DATA_LOG_SYNCED = "synced"
DATA_LOG_SYNCED_VALUE = "synced_value"

# Time limits (negative habits)
DATA_LIMIT_BASELINE_MINUTES = "baseline_minutes"
DATA_LIMIT_TARGET_MINUTES = "target_minutes"
DATA_LIMIT_REDUCTION_PERCENTAGE = "reduction_percentage"

# Achievements
DATA_ACHIEVEMENT_KEY = "key"
DATA_ACHIEVEMENT_NAME = "name"
DATA_ACHIEVEMENT_DESCRIPTION = "description"
DATA_ACHIEVEMENT_CATEGORY = "category"
DATA_ACHIEVEMENT_METRIC = "metric"
DATA_ACHIEVEMENT_CRITERIA = "criteria"
DATA_ACHIEVEMENT_PROGRESS = "progress"
DATA_ACHIEVEMENT_UNLOCKED = "unlocked"
DATA_ACHIEVEMENT_UNLOCKED_AT = "unlocked_at"
DATA_ACHIEVEMENT_XP_REWARD = "xp_reward"
DATA_ACHIEVEMENT_TIER = "tier"
DATA_ACHIEVEMENT_BADGE = "badge"

# Progress ledger
DATA_LEDGER_TOTAL_XP = "total_xp"
DATA_LEDGER_LEVEL = "level"
DATA_LEDGER_RECENTLY_UNLOCKED = "recently_unlocked"

# ------------------------------------------------------------------------------------------------
# Habit Types
# ------------------------------------------------------------------------------------------------
HABIT_TYPE_POSITIVE = "positive"
HABIT_TYPE_NEGATIVE = "negative"

# ------------------------------------------------------------------------------------------------
# System Categories
# ------------------------------------------------------------------------------------------------
SYSTEM_CATEGORY_ATHLETICS = "Athletics"
SYSTEM_CATEGORY_HEALTH = "Health"
SYSTEM_CATEGORY_MIND = "Mind"
SYSTEM_CATEGORY_WORK = "Work"
SYSTEM_CATEGORY_RELATIONSHIPS = "Relationships"
SYSTEM_CATEGORY_CREATIVITY = "Creativity"
SYSTEM_CATEGORY_LEARNING = "Learning"
SYSTEM_CATEGORY_LIFESTYLE = "Lifestyle"

SYSTEM_CATEGORIES: Final[tuple[str, ...]] = (
    SYSTEM_CATEGORY_ATHLETICS,
    SYSTEM_CATEGORY_HEALTH,
    SYSTEM_CATEGORY_MIND,
    SYSTEM_CATEGORY_WORK,
    SYSTEM_CATEGORY_RELATIONSHIPS,
    SYSTEM_CATEGORY_CREATIVITY,
    SYSTEM_CATEGORY_LEARNING,
    SYSTEM_CATEGORY_LIFESTYLE,
)

# ------------------------------------------------------------------------------------------------
# Streaks
# ------------------------------------------------------------------------------------------------
# "Never miss twice": this many consecutive missed units end a streak
STREAK_MAX_CONSECUTIVE_MISSES = 2

STREAK_STATUS_HEALTHY = "healthy"
STREAK_STATUS_AT_RISK = "at_risk"
STREAK_STATUS_BROKEN = "broken"
STREAK_STATUS_NONE = "none"

# ------------------------------------------------------------------------------------------------
# Time Limits (negative habits)
# ------------------------------------------------------------------------------------------------
DEFAULT_LIMIT_REDUCTION_PERCENTAGE = 0.17
LIMIT_BLOCK_DAYS = 7
LIMIT_SUCCESS_DAYS_REQUIRED = 4

PERFORMANCE_ZONE_EXCELLENT = "excellent"
PERFORMANCE_ZONE_GOOD = "good"
PERFORMANCE_ZONE_OVER_LIMIT = "over_limit"

# ------------------------------------------------------------------------------------------------
# Statistics
# ------------------------------------------------------------------------------------------------
# Minimum gap between consecutive completions that counts as a comeback
COMEBACK_GAP_DAYS = 7

# ------------------------------------------------------------------------------------------------
# Achievements
# ------------------------------------------------------------------------------------------------
ACHIEVEMENT_CATEGORY_STREAK = "streak"
ACHIEVEMENT_CATEGORY_SYSTEM = "system"
ACHIEVEMENT_CATEGORY_TASK = "task"
ACHIEVEMENT_CATEGORY_CONSISTENCY = "consistency"
ACHIEVEMENT_CATEGORY_SPECIAL = "special"

ACHIEVEMENT_TIER_BRONZE = "bronze"
ACHIEVEMENT_TIER_SILVER = "silver"
ACHIEVEMENT_TIER_GOLD = "gold"
ACHIEVEMENT_TIER_PLATINUM = "platinum"
ACHIEVEMENT_TIER_DIAMOND = "diamond"

# Metrics produced by StatisticsEngine.build_stats()
METRIC_BEST_STREAK = "best_streak"
METRIC_WEEKLY_TARGET_STREAK = "weekly_target_streak"
METRIC_TOTAL_COMPLETIONS = "total_completions"
METRIC_SYSTEMS_CREATED = "systems_created"
METRIC_PERFECT_DAY_STREAK = "perfect_day_streak"
METRIC_CONSISTENCY_PERCENT = "consistency_percent"
METRIC_CONSISTENCY_PERCENT_7D = "consistency_percent_7d"
METRIC_CONSISTENCY_PERCENT_14D = "consistency_percent_14d"
METRIC_CONSISTENCY_PERCENT_30D = "consistency_percent_30d"
METRIC_NEGATIVE_HABIT_DAYS = "negative_habit_days"
METRIC_LIMITS_REACHED = "limits_reached"
METRIC_CUE_TIME_TASKS = "cue_time_tasks"
METRIC_COMEBACKS = "comebacks"

CONSISTENCY_WINDOW_METRICS: Final[dict[int, str]] = {
    7: METRIC_CONSISTENCY_PERCENT_7D,
    14: METRIC_CONSISTENCY_PERCENT_14D,
    30: METRIC_CONSISTENCY_PERCENT_30D,
}

# Metrics each achievement category may read
CATEGORY_METRICS: Final[dict[str, frozenset[str]]] = {
    ACHIEVEMENT_CATEGORY_STREAK: frozenset(
        {METRIC_BEST_STREAK, METRIC_WEEKLY_TARGET_STREAK}
    ),
    ACHIEVEMENT_CATEGORY_SYSTEM: frozenset(
        {
            METRIC_SYSTEMS_CREATED,
            METRIC_PERFECT_DAY_STREAK,
            METRIC_CONSISTENCY_PERCENT,
        }
    ),
    ACHIEVEMENT_CATEGORY_TASK: frozenset({METRIC_TOTAL_COMPLETIONS}),
    ACHIEVEMENT_CATEGORY_CONSISTENCY: frozenset(
        {
            METRIC_CONSISTENCY_PERCENT,
            METRIC_CONSISTENCY_PERCENT_7D,
            METRIC_CONSISTENCY_PERCENT_14D,
            METRIC_CONSISTENCY_PERCENT_30D,
        }
    ),
    ACHIEVEMENT_CATEGORY_SPECIAL: frozenset(
        {
            METRIC_NEGATIVE_HABIT_DAYS,
            METRIC_LIMITS_REACHED,
            METRIC_CUE_TIME_TASKS,
            METRIC_COMEBACKS,
        }
    ),
}

# ------------------------------------------------------------------------------------------------
# Levels
# ------------------------------------------------------------------------------------------------
# XP required for level N (N > 1) = int(LEVEL_XP_BASE * N ** LEVEL_XP_EXPONENT)
LEVEL_XP_BASE = 50.0
LEVEL_XP_EXPONENT = 1.5
LEVEL_MIN = 1

# Level tiers, highest first: (minimum level, tier name)
LEVEL_TIER_BRONZE = "Bronze Beginner"
LEVEL_TIER_SILVER = "Silver Intermediate"
LEVEL_TIER_GOLD = "Gold Advanced"
LEVEL_TIER_PLATINUM = "Platinum Expert"
LEVEL_TIER_DIAMOND = "Diamond Master"
LEVEL_TIERS: Final[tuple[tuple[int, str], ...]] = (
    (100, LEVEL_TIER_DIAMOND),
    (50, LEVEL_TIER_PLATINUM),
    (25, LEVEL_TIER_GOLD),
    (10, LEVEL_TIER_SILVER),
    (LEVEL_MIN, LEVEL_TIER_BRONZE),
)
