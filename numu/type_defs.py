"""Type definitions for Numu data structures.

Entities arrive from the persistence collaborator as plain dictionaries, so
they are described with TypedDict. References between entities are string
identifiers (a task's `system_id`, a log's `task_id`) resolved through an
index by the caller, never live object references.

The one exception is `Frequency`, a closed sum of frozen dataclasses defined
in engines/schedule_engine.py so that every consumer can `match` on it.

IMPORTANT: This file must NOT import engine modules at runtime.
Only import from typing (type machinery).

NOTE: TypedDict is STATIC ANALYSIS ONLY. The engines still read entities with
`.get()` defaults because legacy records may be missing fields.
"""

from datetime import date, datetime, time
from typing import TYPE_CHECKING, Any, NotRequired, TypedDict

if TYPE_CHECKING:
    from .engines.schedule_engine import Frequency

# =============================================================================
# Type Aliases (for readability)
# =============================================================================

SystemId = str  # UUID string
TaskId = str  # UUID string
LogId = str  # UUID string
AchievementKey = str  # Stable catalog key, e.g. "week_warrior"
DateInput = date | datetime | str  # Anything dt_utils.to_local_date() accepts


# =============================================================================
# Core Entities
# =============================================================================


class SystemData(TypedDict):
    """A system groups related tasks under one identity-based goal.

    The system's creation timestamp is the lower bound for due-date
    computation of every task it owns.
    """

    internal_id: SystemId
    name: str
    category: str  # SYSTEM_CATEGORY_* constant
    created_at: DateInput
    task_ids: list[TaskId]  # Ordered, exclusively owned


class TimeLimitConfig(TypedDict, total=False):
    """Gradual-reduction allowance for a negative habit (minutes per day)."""

    baseline_minutes: int  # Starting allowance
    target_minutes: int  # Floor the allowance shrinks towards
    reduction_percentage: float  # Weekly reduction on success (default 0.17)


class TaskData(TypedDict):
    """A recurring habit inside a system."""

    internal_id: TaskId
    system_id: SystemId  # Non-owning back reference
    name: str
    frequency: "Frequency"
    habit_type: str  # HABIT_TYPE_POSITIVE | HABIT_TYPE_NEGATIVE
    created_at: DateInput
    cue_time: NotRequired[time | None]
    time_limit: NotRequired[TimeLimitConfig | None]


class LogData(TypedDict):
    """One logged completion of a task on a calendar date.

    At most one authoritative log exists per task per date; engines collapse
    duplicates defensively.
    """

    internal_id: LogId
    task_id: TaskId  # Non-owning back reference
    date: DateInput  # Day granularity, local calendar
    note: NotRequired[str | None]
    satisfaction: NotRequired[int | None]  # 1-5
    minutes_spent: NotRequired[int | None]  # Meaningful for negative habits
    synced: NotRequired[bool]  # True when created by an external sync
    synced_value: NotRequired[float | None]


# =============================================================================
# Gamification
# =============================================================================


class AchievementData(TypedDict):
    """An unlockable achievement.

    Created once from the static catalog by seed_achievements(); afterwards
    only `progress`, `unlocked` and `unlocked_at` change.
    """

    key: AchievementKey
    name: str
    description: str
    category: str  # ACHIEVEMENT_CATEGORY_* constant
    metric: str  # METRIC_* constant read from EngineStats
    criteria: int  # Threshold
    progress: int  # Current value, clamped to [0, criteria]
    unlocked: bool
    unlocked_at: datetime | None
    xp_reward: int
    tier: str  # ACHIEVEMENT_TIER_* constant
    badge: NotRequired[str]


class ProgressLedger(TypedDict):
    """Aggregate owner of earned XP."""

    total_xp: int
    level: int
    recently_unlocked: list[AchievementKey]


class EngineStats(TypedDict, total=False):
    """Aggregated statistics consumed by GamificationEngine.

    Produced by StatisticsEngine.build_stats(). Keys mirror METRIC_* constants.
    """

    best_streak: int
    weekly_target_streak: int
    total_completions: int
    systems_created: int
    perfect_day_streak: int
    consistency_percent: int
    consistency_percent_7d: int
    consistency_percent_14d: int
    consistency_percent_30d: int
    negative_habit_days: int
    limits_reached: int
    cue_time_tasks: int
    comebacks: int


class CriterionResult(TypedDict):
    """The result of checking one achievement criterion."""

    metric: str
    met: bool
    progress: float  # 0.0 to 1.0 (capped at 1.0)
    threshold: int
    current_value: int
    reason: str


class EvaluationResult(TypedDict):
    """The raw verdict on one achievement.

    Returned by GamificationEngine.evaluate_achievement(). The reducer in
    GamificationEngine.evaluate() decides whether it is a new unlock.
    """

    achievement_key: AchievementKey
    achievement_name: str
    criteria_met: bool
    already_unlocked: bool
    criterion: CriterionResult


# =============================================================================
# Statistics Results
# =============================================================================


class WeeklyProgress(TypedDict):
    """Current-week progress for a task."""

    week_start: date
    week_end: date
    completions: int
    target: int
    fraction: float  # completions / target, capped at 1.0


# =============================================================================
# Collection Type Aliases
# =============================================================================

SystemsCollection = dict[SystemId, SystemData]
TasksCollection = dict[TaskId, TaskData]
LogsByTask = dict[TaskId, list[LogData]]

# Stored frequency payload ({"type": ..., "days": [...], "times": n})
FrequencyPayload = dict[str, Any]
