# File: __init__.py
"""Numu scheduling and consistency engine.

Answers four questions over a caller-supplied snapshot of systems, tasks and
logs:

- Was a task due on a date? (is_due, weekly_window)
- What is its "never miss twice" streak? (current_streak)
- How consistent is a task or system? (completion_rate,
  completions_this_week, system_consistency)
- Which achievements unlock and for how much XP? (build_stats,
  seed_achievements, evaluate)

Everything is pure and synchronous. "Today" defaults to the local date in
the timezone configured with utils.dt_utils.set_default_timezone().
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import date, datetime
from typing import TYPE_CHECKING, Any

from . import const
from .engines import (
    Daily,
    Frequency,
    GamificationEngine,
    InvalidFrequencyError,
    ScheduleEngine,
    SpecificDays,
    StatisticsEngine,
    StreakEngine,
    Weekdays,
    Weekends,
    WeeklyTarget,
    coerce_frequency,
    frequency_from_dict,
    frequency_to_dict,
)

if TYPE_CHECKING:
    from .type_defs import (
        AchievementData,
        DateInput,
        EngineStats,
        LogData,
        SystemData,
        TaskData,
        TaskId,
    )

__all__ = [
    "Daily",
    "Frequency",
    "InvalidFrequencyError",
    "SpecificDays",
    "Weekdays",
    "Weekends",
    "WeeklyTarget",
    "build_stats",
    "completion_rate",
    "completions_this_week",
    "const",
    "current_streak",
    "evaluate",
    "frequency_from_dict",
    "frequency_to_dict",
    "is_due",
    "seed_achievements",
    "system_consistency",
    "weekly_window",
]


def is_due(frequency: Frequency | dict[str, Any], day: date) -> bool:
    """Return True if a fixed-pattern frequency requires activity on `day`."""
    return ScheduleEngine.is_due(coerce_frequency(frequency), day)


def weekly_window(day: date) -> tuple[date, date]:
    """Return the Monday-start week window containing `day`."""
    return ScheduleEngine.weekly_window(day)


def current_streak(
    task: TaskData,
    logs: Iterable[LogData],
    as_of: date | None = None,
    system_created_at: DateInput | None = None,
) -> int:
    """Return the task's current streak (days, or weeks for WeeklyTarget)."""
    return StreakEngine.current_streak(task, logs, as_of, system_created_at)


def completion_rate(
    task: TaskData,
    logs: Iterable[LogData],
    today: date | None = None,
    system_created_at: DateInput | None = None,
) -> float:
    """Return the task's lifetime completion rate in [0, 1]."""
    return StatisticsEngine.completion_rate(task, logs, today, system_created_at)


def completions_this_week(
    task: TaskData,
    logs: Iterable[LogData],
    today: date | None = None,
    system_created_at: DateInput | None = None,
) -> int:
    """Return completions counted toward the week containing `today`."""
    return StatisticsEngine.completions_this_week(task, logs, today, system_created_at)


def system_consistency(
    system: SystemData,
    tasks: Mapping[TaskId, TaskData],
    logs_by_task: Mapping[TaskId, list[LogData]],
    window: int | None = None,
    today: date | None = None,
) -> float:
    """Return the mean completion rate of the system's tasks."""
    return StatisticsEngine.system_consistency(system, tasks, logs_by_task, window, today)


def build_stats(
    systems: Mapping[str, SystemData],
    tasks: Mapping[TaskId, TaskData],
    logs_by_task: Mapping[TaskId, list[LogData]],
    today: date | None = None,
) -> EngineStats:
    """Roll a snapshot up into the metrics achievements read."""
    return StatisticsEngine.build_stats(systems, tasks, logs_by_task, today)


def seed_achievements(
    existing: Iterable[AchievementData] | None = None,
) -> list[AchievementData]:
    """Merge the achievement catalog into stored achievements."""
    return GamificationEngine.seed_achievements(existing)


def evaluate(
    stats: EngineStats,
    achievements: Iterable[AchievementData],
    now: datetime | None = None,
) -> tuple[list[AchievementData], int]:
    """Apply stats to achievements, returning updated copies and XP earned."""
    return GamificationEngine.evaluate(stats, achievements, now)
