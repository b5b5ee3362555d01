"""Statistics Engine - completion rates, weekly progress and system consistency.

This engine aggregates a task's log history into the numbers the dashboard
and the achievement evaluator consume:
- Completion rate over due units (lifetime or a trailing window)
- Completions and progress for the current Monday-start week
- System consistency (mean task completion rate)
- Today's completion rate and the perfect-day streak for a system
- The EngineStats roll-up for GamificationEngine

Design Principles:
    - Stateless: operates only on the snapshot passed in
    - Recomputed: every figure is derived from the current frequency and the
      full log history, never from cached counters
    - Order-independent: logs may arrive in any order and in any batching
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Mapping
import dataclasses
from datetime import date, timedelta
from typing import TYPE_CHECKING

from .. import const
from ..utils.dt_utils import (
    days_between,
    dt_today_local,
    iter_days,
    start_of_week,
    to_local_date,
)
from ..utils.math_utils import mean, round_ratio, safe_ratio, whole_percent
from .limit_engine import TimeLimitEngine
from .schedule_engine import ScheduleEngine, WeeklyTarget, coerce_frequency
from .streak_engine import StreakEngine, TaskTimeline, completed_dates, effective_start

if TYPE_CHECKING:
    from ..type_defs import (
        DateInput,
        EngineStats,
        LogData,
        SystemData,
        TaskData,
        TaskId,
        WeeklyProgress,
    )


class StatisticsEngine:
    """Read-only aggregation over tasks, systems and logs.

    All methods are static. Dates default to today in the configured local
    timezone; pass `today` explicitly for deterministic results.

    Example:
        rate = StatisticsEngine.completion_rate(task, logs, today=date(2025, 3, 1))
        stats = StatisticsEngine.build_stats(systems, tasks, logs_by_task)
    """

    # ────────────────────────────────────────────────────────────────
    # Snapshot Helpers
    # ────────────────────────────────────────────────────────────────

    @staticmethod
    def group_logs_by_task(logs: Iterable[LogData]) -> dict[TaskId, list[LogData]]:
        """Group a flat log list by `task_id`, preserving input order."""
        grouped: dict[TaskId, list[LogData]] = defaultdict(list)
        for log in logs:
            grouped[log.get(const.DATA_LOG_TASK_ID)].append(log)
        return dict(grouped)

    @staticmethod
    def system_tasks(
        system: SystemData, tasks: Mapping[TaskId, TaskData]
    ) -> list[TaskData]:
        """Resolve a system's ordered task ids against the task index.

        Dangling ids are logged and skipped.
        """
        resolved: list[TaskData] = []
        for task_id in system.get(const.DATA_SYSTEM_TASK_IDS, []):
            task = tasks.get(task_id)
            if task is None:
                const.LOGGER.warning(
                    "System %s references unknown task %s",
                    system.get(const.DATA_INTERNAL_ID),
                    task_id,
                )
                continue
            resolved.append(task)
        return resolved

    @staticmethod
    def task_timeline(
        task: TaskData,
        logs: Iterable[LogData],
        today: date | None = None,
        system_created_at: DateInput | None = None,
        window: int | None = None,
    ) -> TaskTimeline:
        """Build a task timeline, optionally limited to a trailing window.

        Args:
            window: Number of days ending at `today`; None means lifetime.
                A non-positive window yields an empty timeline.
        """
        timeline = TaskTimeline.build(task, logs, today, system_created_at)
        if window is None or timeline.start is None or timeline.is_empty:
            return timeline
        if window <= 0:
            const.LOGGER.debug("Non-positive window %s, nothing is due", window)
            return dataclasses.replace(timeline, start=None, completed=frozenset())

        window_start = timeline.end - timedelta(days=window - 1)
        if timeline.weekly_target is not None:
            # Quota weeks are scored whole
            window_start = start_of_week(window_start)
        if timeline.start >= window_start:
            return timeline
        return dataclasses.replace(
            timeline,
            start=window_start,
            completed=frozenset(d for d in timeline.completed if d >= window_start),
        )

    # ────────────────────────────────────────────────────────────────
    # Per-Task Statistics
    # ────────────────────────────────────────────────────────────────

    @staticmethod
    def timeline_completion_rate(timeline: TaskTimeline) -> float:
        """Return the completion rate of a prepared timeline."""
        if timeline.is_empty or timeline.start is None:
            return 0.0

        match timeline.frequency:
            case WeeklyTarget(times=times):
                if times <= 0:
                    return 0.0
                counts = timeline.week_counts()
                weeks = [
                    week_start
                    for week_start, week_end in ScheduleEngine.week_windows(
                        timeline.start, timeline.end
                    )
                    if week_end < timeline.end or counts[week_start] >= times
                ]
                achieved = sum(min(counts[week_start], times) for week_start in weeks)
                return safe_ratio(achieved, times * len(weeks))
            case _:
                due = timeline.due_dates()
                hits = sum(1 for day in due if day in timeline.completed)
                return safe_ratio(hits, len(due))

    @staticmethod
    def completion_rate(
        task: TaskData,
        logs: Iterable[LogData],
        today: date | None = None,
        system_created_at: DateInput | None = None,
        window: int | None = None,
    ) -> float:
        """Return the task's completion rate in [0, 1].

        Fixed patterns: hits on due dates / due dates from the effective
        start through `today` inclusive. Logs on non-due dates are ignored.

        WeeklyTarget: sum(min(week count, times)) / (times * weeks), where
        weeks are the Monday-start windows intersecting the range. A window
        is widened back to its first Monday so every week is scored whole,
        and the week containing `today` counts only once its quota is met.

        Returns 0.0 when nothing is due or the weekly target is not positive.
        """
        timeline = StatisticsEngine.task_timeline(
            task, logs, today, system_created_at, window
        )
        return StatisticsEngine.timeline_completion_rate(timeline)

    @staticmethod
    def completions_this_week(
        task: TaskData,
        logs: Iterable[LogData],
        today: date | None = None,
        system_created_at: DateInput | None = None,
    ) -> int:
        """Count distinct completions inside the week containing `today`.

        For fixed patterns only completions on due dates count.
        """
        today = today or dt_today_local()
        week_start, week_end = ScheduleEngine.weekly_window(today)
        start = effective_start(task, system_created_at)
        if start is None or start > week_end:
            return 0

        frequency = coerce_frequency(task.get(const.DATA_TASK_FREQUENCY))
        dates = completed_dates(logs, max(week_start, start), week_end)
        if ScheduleEngine.is_weekly_target(frequency):
            return len(dates)
        return sum(1 for day in dates if ScheduleEngine.is_due(frequency, day))

    @staticmethod
    def weekly_progress(
        task: TaskData,
        logs: Iterable[LogData],
        today: date | None = None,
        system_created_at: DateInput | None = None,
    ) -> WeeklyProgress:
        """Return completions vs. target for the current week.

        The target is `times` for WeeklyTarget and the number of due dates
        in the week (on or after the effective start) otherwise.
        """
        today = today or dt_today_local()
        week_start, week_end = ScheduleEngine.weekly_window(today)
        frequency = coerce_frequency(task.get(const.DATA_TASK_FREQUENCY))
        completions = StatisticsEngine.completions_this_week(
            task, logs, today, system_created_at
        )

        match frequency:
            case WeeklyTarget(times=times):
                target = max(times, 0)
            case _:
                start = effective_start(task, system_created_at)
                target = (
                    len(
                        ScheduleEngine.due_dates(
                            frequency, max(week_start, start), week_end
                        )
                    )
                    if start is not None
                    else 0
                )

        return {
            "week_start": week_start,
            "week_end": week_end,
            "completions": completions,
            "target": target,
            "fraction": round_ratio(min(1.0, safe_ratio(completions, target))),
        }

    # ────────────────────────────────────────────────────────────────
    # System Statistics
    # ────────────────────────────────────────────────────────────────

    @staticmethod
    def system_consistency(
        system: SystemData,
        tasks: Mapping[TaskId, TaskData],
        logs_by_task: Mapping[TaskId, list[LogData]],
        window: int | None = None,
        today: date | None = None,
    ) -> float:
        """Return the mean completion rate of the system's tasks.

        Every task counts, including degenerate ones (rate 0.0). A system
        with no tasks has consistency 0.0.

        Args:
            system: The system
            tasks: Task index keyed by id
            logs_by_task: Logs keyed by task id
            window: Trailing days ending at `today`; None means lifetime
            today: Reference date (defaults to today, local)
        """
        today = today or dt_today_local()
        system_created_at = system.get(const.DATA_CREATED_AT)
        return mean(
            StatisticsEngine.completion_rate(
                task,
                logs_by_task.get(task.get(const.DATA_INTERNAL_ID), []),
                today,
                system_created_at,
                window,
            )
            for task in StatisticsEngine.system_tasks(system, tasks)
        )

    @staticmethod
    def _fixed_timelines(
        system: SystemData,
        tasks: Mapping[TaskId, TaskData],
        logs_by_task: Mapping[TaskId, list[LogData]],
        today: date,
    ) -> list[tuple[frozenset[date], frozenset[date]]]:
        """Return (due dates, completed dates) for each fixed-pattern task."""
        system_created_at = system.get(const.DATA_CREATED_AT)
        result: list[tuple[frozenset[date], frozenset[date]]] = []
        for task in StatisticsEngine.system_tasks(system, tasks):
            timeline = TaskTimeline.build(
                task,
                logs_by_task.get(task.get(const.DATA_INTERNAL_ID), []),
                today,
                system_created_at,
            )
            if timeline.weekly_target is not None:
                continue
            result.append((frozenset(timeline.due_dates()), timeline.completed))
        return result

    @staticmethod
    def today_completion_rate(
        system: SystemData,
        tasks: Mapping[TaskId, TaskData],
        logs_by_task: Mapping[TaskId, list[LogData]],
        today: date | None = None,
    ) -> float:
        """Return the share of today's due fixed-pattern tasks already done.

        Returns 0.0 when nothing is due today.
        """
        today = today or dt_today_local()
        timelines = StatisticsEngine._fixed_timelines(system, tasks, logs_by_task, today)
        due_today = [completed for due, completed in timelines if today in due]
        done = sum(1 for completed in due_today if today in completed)
        return round_ratio(safe_ratio(done, len(due_today)))

    @staticmethod
    def perfect_day_streak(
        system: SystemData,
        tasks: Mapping[TaskId, TaskData],
        logs_by_task: Mapping[TaskId, list[LogData]],
        today: date | None = None,
    ) -> int:
        """Count consecutive days on which every due fixed-pattern task was done.

        Days with nothing due are skipped. An incomplete `today` is skipped
        rather than breaking the streak. The walk stops at the system's
        creation date. There is no grace: one imperfect day ends the streak.
        """
        today = today or dt_today_local()
        timelines = StatisticsEngine._fixed_timelines(system, tasks, logs_by_task, today)
        if not timelines:
            return 0

        floor = to_local_date(system.get(const.DATA_CREATED_AT)) or min(
            (min(due) for due, _ in timelines if due), default=today
        )
        streak = 0
        for offset in range(days_between(floor, today) + 1):
            day = today - timedelta(days=offset)
            due_tasks = [completed for due, completed in timelines if day in due]
            if not due_tasks:
                continue
            if all(day in completed for completed in due_tasks):
                streak += 1
            elif day == today:
                continue
            else:
                break
        return streak

    # ────────────────────────────────────────────────────────────────
    # Engine Stats Roll-up
    # ────────────────────────────────────────────────────────────────

    @staticmethod
    def _has_comeback(completed: frozenset[date]) -> bool:
        """True when consecutive completions are COMEBACK_GAP_DAYS or more apart."""
        ordered = sorted(completed)
        return any(
            days_between(earlier, later) >= const.COMEBACK_GAP_DAYS
            for earlier, later in zip(ordered, ordered[1:], strict=False)
        )

    @staticmethod
    def build_stats(
        systems: Mapping[str, SystemData],
        tasks: Mapping[TaskId, TaskData],
        logs_by_task: Mapping[TaskId, list[LogData]],
        today: date | None = None,
    ) -> EngineStats:
        """Roll the snapshot up into the metrics achievements read.

        Args:
            systems: System index keyed by id
            tasks: Task index keyed by id
            logs_by_task: Logs keyed by task id
            today: Reference date (defaults to today, local)

        Returns:
            EngineStats with every METRIC_* key populated.
        """
        today = today or dt_today_local()

        best_streak = 0
        weekly_target_streak = 0
        total_completions = 0
        negative_habit_days = 0
        limits_reached = 0
        cue_time_tasks = 0
        comebacks = 0

        for task_id, task in tasks.items():
            system = systems.get(task.get(const.DATA_TASK_SYSTEM_ID)) or {}
            system_created_at = system.get(const.DATA_CREATED_AT)
            logs = logs_by_task.get(task_id, [])
            timeline = TaskTimeline.build(task, logs, today, system_created_at)
            streak = StreakEngine.streak_from_outcomes(timeline.outcomes())

            if timeline.weekly_target is not None:
                weekly_target_streak = max(weekly_target_streak, streak)
            else:
                best_streak = max(best_streak, streak)

            total_completions += len(timeline.completed)
            if task.get(const.DATA_TASK_HABIT_TYPE) == const.HABIT_TYPE_NEGATIVE:
                negative_habit_days += len(timeline.completed)
                if TimeLimitEngine.reached_target(task, logs, today, system_created_at):
                    limits_reached += 1
            if task.get(const.DATA_TASK_CUE_TIME) is not None:
                cue_time_tasks += 1
            if StatisticsEngine._has_comeback(timeline.completed):
                comebacks += 1

        perfect_day_streak = 0
        consistency: dict[str, int] = {const.METRIC_CONSISTENCY_PERCENT: 0}
        consistency.update(
            dict.fromkeys(const.CONSISTENCY_WINDOW_METRICS.values(), 0)
        )
        for system in systems.values():
            perfect_day_streak = max(
                perfect_day_streak,
                StatisticsEngine.perfect_day_streak(system, tasks, logs_by_task, today),
            )
            consistency[const.METRIC_CONSISTENCY_PERCENT] = max(
                consistency[const.METRIC_CONSISTENCY_PERCENT],
                whole_percent(
                    StatisticsEngine.system_consistency(
                        system, tasks, logs_by_task, None, today
                    )
                ),
            )
            for window, metric in const.CONSISTENCY_WINDOW_METRICS.items():
                consistency[metric] = max(
                    consistency[metric],
                    whole_percent(
                        StatisticsEngine.system_consistency(
                            system, tasks, logs_by_task, window, today
                        )
                    ),
                )

        stats: EngineStats = {
            const.METRIC_BEST_STREAK: best_streak,
            const.METRIC_WEEKLY_TARGET_STREAK: weekly_target_streak,
            const.METRIC_TOTAL_COMPLETIONS: total_completions,
            const.METRIC_SYSTEMS_CREATED: len(systems),
            const.METRIC_PERFECT_DAY_STREAK: perfect_day_streak,
            const.METRIC_NEGATIVE_HABIT_DAYS: negative_habit_days,
            const.METRIC_LIMITS_REACHED: limits_reached,
            const.METRIC_CUE_TIME_TASKS: cue_time_tasks,
            const.METRIC_COMEBACKS: comebacks,
            **consistency,
        }
        const.LOGGER.debug(
            "Built stats for %d systems, %d tasks: %s", len(systems), len(tasks), stats
        )
        return stats

    @staticmethod
    def daily_completion_counts(
        logs_by_task: Mapping[TaskId, list[LogData]], start: date, end: date
    ) -> dict[date, int]:
        """Return distinct task completions per day in [start, end].

        Days without completions map to 0. Used by history charts.
        """
        counts = dict.fromkeys(iter_days(start, end), 0)
        for logs in logs_by_task.values():
            for day in completed_dates(logs, start, end):
                counts[day] += 1
        return counts
