"""Streak Engine - "never miss twice" streak calculation.

This engine provides stateless, pure Python functions for:
- Indexing a task's logs once into a timeline of due units
- Current streak under the grace rule (single backward pass)
- Longest streak under the same rule (single forward fold)
- Streak health for "protect your streak" alerts

A *unit* is a due date for fixed-pattern frequencies, or a Monday-start week
for WeeklyTarget. A unit is a hit when it was completed (a week is a hit when
its quota was met) and a miss otherwise. Any isolated miss is forgiven; two
consecutive misses end the streak. The unit containing `as_of` is still in
progress: it counts when already completed and is skipped otherwise.

ARCHITECTURE: Pure logic. The caller supplies the task and its logs; nothing
is cached or persisted here.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date
from typing import TYPE_CHECKING

from .. import const
from ..utils.dt_utils import dt_today_local, start_of_week, to_local_date
from .schedule_engine import Frequency, ScheduleEngine, WeeklyTarget, coerce_frequency

if TYPE_CHECKING:
    from ..type_defs import DateInput, LogData, TaskData


# =============================================================================
# TASK TIMELINE
# =============================================================================


def effective_start(
    task: TaskData, system_created_at: DateInput | None = None
) -> date | None:
    """Return the first date a task can be due.

    The later of the task's and its system's creation dates. None when the
    task has no readable creation date.
    """
    task_start = to_local_date(task.get(const.DATA_CREATED_AT))
    system_start = to_local_date(system_created_at)
    if task_start is None:
        return None
    if system_start is not None and system_start > task_start:
        return system_start
    return task_start


def completed_dates(logs: Iterable[LogData], start: date, end: date) -> frozenset[date]:
    """Index logs into the set of completed dates within [start, end].

    Duplicate logs on one date collapse to a single completion. Logs dated
    before `start` (legacy data) or after `end` are ignored.
    """
    dates: set[date] = set()
    for log in logs:
        log_date = to_local_date(log.get(const.DATA_LOG_DATE))
        if log_date is None:
            const.LOGGER.debug(
                "Skipping log %s with unreadable date", log.get(const.DATA_INTERNAL_ID)
            )
            continue
        if start <= log_date <= end:
            dates.add(log_date)
    return frozenset(dates)


@dataclass(frozen=True)
class TaskTimeline:
    """A task's due units between its effective start and `end`.

    Attributes:
        frequency: The task's frequency variant
        start: Effective start date, or None if the task is unreadable
        end: The as-of date (inclusive)
        completed: Distinct completed dates within [start, end]
    """

    frequency: Frequency
    start: date | None
    end: date
    completed: frozenset[date] = field(default_factory=frozenset)

    @classmethod
    def build(
        cls,
        task: TaskData,
        logs: Iterable[LogData],
        as_of: date | None = None,
        system_created_at: DateInput | None = None,
    ) -> TaskTimeline:
        """Build a timeline for `task` as of `as_of` (defaults to today)."""
        end = as_of or dt_today_local()
        frequency = coerce_frequency(task.get(const.DATA_TASK_FREQUENCY))
        start = effective_start(task, system_created_at)
        if start is None or start > end:
            return cls(frequency=frequency, start=start, end=end)
        return cls(
            frequency=frequency,
            start=start,
            end=end,
            completed=completed_dates(logs, start, end),
        )

    @property
    def is_empty(self) -> bool:
        """True when no date in the timeline can be due."""
        return self.start is None or self.start > self.end

    @property
    def weekly_target(self) -> int | None:
        """The quota for WeeklyTarget frequencies, else None."""
        if isinstance(self.frequency, WeeklyTarget):
            return self.frequency.times
        return None

    def due_dates(self) -> list[date]:
        """Ascending due dates (empty for WeeklyTarget)."""
        if self.start is None:
            return []
        return ScheduleEngine.due_dates(self.frequency, self.start, self.end)

    def week_counts(self) -> Counter[date]:
        """Completion counts keyed by the Monday of each week."""
        return Counter(start_of_week(day) for day in self.completed)

    def units(self) -> list[tuple[date, bool]]:
        """Every unit from start through end as (unit date, hit), ascending.

        Units are due dates, or week starts for WeeklyTarget. The last unit
        may be the one still in progress.
        """
        if self.is_empty or self.start is None:
            return []

        match self.frequency:
            case WeeklyTarget(times=times):
                if times <= 0:
                    const.LOGGER.debug(
                        "TaskTimeline: non-positive weekly target %s, no units", times
                    )
                    return []
                counts = self.week_counts()
                return [
                    (week_start, counts[week_start] >= times)
                    for week_start, _ in ScheduleEngine.week_windows(
                        self.start, self.end
                    )
                ]
            case _:
                return [(day, day in self.completed) for day in self.due_dates()]

    def outcomes(self) -> list[bool]:
        """Hit/miss per elapsed unit, ascending.

        The unit containing `end` is included only when already a hit; an
        unfinished current unit is never a miss.
        """
        units = self.units()
        if not units:
            return []
        last_unit, last_hit = units[-1]
        if not last_hit and self._contains_end(last_unit):
            units = units[:-1]
        return [hit for _, hit in units]

    def _contains_end(self, unit: date) -> bool:
        """True when `unit` is the in-progress unit for `end`."""
        if self.weekly_target is not None:
            return unit == start_of_week(self.end)
        return unit == self.end


# =============================================================================
# STREAK ENGINE
# =============================================================================


class StreakEngine:
    """Pure logic engine for "never miss twice" streaks.

    All methods are static - no instance state.
    """

    @staticmethod
    def streak_from_outcomes(
        outcomes: list[bool],
        max_consecutive_misses: int = const.STREAK_MAX_CONSECUTIVE_MISSES,
    ) -> int:
        """Count hits backward from the newest outcome until the streak ends.

        Args:
            outcomes: Hit/miss per elapsed unit, ascending
            max_consecutive_misses: Consecutive misses that end a streak

        Returns:
            Number of hits before the terminating run of misses.

        Examples:
            [H, H, M, H] → 3 (single miss forgiven)
            [H, M, M, H] → 1 (second consecutive miss ends it)
            [H, M, H, M, H] → 3 (isolated misses forgiven repeatedly)
        """
        streak = 0
        misses = 0
        for hit in reversed(outcomes):
            if hit:
                streak += 1
                misses = 0
                continue
            misses += 1
            if misses >= max_consecutive_misses:
                break
        return streak

    @staticmethod
    def longest_from_outcomes(
        outcomes: list[bool],
        max_consecutive_misses: int = const.STREAK_MAX_CONSECUTIVE_MISSES,
    ) -> int:
        """Return the best streak anywhere in the history (forward fold)."""
        longest = 0
        run = 0
        misses = 0
        for hit in outcomes:
            if hit:
                run += 1
                misses = 0
                longest = max(longest, run)
                continue
            misses += 1
            if misses >= max_consecutive_misses:
                run = 0
        return longest

    @staticmethod
    def current_streak(
        task: TaskData,
        logs: Iterable[LogData],
        as_of: date | None = None,
        system_created_at: DateInput | None = None,
    ) -> int:
        """Return the task's current streak as of `as_of`.

        Days for fixed-pattern frequencies, weeks for WeeklyTarget.

        Args:
            task: Task definition
            logs: The task's logs, in any order
            as_of: Reference date (defaults to today, local)
            system_created_at: Owning system's creation timestamp, if known

        Returns:
            Streak length >= 0. Degenerate tasks (no due dates, non-positive
            weekly target, unreadable creation date) return 0.
        """
        timeline = TaskTimeline.build(task, logs, as_of, system_created_at)
        return StreakEngine.streak_from_outcomes(timeline.outcomes())

    @staticmethod
    def longest_streak(
        task: TaskData,
        logs: Iterable[LogData],
        as_of: date | None = None,
        system_created_at: DateInput | None = None,
    ) -> int:
        """Return the longest streak the task ever reached as of `as_of`."""
        timeline = TaskTimeline.build(task, logs, as_of, system_created_at)
        return StreakEngine.longest_from_outcomes(timeline.outcomes())

    @staticmethod
    def streak_status(
        task: TaskData,
        logs: Iterable[LogData],
        as_of: date | None = None,
        system_created_at: DateInput | None = None,
    ) -> str:
        """Classify streak health.

        Returns:
            STREAK_STATUS_NONE: nothing has elapsed yet
            STREAK_STATUS_BROKEN: streak is 0
            STREAK_STATUS_AT_RISK: streak alive but the latest elapsed unit
                was missed, so one more miss ends it
            STREAK_STATUS_HEALTHY: streak alive and the latest unit was a hit
        """
        timeline = TaskTimeline.build(task, logs, as_of, system_created_at)
        outcomes = timeline.outcomes()
        if not outcomes:
            return const.STREAK_STATUS_NONE
        if StreakEngine.streak_from_outcomes(outcomes) == 0:
            return const.STREAK_STATUS_BROKEN
        if not outcomes[-1]:
            return const.STREAK_STATUS_AT_RISK
        return const.STREAK_STATUS_HEALTHY
