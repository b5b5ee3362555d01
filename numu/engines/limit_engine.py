"""Time Limit Engine - gradual reduction of negative-habit allowances.

A negative habit (screen time, snacking, ...) can carry a daily time
allowance that shrinks as the user succeeds:

- The allowance starts at `baseline_minutes`
- Each fully elapsed 7-day block since the effective start is evaluated
- If at least 4 days of the block stayed within the allowance in force at the
  time, the allowance drops by `reduction_percentage` (truncated to whole
  minutes), never below `target_minutes`
- Otherwise the allowance carries over unchanged

The current allowance is always recomputed from the baseline and the log
history; nothing is stored.

ARCHITECTURE: Pure logic. All methods are static.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from datetime import date, timedelta
from typing import TYPE_CHECKING

from .. import const
from ..utils.dt_utils import dt_today_local, iter_days, to_local_date
from ..utils.math_utils import safe_ratio
from .streak_engine import effective_start

if TYPE_CHECKING:
    from ..type_defs import DateInput, LogData, TaskData, TimeLimitConfig


class TimeLimitEngine:
    """Pure logic engine for negative-habit time limits.

    Tasks without a time limit get degenerate answers: a limit of 0, the
    GOOD zone and 0 minutes remaining.
    """

    @staticmethod
    def get_config(task: TaskData) -> TimeLimitConfig | None:
        """Return the task's time-limit config, or None if it has none.

        A config is usable only on a negative habit with a baseline and a
        target.
        """
        if task.get(const.DATA_TASK_HABIT_TYPE) != const.HABIT_TYPE_NEGATIVE:
            return None
        config = task.get(const.DATA_TASK_TIME_LIMIT)
        if not config:
            return None
        if (
            config.get(const.DATA_LIMIT_BASELINE_MINUTES) is None
            or config.get(const.DATA_LIMIT_TARGET_MINUTES) is None
        ):
            const.LOGGER.warning(
                "Task %s has an incomplete time limit %r, ignoring it",
                task.get(const.DATA_INTERNAL_ID),
                config,
            )
            return None
        return config

    @staticmethod
    def has_time_limit(task: TaskData) -> bool:
        """Return True when the task carries a usable time limit."""
        return TimeLimitEngine.get_config(task) is not None

    @staticmethod
    def minutes_by_day(logs: Iterable[LogData]) -> dict[date, int]:
        """Sum `minutes_spent` per local date."""
        totals: dict[date, int] = defaultdict(int)
        for log in logs:
            log_date = to_local_date(log.get(const.DATA_LOG_DATE))
            if log_date is None:
                continue
            totals[log_date] += int(log.get(const.DATA_LOG_MINUTES_SPENT) or 0)
        return totals

    @staticmethod
    def minutes_on(logs: Iterable[LogData], day: date) -> int:
        """Return the total minutes logged on `day`."""
        return TimeLimitEngine.minutes_by_day(logs).get(day, 0)

    @staticmethod
    def reduce_limit(limit: int, target: int, reduction_percentage: float) -> int:
        """Apply one successful-week reduction.

        Examples:
            reduce_limit(120, 30, 0.17) → 99
            reduce_limit(32, 30, 0.17) → 30 (floored at target)
        """
        reduced = int(limit - limit * reduction_percentage)
        return max(reduced, target)

    @staticmethod
    def current_limit(
        task: TaskData,
        logs: Iterable[LogData],
        as_of: date | None = None,
        system_created_at: DateInput | None = None,
    ) -> int:
        """Return the daily allowance in force on `as_of`.

        Args:
            task: Negative-habit task with a time limit
            logs: The task's logs
            as_of: Reference date (defaults to today, local)
            system_created_at: Owning system's creation timestamp, if known

        Returns:
            Allowance in minutes, or 0 when the task has no time limit.
        """
        config = TimeLimitEngine.get_config(task)
        if config is None:
            return 0

        baseline = int(config[const.DATA_LIMIT_BASELINE_MINUTES])
        target = int(config[const.DATA_LIMIT_TARGET_MINUTES])
        reduction = float(
            config.get(
                const.DATA_LIMIT_REDUCTION_PERCENTAGE,
                const.DEFAULT_LIMIT_REDUCTION_PERCENTAGE,
            )
        )
        end = as_of or dt_today_local()
        start = effective_start(task, system_created_at)
        if start is None or start > end:
            return baseline

        minutes = TimeLimitEngine.minutes_by_day(logs)
        limit = baseline
        block_start = start
        # Only blocks that have fully elapsed before `end` are evaluated
        while block_start + timedelta(days=const.LIMIT_BLOCK_DAYS) <= end:
            block_end = block_start + timedelta(days=const.LIMIT_BLOCK_DAYS - 1)
            success_days = sum(
                1 for day in iter_days(block_start, block_end) if minutes.get(day, 0) <= limit
            )
            if success_days >= const.LIMIT_SUCCESS_DAYS_REQUIRED:
                limit = TimeLimitEngine.reduce_limit(limit, target, reduction)
            block_start += timedelta(days=const.LIMIT_BLOCK_DAYS)
        return limit

    @staticmethod
    def performance_zone(task: TaskData, minutes: int, current_limit: int) -> str:
        """Classify a day's minutes against the target and current limit.

        Returns:
            PERFORMANCE_ZONE_EXCELLENT: at or under the long-term target
            PERFORMANCE_ZONE_GOOD: at or under this week's limit
            PERFORMANCE_ZONE_OVER_LIMIT: above this week's limit
        """
        config = TimeLimitEngine.get_config(task)
        if config is None:
            return const.PERFORMANCE_ZONE_GOOD
        if minutes <= int(config[const.DATA_LIMIT_TARGET_MINUTES]):
            return const.PERFORMANCE_ZONE_EXCELLENT
        if minutes <= current_limit:
            return const.PERFORMANCE_ZONE_GOOD
        return const.PERFORMANCE_ZONE_OVER_LIMIT

    @staticmethod
    def remaining_today(
        task: TaskData,
        logs: Iterable[LogData],
        as_of: date | None = None,
        system_created_at: DateInput | None = None,
    ) -> int:
        """Return minutes left in today's allowance (never negative)."""
        if not TimeLimitEngine.has_time_limit(task):
            return 0
        logs = list(logs)
        day = as_of or dt_today_local()
        limit = TimeLimitEngine.current_limit(task, logs, day, system_created_at)
        return max(0, limit - TimeLimitEngine.minutes_on(logs, day))

    @staticmethod
    def usage_fraction(
        task: TaskData,
        logs: Iterable[LogData],
        as_of: date | None = None,
        system_created_at: DateInput | None = None,
    ) -> float:
        """Return today's minutes as a fraction of the allowance (may exceed 1.0)."""
        if not TimeLimitEngine.has_time_limit(task):
            return 0.0
        logs = list(logs)
        day = as_of or dt_today_local()
        limit = TimeLimitEngine.current_limit(task, logs, day, system_created_at)
        return safe_ratio(TimeLimitEngine.minutes_on(logs, day), limit)

    @staticmethod
    def reached_target(
        task: TaskData,
        logs: Iterable[LogData],
        as_of: date | None = None,
        system_created_at: DateInput | None = None,
    ) -> bool:
        """Return True once the allowance has shrunk to the target."""
        config = TimeLimitEngine.get_config(task)
        if config is None:
            return False
        limit = TimeLimitEngine.current_limit(task, logs, as_of, system_created_at)
        return limit <= int(config[const.DATA_LIMIT_TARGET_MINUTES])
