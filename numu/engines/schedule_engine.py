"""Schedule Engine for Numu.

Maps a task's frequency and a calendar date to a due/not-due verdict, and
enumerates due dates and week windows for the streak and statistics engines.

- `dateutil.rrule` enumerates due dates for the fixed weekday patterns
- Weekly-quota frequencies have no due dates; they are evaluated per
  Monday-start week window instead

Frequency is a closed sum type: `Daily | Weekdays | Weekends | SpecificDays |
WeeklyTarget`. Consumers dispatch with `match` so that adding a variant is
caught everywhere it matters.

IMPORTANT: This module must stay pure. It imports only const, utils and
third-party libraries.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Any, ClassVar

from dateutil.rrule import DAILY, FR, MO, SA, SU, TH, TU, WE, rrule
import voluptuous as vol

from .. import const
from ..utils.dt_utils import end_of_week, start_of_week

# =============================================================================
# FREQUENCY VARIANTS
# =============================================================================


@dataclass(frozen=True)
class Daily:
    """Due every day."""


@dataclass(frozen=True)
class Weekdays:
    """Due Monday through Friday."""


@dataclass(frozen=True)
class Weekends:
    """Due Saturday and Sunday."""


@dataclass(frozen=True)
class SpecificDays:
    """Due on a set of weekday numbers (1 = Sunday ... 7 = Saturday).

    Out-of-range numbers are dropped. An empty set is a degenerate
    configuration that is never due.
    """

    days: frozenset[int] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        """Normalize any iterable of day numbers to a valid frozenset."""
        object.__setattr__(
            self,
            "days",
            frozenset(d for d in self.days if d in const.WEEKDAY_NUMBERS),
        )


@dataclass(frozen=True)
class WeeklyTarget:
    """Requires `times` completions anywhere inside each Monday-start week."""

    times: int = 1


Frequency = Daily | Weekdays | Weekends | SpecificDays | WeeklyTarget

WeekWindow = tuple[date, date]


# =============================================================================
# ERRORS
# =============================================================================


class InvalidFrequencyError(ValueError):
    """Raised by strict frequency parsing when a payload is unusable.

    Attributes:
        payload: The stored/submitted frequency payload
        reason: Validation message
    """

    def __init__(self, payload: Any, reason: str) -> None:
        """Initialize InvalidFrequencyError.

        Args:
            payload: The offending payload
            reason: Human-readable validation message
        """
        self.payload = payload
        self.reason = reason
        super().__init__(f"Invalid frequency {payload!r}: {reason}")


# =============================================================================
# SCHEDULE ENGINE
# =============================================================================


class ScheduleEngine:
    """Pure, stateless frequency evaluation.

    All methods are static and give identical answers for identical
    (frequency, date) inputs regardless of call order. That property is what
    lets the streak and statistics engines be written as simple folds.
    """

    # Weekday number (1 = Sunday) to rrule weekday
    WEEKDAY_TO_RRULE: ClassVar[dict[int, Any]] = {
        const.WEEKDAY_SUNDAY: SU,
        const.WEEKDAY_MONDAY: MO,
        const.WEEKDAY_TUESDAY: TU,
        const.WEEKDAY_WEDNESDAY: WE,
        const.WEEKDAY_THURSDAY: TH,
        const.WEEKDAY_FRIDAY: FR,
        const.WEEKDAY_SATURDAY: SA,
    }

    @staticmethod
    def weekday_number(day: date) -> int:
        """Return the weekday number of `day` (1 = Sunday ... 7 = Saturday)."""
        return day.isoweekday() % 7 + 1

    @staticmethod
    def due_weekdays(frequency: Frequency) -> frozenset[int] | None:
        """Return the weekday numbers a fixed-pattern frequency is due on.

        Returns:
            A frozenset of weekday numbers, or None for WeeklyTarget, which
            has no per-day due dates.
        """
        match frequency:
            case Daily():
                return const.WEEKDAY_NUMBERS
            case Weekdays():
                return const.WORKWEEK_DAYS
            case Weekends():
                return const.WEEKEND_DAYS
            case SpecificDays(days=days):
                return days
            case WeeklyTarget():
                return None

    @staticmethod
    def is_due(frequency: Frequency, day: date) -> bool:
        """Return True if a fixed-pattern frequency requires activity on `day`.

        WeeklyTarget is not a per-day predicate and always returns False;
        use weekly_window() and a running count instead.
        """
        weekdays = ScheduleEngine.due_weekdays(frequency)
        if weekdays is None:
            return False
        return ScheduleEngine.weekday_number(day) in weekdays

    @staticmethod
    def is_weekly_target(frequency: Frequency) -> bool:
        """Return True for quota-based frequencies."""
        return isinstance(frequency, WeeklyTarget)

    @staticmethod
    def weekly_window(day: date) -> WeekWindow:
        """Return the (Monday, Sunday) week window containing `day`."""
        return start_of_week(day), end_of_week(day)

    @staticmethod
    def week_windows(start: date, end: date) -> list[WeekWindow]:
        """Return every week window that intersects [start, end], ascending.

        Returns an empty list when `start` is after `end`.
        """
        if start > end:
            return []
        windows: list[WeekWindow] = []
        week_start = start_of_week(start)
        while week_start <= end:
            windows.append((week_start, week_start + timedelta(days=6)))
            week_start += timedelta(days=7)
        return windows

    @staticmethod
    def due_dates(frequency: Frequency, start: date, end: date) -> list[date]:
        """Enumerate due dates in [start, end] in ascending order.

        Agrees with is_due() for every date in the range.

        Args:
            frequency: Task frequency
            start: First candidate date (inclusive)
            end: Last candidate date (inclusive)

        Returns:
            Ascending list of due dates. Empty for WeeklyTarget, for an
            empty SpecificDays set, or when start > end.
        """
        if start > end:
            return []

        weekdays = ScheduleEngine.due_weekdays(frequency)
        if not weekdays:
            if weekdays is not None:
                const.LOGGER.debug(
                    "ScheduleEngine: %s has no valid weekdays, never due", frequency
                )
            return []

        byweekday = None
        if weekdays != const.WEEKDAY_NUMBERS:
            byweekday = [ScheduleEngine.WEEKDAY_TO_RRULE[d] for d in sorted(weekdays)]

        rule = rrule(
            DAILY,
            dtstart=datetime.combine(start, time.min),
            until=datetime.combine(end, time.min),
            byweekday=byweekday,
        )
        return [occurrence.date() for occurrence in rule]

    @staticmethod
    def display_text(frequency: Frequency) -> str:
        """Return a short human-readable description of a frequency."""
        match frequency:
            case Daily():
                return "Every day"
            case Weekdays():
                return "Weekdays"
            case Weekends():
                return "Weekends"
            case SpecificDays(days=days):
                if not days:
                    return "No days"
                return ", ".join(const.WEEKDAY_SHORT_NAMES[d] for d in sorted(days))
            case WeeklyTarget(times=times):
                return f"{times}x per week"


# =============================================================================
# SERIALIZATION
# =============================================================================

# Type names written by older app versions
_LEGACY_TYPE_ALIASES: dict[str, str] = {
    "specificDays": const.FREQUENCY_SPECIFIC_DAYS,
    "weeklyTarget": const.FREQUENCY_WEEKLY_TARGET,
}

FREQUENCY_SCHEMA = vol.Schema(
    {
        vol.Required(const.DATA_FREQUENCY_TYPE): vol.In(const.FREQUENCY_TYPES),
        vol.Optional(const.DATA_FREQUENCY_DAYS, default=list): [vol.Coerce(int)],
        vol.Optional(const.DATA_FREQUENCY_TIMES, default=1): vol.Coerce(int),
    },
    extra=vol.REMOVE_EXTRA,
)


def _require_usable_parameters(payload: dict[str, Any]) -> dict[str, Any]:
    """Reject degenerate parameters that lenient reads would tolerate."""
    frequency_type = payload[const.DATA_FREQUENCY_TYPE]
    if frequency_type == const.FREQUENCY_SPECIFIC_DAYS:
        vol.Schema(
            vol.All(
                vol.Length(min=1, msg="select at least one day"),
                [vol.In(const.WEEKDAY_NUMBERS, msg="weekday must be 1-7")],
            )
        )(payload[const.DATA_FREQUENCY_DAYS])
    elif frequency_type == const.FREQUENCY_WEEKLY_TARGET:
        vol.Range(min=1, max=7, msg="weekly target must be 1-7")(
            payload[const.DATA_FREQUENCY_TIMES]
        )
    return payload


STRICT_FREQUENCY_SCHEMA = vol.Schema(vol.All(FREQUENCY_SCHEMA, _require_usable_parameters))


def frequency_to_dict(frequency: Frequency) -> dict[str, Any]:
    """Serialize a frequency to its stored form."""
    match frequency:
        case Daily():
            return {const.DATA_FREQUENCY_TYPE: const.FREQUENCY_DAILY}
        case Weekdays():
            return {const.DATA_FREQUENCY_TYPE: const.FREQUENCY_WEEKDAYS}
        case Weekends():
            return {const.DATA_FREQUENCY_TYPE: const.FREQUENCY_WEEKENDS}
        case SpecificDays(days=days):
            return {
                const.DATA_FREQUENCY_TYPE: const.FREQUENCY_SPECIFIC_DAYS,
                const.DATA_FREQUENCY_DAYS: sorted(days),
            }
        case WeeklyTarget(times=times):
            return {
                const.DATA_FREQUENCY_TYPE: const.FREQUENCY_WEEKLY_TARGET,
                const.DATA_FREQUENCY_TIMES: times,
            }


def frequency_from_dict(payload: Any, *, strict: bool = False) -> Frequency:
    """Deserialize a stored frequency payload.

    Lenient mode (default) is for reading history: corrupt payloads are
    logged and fall back to Daily, while degenerate-but-parseable ones (an
    empty day set, a zero target) are kept as-is so the engines can treat
    them as never due. Strict mode is for the write path and raises.

    Args:
        payload: Stored dict ({"type": ..., "days": [...], "times": n})
        strict: Raise InvalidFrequencyError instead of falling back

    Returns:
        The Frequency variant

    Raises:
        InvalidFrequencyError: strict mode only
    """
    if isinstance(payload, dict):
        raw_type = payload.get(const.DATA_FREQUENCY_TYPE)
        if raw_type in _LEGACY_TYPE_ALIASES:
            payload = {
                **payload,
                const.DATA_FREQUENCY_TYPE: _LEGACY_TYPE_ALIASES[raw_type],
            }

    schema = STRICT_FREQUENCY_SCHEMA if strict else FREQUENCY_SCHEMA
    try:
        data = schema(payload)
    except vol.Invalid as err:
        if strict:
            raise InvalidFrequencyError(payload, str(err)) from err
        const.LOGGER.warning(
            "Unreadable frequency %r (%s), defaulting to daily", payload, err
        )
        return Daily()

    match data[const.DATA_FREQUENCY_TYPE]:
        case const.FREQUENCY_WEEKDAYS:
            return Weekdays()
        case const.FREQUENCY_WEEKENDS:
            return Weekends()
        case const.FREQUENCY_SPECIFIC_DAYS:
            return SpecificDays(frozenset(data[const.DATA_FREQUENCY_DAYS]))
        case const.FREQUENCY_WEEKLY_TARGET:
            return WeeklyTarget(data[const.DATA_FREQUENCY_TIMES])
        case _:
            return Daily()


def coerce_frequency(value: Frequency | dict[str, Any] | None) -> Frequency:
    """Return a Frequency from either a variant or a stored payload.

    Missing frequencies default to Daily.
    """
    if isinstance(value, Daily | Weekdays | Weekends | SpecificDays | WeeklyTarget):
        return value
    if value is None:
        return Daily()
    return frequency_from_dict(value)
