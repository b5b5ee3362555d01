"""Engine modules for Numu.

Contains specialized computation engines:
- schedule_engine: Frequency variants, due dates and week windows
- streak_engine: "Never miss twice" streaks over due units
- limit_engine: Gradual time-limit reduction for negative habits
- statistics_engine: Completion rates, consistency and the EngineStats roll-up
- gamification_engine: Achievement evaluation, XP and levels
"""

# Use relative imports within package to avoid mypy module resolution issues
from .gamification_engine import GamificationEngine
from .limit_engine import TimeLimitEngine
from .schedule_engine import (
    Daily,
    Frequency,
    InvalidFrequencyError,
    ScheduleEngine,
    SpecificDays,
    Weekdays,
    Weekends,
    WeeklyTarget,
    coerce_frequency,
    frequency_from_dict,
    frequency_to_dict,
)
from .statistics_engine import StatisticsEngine
from .streak_engine import StreakEngine, TaskTimeline

__all__ = [
    "Daily",
    "Frequency",
    "GamificationEngine",
    "InvalidFrequencyError",
    "ScheduleEngine",
    "SpecificDays",
    "StatisticsEngine",
    "StreakEngine",
    "TaskTimeline",
    "TimeLimitEngine",
    "Weekdays",
    "Weekends",
    "WeeklyTarget",
    "coerce_frequency",
    "frequency_from_dict",
    "frequency_to_dict",
]
