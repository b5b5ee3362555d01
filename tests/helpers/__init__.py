"""Test helpers for Numu engine tests.

This module re-exports all helpers for convenient imports:

    from tests.helpers import (
        # Builders
        BASE_DATE, day, make_task, make_system, make_log, make_logs,

        # Load generation
        generate_stress_snapshot, iter_batches,
    )

See individual modules for full documentation:
- builders.py: Entity dict builders anchored on a Monday
- generators.py: Bulk synthetic history for performance tests
"""

from tests.helpers.builders import (
    BASE_DATE,
    date_range,
    day,
    make_achievement,
    make_daily_logs,
    make_log,
    make_logs,
    make_system,
    make_task,
    make_time_limit,
)
from tests.helpers.generators import (
    DEFAULT_BATCH_SIZE,
    StressSnapshot,
    generate_stress_snapshot,
    iter_batches,
)

__all__ = [
    "BASE_DATE",
    "DEFAULT_BATCH_SIZE",
    "StressSnapshot",
    "date_range",
    "day",
    "generate_stress_snapshot",
    "iter_batches",
    "make_achievement",
    "make_daily_logs",
    "make_log",
    "make_logs",
    "make_system",
    "make_task",
    "make_time_limit",
]
