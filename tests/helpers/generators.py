"""Bulk synthetic history for load tests.

Builds multi-year snapshots the way a stress-test data generator would:
many systems with several tasks each, and a seeded random completion
pattern. Logs are emitted in batches to mimic how the persistence layer
would write them.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import date, timedelta
import random

from numu import const
from numu.engines.schedule_engine import (
    Daily,
    Frequency,
    SpecificDays,
    Weekdays,
    Weekends,
    WeeklyTarget,
)
from numu.type_defs import LogData, SystemData, TaskData

from .builders import make_log, make_system, make_task

DEFAULT_BATCH_SIZE = 500

_FREQUENCY_ROTATION: tuple[Frequency, ...] = (
    Daily(),
    Weekdays(),
    Weekends(),
    SpecificDays(frozenset({const.WEEKDAY_MONDAY, const.WEEKDAY_THURSDAY})),
    WeeklyTarget(3),
)


@dataclass
class StressSnapshot:
    """A generated snapshot of systems, tasks and logs."""

    today: date
    systems: dict[str, SystemData] = field(default_factory=dict)
    tasks: dict[str, TaskData] = field(default_factory=dict)
    logs: list[LogData] = field(default_factory=list)


def generate_stress_snapshot(
    *,
    systems: int = 20,
    tasks_per_system: int = 5,
    days: int = 730,
    completion_rate: float = 0.7,
    today: date = date(2025, 6, 30),
    seed: int = 42,
) -> StressSnapshot:
    """Generate a deterministic multi-year snapshot.

    With the defaults this produces roughly 50,000 logs.
    """
    rng = random.Random(seed)
    start = today - timedelta(days=days - 1)
    snapshot = StressSnapshot(today=today)

    for s in range(systems):
        system_id = f"system-{s}"
        task_ids = [f"{system_id}-task-{t}" for t in range(tasks_per_system)]
        snapshot.systems[system_id] = make_system(
            task_ids,
            system_id=system_id,
            name=f"System {s}",
            category=const.SYSTEM_CATEGORIES[s % len(const.SYSTEM_CATEGORIES)],
            created_at=start,
        )
        for t, task_id in enumerate(task_ids):
            snapshot.tasks[task_id] = make_task(
                _FREQUENCY_ROTATION[t % len(_FREQUENCY_ROTATION)],
                task_id=task_id,
                system_id=system_id,
                name=f"Task {s}.{t}",
                created_at=start,
            )
            for offset in range(days):
                if rng.random() < completion_rate:
                    snapshot.logs.append(
                        make_log(start + timedelta(days=offset), task_id=task_id)
                    )

    return snapshot


def iter_batches(
    logs: list[LogData], batch_size: int = DEFAULT_BATCH_SIZE
) -> Iterator[list[LogData]]:
    """Yield logs in fixed-size batches."""
    for index in range(0, len(logs), batch_size):
        yield logs[index : index + batch_size]
