# views/calendar_view.py

from __future__ import annotations

import calendar
from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Sequence

from board.records import TaskRecord

MAX_TASKS_PER_DAY = 4


@dataclass(frozen=True)
class DayCell:
    day: date
    tasks: list[TaskRecord]
    overflow: int = 0


def bucket_by_due_date(tasks: Iterable[TaskRecord]) -> dict[date, list[TaskRecord]]:
    buckets: dict[date, list[TaskRecord]] = defaultdict(list)
    for t in tasks:
        if t.due_date is not None:
            buckets[t.due_date].append(t)
    return dict(buckets)


def tasks_for_day(tasks: Iterable[TaskRecord], day: date) -> list[TaskRecord]:
    return [t for t in tasks if t.due_date == day]


def day_cell(day: date, tasks: Sequence[TaskRecord]) -> DayCell:
    shown = list(tasks[:MAX_TASKS_PER_DAY])
    return DayCell(day=day, tasks=shown, overflow=len(tasks) - len(shown))


def month_grid(tasks: Iterable[TaskRecord], year: int, month: int) -> list[list[DayCell | None]]:
    """Weeks of a month, Sunday first; blank cells are None."""
    buckets = bucket_by_due_date(tasks)
    first = date(year, month, 1)
    leading = (first.weekday() + 1) % 7
    days_in_month = calendar.monthrange(year, month)[1]

    cells: list[DayCell | None] = [None] * leading
    for d in range(1, days_in_month + 1):
        day = date(year, month, d)
        cells.append(day_cell(day, buckets.get(day, [])))
    if len(cells) % 7:
        cells.extend([None] * (7 - len(cells) % 7))
    return [cells[i:i + 7] for i in range(0, len(cells), 7)]


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1
