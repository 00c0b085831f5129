# views/gantt_view.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable, Sequence

import pandas as pd

from board.records import Priority, StatusRecord, TaskRecord
from utils.timeline import safe_dates_for_timeline

PRIORITY_COLORS = {
    Priority.URGENT: "#dc2626",
    Priority.HIGH: "#ea580c",
    Priority.MEDIUM: "#ca8a04",
    Priority.LOW: "#6b7280",
}


@dataclass(frozen=True)
class GanttBar:
    task_id: int
    name: str
    start: date
    end: date
    progress: int
    color: str
    display_order: int
    status_name: str = ""


def gantt_bars(
    tasks: Iterable[TaskRecord], statuses: Sequence[StatusRecord] | None = None
) -> list[GanttBar]:
    """One bar per task with a due date, from its creation day to its due day."""
    by_id = {s.id: s for s in statuses or []}
    bars = []
    dated = [t for t in tasks if t.due_date is not None]
    for order, t in enumerate(dated, start=1):
        start, end = safe_dates_for_timeline(t.created_at, t.due_date)
        status = t.status or by_id.get(t.status_id)
        bars.append(GanttBar(
            task_id=t.id,
            name=t.title,
            start=start,
            end=end,
            progress=status.category.progress if status else 0,
            color=PRIORITY_COLORS[t.priority],
            display_order=order,
            status_name=status.name if status else "",
        ))
    return bars


def gantt_frame(bars: Iterable[GanttBar]) -> pd.DataFrame:
    cols = ["Item", "Start", "Finish", "Status", "Progress", "Color"]
    rows = [
        {
            "Item": b.name,
            "Start": b.start,
            "Finish": b.end,
            "Status": b.status_name,
            "Progress": b.progress,
            "Color": b.color,
        }
        for b in sorted(bars, key=lambda b: b.display_order)
    ]
    return pd.DataFrame(rows, columns=cols)
