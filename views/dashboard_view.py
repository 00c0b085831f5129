# views/dashboard_view.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Sequence

import pandas as pd

from board.records import StatusCategory, TaskRecord


@dataclass(frozen=True)
class DashboardStats:
    total: int = 0
    completed: int = 0
    in_progress: int = 0
    overdue: int = 0
    completion_rate: int = 0  # percent
    recent: list[TaskRecord] = field(default_factory=list)


def dashboard_stats(
    tasks: Sequence[TaskRecord], today: date | None = None, recent_limit: int = 10
) -> DashboardStats:
    """Headline numbers across ``tasks`` (expected newest first)."""
    today = today or date.today()
    if not tasks:
        return DashboardStats()

    dfA = pd.DataFrame({
        "category": [(t.status.category if t.status else StatusCategory.TODO).value for t in tasks],
        "due_date": pd.to_datetime(pd.Series([t.due_date for t in tasks], dtype="object")),
    })
    dfA["is_done"] = dfA["category"].eq(StatusCategory.DONE.value)
    dfA["is_overdue"] = (
        dfA["due_date"].notna() & (dfA["due_date"] < pd.Timestamp(today)) & (~dfA["is_done"])
    )

    total = len(dfA)
    completed = int(dfA["is_done"].sum())
    return DashboardStats(
        total=total,
        completed=completed,
        in_progress=int(dfA["category"].eq(StatusCategory.IN_PROGRESS.value).sum()),
        overdue=int(dfA["is_overdue"].sum()),
        completion_rate=int(completed * 100 / total + 0.5),
        recent=list(tasks[:recent_limit]),
    )
