# views/table_view.py

"""Table view: search, filter and sort a project's tasks."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from typing import Iterable, Sequence

import pandas as pd

from board.records import TaskRecord

ALL = "all"
SORT_FIELDS = ("title", "priority", "status", "due_date", "created_at", "assignee")
_EPOCH = date(1970, 1, 1)


@dataclass(frozen=True)
class TableQuery:
    search: str = ""
    status: str = ALL  # status name, or "all"
    priority: str = ALL
    sort_field: str = "created_at"
    direction: str = "desc"

    def toggle_sort(self, field: str) -> "TableQuery":
        """Same field flips direction; a new field starts ascending."""
        if field not in SORT_FIELDS:
            raise ValueError(f"Unknown sort field: {field}")
        if field == self.sort_field:
            return replace(self, direction="asc" if self.direction == "desc" else "desc")
        return replace(self, sort_field=field, direction="asc")


@dataclass(frozen=True)
class TableResult:
    rows: list[TaskRecord]
    matched: int
    total: int


def _sort_value(t: TaskRecord, field: str):
    if field == "title":
        return t.title.lower()
    if field == "priority":
        return t.priority.rank
    if field == "status":
        return t.status.name if t.status else ""
    if field == "due_date":
        return (t.due_date - _EPOCH).days if t.due_date else 0
    if field == "created_at":
        return t.created_at
    if field == "assignee":
        return t.assignee.name if t.assignee else ""
    raise ValueError(f"Unknown sort field: {field}")


def sort_tasks(tasks: Iterable[TaskRecord], field: str, direction: str = "asc") -> list[TaskRecord]:
    # descending is the ascending result reversed, never a separate sort
    ascending = sorted(tasks, key=lambda t: _sort_value(t, field))
    return ascending if direction == "asc" else ascending[::-1]


def filter_tasks(tasks: Iterable[TaskRecord], query: TableQuery) -> list[TaskRecord]:
    out = list(tasks)
    if query.search:
        needle = query.search.lower()
        out = [
            t for t in out
            if needle in t.title.lower() or needle in (t.description or "").lower()
        ]
    if query.status != ALL:
        out = [t for t in out if t.status is not None and t.status.name == query.status]
    if query.priority != ALL:
        out = [t for t in out if t.priority.value == query.priority]
    return out


def project_table(tasks: Sequence[TaskRecord], query: TableQuery = TableQuery()) -> TableResult:
    matched = filter_tasks(tasks, query)
    rows = sort_tasks(matched, query.sort_field, query.direction)
    return TableResult(rows=rows, matched=len(rows), total=len(tasks))


def status_options(tasks: Iterable[TaskRecord]) -> list[str]:
    """Distinct status names in first-seen order, for the status filter."""
    seen: dict[str, None] = {}
    for t in tasks:
        if t.status and t.status.name:
            seen.setdefault(t.status.name, None)
    return list(seen)


def table_frame(result: TableResult) -> pd.DataFrame:
    cols = ["Title", "Status", "Priority", "Due", "Assignee", "Created"]
    rows = [
        {
            "Title": t.title,
            "Status": t.status.name if t.status else "",
            "Priority": t.priority.value,
            "Due": t.due_date,
            "Assignee": t.assignee.name if t.assignee else "",
            "Created": t.created_at.date(),
        }
        for t in result.rows
    ]
    return pd.DataFrame(rows, columns=cols)
