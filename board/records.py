# board/records.py

"""In-memory records for one project view.

Rows coming back from the data service are plain dicts; the board works on
these frozen records and swaps them with ``dataclasses.replace``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Mapping

from utils.dates import parse_date, parse_datetime, utcnow


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]

    @classmethod
    def parse(cls, raw: "str | Priority") -> "Priority":
        """Strict parse for user input; unknown values raise ValueError."""
        if isinstance(raw, cls):
            return raw
        return cls(str(raw or "").strip().lower())

    @classmethod
    def from_value(cls, raw: str | None) -> "Priority":
        """Lenient parse for stored rows; unknown values read as medium."""
        if not raw:
            return cls.MEDIUM
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            return cls.MEDIUM


_PRIORITY_RANK = {
    Priority.URGENT: 4,
    Priority.HIGH: 3,
    Priority.MEDIUM: 2,
    Priority.LOW: 1,
}


class StatusCategory(str, Enum):
    """Semantic bucket of a free-text status name.

    Resolved once per status. Precedence: done/complete, review,
    progress/doing, then to-do for everything else.
    """

    TODO = "todo"
    IN_PROGRESS = "in_progress"
    REVIEW = "review"
    DONE = "done"

    @property
    def progress(self) -> int:
        return _CATEGORY_PROGRESS[self]

    @classmethod
    def classify(cls, name: str | None) -> "StatusCategory":
        s = (name or "").strip().lower()
        if "done" in s or "complete" in s:
            return cls.DONE
        if "review" in s:
            return cls.REVIEW
        if "progress" in s or "doing" in s:
            return cls.IN_PROGRESS
        return cls.TODO


_CATEGORY_PROGRESS = {
    StatusCategory.TODO: 0,
    StatusCategory.IN_PROGRESS: 50,
    StatusCategory.REVIEW: 75,
    StatusCategory.DONE: 100,
}


@dataclass(frozen=True)
class PersonRef:
    id: int
    name: str
    avatar_url: str | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any] | None) -> PersonRef | None:
        if not row or row.get("id") is None:
            return None
        return cls(id=row["id"], name=row.get("name") or "", avatar_url=row.get("avatar_url"))


@dataclass(frozen=True)
class StatusRecord:
    id: int
    name: str
    color: str
    order_index: int
    category: StatusCategory

    @property
    def is_done(self) -> bool:
        return self.category is StatusCategory.DONE

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> StatusRecord:
        name = row.get("name") or ""
        return cls(
            id=row["id"],
            name=name,
            color=row.get("color") or "#6b7280",
            order_index=int(row.get("order_index") or 0),
            category=StatusCategory.classify(name),
        )


@dataclass(frozen=True)
class TaskRecord:
    id: int
    title: str
    status_id: int | None
    created_at: datetime
    priority: Priority = Priority.MEDIUM
    description: str | None = None
    due_date: date | None = None
    project_id: int | None = None
    parent_task_id: int | None = None
    completion_percentage: float | None = None
    assignee: PersonRef | None = None
    creator: PersonRef | None = None
    status: StatusRecord | None = None

    @property
    def is_subtask(self) -> bool:
        return self.parent_task_id is not None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> TaskRecord:
        status_row = row.get("status")
        pct = row.get("completion_percentage")
        return cls(
            id=row["id"],
            title=row.get("title") or "",
            description=row.get("description"),
            status_id=row.get("status_id"),
            priority=Priority.from_value(row.get("priority")),
            due_date=parse_date(row.get("due_date")),
            created_at=parse_datetime(row.get("created_at")) or utcnow(),
            project_id=row.get("project_id"),
            parent_task_id=row.get("parent_task_id"),
            completion_percentage=None if pct is None else float(pct),
            assignee=PersonRef.from_row(row.get("assignee")),
            creator=PersonRef.from_row(row.get("creator")),
            status=StatusRecord.from_row(status_row) if status_row else None,
        )


@dataclass(frozen=True)
class ProjectRecord:
    id: int
    name: str
    workspace_id: int
    owner_id: int
    color: str = "#3b82f6"
    status: str = "active"
    description: str | None = None
    created_at: datetime | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> ProjectRecord:
        return cls(
            id=row["id"],
            name=row.get("name") or "",
            workspace_id=row["workspace_id"],
            owner_id=row["owner_id"],
            color=row.get("color") or "#3b82f6",
            status=row.get("status") or "active",
            description=row.get("description"),
            created_at=parse_datetime(row.get("created_at")),
        )


@dataclass(frozen=True)
class WorkspaceRecord:
    id: int
    name: str
    slug: str
    owner_id: int
    user_role: str = "member"
    description: str | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> WorkspaceRecord:
        return cls(
            id=row["id"],
            name=row.get("name") or "",
            slug=row.get("slug") or "",
            owner_id=row["owner_id"],
            user_role=row.get("user_role") or "member",
            description=row.get("description"),
        )
