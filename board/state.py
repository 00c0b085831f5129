# board/state.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from .records import StatusRecord, TaskRecord


@dataclass
class BoardState:
    """
    Everything one project view holds in memory.

    Owned by the controller of that view; renderers get a reference to it.
    Nothing here is persisted.
    """

    project_id: int
    tasks: list[TaskRecord] = field(default_factory=list)
    statuses: list[StatusRecord] = field(default_factory=list)

    # parent task ids whose sub-tasks are hidden
    collapsed: set[int] = field(default_factory=set)
    # status ids whose list section is folded
    collapsed_sections: set[int] = field(default_factory=set)
    # task ids with a mutation in flight
    pending: set[int] = field(default_factory=set)

    def task(self, task_id: int) -> TaskRecord | None:
        return next((t for t in self.tasks if t.id == task_id), None)

    def status(self, status_id: int | None) -> StatusRecord | None:
        return next((s for s in self.statuses if s.id == status_id), None)

    def replace_tasks(self, updated: Iterable[TaskRecord]) -> None:
        by_id = {t.id: t for t in updated}
        self.tasks = [by_id.get(t.id, t) for t in self.tasks]

    def remove_tasks(self, ids: Iterable[int]) -> None:
        drop = set(ids)
        self.tasks = [t for t in self.tasks if t.id not in drop]
        self.collapsed -= drop

    def toggle_collapsed(self, task_id: int) -> bool:
        """Flip a parent's collapse flag; returns True when now collapsed."""
        if task_id in self.collapsed:
            self.collapsed.discard(task_id)
            return False
        self.collapsed.add(task_id)
        return True

    def toggle_section(self, status_id: int) -> bool:
        if status_id in self.collapsed_sections:
            self.collapsed_sections.discard(status_id)
            return False
        self.collapsed_sections.add(status_id)
        return True
