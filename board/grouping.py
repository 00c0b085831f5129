# board/grouping.py

"""Status grouping: one column per status, in order_index order."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import AbstractSet, Iterable, Sequence

from .records import StatusRecord, TaskRecord


@dataclass(frozen=True)
class StatusGroup:
    status: StatusRecord
    tasks: list[TaskRecord] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.tasks)


def is_visible(task: TaskRecord, collapsed: AbstractSet[int]) -> bool:
    # collapsing a parent hides its children, never the parent itself
    return task.parent_task_id is None or task.parent_task_id not in collapsed


def ordered_statuses(statuses: Iterable[StatusRecord] | None) -> list[StatusRecord]:
    return sorted(statuses or [], key=lambda s: s.order_index)


def group_by_status(
    tasks: Sequence[TaskRecord] | None,
    statuses: Sequence[StatusRecord] | None,
    collapsed: AbstractSet[int] = frozenset(),
) -> list[StatusGroup]:
    """Partition ``tasks`` into one group per status, keeping fetch order.

    Tasks pointing at a status that is not in ``statuses`` land nowhere.
    """
    columns = ordered_statuses(statuses)
    if not columns:
        return []
    buckets: dict[int, list[TaskRecord]] = {s.id: [] for s in columns}
    for t in tasks or []:
        bucket = buckets.get(t.status_id)
        if bucket is not None and is_visible(t, collapsed):
            bucket.append(t)
    return [StatusGroup(status=s, tasks=buckets[s.id]) for s in columns]


def _list_key(t: TaskRecord):
    return (t.parent_task_id is not None, t.created_at)


def group_for_list(
    tasks: Sequence[TaskRecord] | None,
    statuses: Sequence[StatusRecord] | None,
    collapsed: AbstractSet[int] = frozenset(),
) -> list[StatusGroup]:
    """List view: parents before sub-tasks, oldest first, empty sections dropped."""
    groups = group_by_status(tasks, statuses, collapsed)
    return [
        StatusGroup(status=g.status, tasks=sorted(g.tasks, key=_list_key))
        for g in groups
        if g.tasks
    ]


def children_of(tasks: Iterable[TaskRecord], parent_id: int) -> list[TaskRecord]:
    return [t for t in tasks if t.parent_task_id == parent_id]


def parents_with_children(tasks: Iterable[TaskRecord]) -> set[int]:
    return {t.parent_task_id for t in tasks if t.parent_task_id is not None}
