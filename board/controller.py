# board/controller.py

"""
Optimistic mutation controller for one project board.

Only drag-and-drop moves touch local state before the data service answers;
they snapshot the affected tasks first and restore them if any update fails.
Every other operation changes local state after the service confirms, so a
failure leaves the board as it was.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass, replace
from datetime import date
from enum import Enum
from typing import Any, Awaitable, Callable, Iterable, Union

from config import get_settings
from .errors import NotFoundError, ServiceError
from .grouping import StatusGroup, children_of, group_by_status, group_for_list, parents_with_children
from .notify import NoticeBoard, Notifier
from .records import Priority, ProjectRecord, StatusRecord, TaskRecord, WorkspaceRecord
from .service import TaskService
from .state import BoardState

logger = logging.getLogger(__name__)

Confirm = Callable[[str], Union[bool, Awaitable[bool]]]


class Outcome(str, Enum):
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"
    REJECTED = "rejected"  # validation/no-op, nothing sent
    FAILED = "failed"  # service error, local state untouched


@dataclass
class TaskDraft:
    title: str
    description: str | None = None
    priority: Priority = Priority.MEDIUM
    due_date: date | None = None
    status_id: int | None = None
    assignee_id: int | None = None

    def to_fields(self) -> dict[str, Any]:
        return {
            "title": self.title.strip(),
            "description": self.description,
            "priority": Priority.parse(self.priority).value,
            "due_date": self.due_date,
            "status_id": self.status_id,
            "assignee_id": self.assignee_id,
        }


def _plural(n: int) -> str:
    return f"{n} task" if n == 1 else f"{n} tasks"


class BoardController:
    def __init__(
        self,
        service: TaskService,
        project_id: int,
        *,
        notifier: Notifier | None = None,
        allow_subtask_drag: bool | None = None,
        user_id: int | None = None,
    ) -> None:
        settings = get_settings()
        self.service = service
        self.notifier = notifier or NoticeBoard(
            success_seconds=settings.success_notice_seconds,
            error_seconds=settings.error_notice_seconds,
        )
        self.allow_subtask_drag = (
            settings.allow_subtask_drag if allow_subtask_drag is None else allow_subtask_drag
        )
        self.user_id = user_id
        self.state = BoardState(project_id=project_id)
        self.workspace: WorkspaceRecord | None = None
        self.project: ProjectRecord | None = None

    @property
    def project_id(self) -> int:
        return self.state.project_id

    # ---- loading ----
    async def load(self) -> None:
        """Fetch statuses and tasks together. Raises ServiceError."""
        results = await asyncio.gather(
            self.service.fetch_statuses(self.project_id),
            self.service.fetch_tasks(self.project_id),
            return_exceptions=True,
        )
        for r in results:
            if isinstance(r, BaseException):
                raise r
        statuses, tasks = results
        self.state.statuses = list(statuses)
        self.state.tasks = list(tasks)
        logger.debug(
            "Loaded project %s: %d statuses, %d tasks", self.project_id, len(statuses), len(tasks)
        )

    async def refresh(self) -> bool:
        try:
            tasks = await self.service.fetch_tasks(self.project_id)
        except ServiceError:
            self.notifier.error("Failed to refresh tasks")
            return False
        self.state.tasks = list(tasks)
        return True

    # ---- read side ----
    def groups(self) -> list[StatusGroup]:
        return group_by_status(self.state.tasks, self.state.statuses, self.state.collapsed)

    def list_groups(self) -> list[StatusGroup]:
        return group_for_list(self.state.tasks, self.state.statuses, self.state.collapsed)

    def toggle_collapse(self, task_id: int) -> bool:
        return self.state.toggle_collapsed(task_id)

    def collapse_all(self) -> None:
        self.state.collapsed = parents_with_children(self.state.tasks)

    def expand_all(self) -> None:
        self.state.collapsed = set()

    def toggle_section(self, status_id: int) -> bool:
        return self.state.toggle_section(status_id)

    # ---- per-task lock ----
    def _claim(self, ids: Iterable[int]) -> bool:
        ids = set(ids)
        busy = ids & self.state.pending
        if busy:
            logger.debug("Rejected: tasks %s already have a pending change", sorted(busy))
            return False
        self.state.pending |= ids
        return True

    def _release(self, ids: Iterable[int]) -> None:
        self.state.pending -= set(ids)

    def _restore(self, snapshot: dict[int, tuple[int | None, StatusRecord | None]]) -> None:
        restored = []
        for task_id, (status_id, status) in snapshot.items():
            current = self.state.task(task_id)
            if current is not None:
                restored.append(replace(current, status_id=status_id, status=status))
        self.state.replace_tasks(restored)

    @staticmethod
    def _draft_fields(draft: TaskDraft) -> dict[str, Any] | None:
        try:
            return draft.to_fields()
        except ValueError:
            logger.debug("Rejected task with unknown priority %r", draft.priority)
            return None

    # ---- mutations ----
    async def move(self, task_id: int, status_id: int) -> Outcome:
        """Drag a task (and, for a top-level task, its sub-tasks) to another column."""
        task = self.state.task(task_id)
        dest = self.state.status(status_id)
        if task is None or dest is None or task.status_id == dest.id:
            logger.debug("Move of task %s to status %s is a no-op", task_id, status_id)
            return Outcome.REJECTED
        if task.is_subtask and not self.allow_subtask_drag:
            logger.debug("Sub-task %s cannot be dragged on its own", task_id)
            return Outcome.REJECTED

        affected = [task] if task.is_subtask else [task, *children_of(self.state.tasks, task.id)]
        ids = [t.id for t in affected]
        if not self._claim(ids):
            return Outcome.REJECTED

        snapshot = {t.id: (t.status_id, t.status) for t in affected}
        self.state.replace_tasks(replace(t, status_id=dest.id, status=dest) for t in affected)
        try:
            results = await asyncio.gather(
                *(self.service.update_task(t.id, {"status_id": dest.id}) for t in affected),
                return_exceptions=True,
            )
        except BaseException:
            self._restore(snapshot)
            raise
        finally:
            self._release(ids)

        failures = [(i, r) for i, r in zip(ids, results) if isinstance(r, BaseException)]
        if failures:
            for failed_id, exc in failures:
                logger.warning("Status update of task %s failed: %s", failed_id, exc)
            self._restore(snapshot)
            self.notifier.error("Failed to move task. Changes have been reverted.")
            return Outcome.ROLLED_BACK

        self.state.replace_tasks(r for r in results if isinstance(r, TaskRecord))
        self.notifier.success(f"{_plural(len(affected))} moved to {dest.name}!")
        return Outcome.COMMITTED

    async def complete(self, task_id: int) -> Outcome:
        return await self._set_completed(task_id, True)

    async def uncomplete(self, task_id: int) -> Outcome:
        return await self._set_completed(task_id, False)

    async def _set_completed(self, task_id: int, completed: bool) -> Outcome:
        if self.state.task(task_id) is None or not self._claim([task_id]):
            return Outcome.REJECTED
        verb = "complete" if completed else "uncomplete"
        try:
            if completed:
                await self.service.mark_complete(task_id, self.project_id)
            else:
                await self.service.mark_incomplete(task_id, self.project_id)
        except ServiceError as e:
            logger.warning("Could not %s task %s: %s", verb, task_id, e)
            self.notifier.error(f"Failed to {verb} task")
            return Outcome.FAILED
        finally:
            self._release([task_id])

        self.notifier.success("Task marked as complete" if completed else "Task marked as incomplete")
        # parent completion percentages are computed by the data service
        await self.refresh()
        return Outcome.COMMITTED

    async def create(self, draft: TaskDraft) -> Outcome:
        if not draft.title.strip():
            logger.debug("Rejected task without a title")
            return Outcome.REJECTED
        fields = self._draft_fields(draft)
        if fields is None:
            return Outcome.REJECTED
        if fields["status_id"] is None:
            columns = sorted(self.state.statuses, key=lambda s: s.order_index)
            fields["status_id"] = columns[0].id if columns else None
        elif self.state.status(fields["status_id"]) is None:
            return Outcome.REJECTED
        fields["project_id"] = self.project_id
        fields["creator_id"] = self.user_id

        try:
            created = await self.service.create_task(fields)
        except ServiceError as e:
            logger.warning("Could not create task: %s", e)
            self.notifier.error("Failed to create task")
            return Outcome.FAILED
        self.state.tasks = [*self.state.tasks, created]
        self.notifier.success("Task created successfully")
        return Outcome.COMMITTED

    async def create_subtask(self, parent_id: int, draft: TaskDraft) -> Outcome:
        if not draft.title.strip():
            return Outcome.REJECTED
        parent = self.state.task(parent_id)
        if parent is None or parent.is_subtask:
            return Outcome.REJECTED
        fields = self._draft_fields(draft)
        if fields is None:
            return Outcome.REJECTED
        if fields["status_id"] is None:
            fields["status_id"] = parent.status_id
        elif self.state.status(fields["status_id"]) is None:
            return Outcome.REJECTED
        fields["creator_id"] = self.user_id
        if not self._claim([parent_id]):
            return Outcome.REJECTED

        try:
            await self.service.create_subtask(parent_id, fields)
        except ServiceError as e:
            logger.warning("Could not create sub-task of %s: %s", parent_id, e)
            self.notifier.error("Failed to create sub-task")
            return Outcome.FAILED
        finally:
            self._release([parent_id])

        self.notifier.success("Sub-task created successfully")
        await self.refresh()
        return Outcome.COMMITTED

    async def update(self, task_id: int, changes: dict[str, Any]) -> Outcome:
        if self.state.task(task_id) is None or not changes:
            return Outcome.REJECTED
        changes = dict(changes)
        if "title" in changes:
            changes["title"] = (changes["title"] or "").strip()
            if not changes["title"]:
                return Outcome.REJECTED
        if "priority" in changes:
            try:
                changes["priority"] = Priority.parse(changes["priority"]).value
            except ValueError:
                logger.debug("Rejected unknown priority %r", changes["priority"])
                return Outcome.REJECTED
        if "status_id" in changes and self.state.status(changes["status_id"]) is None:
            return Outcome.REJECTED
        if not self._claim([task_id]):
            return Outcome.REJECTED

        try:
            updated = await self.service.update_task(task_id, changes)
        except ServiceError as e:
            logger.warning("Could not update task %s: %s", task_id, e)
            self.notifier.error("Failed to update task")
            return Outcome.FAILED
        finally:
            self._release([task_id])

        self.state.replace_tasks([updated])
        self.notifier.success("Task updated successfully")
        return Outcome.COMMITTED

    async def delete(self, task_id: int, confirm: Confirm) -> Outcome:
        """Delete after an explicit yes from ``confirm``; sub-tasks go with their parent."""
        task = self.state.task(task_id)
        if task is None:
            return Outcome.REJECTED
        ids = [task_id, *(t.id for t in children_of(self.state.tasks, task_id))]
        if set(ids) & self.state.pending:
            logger.debug("Delete of task %s waits for a pending change", task_id)
            return Outcome.REJECTED
        answer = confirm(f'Are you sure you want to delete "{task.title}"?')
        if inspect.isawaitable(answer):
            answer = await answer
        if not answer or not self._claim(ids):
            return Outcome.REJECTED
        try:
            await self.service.delete_task(task_id)
        except ServiceError as e:
            logger.warning("Could not delete task %s: %s", task_id, e)
            self.notifier.error("Failed to delete task")
            return Outcome.FAILED
        finally:
            self._release(ids)

        self.state.remove_tasks(ids)
        self.notifier.success("Task deleted successfully")
        return Outcome.COMMITTED


async def open_board(
    service: TaskService,
    *,
    user_id: int,
    workspace_id: int,
    project_id: int,
    notifier: Notifier | None = None,
    allow_subtask_drag: bool | None = None,
) -> BoardController:
    """Resolve workspace and project for ``user_id`` and load the board.

    Raises NotFoundError when either is missing, ServiceError when loading fails.
    """
    workspaces = await service.get_user_workspaces(user_id)
    workspace = next((w for w in workspaces if w.id == workspace_id), None)
    if workspace is None:
        raise NotFoundError("Workspace not found", back_to="workspaces")

    projects = await service.get_projects(workspace_id)
    project = next((p for p in projects if p.id == project_id), None)
    if project is None:
        raise NotFoundError("Project not found", back_to="projects")

    controller = BoardController(
        service,
        project.id,
        notifier=notifier,
        allow_subtask_drag=allow_subtask_drag,
        user_id=user_id,
    )
    controller.workspace = workspace
    controller.project = project
    await controller.load()
    return controller
