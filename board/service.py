# board/service.py

"""
Port to the remote data service, and its SQL-backed adapter.

The controller only talks to ``TaskService``. Every method raises
``ServiceError`` on failure; nothing else leaks out of an adapter.
"""

from __future__ import annotations

import asyncio
import functools
import logging
from typing import Any, Callable, Protocol, TypeVar

from sqlalchemy.exc import SQLAlchemyError

import db
from .errors import ServiceError
from .records import ProjectRecord, StatusRecord, TaskRecord, WorkspaceRecord

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TaskService(Protocol):
    async def get_user_workspaces(self, user_id: int) -> list[WorkspaceRecord]: ...
    async def get_projects(self, workspace_id: int) -> list[ProjectRecord]: ...

    async def fetch_statuses(self, project_id: int) -> list[StatusRecord]: ...
    async def fetch_tasks(self, project_id: int) -> list[TaskRecord]: ...

    async def create_task(self, fields: dict[str, Any]) -> TaskRecord: ...
    async def update_task(self, task_id: int, fields: dict[str, Any]) -> TaskRecord: ...
    async def delete_task(self, task_id: int) -> None: ...

    async def mark_complete(self, task_id: int, project_id: int) -> TaskRecord: ...
    async def mark_incomplete(self, task_id: int, project_id: int) -> TaskRecord: ...
    async def create_subtask(self, parent_id: int, fields: dict[str, Any]) -> TaskRecord: ...


class SqlTaskService:
    """TaskService over the functions in ``db``; blocking calls run in worker threads."""

    async def _call(self, fn: Callable[..., T], *args: Any) -> T:
        try:
            return await asyncio.to_thread(functools.partial(fn, *args))
        except (SQLAlchemyError, ValueError) as e:
            logger.exception("Data service call %s failed", fn.__name__)
            raise ServiceError(str(e)) from e

    async def get_user_workspaces(self, user_id: int) -> list[WorkspaceRecord]:
        rows = await self._call(db.get_user_workspaces, user_id)
        return [WorkspaceRecord.from_row(r) for r in rows]

    async def get_projects(self, workspace_id: int) -> list[ProjectRecord]:
        rows = await self._call(db.get_projects, workspace_id)
        return [ProjectRecord.from_row(r) for r in rows]

    async def fetch_statuses(self, project_id: int) -> list[StatusRecord]:
        rows = await self._call(db.get_task_statuses, project_id)
        return [StatusRecord.from_row(r) for r in rows]

    async def fetch_tasks(self, project_id: int) -> list[TaskRecord]:
        rows = await self._call(db.get_project_tasks, project_id)
        return [TaskRecord.from_row(r) for r in rows]

    async def create_task(self, fields: dict[str, Any]) -> TaskRecord:
        return TaskRecord.from_row(await self._call(db.create_task, fields))

    async def update_task(self, task_id: int, fields: dict[str, Any]) -> TaskRecord:
        return TaskRecord.from_row(await self._call(db.update_task, task_id, fields))

    async def delete_task(self, task_id: int) -> None:
        if not await self._call(db.delete_task, task_id):
            raise ServiceError("Task not found")

    async def mark_complete(self, task_id: int, project_id: int) -> TaskRecord:
        return TaskRecord.from_row(await self._call(db.mark_task_complete, task_id, project_id))

    async def mark_incomplete(self, task_id: int, project_id: int) -> TaskRecord:
        return TaskRecord.from_row(await self._call(db.mark_task_incomplete, task_id, project_id))

    async def create_subtask(self, parent_id: int, fields: dict[str, Any]) -> TaskRecord:
        return TaskRecord.from_row(await self._call(db.create_sub_task, parent_id, fields))
