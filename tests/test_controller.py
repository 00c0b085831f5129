# tests/test_controller.py

from __future__ import annotations

import asyncio
from dataclasses import replace

import pytest

from board.controller import BoardController, Outcome, TaskDraft, open_board
from board.errors import NotFoundError, ServiceError
from board.notify import NoticeLevel

from .fakes import DONE, IN_PROGRESS, PROJECT_ID, TO_DO, FakeTaskService


def _status_ids(board: BoardController) -> dict[int, int]:
    return {t.id: t.status_id for t in board.state.tasks}


# ---- move ----
@pytest.mark.asyncio
async def test_move_parent_takes_subtasks_along(board, service, notices) -> None:
    outcome = await board.move(1, DONE.id)

    assert outcome is Outcome.COMMITTED
    assert _status_ids(board) == {1: DONE.id, 2: DONE.id, 3: DONE.id, 4: TO_DO.id}
    assert sorted(args[0] for args in service.called("update_task")) == [1, 2, 3]
    assert notices.latest().message == "3 tasks moved to Done!"
    assert notices.latest().level is NoticeLevel.SUCCESS


@pytest.mark.asyncio
async def test_move_single_task_message(board, notices) -> None:
    assert await board.move(4, IN_PROGRESS.id) is Outcome.COMMITTED
    assert notices.latest().message == "1 task moved to In Progress!"
    assert board.state.task(4).status == IN_PROGRESS


@pytest.mark.asyncio
async def test_move_rolls_back_everything_when_one_update_fails(board, service, notices) -> None:
    before = list(board.state.tasks)
    service.fail_ids = {3}

    outcome = await board.move(1, DONE.id)

    assert outcome is Outcome.ROLLED_BACK
    assert board.state.tasks == before
    assert notices.latest().level is NoticeLevel.ERROR
    assert notices.latest().message == "Failed to move task. Changes have been reverted."
    assert board.state.pending == set()


@pytest.mark.asyncio
async def test_move_there_and_back_restores_statuses(board) -> None:
    before = _status_ids(board)
    assert await board.move(1, IN_PROGRESS.id) is Outcome.COMMITTED
    assert await board.move(1, TO_DO.id) is Outcome.COMMITTED
    assert _status_ids(board) == before


@pytest.mark.asyncio
async def test_move_to_same_status_sends_nothing(board, service) -> None:
    assert await board.move(1, TO_DO.id) is Outcome.REJECTED
    assert service.called("update_task") == []


@pytest.mark.asyncio
async def test_move_unknown_task_or_status_is_rejected(board, service) -> None:
    assert await board.move(99, DONE.id) is Outcome.REJECTED
    assert await board.move(1, 99) is Outcome.REJECTED
    assert service.calls == []


@pytest.mark.asyncio
async def test_subtask_cannot_be_dragged_alone(board, service) -> None:
    assert await board.move(2, DONE.id) is Outcome.REJECTED
    assert service.calls == []
    assert board.state.task(2).status_id == TO_DO.id


@pytest.mark.asyncio
async def test_subtask_drag_when_enabled_moves_only_that_task(board, service) -> None:
    board.allow_subtask_drag = True
    assert await board.move(2, DONE.id) is Outcome.COMMITTED
    assert _status_ids(board) == {1: TO_DO.id, 2: DONE.id, 3: TO_DO.id, 4: TO_DO.id}
    assert [args[0] for args in service.called("update_task")] == [2]


@pytest.mark.asyncio
async def test_move_applies_locally_before_service_answers(board, service) -> None:
    service.gate = asyncio.Event()
    pending = asyncio.create_task(board.move(4, DONE.id))
    await asyncio.sleep(0)

    assert board.state.task(4).status_id == DONE.id
    assert board.state.pending == {4}
    # a second change on the same task waits its turn
    assert await board.move(4, IN_PROGRESS.id) is Outcome.REJECTED

    service.gate.set()
    assert await pending is Outcome.COMMITTED
    assert board.state.pending == set()


@pytest.mark.asyncio
async def test_cancelled_move_is_reverted(board, service) -> None:
    service.gate = asyncio.Event()
    pending = asyncio.create_task(board.move(1, DONE.id))
    await asyncio.sleep(0)
    assert board.state.task(1).status_id == DONE.id

    pending.cancel()
    with pytest.raises(asyncio.CancelledError):
        await pending

    assert _status_ids(board) == {1: TO_DO.id, 2: TO_DO.id, 3: TO_DO.id, 4: TO_DO.id}
    assert board.state.pending == set()


# ---- complete / incomplete ----
@pytest.mark.asyncio
async def test_complete_refetches_tasks(board, service, notices) -> None:
    assert await board.complete(4) is Outcome.COMMITTED
    assert service.called("mark_complete") == [(4, PROJECT_ID)]
    assert service.called("fetch_tasks") == [(PROJECT_ID,)]
    assert board.state.task(4).status_id == DONE.id
    assert notices.latest().message == "Task marked as complete"


@pytest.mark.asyncio
async def test_uncomplete_moves_to_first_todo_status(service, notices) -> None:
    service.tasks[4] = replace(service.tasks[4], status_id=DONE.id, status=DONE)
    board = BoardController(service, PROJECT_ID, notifier=notices)
    await board.load()

    assert await board.uncomplete(4) is Outcome.COMMITTED
    assert board.state.task(4).status_id == TO_DO.id
    assert notices.latest().message == "Task marked as incomplete"


@pytest.mark.asyncio
async def test_failed_complete_leaves_state_alone(board, service, notices) -> None:
    before = list(board.state.tasks)
    service.fail_ids = {4}

    assert await board.complete(4) is Outcome.FAILED
    assert board.state.tasks == before
    assert service.called("fetch_tasks") == []
    assert notices.latest().message == "Failed to complete task"


# ---- create / update ----
@pytest.mark.asyncio
async def test_create_without_title_sends_nothing(board, service) -> None:
    assert await board.create(TaskDraft(title="   ")) is Outcome.REJECTED
    assert service.calls == []


@pytest.mark.asyncio
async def test_create_appends_to_first_column(board, service, notices) -> None:
    assert await board.create(TaskDraft(title="  Ship it  ", priority="urgent")) is Outcome.COMMITTED

    (fields,) = service.called("create_task")[0]
    assert fields["title"] == "Ship it"
    assert fields["status_id"] == TO_DO.id
    assert fields["project_id"] == PROJECT_ID
    assert fields["creator_id"] == 7
    assert board.state.tasks[-1].title == "Ship it"
    assert notices.latest().message == "Task created successfully"


@pytest.mark.asyncio
async def test_create_failure_changes_nothing(board, service, notices) -> None:
    service.fail_all = True
    before = list(board.state.tasks)
    assert await board.create(TaskDraft(title="x")) is Outcome.FAILED
    assert board.state.tasks == before
    assert notices.latest().level is NoticeLevel.ERROR


@pytest.mark.asyncio
async def test_create_subtask_inherits_parent_status_and_refreshes(board, service) -> None:
    assert await board.create_subtask(4, TaskDraft(title="Child")) is Outcome.COMMITTED

    child = board.state.tasks[-1]
    assert child.parent_task_id == 4
    assert child.status_id == TO_DO.id
    assert service.called("fetch_tasks") == [(PROJECT_ID,)]


@pytest.mark.asyncio
async def test_subtask_of_subtask_is_rejected(board, service) -> None:
    assert await board.create_subtask(2, TaskDraft(title="Grandchild")) is Outcome.REJECTED
    assert service.calls == []


@pytest.mark.asyncio
async def test_update_replaces_task_in_place(board, notices) -> None:
    assert await board.update(4, {"title": " Renamed ", "priority": "high"}) is Outcome.COMMITTED
    task = board.state.task(4)
    assert task.title == "Renamed"
    assert task.priority.value == "high"
    assert [t.id for t in board.state.tasks] == [1, 2, 3, 4]
    assert notices.latest().message == "Task updated successfully"


@pytest.mark.asyncio
async def test_update_with_blank_title_is_rejected(board, service) -> None:
    assert await board.update(4, {"title": ""}) is Outcome.REJECTED
    assert service.calls == []


# ---- delete ----
@pytest.mark.asyncio
async def test_delete_needs_confirmation(board, service) -> None:
    asked = []

    def confirm(question: str) -> bool:
        asked.append(question)
        return False

    assert await board.delete(1, confirm) is Outcome.REJECTED
    assert asked == ['Are you sure you want to delete "Launch"?']
    assert service.called("delete_task") == []
    assert len(board.state.tasks) == 4


@pytest.mark.asyncio
async def test_delete_parent_removes_subtasks(board, service, notices) -> None:
    async def confirm(_question: str) -> bool:
        return True

    board.toggle_collapse(1)
    assert await board.delete(1, confirm) is Outcome.COMMITTED
    assert [t.id for t in board.state.tasks] == [4]
    assert board.state.collapsed == set()
    assert notices.latest().message == "Task deleted successfully"


@pytest.mark.asyncio
async def test_failed_delete_keeps_task(board, service, notices) -> None:
    service.fail_ids = {4}
    assert await board.delete(4, lambda _q: True) is Outcome.FAILED
    assert board.state.task(4) is not None
    assert notices.latest().message == "Failed to delete task"


# ---- loading ----
@pytest.mark.asyncio
async def test_refresh_failure_keeps_tasks_and_notifies(board, service, notices) -> None:
    before = list(board.state.tasks)
    service.fail_all = True
    assert await board.refresh() is False
    assert board.state.tasks == before
    assert notices.latest().message == "Failed to refresh tasks"


@pytest.mark.asyncio
async def test_open_board_loads_statuses_and_tasks(service, notices) -> None:
    board = await open_board(service, user_id=7, workspace_id=1, project_id=PROJECT_ID, notifier=notices)
    assert board.project.name == "My First Project"
    assert [s.name for s in board.state.statuses] == ["To Do", "In Progress", "Done"]
    assert len(board.state.tasks) == 4


@pytest.mark.asyncio
async def test_open_board_unknown_workspace() -> None:
    with pytest.raises(NotFoundError) as exc:
        await open_board(FakeTaskService(), user_id=7, workspace_id=404, project_id=PROJECT_ID)
    assert exc.value.message == "Workspace not found"
    assert exc.value.back_to == "workspaces"


@pytest.mark.asyncio
async def test_open_board_unknown_project() -> None:
    with pytest.raises(NotFoundError) as exc:
        await open_board(FakeTaskService(), user_id=7, workspace_id=1, project_id=404)
    assert exc.value.message == "Project not found"
    assert exc.value.back_to == "projects"


def test_collapse_all_and_expand_all(board) -> None:
    board.collapse_all()
    assert board.state.collapsed == {1}
    assert [t.id for t in board.groups()[0].tasks] == [1, 4]

    board.expand_all()
    assert [t.id for t in board.groups()[0].tasks] == [1, 2, 3, 4]


def test_toggle_section_is_view_state_only(board) -> None:
    assert board.toggle_section(TO_DO.id) is True
    assert board.state.collapsed_sections == {TO_DO.id}
    assert [g.count for g in board.list_groups()] == [4]
    assert board.toggle_section(TO_DO.id) is False


@pytest.mark.asyncio
async def test_parent_move_sends_all_updates_before_any_settles(board, service) -> None:
    service.gate = asyncio.Event()
    pending = asyncio.create_task(board.move(1, DONE.id))
    for _ in range(3):
        await asyncio.sleep(0)

    assert sorted(service.started) == [1, 2, 3]
    assert service.called("update_task") == []
    assert board.state.pending == {1, 2, 3}

    service.gate.set()
    assert await pending is Outcome.COMMITTED
    assert sorted(args[0] for args in service.called("update_task")) == [1, 2, 3]


@pytest.mark.asyncio
async def test_create_with_unknown_priority_sends_nothing(board, service) -> None:
    assert await board.create(TaskDraft(title="x", priority="bogus")) is Outcome.REJECTED
    assert await board.create_subtask(4, TaskDraft(title="x", priority="critical")) is Outcome.REJECTED
    assert service.calls == []


@pytest.mark.asyncio
async def test_update_with_unknown_priority_keeps_existing(board, service) -> None:
    assert await board.update(4, {"priority": "high"}) is Outcome.COMMITTED
    service.calls.clear()

    assert await board.update(4, {"priority": "critical"}) is Outcome.REJECTED
    assert service.calls == []
    assert board.state.task(4).priority.value == "high"


@pytest.mark.asyncio
async def test_priority_input_is_case_insensitive(board, service) -> None:
    assert await board.update(4, {"priority": " URGENT "}) is Outcome.COMMITTED
    assert service.called("update_task") == [(4, {"priority": "urgent"})]


@pytest.mark.asyncio
async def test_load_failure_raises_after_both_fetches(service, notices) -> None:
    service.fail_calls = {"fetch_statuses"}
    board = BoardController(service, PROJECT_ID, notifier=notices)

    with pytest.raises(ServiceError):
        await board.load()
    assert service.called("fetch_tasks") == [(PROJECT_ID,)]
    assert board.state.tasks == []
    assert board.state.statuses == []


@pytest.mark.asyncio
async def test_delete_of_busy_task_does_not_ask(board, service) -> None:
    asked = []

    def confirm(question: str) -> bool:
        asked.append(question)
        return True

    board.state.pending = {3}
    assert await board.delete(1, confirm) is Outcome.REJECTED
    assert asked == []
    assert service.called("delete_task") == []
