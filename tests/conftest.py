# tests/conftest.py

from __future__ import annotations

from pathlib import Path

import pytest

import db
from board.controller import BoardController
from board.notify import NoticeBoard

from .fakes import PROJECT_ID, FakeTaskService, make_task


@pytest.fixture()
def notices() -> NoticeBoard:
    """Notice board with a frozen clock, so nothing expires mid-test."""
    return NoticeBoard(success_seconds=3.0, error_seconds=5.0, clock=lambda: 0.0)


@pytest.fixture()
def service() -> FakeTaskService:
    """Parent 1 with sub-tasks 2 and 3, plus an unrelated task 4, all in To Do."""
    return FakeTaskService(
        tasks=[
            make_task(1, title="Launch"),
            make_task(2, parent=1, title="Write copy"),
            make_task(3, parent=1, title="Pick date"),
            make_task(4, title="Standalone"),
        ]
    )


@pytest.fixture()
def board(service: FakeTaskService, notices: NoticeBoard) -> BoardController:
    """Controller with state preloaded from the fake service (no load() round trip)."""
    controller = BoardController(service, PROJECT_ID, notifier=notices, allow_subtask_drag=False, user_id=7)
    controller.state.statuses = list(service.statuses)
    controller.state.tasks = list(service.tasks.values())
    return controller


@pytest.fixture()
def database(tmp_path: Path):
    """Fresh SQLite file per test, wired into the ``db`` module."""
    engine = db.configure(f"sqlite:///{tmp_path / 'taskflow.db'}")
    db.init_db()
    yield engine
    engine.dispose()
