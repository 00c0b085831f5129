# tests/test_notify.py

from __future__ import annotations

from board.notify import NoticeBoard, NoticeLevel


class Clock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


def test_success_and_error_lifetimes() -> None:
    clock = Clock()
    board = NoticeBoard(success_seconds=3.0, error_seconds=5.0, clock=clock)
    board.success("Saved")
    board.error("Broken")
    assert [n.level for n in board.active()] == [NoticeLevel.SUCCESS, NoticeLevel.ERROR]

    clock.now += 3.0
    assert [n.message for n in board.active()] == ["Broken"]

    clock.now += 2.0
    assert board.active() == []
    assert board.latest() is None


def test_latest_is_most_recent() -> None:
    board = NoticeBoard(clock=lambda: 0.0)
    board.success("one")
    board.success("two")
    assert board.latest().message == "two"
