# utils/progress.py
from sqlmodel import select

from models.task import Task
from models.task_status import TaskStatus
from board.records import StatusCategory


def compute_task_progress(task: Task, session) -> float | None:
    """Share of a parent's sub-tasks sitting in a done-like status, 0..100.

    Returns None for tasks without sub-tasks.
    """
    subs = session.exec(select(Task).where(Task.parent_task_id == task.id)).all()
    if not subs:
        return None
    status_ids = {sub.status_id for sub in subs if sub.status_id is not None}
    done_ids = set()
    if status_ids:
        statuses = session.exec(select(TaskStatus).where(TaskStatus.id.in_(status_ids))).all()
        done_ids = {s.id for s in statuses if StatusCategory.classify(s.name) is StatusCategory.DONE}
    done = sum(1 for sub in subs if sub.status_id in done_ids)
    return round(done * 100.0 / len(subs), 1)

