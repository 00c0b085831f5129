# models/task.py
from sqlmodel import SQLModel, Field, Relationship
from typing import Optional, TYPE_CHECKING
from datetime import date, datetime

from sqlalchemy import DateTime

from utils.dates import utcnow

if TYPE_CHECKING:
    from models.project import Project

PRIORITIES = ("low", "medium", "high", "urgent")

class Task(SQLModel, table=True):
    __tablename__ = "tasks"
    __table_args__ = {"extend_existing": True}

    id: Optional[int] = Field(default=None, primary_key=True)
    project_id: int = Field(foreign_key="projects.id", index=True)
    title: str
    description: Optional[str] = None
    status_id: Optional[int] = Field(default=None, foreign_key="task_statuses.id")
    priority: str = Field(default="medium")
    due_date: Optional[date] = None
    # null means top-level task
    parent_task_id: Optional[int] = Field(default=None, foreign_key="tasks.id", index=True)
    assignee_id: Optional[int] = Field(default=None, foreign_key="users.id")
    creator_id: Optional[int] = Field(default=None, foreign_key="users.id")
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))

    project: "Project" = Relationship(back_populates="tasks")
