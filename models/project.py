# models/project.py
from sqlmodel import SQLModel, Field, Relationship
from typing import Optional, List, TYPE_CHECKING
from datetime import datetime

from sqlalchemy import DateTime

from utils.dates import utcnow

if TYPE_CHECKING:
    from models.workspace import Workspace
    from models.project_member import ProjectMember
    from models.task_status import TaskStatus
    from models.task import Task

PROJECT_STATUSES = ("active", "on_hold", "completed", "archived")

class Project(SQLModel, table=True):
    __tablename__ = "projects"
    __table_args__ = {"extend_existing": True}

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True)
    description: Optional[str] = None
    color: str = Field(default="#3b82f6")
    status: str = Field(default="active")
    workspace_id: int = Field(foreign_key="workspaces.id", index=True)
    owner_id: int = Field(foreign_key="users.id")
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))

    workspace: "Workspace" = Relationship(back_populates="projects")
    members: List["ProjectMember"] = Relationship(
        back_populates="project",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )
    statuses: List["TaskStatus"] = Relationship(
        back_populates="project",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )
    tasks: List["Task"] = Relationship(
        back_populates="project",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )
