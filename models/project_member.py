# models/project_member.py
from sqlmodel import SQLModel, Field, Relationship
from typing import Optional, TYPE_CHECKING
from datetime import datetime

from sqlalchemy import DateTime

from utils.dates import utcnow

if TYPE_CHECKING:
    from models.project import Project
    from models.user import User

PROJECT_ROLES = ("admin", "member", "viewer")

class ProjectMember(SQLModel, table=True):
    """Who can be assigned tasks in a project; the creator joins as admin."""
    __tablename__ = "project_members"
    __table_args__ = {"extend_existing": True}

    id: Optional[int] = Field(default=None, primary_key=True)
    project_id: int = Field(foreign_key="projects.id", index=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    role: str = Field(default="member")
    joined_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))

    project: "Project" = Relationship(back_populates="members")
    user: "User" = Relationship(back_populates="project_memberships")
