# models/task_status.py
from sqlmodel import SQLModel, Field, Relationship
from typing import Optional, TYPE_CHECKING
from datetime import datetime

from sqlalchemy import DateTime

from utils.dates import utcnow

if TYPE_CHECKING:
    from models.project import Project

# seeded into every new project
DEFAULT_STATUSES = (
    {"name": "To Do", "color": "#6b7280", "order_index": 0},
    {"name": "In Progress", "color": "#3b82f6", "order_index": 1},
    {"name": "Review", "color": "#f59e0b", "order_index": 2},
    {"name": "Done", "color": "#10b981", "order_index": 3},
)

class TaskStatus(SQLModel, table=True):
    __tablename__ = "task_statuses"
    __table_args__ = {"extend_existing": True}

    id: Optional[int] = Field(default=None, primary_key=True)
    project_id: int = Field(foreign_key="projects.id", index=True)
    name: str
    color: str = Field(default="#6b7280")
    order_index: int = Field(default=0)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))

    project: "Project" = Relationship(back_populates="statuses")
