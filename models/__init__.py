# models/__init__.py
from .user import User
from .workspace import Workspace, WorkspaceMember
from .project import Project
from .project_member import ProjectMember
from .task_status import TaskStatus
from .task import Task
