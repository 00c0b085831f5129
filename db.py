# db.py

#============================================================#
#                          TaskFlow                          #
#------------------------------------------------------------#
# Purpose     : Data service for TaskFlow: workspaces,       #
#               projects, status columns and tasks with      #
#               sub-tasks (SQLite/Supabase Postgres powered) #
#============================================================#


from __future__ import annotations

import logging
import re
from typing import Optional, List, Dict, Any

from sqlmodel import SQLModel, Session, create_engine, select

from config import get_settings
from models import User, Workspace, WorkspaceMember, Project, ProjectMember, TaskStatus, Task
from models.task import PRIORITIES
from models.project import PROJECT_STATUSES
from models.workspace import WORKSPACE_ROLES
from models.project_member import PROJECT_ROLES
from models.task_status import DEFAULT_STATUSES
from board.records import StatusCategory
from utils.dates import parse_date, utcnow
from utils.progress import compute_task_progress

logger = logging.getLogger(__name__)

# ---- Engine / Session ----
def _build_engine(url: str):
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, pool_pre_ping=True, connect_args=connect_args)

engine = _build_engine(get_settings().database_url)

def configure(url: str):
    """Point the module at another database (tests, scripts)."""
    global engine
    engine = _build_engine(url)
    return engine

def get_session() -> Session:
    return Session(engine, expire_on_commit=False)

def init_db():
    SQLModel.metadata.create_all(engine)

TASK_UPDATE_FIELDS = ("title", "description", "status_id", "priority", "due_date", "assignee_id")

# ---- row -> dict ----
def _user_dict(u: Optional[User]) -> Optional[Dict]:
    if u is None:
        return None
    return {"id": u.id, "name": u.name or u.email, "email": u.email, "avatar_url": u.avatar_url}

def _status_dict(st: Optional[TaskStatus]) -> Optional[Dict]:
    if st is None:
        return None
    return {"id": st.id, "name": st.name, "color": st.color, "order_index": st.order_index,
            "project_id": st.project_id}

def _project_dict(p: Project) -> Dict:
    return {
        "id": p.id, "name": p.name, "description": p.description, "color": p.color,
        "status": p.status, "workspace_id": p.workspace_id, "owner_id": p.owner_id,
        "created_at": p.created_at,
    }

def _task_dict(s: Session, t: Task) -> Dict:
    """Return plain dicts to avoid detached lazy loads."""
    return {
        "id": t.id,
        "title": t.title,
        "description": t.description,
        "status_id": t.status_id,
        "priority": t.priority,
        "due_date": t.due_date,
        "project_id": t.project_id,
        "parent_task_id": t.parent_task_id,
        "created_at": t.created_at,
        "updated_at": t.updated_at,
        "completion_percentage": compute_task_progress(t, s),
        "assignee": _user_dict(s.get(User, t.assignee_id)) if t.assignee_id else None,
        "creator": _user_dict(s.get(User, t.creator_id)) if t.creator_id else None,
        "status": _status_dict(s.get(TaskStatus, t.status_id)) if t.status_id else None,
    }

def _slugify(name: str) -> str:
    return re.sub(r"[^a-z0-9]", "-", name.lower())

def _seed_statuses(s: Session, project_id: int) -> None:
    for row in DEFAULT_STATUSES:
        s.add(TaskStatus(project_id=project_id, **row))

def _check_priority(priority: Optional[str]) -> str:
    p = (priority or "medium").strip().lower()
    if p not in PRIORITIES:
        raise ValueError(f"Unknown priority: {priority}")
    return p

def _check_status(s: Session, project_id: int, status_id: Optional[int]) -> Optional[int]:
    if status_id is None:
        return None
    st = s.get(TaskStatus, status_id)
    if not st or st.project_id != project_id:
        raise ValueError("Status not found")
    return st.id

def _first_status(s: Session, project_id: int) -> Optional[TaskStatus]:
    return s.exec(
        select(TaskStatus).where(TaskStatus.project_id == project_id).order_by(TaskStatus.order_index)
    ).first()

# ---- users / workspaces ----
def get_or_create_user(email: str, name: Optional[str] = None, avatar_url: Optional[str] = None) -> Dict:
    email = email.strip().lower()
    with get_session() as s:
        user = s.exec(select(User).where(User.email == email)).first()
        if not user:
            user = User(email=email, name=name, avatar_url=avatar_url)
            s.add(user)
            s.commit()
            s.refresh(user)
            logger.info("Created user id=%s", user.id)
        elif (name and user.name != name) or (avatar_url and user.avatar_url != avatar_url):
            user.name = name or user.name
            user.avatar_url = avatar_url or user.avatar_url
            s.commit()
        return _user_dict(user)

def create_workspace(owner_id: int, name: str, description: Optional[str] = None,
                     slug: Optional[str] = None) -> Dict:
    with get_session() as s:
        ws = Workspace(name=name, slug=slug or _slugify(name), description=description, owner_id=owner_id)
        s.add(ws); s.flush()
        s.add(WorkspaceMember(workspace_id=ws.id, user_id=owner_id, role="admin"))
        s.commit()
        return {"id": ws.id, "name": ws.name, "slug": ws.slug, "description": ws.description,
                "owner_id": ws.owner_id, "created_at": ws.created_at, "user_role": "admin"}

def create_default_workspace(user_id: int, user_name: str) -> Dict:
    """Personal workspace plus a sample project for a brand new user."""
    ws = create_workspace(user_id, f"{user_name}'s Workspace", description="Your personal workspace")
    create_project(ws["id"], user_id, "My First Project",
                   description="Welcome to TaskFlow! This is your first project.")
    logger.info("Default workspace and project created for user id=%s", user_id)
    return ws

def add_workspace_member(workspace_id: int, user_id: int, role: str = "member") -> Dict:
    if role not in WORKSPACE_ROLES:
        raise ValueError(f"Unknown workspace role: {role}")
    with get_session() as s:
        if not s.get(Workspace, workspace_id):
            raise ValueError("Workspace not found")
        m = s.exec(
            select(WorkspaceMember).where(
                WorkspaceMember.workspace_id == workspace_id, WorkspaceMember.user_id == user_id
            )
        ).first()
        if m:
            m.role = role
        else:
            m = WorkspaceMember(workspace_id=workspace_id, user_id=user_id, role=role)
            s.add(m)
        s.commit()
        return {"workspace_id": workspace_id, "user_id": user_id, "role": m.role}

def get_user_workspaces(user_id: int) -> List[Dict]:
    with get_session() as s:
        rows = s.exec(
            select(WorkspaceMember, Workspace)
            .join(Workspace, Workspace.id == WorkspaceMember.workspace_id)
            .where(WorkspaceMember.user_id == user_id)
            .order_by(Workspace.created_at)
        ).all()
        return [
            {
                "id": ws.id, "name": ws.name, "slug": ws.slug, "description": ws.description,
                "owner_id": ws.owner_id, "created_at": ws.created_at, "user_role": m.role,
            }
            for (m, ws) in rows
        ]

# ---- projects ----
def get_projects(workspace_id: int) -> List[Dict]:
    with get_session() as s:
        rows = s.exec(
            select(Project)
            .where(Project.workspace_id == workspace_id)
            .order_by(Project.created_at.desc(), Project.id.desc())
        ).all()
        return [_project_dict(p) for p in rows]

def get_project(project_id: int) -> Optional[Dict]:
    with get_session() as s:
        p = s.get(Project, project_id)
        return _project_dict(p) if p else None

def create_project(workspace_id: int, owner_id: int, name: str, description: Optional[str] = None,
                   color: str = "#3b82f6", status: str = "active") -> Dict:
    if status not in PROJECT_STATUSES:
        raise ValueError(f"Unknown project status: {status}")
    with get_session() as s:
        p = Project(name=name.strip(), description=description, color=color, status=status,
                    workspace_id=workspace_id, owner_id=owner_id)
        s.add(p); s.flush()
        s.add(ProjectMember(project_id=p.id, user_id=owner_id, role="admin"))
        _seed_statuses(s, p.id)
        s.commit()
        return _project_dict(p)

def update_project(project_id: int, updates: Dict[str, Any]) -> Dict:
    with get_session() as s:
        p = s.get(Project, project_id)
        if not p:
            raise ValueError("Project not found")
        for key in ("name", "description", "color", "status"):
            if key in updates:
                setattr(p, key, updates[key])
        if p.status not in PROJECT_STATUSES:
            raise ValueError(f"Unknown project status: {p.status}")
        s.commit()
        return _project_dict(p)

def delete_project(project_id: int) -> bool:
    with get_session() as s:
        p = s.get(Project, project_id)
        if not p:
            return False
        # sub-tasks first, they point at their parents
        for t in s.exec(select(Task).where(Task.project_id == project_id, Task.parent_task_id.is_not(None))).all():
            s.delete(t)
        s.flush()
        s.delete(p)
        s.commit()
        return True

def add_project_member(project_id: int, user_id: int, role: str = "member") -> Dict:
    if role not in PROJECT_ROLES:
        raise ValueError(f"Unknown project role: {role}")
    with get_session() as s:
        if not s.get(Project, project_id):
            raise ValueError("Project not found")
        m = s.exec(
            select(ProjectMember).where(ProjectMember.project_id == project_id, ProjectMember.user_id == user_id)
        ).first()
        if m:
            m.role = role
        else:
            m = ProjectMember(project_id=project_id, user_id=user_id, role=role)
            s.add(m)
        s.commit()
        return {"project_id": project_id, "user_id": user_id, "role": m.role}

def get_project_members(project_id: int) -> List[Dict]:
    """Members with their user, oldest first (assignee pick list)."""
    with get_session() as s:
        rows = s.exec(
            select(ProjectMember, User)
            .join(User, User.id == ProjectMember.user_id)
            .where(ProjectMember.project_id == project_id)
            .order_by(ProjectMember.joined_at, ProjectMember.id)
        ).all()
        return [{**_user_dict(u), "role": m.role} for (m, u) in rows]

# ---- statuses / tasks ----
def get_task_statuses(project_id: int) -> List[Dict]:
    with get_session() as s:
        rows = s.exec(
            select(TaskStatus)
            .where(TaskStatus.project_id == project_id)
            .order_by(TaskStatus.order_index, TaskStatus.id)
        ).all()
        return [_status_dict(r) for r in rows]

def get_project_tasks(project_id: int) -> List[Dict]:
    with get_session() as s:
        rows = s.exec(
            select(Task)
            .where(Task.project_id == project_id)
            .order_by(Task.created_at.desc(), Task.id.desc())
        ).all()
        return [_task_dict(s, t) for t in rows]

def get_task(task_id: int) -> Optional[Dict]:
    with get_session() as s:
        t = s.get(Task, task_id)
        return _task_dict(s, t) if t else None

def create_task(fields: Dict[str, Any]) -> Dict:
    title = (fields.get("title") or "").strip()
    if not title:
        raise ValueError("Task title is required")
    project_id = fields.get("project_id")
    with get_session() as s:
        if not project_id or not s.get(Project, project_id):
            raise ValueError("Project not found")
        status_id = _check_status(s, project_id, fields.get("status_id"))
        if status_id is None:
            first = _first_status(s, project_id)
            status_id = first.id if first else None
        t = Task(
            project_id=project_id,
            title=title,
            description=fields.get("description"),
            status_id=status_id,
            priority=_check_priority(fields.get("priority")),
            due_date=parse_date(fields.get("due_date")),
            parent_task_id=fields.get("parent_task_id"),
            assignee_id=fields.get("assignee_id"),
            creator_id=fields.get("creator_id"),
        )
        s.add(t)
        s.commit()
        s.refresh(t)
        return _task_dict(s, t)

def update_task(task_id: int, updates: Dict[str, Any]) -> Dict:
    unknown = set(updates) - set(TASK_UPDATE_FIELDS)
    if unknown:
        raise ValueError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")
    with get_session() as s:
        t = s.get(Task, task_id)
        if not t:
            raise ValueError("Task not found")
        if "title" in updates:
            title = (updates["title"] or "").strip()
            if not title:
                raise ValueError("Task title is required")
            t.title = title
        if "description" in updates:
            t.description = updates["description"]
        if "status_id" in updates:
            t.status_id = _check_status(s, t.project_id, updates["status_id"])
        if "priority" in updates:
            t.priority = _check_priority(updates["priority"])
        if "due_date" in updates:
            t.due_date = parse_date(updates["due_date"])
        if "assignee_id" in updates:
            t.assignee_id = updates["assignee_id"]
        t.updated_at = utcnow()
        s.commit()
        s.refresh(t)
        return _task_dict(s, t)

def delete_task(task_id: int) -> bool:
    with get_session() as s:
        t = s.get(Task, task_id)
        if not t:
            return False
        for sub in s.exec(select(Task).where(Task.parent_task_id == task_id)).all():
            s.delete(sub)
        s.flush()
        s.delete(t)
        s.commit()
        return True

def _move_to_category(task_id: int, project_id: int, category: StatusCategory) -> Dict:
    with get_session() as s:
        t = s.get(Task, task_id)
        if not t or t.project_id != project_id:
            raise ValueError("Task not found")
        statuses = s.exec(
            select(TaskStatus).where(TaskStatus.project_id == project_id).order_by(TaskStatus.order_index)
        ).all()
        target = next((st for st in statuses if StatusCategory.classify(st.name) is category), None)
        if target is None and category is StatusCategory.TODO and statuses:
            target = statuses[0]
        if target is None:
            raise ValueError(f"Project has no '{category.value}' status")
        t.status_id = target.id
        t.updated_at = utcnow()
        s.commit()
        s.refresh(t)
        return _task_dict(s, t)

def mark_task_complete(task_id: int, project_id: int) -> Dict:
    return _move_to_category(task_id, project_id, StatusCategory.DONE)

def mark_task_incomplete(task_id: int, project_id: int) -> Dict:
    return _move_to_category(task_id, project_id, StatusCategory.TODO)

def create_sub_task(parent_id: int, fields: Dict[str, Any]) -> Dict:
    with get_session() as s:
        parent = s.get(Task, parent_id)
        if not parent:
            raise ValueError("Parent task not found")
        if parent.parent_task_id is not None:
            raise ValueError("Sub-tasks cannot have sub-tasks")
        project_id, status_id = parent.project_id, parent.status_id
    data = dict(fields)
    data["project_id"] = project_id
    data["parent_task_id"] = parent_id
    if data.get("status_id") is None:
        data["status_id"] = status_id
    return create_task(data)
