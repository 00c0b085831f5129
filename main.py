# main.py

#============================================================#
#                          TaskFlow                          #
#------------------------------------------------------------#
# Purpose     : Command line front end for TaskFlow boards:  #
#               board, list, table, calendar and Gantt views #
#               over the SQLite/Supabase data service        #
#============================================================#

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from datetime import date

import db
from config import get_settings
from logging_setup import setup_logging
from board.controller import BoardController, Outcome, TaskDraft, open_board
from board.errors import NotFoundError, ServiceError
from board.notify import NoticeBoard
from board.records import Priority, TaskRecord
from board.service import SqlTaskService
from utils.dates import parse_date
from views.calendar_view import month_grid
from views.dashboard_view import dashboard_stats
from views.gantt_view import gantt_bars, gantt_frame
from views.table_view import ALL, SORT_FIELDS, TableQuery, project_table, table_frame

logger = logging.getLogger(__name__)

PRIORITY_CHOICES = [p.value for p in Priority]

# ======================  OUTPUT HELPERS  ======================
def _task_line(t: TaskRecord, collapsed: set[int]) -> str:
    marker = "   ↳ " if t.is_subtask else ("[+] " if t.id in collapsed else " -  ")
    due = f" due {t.due_date.isoformat()}" if t.due_date else ""
    pct = f" {t.completion_percentage:.0f}%" if t.completion_percentage is not None else ""
    who = f" @{t.assignee.name}" if t.assignee else ""
    return f"{marker}#{t.id} {t.title} ({t.priority.value}){due}{pct}{who}"

def _print_notices(board: BoardController) -> None:
    for n in board.notifier.active():
        print(f"[{n.level.value}] {n.message}")

def _exit_code(outcome: Outcome) -> int:
    if outcome is Outcome.COMMITTED:
        return 0
    return 2 if outcome is Outcome.REJECTED else 1

def _confirm_from_stdin(question: str) -> bool:
    try:
        answer = input(f"{question} [y/N] ").strip().lower()
    except EOFError:
        return False
    return answer in {"y", "yes"}

def _draft(args) -> TaskDraft:
    return TaskDraft(
        title=args.title or "",
        description=args.description,
        priority=Priority.from_value(args.priority),
        due_date=parse_date(args.due),
        status_id=args.status,
    )

# ======================  BOARD COMMANDS  ======================
async def cmd_board(board: BoardController, args) -> int:
    if args.collapse_all:
        board.collapse_all()
    for task_id in args.collapse or []:
        board.toggle_collapse(task_id)
    for status_id in args.fold or []:
        board.toggle_section(status_id)
    groups = board.list_groups() if args.list else board.groups()
    for g in groups:
        folded = args.list and g.status.id in board.state.collapsed_sections
        print(f"== {g.status.name} ({g.count})" + (" [folded]" if folded else ""))
        if folded:
            continue
        for t in g.tasks:
            print(_task_line(t, board.state.collapsed))
    return 0

async def cmd_move(board: BoardController, args) -> int:
    outcome = await board.move(args.task, args.status)
    _print_notices(board)
    return _exit_code(outcome)

async def cmd_complete(board: BoardController, args) -> int:
    outcome = await board.complete(args.task)
    _print_notices(board)
    return _exit_code(outcome)

async def cmd_uncomplete(board: BoardController, args) -> int:
    outcome = await board.uncomplete(args.task)
    _print_notices(board)
    return _exit_code(outcome)

async def cmd_add(board: BoardController, args) -> int:
    outcome = await board.create(_draft(args))
    if outcome is Outcome.REJECTED:
        print("A task needs a title.")
    _print_notices(board)
    return _exit_code(outcome)

async def cmd_add_subtask(board: BoardController, args) -> int:
    outcome = await board.create_subtask(args.parent, _draft(args))
    if outcome is Outcome.REJECTED:
        print("A sub-task needs a title and an existing top-level parent.")
    _print_notices(board)
    return _exit_code(outcome)

async def cmd_edit(board: BoardController, args) -> int:
    changes = {}
    if args.title is not None:
        changes["title"] = args.title
    if args.description is not None:
        changes["description"] = args.description
    if args.priority is not None:
        changes["priority"] = args.priority
    if args.due is not None:
        changes["due_date"] = parse_date(args.due)
    if args.status is not None:
        changes["status_id"] = args.status
    outcome = await board.update(args.task, changes)
    _print_notices(board)
    return _exit_code(outcome)

async def cmd_delete(board: BoardController, args) -> int:
    confirm = (lambda _q: True) if args.yes else _confirm_from_stdin
    outcome = await board.delete(args.task, confirm)
    _print_notices(board)
    return _exit_code(outcome)

async def cmd_table(board: BoardController, args) -> int:
    query = TableQuery(
        search=args.search or "",
        status=args.status_name or ALL,
        priority=args.priority or ALL,
        sort_field=args.sort,
        direction="asc" if args.asc else "desc",
    )
    result = project_table(board.state.tasks, query)
    print(f"{result.matched} of {result.total} tasks")
    if result.rows:
        print(table_frame(result).to_string(index=False))
    return 0

async def cmd_calendar(board: BoardController, args) -> int:
    today = date.today()
    year, month = args.year or today.year, args.month or today.month
    if not 1 <= year <= 9999:
        print(f"Year out of range: {year}", file=sys.stderr)
        return 2
    print(f"{year}-{month:02d}")
    for week in month_grid(board.state.tasks, year, month):
        for cell in week:
            if cell is None or not cell.tasks:
                continue
            titles = ", ".join(t.title for t in cell.tasks)
            more = f" (+{cell.overflow} more)" if cell.overflow else ""
            print(f"  {cell.day.isoformat()}: {titles}{more}")
    return 0

async def cmd_gantt(board: BoardController, args) -> int:
    df = gantt_frame(gantt_bars(board.state.tasks, board.state.statuses))
    if df.empty:
        print("Add due dates to tasks to see them on the timeline.")
    else:
        print(df.to_string(index=False))
    return 0

async def cmd_stats(board: BoardController, args) -> int:
    stats = dashboard_stats(board.state.tasks)
    print(f"Total tasks:  {stats.total}")
    print(f"Completed:    {stats.completed} ({stats.completion_rate}%)")
    print(f"In progress:  {stats.in_progress}")
    print(f"Overdue:      {stats.overdue}")
    return 0

BOARD_COMMANDS = {
    "board": cmd_board,
    "move": cmd_move,
    "complete": cmd_complete,
    "uncomplete": cmd_uncomplete,
    "add": cmd_add,
    "add-subtask": cmd_add_subtask,
    "edit": cmd_edit,
    "delete": cmd_delete,
    "table": cmd_table,
    "calendar": cmd_calendar,
    "gantt": cmd_gantt,
    "stats": cmd_stats,
}

async def run_board_command(args) -> int:
    settings = get_settings()
    notices = NoticeBoard(
        success_seconds=settings.success_notice_seconds,
        error_seconds=settings.error_notice_seconds,
    )
    try:
        board = await open_board(
            SqlTaskService(),
            user_id=args.user,
            workspace_id=args.workspace,
            project_id=args.project,
            notifier=notices,
        )
    except NotFoundError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        hint = f"--user {args.user}" if e.back_to == "workspaces" else f"--workspace {args.workspace}"
        print(f"Back to {e.back_to}: python main.py {e.back_to} {hint}", file=sys.stderr)
        return 1
    except ServiceError as e:
        print(f"Failed to load data: {e}", file=sys.stderr)
        return 1
    logger.debug("Running %s on project %s", args.command, board.project_id)
    return await BOARD_COMMANDS[args.command](board, args)

# ======================  OTHER COMMANDS  ======================
def cmd_init_db(args) -> int:
    db.init_db()
    print("Database ready.")
    return 0

def cmd_bootstrap(args) -> int:
    user = db.get_or_create_user(args.email, args.name)
    ws = db.create_default_workspace(user["id"], user["name"])
    print(f"user={user['id']} workspace={ws['id']} ({ws['name']})")
    for p in db.get_projects(ws["id"]):
        print(f"  project={p['id']} {p['name']}")
    return 0

def cmd_workspaces(args) -> int:
    for ws in db.get_user_workspaces(args.user):
        print(f"{ws['id']}: {ws['name']} [{ws['user_role']}]")
    return 0

def cmd_projects(args) -> int:
    for p in db.get_projects(args.workspace):
        print(f"{p['id']}: {p['name']} ({p['status']})")
    return 0

# ======================  PARSER  ======================
def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="taskflow", description="TaskFlow project boards")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="create tables")

    p = sub.add_parser("bootstrap", help="create a user with a default workspace")
    p.add_argument("--email", required=True)
    p.add_argument("--name", required=True)

    p = sub.add_parser("workspaces", help="list a user's workspaces")
    p.add_argument("--user", type=int, required=True)

    p = sub.add_parser("projects", help="list a workspace's projects")
    p.add_argument("--workspace", type=int, required=True)

    def board_parser(name: str, help_text: str) -> argparse.ArgumentParser:
        bp = sub.add_parser(name, help=help_text)
        bp.add_argument("--user", type=int, required=True)
        bp.add_argument("--workspace", type=int, required=True)
        bp.add_argument("--project", type=int, required=True)
        return bp

    def task_fields(bp: argparse.ArgumentParser) -> None:
        bp.add_argument("--title")
        bp.add_argument("--description")
        bp.add_argument("--priority", choices=PRIORITY_CHOICES)
        bp.add_argument("--due", help="YYYY-MM-DD")
        bp.add_argument("--status", type=int, help="status id")

    p = board_parser("board", "show the board grouped by status")
    p.add_argument("--collapse", type=int, action="append", help="hide sub-tasks of this task")
    p.add_argument("--collapse-all", action="store_true", help="hide every sub-task")
    p.add_argument("--fold", type=int, action="append", help="list view: fold this status section")
    p.add_argument("--list", action="store_true", help="list view ordering")

    p = board_parser("move", "move a task (with its sub-tasks) to another status")
    p.add_argument("--task", type=int, required=True)
    p.add_argument("--status", type=int, required=True)

    for name in ("complete", "uncomplete"):
        p = board_parser(name, f"mark a task {name}")
        p.add_argument("--task", type=int, required=True)

    p = board_parser("add", "create a task")
    task_fields(p)

    p = board_parser("add-subtask", "create a sub-task")
    p.add_argument("--parent", type=int, required=True)
    task_fields(p)

    p = board_parser("edit", "edit task fields")
    p.add_argument("--task", type=int, required=True)
    task_fields(p)

    p = board_parser("delete", "delete a task")
    p.add_argument("--task", type=int, required=True)
    p.add_argument("--yes", action="store_true", help="skip the confirmation prompt")

    p = board_parser("table", "filterable, sortable task table")
    p.add_argument("--search")
    p.add_argument("--status-name")
    p.add_argument("--priority", choices=PRIORITY_CHOICES)
    p.add_argument("--sort", choices=SORT_FIELDS, default="created_at")
    p.add_argument("--asc", action="store_true")

    p = board_parser("calendar", "tasks by due date for one month")
    p.add_argument("--year", type=int)
    p.add_argument("--month", type=int, choices=range(1, 13), metavar="1-12")

    board_parser("gantt", "timeline bars")
    board_parser("stats", "dashboard numbers")
    return parser

SIMPLE_COMMANDS = {
    "init-db": cmd_init_db,
    "bootstrap": cmd_bootstrap,
    "workspaces": cmd_workspaces,
    "projects": cmd_projects,
}

def main(argv: list[str] | None = None) -> int:
    settings = get_settings()
    setup_logging(settings.log_level)
    args = build_parser().parse_args(argv)

    db.init_db()
    if args.command in SIMPLE_COMMANDS:
        return SIMPLE_COMMANDS[args.command](args)
    return asyncio.run(run_board_command(args))


if __name__ == "__main__":
    sys.exit(main())
