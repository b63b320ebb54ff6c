# src/taskdeck/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from ..core.errors import TaskdeckError, ValidationFailure
from ..core.state import AppState
from ..tasks.task_models import Priority, Task, TaskStatus
from ..tasks.task_query import PageOptions, TaskFilter
from ..tasks.task_stats import calculate_completion_rate
from ..users.user_models import UserRole

CommandHandler = Callable[[AppState, list[str]], str]

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /tasks, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(self, state: AppState, line: str) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.

        Domain errors become replies; anything else propagates.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            return handler(state, args)
        except ValidationFailure as e:
            return "Validation failed:\n" + "\n".join(f"  - {err}" for err in e.errors)
        except TaskdeckError as e:
            logger.debug("Command /%s refused: %s", name, e)
            return str(e)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _split_options(args: list[str]) -> tuple[list[str], dict[str, str]]:
    """Separate `key=value` options from positional words."""
    words: list[str] = []
    opts: dict[str, str] = {}
    for a in args:
        key, sep, value = a.partition("=")
        if sep and key:
            opts[key.lower()] = value
        else:
            words.append(a)
    return words, opts


def _csv(value: str) -> list[str]:
    return [p.strip() for p in value.split(",") if p.strip()]


def _format_task(task: Task) -> str:
    extra = []
    if task.assignee_id:
        extra.append(f"@{task.assignee_id}")
    extra.extend(f"#{t}" for t in task.tags)
    suffix = f"  {' '.join(extra)}" if extra else ""
    return f"{task.id}: {task.summary()}{suffix}"


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_tasks(state: AppState, args: list[str]) -> str:
    """
    /tasks [status=todo,done] [priority=high] [assignee=user_2] [tag=a,b]
           [done=yes|no] [page=1] [limit=10] [sort=due_at] [order=asc|desc]
    """
    _, opts = _split_options(args)

    completed = None
    if "done" in opts:
        completed = opts["done"].lower() in ("1", "yes", "true", "y")

    flt = TaskFilter(
        status=_csv(opts["status"]) if "status" in opts else None,
        priority=_csv(opts["priority"]) if "priority" in opts else None,
        assignee_id=opts.get("assignee"),
        completed=completed,
        tags=_csv(opts["tag"]) if "tag" in opts else None,
    )

    try:
        page_no = int(opts.get("page", "1"))
        limit = int(opts.get("limit", str(state.settings.default_page_size)))
    except ValueError:
        return "page and limit must be integers."

    order = opts.get("order", "asc").lower()
    page = PageOptions(
        page=page_no,
        limit=limit,
        sort_by=opts.get("sort"),
        sort_order="desc" if order == "desc" else "asc",
    )

    result = state.tasks.list_tasks(flt, page)
    if result.total == 0:
        return "No tasks match."
    if not result.items:
        return f"Page {result.page} is empty ({result.total} tasks, {result.total_pages} pages)."

    lines = [f"Tasks (page {result.page}/{result.total_pages}, {result.total} total):"]
    lines.extend(f"  {_format_task(t)}" for t in result.items)
    return "\n".join(lines)


def cmd_add(state: AppState, args: list[str]) -> str:
    """
    /add <title words> [!priority] [#tag ...] [@assignee] [due=YYYY-MM-DD]
    """
    words, opts = _split_options(args)
    priority: str = Priority.MEDIUM.value
    tags: list[str] = []
    assignee = None
    title_parts: list[str] = []

    for w in words:
        if w.startswith("!") and len(w) > 1:
            priority = w[1:].lower()
        elif w.startswith("#") and len(w) > 1:
            tags.append(w[1:])
        elif w.startswith("@") and len(w) > 1:
            assignee = w[1:]
        else:
            title_parts.append(w)

    task = state.tasks.create(
        title=" ".join(title_parts),
        priority=priority,
        tags=tags,
        assignee_id=assignee,
        due_at=opts.get("due"),
    )
    return f"Created {_format_task(task)}"


def cmd_show(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /show <task_id>"
    task = state.tasks.get(args[0])
    now = state.clock.now()
    lines = [_format_task(task)]
    if task.description:
        lines.append(f"  {task.description}")
    lines.append(f"  status: {task.status.value}  completed: {'yes' if task.completed else 'no'}")
    days = task.days_until_due(now)
    if days is not None:
        lines.append(f"  due in {days} day(s)" + ("  OVERDUE" if task.is_overdue(now) else ""))
    return "\n".join(lines)


def _status_command(status: TaskStatus) -> CommandHandler:
    def handler(state: AppState, args: list[str]) -> str:
        if not args:
            return "Usage: /<command> <task_id>"
        task = state.tasks.set_status(args[0], status)
        return f"{task.id} -> {task.status.value}"

    return handler


def cmd_rm(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /rm <task_id>"
    state.tasks.delete(args[0])
    return f"Deleted {args[0]}."


def cmd_tag(state: AppState, args: list[str]) -> str:
    if len(args) < 2:
        return "Usage: /tag <task_id> <tag>"
    task = state.tasks.add_tag(args[0], args[1])
    return _format_task(task)


def cmd_untag(state: AppState, args: list[str]) -> str:
    if len(args) < 2:
        return "Usage: /untag <task_id> <tag>"
    task = state.tasks.remove_tag(args[0], args[1])
    return _format_task(task)


def cmd_assign(state: AppState, args: list[str]) -> str:
    """/assign <task_id> <user_id>  (use "-" to unassign)"""
    if len(args) < 2:
        return "Usage: /assign <task_id> <user_id|->"
    assignee = None if args[1] == "-" else args[1]
    task = state.tasks.update(args[0], {"assignee_id": assignee})
    return _format_task(task)


def cmd_overdue(state: AppState, args: list[str]) -> str:
    tasks = state.tasks.overdue()
    if not tasks:
        return "Nothing overdue."
    return "Overdue:\n" + "\n".join(f"  {_format_task(t)}" for t in tasks)


def cmd_stats(state: AppState, args: list[str]) -> str:
    st = state.tasks.statistics()
    all_tasks = state.tasks.list_tasks().items
    us = state.users.statistics()
    by_priority = ", ".join(f"{p.value}={n}" for p, n in st.by_priority.items())
    by_status = ", ".join(f"{s.value}={n}" for s, n in st.by_status.items())
    return (
        "Statistics:\n"
        f"  Tasks: {st.total} (completed {st.completed}, pending {st.pending}, "
        f"overdue {st.overdue})\n"
        f"  Completion rate: {calculate_completion_rate(all_tasks)}%\n"
        f"  By priority: {by_priority}\n"
        f"  By status: {by_status}\n"
        f"  Users: {us.total} (active {us.active}, recently active {us.recently_active})"
    )


def cmd_users(state: AppState, args: list[str]) -> str:
    users = state.users.list_users(requested_by=state.current_user)
    safe = state.current_user is None or not state.current_user.can_manage_users()
    lines = [f"Users ({len(users)}):"]
    for u in users:
        email = u.masked_email if safe else u.email
        flag = "" if u.is_active else "  [inactive]"
        lines.append(f"  {u.id}: {u.display_name} <{email}>{flag}")
    return "\n".join(lines)


def cmd_adduser(state: AppState, args: list[str]) -> str:
    """/adduser <email> <role> <name words>"""
    if len(args) < 3:
        return "Usage: /adduser <email> <role> <name>"
    role = UserRole.coerce(args[1].lower())
    if role is None:
        return f"Unknown role: {args[1]}"
    user = state.users.create(
        name=" ".join(args[2:]),
        email=args[0],
        role=role,
        created_by=state.current_user,
    )
    return f"Created {user.id}: {user.display_name}"


def cmd_login(state: AppState, args: list[str]) -> str:
    """/login <email>  (demo login, no password)"""
    if not args:
        if state.current_user is None:
            return "Not logged in."
        return f"Logged in as {state.current_user.display_name}."
    user = state.users.authenticate(args[0], password="")
    state.current_user = user
    return f"Welcome, {user.name}."


def cmd_due(state: AppState, args: list[str]) -> str:
    tasks = state.tasks.due_soon()
    if not tasks:
        return "Nothing due soon."
    now: datetime = state.clock.now()
    return "Due soon:\n" + "\n".join(
        f"  {_format_task(t)} (in {t.days_until_due(now)} day(s))" for t in tasks
    )


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register(
    "tasks",
    cmd_tasks,
    help_text="List tasks: status= priority= assignee= tag= done= page= limit= sort= order=.",
    aliases=["ls"],
)
registry.register(
    "add", cmd_add, help_text="Add a task: /add <title> [!priority] [#tag] [@user] [due=date]."
)
registry.register("show", cmd_show, help_text="Show one task.")
registry.register("start", _status_command(TaskStatus.IN_PROGRESS), help_text="Mark in progress.")
registry.register("done", _status_command(TaskStatus.DONE), help_text="Mark done.")
registry.register("undo", _status_command(TaskStatus.TODO), help_text="Reopen a task.")
registry.register("cancel", _status_command(TaskStatus.CANCELLED), help_text="Cancel a task.")
registry.register("rm", cmd_rm, help_text="Delete a task.")
registry.register("tag", cmd_tag, help_text="Add a tag: /tag <task_id> <tag>.")
registry.register("untag", cmd_untag, help_text="Remove a tag: /untag <task_id> <tag>.")
registry.register("assign", cmd_assign, help_text="Assign: /assign <task_id> <user_id|->.")
registry.register("overdue", cmd_overdue, help_text="List overdue tasks.")
registry.register("due", cmd_due, help_text="List tasks due soon.")
registry.register("stats", cmd_stats, help_text="Task and user statistics.")
registry.register("users", cmd_users, help_text="List users.")
registry.register("adduser", cmd_adduser, help_text="Add a user: /adduser <email> <role> <name>.")
registry.register("login", cmd_login, help_text="Act as a user: /login <email>.")
