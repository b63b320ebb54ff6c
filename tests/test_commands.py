# tests/test_commands.py

from __future__ import annotations

from taskdeck.cli.commands import CommandRegistry, registry


def test_command_registry_routes_and_aliases(state) -> None:
    reg = CommandRegistry()
    seen: list[list[str]] = []

    def echo(state, args):
        seen.append(args)
        return "ok"

    reg.register("echo", echo, "echo", aliases=["e"])

    assert reg.handle(state, "/echo a b") == "ok"
    assert reg.handle(state, "/E c") == "ok"
    assert seen == [["a", "b"], ["c"]]
    assert "/echo - echo" in reg.build_help()


def test_command_registry_unknown_and_non_command(state) -> None:
    reg = CommandRegistry()
    assert reg.handle(state, "hello") is None
    assert "Unknown command" in (reg.handle(state, "/nope") or "")
    assert "Empty command" in (reg.handle(state, "/") or "")


def test_add_and_show(state) -> None:
    reply = registry.handle(state, "/add Buy milk !high #home @user_1 due=2024-01-20")
    assert reply == "Created task_1: ⏳ [HIGH] Buy milk (Due: 2024-01-20)  @user_1 #home"

    shown = registry.handle(state, "/show task_1") or ""
    assert "status: todo" in shown
    assert "due in 5 day(s)" in shown


def test_validation_errors_become_replies(state) -> None:
    reply = registry.handle(state, "/add !critical")
    assert reply == "Validation failed:\n  - Title is required\n  - Invalid priority value"
    assert state.tasks.count() == 0


def test_domain_errors_become_replies(state) -> None:
    assert registry.handle(state, "/done task_9") == "Task with ID task_9 not found"
    assert "page" in (registry.handle(state, "/tasks page=x") or "")


def test_status_commands_and_listing(state) -> None:
    registry.handle(state, "/add First !low")
    registry.handle(state, "/add Second !urgent #work")
    registry.handle(state, "/add Third")
    assert registry.handle(state, "/done task_1") == "task_1 -> done"
    assert registry.handle(state, "/start task_3") == "task_3 -> in-progress"

    listing = registry.handle(state, "/tasks done=no sort=priority order=desc") or ""
    lines = listing.splitlines()
    assert lines[0] == "Tasks (page 1/1, 2 total):"
    assert lines[1].strip().startswith("task_2:")
    assert lines[2].strip().startswith("task_3:")

    assert registry.handle(state, "/tasks tag=nothing") == "No tasks match."
    assert registry.handle(state, "/tasks limit=1 page=5") == "Page 5 is empty (3 tasks, 3 pages)."


def test_bad_sort_key_is_reported(state) -> None:
    registry.handle(state, "/add Something")
    reply = registry.handle(state, "/tasks sort=color") or ""
    assert "color" in reply


def test_tag_assign_and_remove(state) -> None:
    registry.handle(state, "/add Tidy desk")
    assert registry.handle(state, "/tag task_1 office") == "task_1: ⏳ [MEDIUM] Tidy desk  #office"
    assert registry.handle(state, "/assign task_1 user_1") == (
        "task_1: ⏳ [MEDIUM] Tidy desk  @user_1 #office"
    )
    assert registry.handle(state, "/untag task_1 office") == "task_1: ⏳ [MEDIUM] Tidy desk  @user_1"
    assert registry.handle(state, "/assign task_1 -") == "task_1: ⏳ [MEDIUM] Tidy desk"
    assert registry.handle(state, "/rm task_1") == "Deleted task_1."
    assert state.tasks.count() == 0


def test_overdue_and_due_soon(state, clock) -> None:
    assert registry.handle(state, "/overdue") == "Nothing overdue."
    assert registry.handle(state, "/due") == "Nothing due soon."
    registry.handle(state, "/add Pay rent due=2024-01-17T12:00:00+00:00")

    assert "in 2 day(s)" in (registry.handle(state, "/due") or "")
    clock.advance(days=3)
    assert "Pay rent" in (registry.handle(state, "/overdue") or "")


def test_stats(state) -> None:
    registry.handle(state, "/add A")
    registry.handle(state, "/add B")
    registry.handle(state, "/done task_2")
    stats = registry.handle(state, "/stats") or ""
    assert "Tasks: 2 (completed 1, pending 1, overdue 0)" in stats
    assert "Completion rate: 50%" in stats
    assert "Users: 1" in stats


def test_login_and_user_management(state) -> None:
    assert registry.handle(state, "/login") == "Not logged in."
    assert registry.handle(state, "/login admin@taskmanager.com") == "Welcome, System Administrator."
    assert state.current_user is not None and state.current_user.is_admin

    assert registry.handle(state, "/adduser ann@example.com user Ann Lee") == (
        "Created user_2: Ann Lee (user)"
    )
    assert registry.handle(state, "/adduser x@example.com wizard X") == "Unknown role: wizard"
    assert "already exists" in (registry.handle(state, "/adduser ANN@example.com user Ann") or "")

    # admin sees full addresses
    assert "<ann@example.com>" in (registry.handle(state, "/users") or "")

    registry.handle(state, "/login ann@example.com")
    assert "<an***@example.com>" in (registry.handle(state, "/users") or "")
    assert registry.handle(state, "/adduser y@example.com user Y") == (
        "Insufficient permissions to create users"
    )


def test_login_unknown_email(state) -> None:
    assert registry.handle(state, "/login ghost@example.com") == "Invalid credentials"
    assert state.current_user is None
