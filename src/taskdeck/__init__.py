"""
taskdeck: an in-memory task and user manager.

Components:
- tasks/: Task model, validation, query engine (filter/sort/paginate), statistics, service
- users/: User model with role ranks, validation, service
- core/: errors, ports, clock/ids, shared validation helpers, AppState
- cli/: composition root, slash commands, console REPL
"""
