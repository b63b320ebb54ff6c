"""
Task subsystem.

Components:
- task_models.py: data structures (Task, Priority, TaskStatus)
- task_validation.py: field rules for candidate task records
- task_query.py: filter -> sort -> paginate over a task collection
- task_stats.py: completion rate, overdue / due-soon, aggregate counts
- task_service.py: in-memory collection with CRUD helpers
"""
