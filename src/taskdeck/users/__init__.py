"""
User subsystem.

Components:
- user_models.py: User, UserRole (with privilege rank), Preferences
- user_validation.py: field rules for candidate user records
- user_service.py: in-memory collection, permissions, last-admin protection
"""
