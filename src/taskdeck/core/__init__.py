"""Shared building blocks: errors, ports, clock, validation helpers, AppState."""
