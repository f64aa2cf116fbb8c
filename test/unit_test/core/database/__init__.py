"""Unit tests for the database layer.

This package covers thinky/core/database:

- Entity defaults (SQLModel)
- Repository queries and explicit cascades

All tests use in-memory SQLite so they run without external database services.
"""
