"""Repository tests against in-memory SQLite."""
