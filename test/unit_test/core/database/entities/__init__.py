"""Entity model tests."""
