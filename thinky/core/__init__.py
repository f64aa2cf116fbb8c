"""
Shared building blocks for Thinky.

Holds the database layer, the request/response models, and the logging
and Logfire setup used by the server.
"""

from thinky.core.logging_config import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
