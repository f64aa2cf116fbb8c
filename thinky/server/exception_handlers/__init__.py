"""
Error responses for the Thinky API.

Every failure, including validation errors and unknown routes, leaves the
server as a JSON body with an ``error`` message.
"""

from .global_handler import setup_exception_handlers

__all__ = ["setup_exception_handlers"]
