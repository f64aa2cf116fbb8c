"""
Monitoring and Tracing Configuration Module.

This module provides optional integration with Logfire for tracing the
Thinky server, including:
- API endpoint tracing
- Database operation monitoring
- Outbound HTTP calls (avatar storage)
- Moderation audit events

Everything here is a no-op unless ``LOGFIRE_ENABLED`` is set, so the server
behaves identically with monitoring switched off.
"""

import logging
import os
from typing import Optional

from fastapi import FastAPI

logger = logging.getLogger(__name__)

# Logfire configuration from environment
LOGFIRE_ENABLED = os.getenv("LOGFIRE_ENABLED", "false").lower() in ("true", "1", "yes")
LOGFIRE_TOKEN = os.getenv("LOGFIRE_TOKEN", "")
LOGFIRE_ENVIRONMENT = os.getenv("LOGFIRE_ENVIRONMENT", "development")
LOGFIRE_SERVICE_NAME = os.getenv("LOGFIRE_SERVICE_NAME", "thinky-server")
LOGFIRE_SERVICE_VERSION = os.getenv("LOGFIRE_SERVICE_VERSION", "1.0.0")

# Feature flags
LOGFIRE_TRACE_SQLALCHEMY = os.getenv("LOGFIRE_TRACE_SQLALCHEMY", "true").lower() in ("true", "1", "yes")
LOGFIRE_TRACE_HTTPX = os.getenv("LOGFIRE_TRACE_HTTPX", "true").lower() in ("true", "1", "yes")
LOGFIRE_TRACE_FASTAPI = os.getenv("LOGFIRE_TRACE_FASTAPI", "true").lower() in ("true", "1", "yes")


def initialize_logfire(app: FastAPI | None = None) -> bool:
    """
    Initialize Logfire for monitoring and tracing.

    Args:
        app: FastAPI application instance for endpoint instrumentation (optional).

    Returns:
        True when Logfire was configured, False when monitoring stays disabled.
    """
    if not LOGFIRE_ENABLED:
        logger.info("Logfire monitoring is disabled. Set LOGFIRE_ENABLED=true to enable.")
        return False

    if not LOGFIRE_TOKEN:
        logger.warning("Logfire is enabled but LOGFIRE_TOKEN is not set. Monitoring will not work.")
        return False

    try:
        import logfire

        logfire.configure(
            token=LOGFIRE_TOKEN,
            service_name=LOGFIRE_SERVICE_NAME,
            service_version=LOGFIRE_SERVICE_VERSION,
            environment=LOGFIRE_ENVIRONMENT,
        )

        if LOGFIRE_TRACE_SQLALCHEMY:
            try:
                logfire.instrument_sqlalchemy()
                logger.info("Logfire: SQLAlchemy instrumentation enabled")
            except Exception as e:
                logger.warning(f"Failed to instrument SQLAlchemy: {e}")

        if LOGFIRE_TRACE_HTTPX:
            try:
                logfire.instrument_httpx()
                logger.info("Logfire: HTTPX instrumentation enabled")
            except Exception as e:
                logger.warning(f"Failed to instrument HTTPX: {e}")

        if LOGFIRE_TRACE_FASTAPI and app is not None:
            try:
                logfire.instrument_fastapi(app=app)
                logger.info("Logfire: FastAPI instrumentation enabled")
            except Exception as e:
                logger.warning(f"Failed to instrument FastAPI: {e}")

        logger.info(
            f"Logfire monitoring initialized: environment={LOGFIRE_ENVIRONMENT}, service={LOGFIRE_SERVICE_NAME}"
        )
        return True

    except ImportError:
        logger.warning("Logfire is enabled but 'logfire' package is not installed.")
    except Exception as e:
        logger.error(f"Failed to initialize Logfire: {e}", exc_info=True)
    return False


def log_api_request(method: str, path: str, status_code: int, duration_ms: float) -> None:
    """
    Log an API request with performance metrics.

    Args:
        method: HTTP method
        path: Request path
        status_code: HTTP status code
        duration_ms: Request duration in milliseconds
    """
    if not LOGFIRE_ENABLED:
        return
    try:
        import logfire

        logfire.info(
            "API request completed",
            method=method,
            path=path,
            status_code=status_code,
            duration_ms=duration_ms,
        )
    except Exception:
        logger.debug(f"Could not log API request to Logfire: {method} {path}")


def log_moderation_action(report_id: str, action: str, moderator_id: str, target_user_id: Optional[str]) -> None:
    """
    Record a moderation decision as an audit event.

    Args:
        report_id: The report that was acted upon
        action: The action name (ban, mute, dismiss, ...)
        moderator_id: The moderator who took the action
        target_user_id: The user affected by the action, if any
    """
    logger.info(
        f"Moderation action {action} on report {report_id} by {moderator_id}",
        extra={"report_id": report_id, "action": action, "moderator_id": moderator_id, "target_user_id": target_user_id},
    )
    if not LOGFIRE_ENABLED:
        return
    try:
        import logfire

        logfire.info(
            "Moderation action taken",
            report_id=report_id,
            action=action,
            moderator_id=moderator_id,
            target_user_id=target_user_id,
        )
    except Exception:
        logger.debug(f"Could not log moderation action to Logfire: report_id={report_id}")
