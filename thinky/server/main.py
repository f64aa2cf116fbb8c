"""
Main Application Entry Point.

This module initializes the FastAPI application, configures middleware
(request logging, API guard, cookie sessions, CORS), registers the exception
handlers and includes all API routers. It serves as the root of the web server.
"""

import os
import secrets
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from starlette.middleware.sessions import SessionMiddleware

from thinky import __version__
from thinky.core.database import init_db
from thinky.core.logging_config import get_logger, setup_logging
from thinky.core.monitoring import initialize_logfire

from .api.v1 import (
    admin,
    auth,
    health,
    messages,
    moderation,
    policies,
    presence,
    reviewers,
    subjects,
    users,
)
from .core import constant
from .core.config import settings
from .exception_handlers import setup_exception_handlers
from .middleware import ApiGuardMiddleware, RequestLoggingMiddleware
from .services.storage import LOCAL_URL_PREFIX, close_storage

# Initialize logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifespan events.

    Handles startup and shutdown events for the FastAPI application.
    """
    # Startup
    logger.info("Starting up Thinky Server...")
    missing = settings.missing_critical
    if missing:
        logger.error(f"Missing critical configuration: {', '.join(missing)}. API requests will be rejected.")
    try:
        await init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}", exc_info=True)

    yield

    # Shutdown
    logger.info("Shutting down Thinky Server...")
    await close_storage()


app = FastAPI(
    title=constant.PROJECT_NAME,
    description="""
    Thinky Server API

    Backend of the Thinky study community: accounts, subjects, reviewers with
    flashcards, reactions, chat, presence, moderation and administration.
    """,
    version=__version__,
    openapi_url=f"{constant.API_PREFIX}/openapi.json",
    docs_url=f"{constant.API_PREFIX}/docs",
    redoc_url=f"{constant.API_PREFIX}/redoc",
    lifespan=lifespan,
)

setup_exception_handlers(app)
initialize_logfire(app)

# The last middleware added runs first
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(ApiGuardMiddleware)
app.add_middleware(
    SessionMiddleware,
    # Requests are refused while SESSION_SECRET is missing; the random key only keeps the app constructible.
    secret_key=settings.session_secret or secrets.token_hex(32),
    session_cookie=settings.session_cookie_name,
    max_age=settings.session_max_age,
    same_site="lax",
    https_only=settings.is_production,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router, tags=["health"])
app.include_router(auth.router, prefix=f"{constant.API_PREFIX}/auth", tags=["auth"])
app.include_router(subjects.router, prefix=constant.API_PREFIX, tags=["subjects"])
app.include_router(reviewers.router, prefix=constant.API_PREFIX, tags=["reviewers"])
app.include_router(users.router, prefix=constant.API_PREFIX, tags=["users"])
app.include_router(messages.router, prefix=constant.API_PREFIX, tags=["chat"])
app.include_router(presence.router, prefix=constant.API_PREFIX, tags=["presence"])
app.include_router(moderation.router, prefix=constant.API_PREFIX, tags=["moderation"])
app.include_router(policies.router, prefix=constant.API_PREFIX, tags=["policies"])
app.include_router(admin.router, prefix=constant.API_PREFIX, tags=["admin"])

# Avatars written by the local storage backend
if not settings.storage.use_hosted:
    _avatar_root = settings.avatar_upload_dir
    os.makedirs(_avatar_root, exist_ok=True)
    app.mount(LOCAL_URL_PREFIX, StaticFiles(directory=_avatar_root), name="uploads")
