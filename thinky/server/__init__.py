"""
Thinky web server.

Subpackages:
    api: versioned FastAPI routers.
    core: settings and API constants.
    services: auth guards, e-mail, storage, moderation and other helpers
        used by the routers.
    middleware: request logging, rate limiting and cache headers.
    exception_handlers: JSON error bodies.
"""
