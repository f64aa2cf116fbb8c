"""Thinky.

Backend service for a study community where students publish "reviewers"
(rich-text notes with optional flashcards), chat with each other, and where
moderators handle abuse reports.

High-level architecture
-----------------------

- ``thinky.core``:

  - Logging and optional monitoring setup.
  - SQLModel entities and async repositories for every table.
  - Pydantic I/O models that define the JSON contract of the API.

- ``thinky.server``:

  - The FastAPI application, its middleware and exception handlers.
  - Services (password security, rate limiting, e-mail, avatar storage,
    chat filtering, moderation workflow).
  - Versioned REST routers consumed by the browser front end.
"""

__version__ = "1.0.0"
