"""Test configuration for database unit tests.

Provides an in-memory SQLite engine per test plus small factories for the
rows most repository tests need.
"""

from __future__ import annotations

from typing import AsyncGenerator, Callable

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel
from sqlmodel.pool import StaticPool

from thinky.core.database import entities  # noqa: F401
from thinky.core.database.entities.reviewers import Reviewer
from thinky.core.database.entities.subjects import Subject
from thinky.core.database.entities.users import User
from thinky.core.database.repositories import SqlRepoBundle, build_sql_repos


@pytest_asyncio.fixture(scope="function")
async def in_memory_engine() -> AsyncGenerator:
    """Create in-memory SQLite engine for testing."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    try:
        yield engine
    finally:
        await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def in_memory_session(in_memory_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create in-memory SQLite session for testing."""
    maker = async_sessionmaker(in_memory_engine, class_=AsyncSession, expire_on_commit=False)
    async with maker() as session:
        yield session


@pytest.fixture
def db(in_memory_session: AsyncSession) -> SqlRepoBundle:
    return build_sql_repos(session=in_memory_session)


@pytest.fixture
def add_user(db: SqlRepoBundle) -> Callable:
    async def _add(username: str, role: str = "student", **fields) -> User:
        email = fields.pop("email", f"{username}@example.com")
        return await db.users.create(
            User(email=email, username=username, role=role, password_hash="x", is_verified=True, **fields)
        )

    return _add


@pytest.fixture
def add_reviewer(db: SqlRepoBundle) -> Callable:
    async def _add(owner: User, title: str = "Cell structure", subject: Subject | None = None, **fields) -> Reviewer:
        if subject is None:
            subject = await db.subjects.create(Subject(user_id=owner.id, name="Biology", school="Central High"))
        return await db.reviewers.create(
            Reviewer(user_id=owner.id, subject_id=subject.id, title=title, content="<p>notes</p>", **fields)
        )

    return _add
