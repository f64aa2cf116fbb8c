from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, AsyncGenerator, Callable, Dict, List, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel
from sqlmodel.pool import StaticPool

from thinky.core.database import entities  # noqa: F401
from thinky.core.database import utc_now
from thinky.core.database.entities.reviewers import Reviewer
from thinky.core.database.entities.subjects import Subject
from thinky.core.database.entities.users import User
from thinky.core.database.repositories import SqlRepoBundle, build_sql_repos
from thinky.server.services.mailer import EmailResult
from thinky.server.services.security import hash_password
from thinky.server.services.storage import LocalAvatarStorage

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
DEFAULT_PASSWORD = "Sup3r$ecret!"


@dataclass
class SentEmail:
    to: str
    subject: str
    template: str
    variables: Dict[str, Any]


@dataclass
class FakeMailer:
    """Records e-mails instead of sending them."""

    ok: bool = True
    sent: List[SentEmail] = field(default_factory=list)

    async def send(self, to, subject, template="default", variables=None) -> EmailResult:
        self.sent.append(SentEmail(to=to, subject=subject, template=template, variables=dict(variables or {})))
        if self.ok:
            return EmailResult(ok=True, info="recorded")
        return EmailResult(ok=False, error="smtp down")


@pytest_asyncio.fixture
async def test_engine():
    """A fresh in-memory database per test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture(name="session")
async def session_fixture(test_engine) -> AsyncGenerator[AsyncSession, None]:
    maker = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)
    async with maker() as session:
        yield session


@pytest.fixture
def repos(session: AsyncSession) -> SqlRepoBundle:
    return build_sql_repos(session=session)


@pytest.fixture
def mailer() -> FakeMailer:
    return FakeMailer()


@pytest.fixture
def storage(tmp_path) -> LocalAvatarStorage:
    return LocalAvatarStorage(str(tmp_path / "avatars"))


@pytest.fixture
def make_user(repos: SqlRepoBundle) -> Callable:
    """Factory creating accounts directly in the database."""
    counter = {"n": 0}

    async def _make(
        username: Optional[str] = None,
        *,
        role: str = "student",
        password: str = DEFAULT_PASSWORD,
        is_verified: bool = True,
        **fields: Any,
    ) -> User:
        counter["n"] += 1
        username = username or f"user{counter['n']}"
        email = fields.pop("email", f"{username}@example.com")
        user = User(
            email=email,
            username=username,
            role=role,
            password_hash=hash_password(password),
            is_verified=is_verified,
            **fields,
        )
        return await repos.users.create(user)

    return _make


@pytest.fixture
def make_subject(repos: SqlRepoBundle) -> Callable:
    async def _make(owner: User, name: str = "Biology", school: str = "Central High") -> Subject:
        return await repos.subjects.create(Subject(user_id=owner.id, name=name, school=school, description=""))

    return _make


@pytest.fixture
def make_reviewer(repos: SqlRepoBundle, make_subject) -> Callable:
    async def _make(
        owner: User,
        subject: Optional[Subject] = None,
        title: str = "Cell structure",
        content: str = "<p>Mitochondria is the powerhouse of the cell</p>",
        **fields: Any,
    ) -> Reviewer:
        subject = subject or await make_subject(owner)
        reviewer = Reviewer(user_id=owner.id, subject_id=subject.id, title=title, content=content, **fields)
        return await repos.reviewers.create(reviewer)

    return _make


@pytest_asyncio.fixture(name="app")
async def app_fixture(session: AsyncSession, mailer: FakeMailer, storage: LocalAvatarStorage):
    """The application with database, mailer and storage replaced for tests."""
    from thinky.core.database import get_session
    from thinky.server.main import app
    from thinky.server.services.mailer import get_email_service
    from thinky.server.services.storage import get_storage

    async def get_session_override() -> AsyncGenerator[AsyncSession, None]:
        yield session

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_email_service] = lambda: mailer
    app.dependency_overrides[get_storage] = lambda: storage

    yield app

    app.dependency_overrides.clear()


@pytest_asyncio.fixture(name="client")
async def client_fixture(app) -> AsyncGenerator[AsyncClient, None]:
    """An anonymous client."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost") as client:
        yield client


@pytest_asyncio.fixture
async def login_as(app) -> AsyncGenerator[Callable, None]:
    """Factory returning a client logged in as the given user.

    Each user gets a separate client so several sessions can be used in one test.
    """
    clients: List[AsyncClient] = []

    async def _login(user: User, password: str = DEFAULT_PASSWORD) -> AsyncClient:
        client = AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost")
        clients.append(client)
        response = await client.post("/api/auth/login", json={"email": user.email, "password": password})
        assert response.status_code == 200, response.text
        return client

    yield _login

    for client in clients:
        await client.aclose()


@pytest.fixture
def later() -> Callable:
    def _later(**delta: float):
        return utc_now() + timedelta(**delta)

    return _later
