"""Shared fixtures: a throwaway SQLite database and an ASGI test client."""

import os

# Cheap bcrypt and a deterministic environment before settings are cached
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("ENVIRONMENT", "test")

from collections.abc import AsyncGenerator

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from talecraft.api.main import create_app
from talecraft.core.config import Settings, get_settings
from talecraft.core.security import create_access_token, hash_password
from talecraft.models import Base, Collaborator, CollaboratorRole, Comment, Story, User
from talecraft.models.database import build_engine, build_session_factory, get_session

get_settings.cache_clear()


@pytest.fixture
async def engine(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'talecraft.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return build_session_factory(engine)


@pytest.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


class Seeder:
    """Insert rows in their own committed transactions."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def _add(self, obj):
        async with self.session_factory() as session:
            session.add(obj)
            await session.commit()
            await session.refresh(obj)
        return obj

    async def user(self, username: str, password: str = "password123") -> User:
        return await self._add(
            User(
                username=username,
                email=f"{username}@example.com",
                password_hash=hash_password(password),
            )
        )

    async def story(
        self,
        author: User,
        title: str = "The Lighthouse",
        content: str = "It was a dark and stormy night.",
        is_public: bool = False,
    ) -> Story:
        return await self._add(
            Story(author_id=author.id, title=title, content=content, is_public=is_public)
        )

    async def collaborator(
        self, story: Story, user: User, role: CollaboratorRole
    ) -> Collaborator:
        return await self._add(Collaborator(story_id=story.id, user_id=user.id, role=role))

    async def comment(self, story: Story, user: User, content: str = "Lovely.") -> Comment:
        return await self._add(Comment(story_id=story.id, user_id=user.id, content=content))


@pytest.fixture
def seed(session_factory) -> Seeder:
    return Seeder(session_factory)


@pytest.fixture
def settings() -> Settings:
    return Settings(environment="test", rate_limit_requests=1000, bcrypt_rounds=4)


@pytest.fixture
def app(settings, session_factory):
    app = create_app(settings)

    async def override_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = override_session
    return app


@pytest.fixture
async def client(app) -> AsyncGenerator[httpx.AsyncClient, None]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.email)}"}


@pytest.fixture
def headers_for():
    return auth_headers
