# tests/conftest.py
"""
Shared fixtures.

- Settings come from environment variables set before the app is imported
- Each test gets its own in-memory SQLite database (aiosqlite)
- Redis is an AsyncMock backed by a plain dict with list semantics
- The chat model is langchain's fake list model
- The FastAPI app is exercised in-process through httpx's ASGITransport
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-testing-only-not-for-production")
os.environ.setdefault("LOG_LEVEL", "ERROR")

from typing import AsyncGenerator, Callable, Dict, List
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from langchain_core.language_models.fake_chat_models import FakeListChatModel
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from companion_app.api.endpoints.chat import get_chat_memory, get_llm
from companion_app.core.database import Base, get_db, get_session_factory
from companion_app.core.security import create_access_token
from companion_app.main import create_app
from companion_app.models.category import Category
from companion_app.services.category_service import CategoryService
from companion_app.services.chat_memory import ChatMemoryService

# Registers the message table on Base.metadata
import companion_app.models.message  # noqa: F401,E402

INSTRUCTIONS = (
    "Milo is a curious fox who helps children learn about animals and nature. "
    "He always answers kindly, asks a follow-up question to keep the child thinking, "
    "and never uses words a seven year old would not understand."
)
SEED = (
    "Human: Hi Milo, why do foxes have bushy tails?\n"
    "Milo: Great question! My tail keeps me warm when I curl up to sleep in the snow. "
    "What do you think your cat uses its tail for?\n"
    "Human: Balance!\nMilo: Exactly right!"
)


# ============================================================================
# Database
# ============================================================================

@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker:
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
async def categories(session_factory) -> List[Category]:
    async with session_factory() as session:
        return await CategoryService(session).ensure(["Animals", "Cartoons"])


@pytest.fixture
def valid_values(categories) -> Dict[str, str]:
    """A complete companion form, keyed the way the form submits it."""
    return {
        "name": "Milo",
        "description": "A curious fox",
        "instructions": INSTRUCTIONS,
        "seed": SEED,
        "src": "/img/milo.png",
        "categoryID": categories[0].id,
    }


# ============================================================================
# Redis and chat model
# ============================================================================

@pytest.fixture
def redis_store() -> Dict[str, list]:
    return {}


@pytest.fixture
def mock_redis(redis_store) -> MagicMock:
    """Redis mock implementing the list commands chat memory uses."""

    async def lpush(key, *values):
        items = redis_store.setdefault(key, [])
        for value in values:
            items.insert(0, value)
        return len(items)

    async def ltrim(key, start, end):
        redis_store[key] = redis_store.get(key, [])[start:end + 1]
        return True

    async def lrange(key, start, end):
        items = redis_store.get(key, [])
        return items[start:] if end == -1 else items[start:end + 1]

    redis = MagicMock()
    redis.lpush = AsyncMock(side_effect=lpush)
    redis.ltrim = AsyncMock(side_effect=ltrim)
    redis.lrange = AsyncMock(side_effect=lrange)
    redis.ping = AsyncMock(return_value=True)
    return redis


@pytest.fixture
def chat_memory(mock_redis) -> ChatMemoryService:
    return ChatMemoryService(redis_client=mock_redis)


@pytest.fixture
def fake_llm() -> FakeListChatModel:
    return FakeListChatModel(responses=["Hello there, friend!", "Foxes love to play."])


# ============================================================================
# Identity
# ============================================================================

@pytest.fixture
def make_token() -> Callable[..., str]:
    def _make_token(user_id: str = "user_alice", first_name: str = "Alice", **claims) -> str:
        data = {"sub": user_id, "first_name": first_name}
        data.update(claims)
        return create_access_token({k: v for k, v in data.items() if v is not None})
    return _make_token


@pytest.fixture
def auth_headers(make_token) -> Dict[str, str]:
    return {"Authorization": f"Bearer {make_token()}"}


@pytest.fixture
def other_auth_headers(make_token) -> Dict[str, str]:
    return {"Authorization": f"Bearer {make_token('user_bob', 'Bob')}"}


# ============================================================================
# FastAPI application and client
# ============================================================================

@pytest.fixture
def app(session_factory, chat_memory, fake_llm) -> FastAPI:
    app = create_app()

    async def _get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_chat_memory] = lambda: chat_memory
    app.dependency_overrides[get_llm] = lambda: fake_llm
    return app


@pytest.fixture
async def async_client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
