"""Pytest fixtures for attendbot tests."""

import json
from datetime import date

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from attendbot.attendance.models import Base
from attendbot.config import get_settings
from attendbot.llm.provider import CompletionBackend

# Monday
TODAY = date(2026, 10, 19)


@pytest.fixture(autouse=True)
def settings_env(monkeypatch):
    """Minimal environment so Settings() validates without a .env file."""
    monkeypatch.setenv("SLACK_BOT_TOKEN", "xoxb-test")
    monkeypatch.setenv("SLACK_APP_TOKEN", "xapp-test")
    monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
    monkeypatch.setenv("CACHE_ENABLED", "false")
    monkeypatch.setenv("LLM_PROVIDER", "openai")
    monkeypatch.setenv("TIMEZONE", "UTC")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
async def db_engine():
    """In-memory database shared by every session of one test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def db_session(db_engine):
    """Create in-memory database for testing."""
    async with AsyncSession(db_engine, expire_on_commit=False) as session:
        yield session


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


class FakeBackend(CompletionBackend):
    """Completion backend returning canned text per task."""

    name = "fake"

    def __init__(self, responses: dict | None = None, error: Exception | None = None):
        self.responses = responses or {}
        self.error = error
        self.calls: list[tuple[str, str, str]] = []

    async def complete(self, prompt: str, message: str, task: str) -> str:
        self.calls.append((prompt, message, task))
        if self.error is not None:
            raise self.error
        response = self.responses.get(task, "")
        if isinstance(response, dict):
            return json.dumps(response)
        return response


@pytest.fixture
def fake_backend():
    """Factory for fake completion backends."""

    def _make(responses: dict | None = None, error: Exception | None = None) -> FakeBackend:
        return FakeBackend(responses, error)

    return _make
