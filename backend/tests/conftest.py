"""Shared fixtures: in-memory databases, a ticking clock, the API client."""

import os
from collections.abc import Iterator
from datetime import datetime, timedelta
from unittest.mock import AsyncMock

# Must be set before app.config is imported anywhere.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import Engine, create_engine  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

from app.audit import AuditCommitHook, BubblingPolicy  # noqa: E402
from app.models import Base  # noqa: E402

T0 = datetime(2026, 1, 1, 12, 0, 0)


class TickClock:
    """Deterministic clock: T0, T0+1s, T0+2s, ... one tick per call."""

    def __init__(
        self, start: datetime = T0, step: timedelta = timedelta(seconds=1)
    ) -> None:
        self.start = start
        self.step = step
        self.calls = 0

    def __call__(self) -> datetime:
        value = self.at(self.calls)
        self.calls += 1
        return value

    def at(self, tick: int) -> datetime:
        """The value returned by the ``tick``-th call (0-based)."""
        return self.start + self.step * tick


@pytest.fixture
def clock() -> TickClock:
    return TickClock()


@pytest.fixture
def db_engine() -> Iterator[Engine]:
    engine = create_engine("sqlite://")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def policy() -> BubblingPolicy:
    return BubblingPolicy.from_rules(["OrderItem:Order"])


@pytest.fixture
def hook(policy: BubblingPolicy, clock: TickClock) -> AuditCommitHook:
    return AuditCommitHook(policy, clock=clock)


@pytest.fixture
def session(db_engine: Engine, hook: AuditCommitHook) -> Iterator[Session]:
    """Sync session on SQLite with the audit hook installed."""
    with Session(db_engine, expire_on_commit=False) as session:
        hook.install(session)
        yield session


@pytest.fixture
def client() -> Iterator[TestClient]:
    """API client whose DB session dependency is a mock."""
    from app.main import app
    from app.models.base import get_async_session

    async def _session() -> AsyncMock:
        return AsyncMock()

    app.dependency_overrides[get_async_session] = _session
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
