from __future__ import annotations

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from tradeassist.db import Base, SignupStore
from tradeassist.main import (
    app,
    get_generator,
    get_messenger,
    get_retry_policy,
    get_signup_limiter,
    get_store,
)
from tradeassist.ratelimit import SlidingWindowLimiter
from tradeassist.retry import RetryPolicy

from .fakes import FakeGenerator, FakeMessenger, FakeSleep


@pytest.fixture
def sleeper() -> FakeSleep:
    return FakeSleep()


@pytest.fixture
def db_session() -> Generator[Session, None, None]:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(bind=engine, autoflush=False, autocommit=False)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def store(db_session: Session) -> SignupStore:
    return SignupStore(db_session)


@pytest.fixture
def messenger() -> FakeMessenger:
    return FakeMessenger()


@pytest.fixture
def generator() -> FakeGenerator:
    return FakeGenerator()


@pytest.fixture
def limiter() -> SlidingWindowLimiter:
    return SlidingWindowLimiter(max_requests=5, window=60)


@pytest.fixture
def client(
    store: SignupStore,
    messenger: FakeMessenger,
    generator: FakeGenerator,
    limiter: SlidingWindowLimiter,
    sleeper: FakeSleep,
) -> Generator[TestClient, None, None]:
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_messenger] = lambda: messenger
    app.dependency_overrides[get_generator] = lambda: generator
    app.dependency_overrides[get_signup_limiter] = lambda: limiter
    app.dependency_overrides[get_retry_policy] = lambda: RetryPolicy(sleep=sleeper)
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
