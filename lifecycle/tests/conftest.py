from collections.abc import Generator
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from lifecycle.api.main import create_app
from lifecycle.core.clock import FixedClock
from lifecycle.core.config import Settings
from lifecycle.infrastructure.container import Container, build_container
from lifecycle.infrastructure.ids import SequentialIdGenerator

DAY_0 = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


def day(n: int | float) -> datetime:
    """Instant ``n`` days after DAY_0."""
    return DAY_0 + timedelta(days=n)


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, ENVIRONMENT="test", LOG_FORMAT="console")


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(DAY_0)


@pytest.fixture
def container(settings: Settings, clock: FixedClock) -> Container:
    return build_container(settings, clock=clock, ids=SequentialIdGenerator())


@pytest.fixture
def client(container: Container) -> Generator[TestClient, None, None]:
    with TestClient(create_app(container)) as c:
        yield c
