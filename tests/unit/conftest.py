"""Shared fixtures for unit tests."""

from datetime import datetime, UTC
from unittest.mock import MagicMock

import pytest
import redis

from linkshortener.dao.redis import ShortURLRedisDAO
from linkshortener.services import ShortURLStore


class FakeClock:
    """Controllable clock returning aware UTC datetimes."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta) -> None:
        self.now = self.now + delta


@pytest.fixture
def redis_data():
    """Backing dictionary of the fake Redis client."""
    return {}


@pytest.fixture
def fake_redis(redis_data):
    """Mock a Redis client whose GET/SET operate on `redis_data`."""
    client = MagicMock(
        spec=redis.Redis,
        connection_pool=MagicMock(spec=redis.ConnectionPool, connection_kwargs={'host': 'redis', 'port': 6379, 'db': 0}),
    )
    client.ping.return_value = True
    client.get.side_effect = lambda key: redis_data.get(key)
    client.set.side_effect = lambda key, value, **kwargs: redis_data.__setitem__(key, value) or True
    return client


@pytest.fixture
def dao(fake_redis):
    return ShortURLRedisDAO(redis_client=fake_redis, prefix='testapp:test')


@pytest.fixture
def clock():
    return FakeClock(datetime(2025, 10, 15, 12, 0, 0, tzinfo=UTC))


@pytest.fixture
def store(dao, clock):
    return ShortURLStore(dao, clock=clock)
