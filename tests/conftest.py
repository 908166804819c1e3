"""Pytest configuration and fixtures."""

import random

import pytest
import redis
from fastapi.testclient import TestClient

from shorrt import database, models
from shorrt.cache import LinkCache
from shorrt.config import Settings
from shorrt.crud import LinkStore
from shorrt.main import create_app
from shorrt.qr_utils import QRCodeWriter
from shorrt.service import LinkService
from shorrt.tokens import TokenGenerator


class FakeRedis:
    """In-memory stand-in for the few redis.Redis calls the cache makes."""

    def __init__(self):
        self.data = {}

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value):
        self.data[key] = value
        return True

    def delete(self, key):
        return 1 if self.data.pop(key, None) is not None else 0

    def close(self):
        pass


class BrokenRedis:
    """Every call fails the way an unreachable server does."""

    def _fail(self, *args, **kwargs):
        raise redis.exceptions.ConnectionError("Error 111 connecting to localhost:6379")

    get = set = delete = _fail

    def close(self):
        pass


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'test.db'}",
        qr_dir=str(tmp_path / "qrcodes"),
        log_level="DEBUG",
    )


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def tokens():
    return TokenGenerator(random.Random(1234))


@pytest.fixture
def db(settings):
    engine = database.make_engine(settings)
    models.Base.metadata.create_all(bind=engine)
    session = database.make_session_factory(engine)()
    yield session
    session.close()
    engine.dispose()


def build_service(db, settings, client, tokens):
    return LinkService(
        store=LinkStore(db),
        cache=LinkCache(client),
        tokens=tokens,
        artifacts=QRCodeWriter(settings.qr_dir),
    )


@pytest.fixture
def service(db, settings, fake_redis, tokens):
    return build_service(db, settings, fake_redis, tokens)


@pytest.fixture
def client(settings, fake_redis, tokens):
    app = create_app(settings, cache=LinkCache(fake_redis), tokens=tokens)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def sample_urls():
    return [
        "https://example.com",
        "https://github.com/user/repo",
        "https://stackoverflow.com/questions/123456",
    ]
