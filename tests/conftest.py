"""
Shared fixtures: a throwaway SQLite user store and the services built on it.
"""

import httpx
import pytest

from auth.guard import AccessGuard
from auth.jwt import TokenCodec
from auth.password import CredentialVerifier
from auth.service import AuthService
from config.settings import Settings
from core.user_lifecycle import UserLifecycleManager
from database.session import build_engine, build_session_factory, init_schema
from database.user_store import SqlUserStore
from main import create_app

TEST_SECRET = "test-secret-0123456789-abcdefghijklmnop"


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def settings(tmp_path):
    return Settings(
        jwt_secret=TEST_SECRET,
        bcrypt_rounds=4,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'users.db'}",
    )


@pytest.fixture
async def store(settings):
    engine = build_engine(settings.database_url)
    await init_schema(engine)
    yield SqlUserStore(build_session_factory(engine))
    await engine.dispose()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def codec(clock):
    return TokenCodec(TEST_SECRET, 86400, clock=clock)


@pytest.fixture
def auth_service(store, codec):
    return AuthService(store, CredentialVerifier(rounds=4), codec)


@pytest.fixture
def guard(store, codec):
    return AccessGuard(codec, store)


@pytest.fixture
def lifecycle(store):
    return UserLifecycleManager(store)


@pytest.fixture
async def client(settings, store):
    app = create_app(settings, store=store)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
