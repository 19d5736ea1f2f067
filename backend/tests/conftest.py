import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402

from database import init_db  # noqa: E402
from services.auth import Identity  # noqa: E402
from services.fluency import FluencyLevelManager  # noqa: E402
from services.kv_store import KVStore, user_key  # noqa: E402


class FakeClock:
    """Deterministic UTC clock that moves forward by ``step`` on every read."""

    def __init__(self, start: datetime, step: timedelta = timedelta(seconds=1)):
        self.now = start
        self.step = step

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + self.step
        return current

    def freeze(self):
        self.step = timedelta(0)


class FakeIdentityProvider:
    def __init__(self):
        self.tokens: dict[str, Identity] = {}
        self.created: list[Identity] = []

    def add(self, token: str, user_id: str, role: str = "student", name: str | None = None) -> Identity:
        identity = Identity(user_id=user_id, metadata={"role": role, "name": name})
        self.tokens[token] = identity
        return identity

    async def resolve_token(self, token: str) -> Identity | None:
        return self.tokens.get(token)

    async def create_user(self, email: str, password: str, name: str, role: str) -> Identity:
        identity = Identity(
            user_id=f"user-{len(self.created) + 1}",
            email=email,
            metadata={"name": name, "role": role},
        )
        self.created.append(identity)
        return identity


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
async def session_factory(anyio_backend, tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await init_db(engine)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def store(session):
    return KVStore(session)


@pytest.fixture
def clock():
    return FakeClock(datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def make_clock():
    return FakeClock


@pytest.fixture
def manager(store, clock):
    return FluencyLevelManager(store, clock=clock)


@pytest.fixture
def put_profile(session_factory):
    async def _put(user_id: str, **fields) -> dict:
        profile = {"id": user_id, "email": f"{user_id}@example.com", "name": user_id.title(), **fields}
        async with session_factory() as session:
            store = KVStore(session)
            async with store.transaction():
                await store.set(user_key(user_id), profile)
        return profile

    return _put


@pytest.fixture
def read_key(session_factory):
    """Read a key through a fresh session, i.e. only committed state."""

    async def _read(key: str):
        async with session_factory() as session:
            return await KVStore(session).get(key)

    return _read


@pytest.fixture
def read_prefix(session_factory):
    async def _read(prefix: str):
        async with session_factory() as session:
            return await KVStore(session).get_by_prefix(prefix)

    return _read


@pytest.fixture
def identity():
    return FakeIdentityProvider()


@pytest.fixture
async def client(session_factory, clock, identity):
    import httpx

    from database import get_db
    from dependencies import get_clock
    from main import app
    from services.auth import get_identity_provider

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_identity_provider] = lambda: identity
    app.dependency_overrides[get_clock] = lambda: clock

    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http:
        yield http
    app.dependency_overrides.clear()
