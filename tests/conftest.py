"""
Pytest configuration and fixtures for the studio CMS tests.
Provides a throwaway SQLite row store, a Cloudinary stand-in served through
httpx.MockTransport and an authenticated API client.
"""

import os

import bcrypt

ADMIN_PASSWORD = "correct-horse-battery"

# Settings are read at import time, so the environment must be in place first
os.environ["DATABASE_URL"] = ""
os.environ["ADMIN_PASSWORD_HASH"] = bcrypt.hashpw(
    ADMIN_PASSWORD.encode("utf-8"), bcrypt.gensalt(rounds=4)
).decode("utf-8")
os.environ["JWT_SECRET_KEY"] = "test-jwt-secret"
os.environ["CLOUDINARY_CLOUD_NAME"] = "demo"
os.environ["CLOUDINARY_API_KEY"] = "123456789012345"
os.environ["CLOUDINARY_API_SECRET"] = "test-api-secret"
os.environ["RATE_LIMIT_ENABLED"] = "false"

from collections.abc import Callable  # noqa: E402
from typing import Any  # noqa: E402
from urllib.parse import parse_qsl  # noqa: E402

import httpx  # noqa: E402
import pytest  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import NullPool  # noqa: E402

from studio_cms.database import Base, get_db  # noqa: E402
from studio_cms.main import app  # noqa: E402
from studio_cms.models import PortfolioImage, Service  # noqa: E402
from studio_cms.services.cloudinary_service import MediaHost, get_media_host  # noqa: E402
from studio_cms.services.row_store import RowStore  # noqa: E402
from studio_cms.utils.jwt_auth import create_access_token  # noqa: E402

CLOUD = "https://res.cloudinary.com/demo/image/upload"


def cloudinary_url(key: str, ext: str = "jpg", version: str = "v1690000000") -> str:
    return f"{CLOUD}/{version}/{key}.{ext}"


class FakeCloudinary:
    """
    Destroy endpoint stand-in.

    Every request is recorded with its decoded form fields. `fail_with` makes
    every call fail, either with a status code or by raising an httpx error.
    """

    def __init__(self):
        self.requests: list[dict[str, str]] = []
        self.fail_with: int | Exception | None = None
        self.results: dict[str, str] = {}

    def __call__(self, request: httpx.Request) -> httpx.Response:
        form = dict(parse_qsl(request.read().decode("utf-8")))
        self.requests.append(form)

        if isinstance(self.fail_with, Exception):
            raise self.fail_with
        if isinstance(self.fail_with, int):
            return httpx.Response(self.fail_with, json={"error": {"message": "rejected"}})

        return httpx.Response(200, json={"result": self.results.get(form["public_id"], "ok")})

    @property
    def deleted_keys(self) -> list[str]:
        return [form["public_id"] for form in self.requests]


@pytest.fixture(scope="function")
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'cms.db'}", poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture(scope="function")
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture(scope="function")
async def store(session_factory):
    async with session_factory() as session:
        yield RowStore(session)


@pytest.fixture(scope="function")
def cloudinary_api() -> FakeCloudinary:
    return FakeCloudinary()


@pytest.fixture(scope="function")
async def media(cloudinary_api):
    host = MediaHost(
        cloud_name="demo",
        api_key="123456789012345",
        api_secret="test-api-secret",
        concurrency=4,
        max_retries=2,
        retry_backoff=0,
        transport=httpx.MockTransport(cloudinary_api),
    )
    yield host
    await host.aclose()


@pytest.fixture(scope="function")
def make_service(store) -> Callable[..., Any]:
    """Insert a service; extra keyword arguments override column values."""
    counter = {"n": 0}

    async def _make(**values):
        counter["n"] += 1
        n = counter["n"]
        defaults = {
            "title": f"Service {n}",
            "slug": f"service-{n}",
            "description": "A photography service offered by the studio.",
            "order": n - 1,
        }
        defaults.update(values)
        return await store.insert(Service, defaults)

    return _make


@pytest.fixture(scope="function")
def make_portfolio_image(store) -> Callable[..., Any]:
    counter = {"n": 0}

    async def _make(**values):
        counter["n"] += 1
        n = counter["n"]
        defaults = {
            "image_url": cloudinary_url(f"portfolio/photo-{n}"),
            "order": n - 1,
        }
        defaults.update(values)
        return await store.insert(PortfolioImage, defaults)

    return _make


@pytest.fixture(scope="function")
def auth_headers() -> dict[str, str]:
    token = create_access_token({"role": "admin", "sub": "cms_admin"})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(scope="function")
async def client(session_factory, media):
    """API client bound to the test database and the fake Cloudinary host."""

    async def _get_test_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _get_test_db
    app.dependency_overrides[get_media_host] = lambda: media

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as api_client:
        yield api_client

    app.dependency_overrides.clear()
