"""Shared fixtures: throwaway settings, test images, in-memory database, API client."""

import io
import os
import tempfile

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="blog-api-tests-"))
os.environ.setdefault("APP_ENV", "testing")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from PIL import Image
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from blog_api.infrastructure.database import AuthorModel, Base, get_db_session
from blog_api.infrastructure.database.session import build_engine
from blog_api.infrastructure.dependencies import get_blob_storage
from blog_api.infrastructure.storage.local_blob_storage import LocalBlobStorage
from blog_api.main import app


def _encode_image(image_format: str, size: tuple[int, int] = (8, 8)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color=(200, 30, 30)).save(buffer, format=image_format)
    return buffer.getvalue()


@pytest.fixture
def make_image():
    """Factory returning encoded image bytes, e.g. ``make_image("JPEG")``."""
    return _encode_image


@pytest.fixture
def png_bytes() -> bytes:
    return _encode_image("PNG")


@pytest.fixture
def blob_storage(tmp_path) -> LocalBlobStorage:
    return LocalBlobStorage(upload_dir=str(tmp_path / "storage"))


@pytest_asyncio.fixture
async def session_factory():
    """Fresh in-memory database per test, with the default author seeded."""
    engine = build_engine("sqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        session.add(AuthorModel(id=1, name="Administrator", email="admin@example.com"))
        await session.commit()

    yield factory
    await engine.dispose()


@pytest_asyncio.fixture
async def client(session_factory, blob_storage):
    """HTTP client bound to the app with the test database and storage wired in."""

    async def _test_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = _test_session
    app.dependency_overrides[get_blob_storage] = lambda: blob_storage

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client

    app.dependency_overrides.clear()
