"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from sqlalchemy import select
from sqlalchemy.engine import make_url

from blog_api.config import get_settings
from blog_api.infrastructure.database import AuthorModel, Base, engine
from blog_api.infrastructure.database.session import async_session_factory
from blog_api.infrastructure.logging.log_config import setup_logging
from blog_api.presentation.api.router import router as api_router

logger = logging.getLogger(__name__)


async def create_postgres_database() -> None:
    """Create the blog's PostgreSQL database on first start.

    No-op for SQLite and for URLs without a database name.
    """
    url = make_url(get_settings().database_url)
    if url.get_backend_name() != "postgresql" or not url.database:
        return

    import asyncpg

    blog_db = url.database
    server_dsn = url.set(drivername="postgresql", database="postgres").render_as_string(
        hide_password=False
    )
    try:
        conn = await asyncpg.connect(server_dsn)
        try:
            if await conn.fetchval("SELECT 1 FROM pg_database WHERE datname = $1", blog_db):
                logger.debug("Blog database '%s' present", blog_db)
                return
            # Not allowed inside a transaction
            await conn.execute(f'CREATE DATABASE "{blog_db}"')
            logger.info("Created blog database '%s'", blog_db)
        finally:
            await conn.close()
    except (OSError, asyncpg.PostgresError) as exc:
        logger.warning("Skipping creation of blog database '%s': %s", blog_db, exc)


async def seed_default_author() -> None:
    """Ensure the placeholder author that new articles are credited to exists.

    Idempotent — safe to call on every startup.
    """
    settings = get_settings()
    async with async_session_factory() as session:
        result = await session.execute(
            select(AuthorModel).where(AuthorModel.id == settings.default_author_id)
        )
        if result.scalar_one_or_none() is None:
            session.add(
                AuthorModel(
                    id=settings.default_author_id,
                    name=settings.default_author_name,
                    email=settings.default_author_email,
                )
            )
            await session.commit()
            logger.info("Seeded default author %d", settings.default_author_id)
        else:
            logger.debug("Default author %d already exists", settings.default_author_id)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan — create the database and tables, seed the default author."""
    setup_logging()

    await create_postgres_database()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    try:
        await seed_default_author()
    except Exception:
        logger.exception("Failed to seed default author — continuing without it")

    yield

    await engine.dispose()


def create_app() -> FastAPI:
    """Factory function that builds and configures the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_title,
        version=settings.app_version,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)

    # Uploaded blobs are public, like a web server's storage link
    upload_dir = Path(settings.upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)
    app.mount(
        settings.storage_url_prefix,
        StaticFiles(directory=upload_dir),
        name="storage",
    )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "blog_api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
