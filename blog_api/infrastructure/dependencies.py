"""FastAPI dependency injection — wires infrastructure to application layer."""

from collections.abc import AsyncGenerator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from blog_api.config import get_settings
from blog_api.application.interfaces import BlobStorage
from blog_api.application.services import ArticleService
from blog_api.infrastructure.database.session import get_db_session
from blog_api.infrastructure.database.repositories import SQLAlchemyArticleRepository
from blog_api.infrastructure.storage.local_blob_storage import LocalBlobStorage


def get_blob_storage() -> BlobStorage:
    """Provides the blob storage rooted at the configured upload directory."""
    settings = get_settings()
    return LocalBlobStorage(
        upload_dir=settings.upload_dir,
        url_prefix=settings.storage_url_prefix,
    )


async def get_article_service(
    session: AsyncSession = Depends(get_db_session),
    storage: BlobStorage = Depends(get_blob_storage),
) -> AsyncGenerator[ArticleService, None]:
    """Provides an ArticleService instance with its repository and storage wired up."""
    settings = get_settings()
    repository = SQLAlchemyArticleRepository(session)
    yield ArticleService(
        repository,
        storage,
        image_prefix=settings.article_image_prefix,
        default_author_id=settings.default_author_id,
        default_per_page=settings.articles_per_page,
        max_per_page=settings.max_articles_per_page,
    )
