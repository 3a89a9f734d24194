"""Concrete repository implementation backed by SQLAlchemy."""

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from blog_api.application.interfaces import ArticleRepository
from blog_api.domain.entities import Article, Author, Page
from blog_api.domain.exceptions import DuplicateEntityError, StorageError
from blog_api.infrastructure.database.models import ArticleModel, AuthorModel


@contextmanager
def _database_errors(operation: str, article: Article | None = None) -> Iterator[None]:
    """Translate SQLAlchemy failures into domain exceptions."""
    try:
        yield
    except IntegrityError as exc:
        if article is not None and "title" in str(exc.orig).lower():
            raise DuplicateEntityError("Article", "title", article.title) from exc
        raise StorageError(operation, str(exc.orig)) from exc
    except SQLAlchemyError as exc:
        raise StorageError(operation, str(exc)) from exc


class SQLAlchemyArticleRepository(ArticleRepository):
    """Implements the ArticleRepository port using SQLAlchemy async sessions."""

    def __init__(self, session: AsyncSession):
        self._session = session

    def _to_author(self, model: AuthorModel) -> Author:
        return Author(
            id=model.id,
            name=model.name,
            email=model.email,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_entity(self, model: ArticleModel) -> Article:
        """Map ORM model → domain entity."""
        return Article(
            id=model.id,
            title=model.title,
            slug=model.slug,
            body=model.body,
            image=model.image,
            author_id=model.author_id,
            author=self._to_author(model.author) if model.author else None,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, entity: Article) -> ArticleModel:
        """Map domain entity → ORM model (for creation)."""
        return ArticleModel(
            title=entity.title,
            slug=entity.slug,
            body=entity.body,
            image=entity.image,
            author_id=entity.author_id,
        )

    async def get_by_id(self, article_id: int) -> Article | None:
        with _database_errors("get article"):
            result = await self._session.get(ArticleModel, article_id)
        return self._to_entity(result) if result else None

    async def paginate(self, page: int = 1, per_page: int = 15) -> Page[Article]:
        with _database_errors("list articles"):
            total = (
                await self._session.execute(select(func.count()).select_from(ArticleModel))
            ).scalar_one()
            stmt = (
                select(ArticleModel)
                .order_by(ArticleModel.id)
                .offset((page - 1) * per_page)
                .limit(per_page)
            )
            result = await self._session.execute(stmt)
            models = result.scalars().all()
        return Page(
            items=[self._to_entity(row) for row in models],
            total=total,
            per_page=per_page,
            current_page=page,
        )

    async def create(self, article: Article) -> Article:
        model = self._to_model(article)
        with _database_errors("create article", article):
            self._session.add(model)
            await self._session.flush()
            await self._session.refresh(model, attribute_names=["author"])
        return self._to_entity(model)

    async def update(self, article: Article) -> Article:
        with _database_errors("update article", article):
            model = await self._session.get(ArticleModel, article.id)
            if model is None:
                raise ValueError(f"Article {article.id} not found in database")
            model.title = article.title
            model.slug = article.slug
            model.body = article.body
            model.image = article.image
            await self._session.flush()
        return self._to_entity(model)

    async def delete(self, article_id: int) -> bool:
        with _database_errors("delete article"):
            model = await self._session.get(ArticleModel, article_id)
            if model is None:
                return False
            await self._session.delete(model)
            await self._session.flush()
        return True

    async def exists_with_title(self, title: str, exclude_id: int | None = None) -> bool:
        stmt = select(ArticleModel.id).where(ArticleModel.title == title)
        if exclude_id is not None:
            stmt = stmt.where(ArticleModel.id != exclude_id)
        with _database_errors("check article title"):
            result = await self._session.execute(stmt.limit(1))
        return result.scalar_one_or_none() is not None
