"""Abstract repository interfaces (ports) — define the contract, not the implementation."""

from abc import ABC, abstractmethod

from blog_api.domain.entities import Article, Page


class ArticleRepository(ABC):
    """Port for article persistence — implemented in the infrastructure layer.

    Reads return articles with their author loaded. Database failures are
    raised as ``StorageError``.
    """

    @abstractmethod
    async def get_by_id(self, article_id: int) -> Article | None:
        """Retrieve a single article (with author) by its ID."""
        ...

    @abstractmethod
    async def paginate(self, page: int = 1, per_page: int = 15) -> Page[Article]:
        """Retrieve one page of articles in insertion order."""
        ...

    @abstractmethod
    async def create(self, article: Article) -> Article:
        """Persist a new article and return it with the generated ID.

        Raises ``DuplicateEntityError`` if the title is already taken.
        """
        ...

    @abstractmethod
    async def update(self, article: Article) -> Article:
        """Update an existing article.

        Raises ``DuplicateEntityError`` if the new title is already taken.
        """
        ...

    @abstractmethod
    async def delete(self, article_id: int) -> bool:
        """Delete an article. Returns True if deleted, False if not found."""
        ...

    @abstractmethod
    async def exists_with_title(self, title: str, exclude_id: int | None = None) -> bool:
        """Whether another article already uses *title*, ignoring ``exclude_id``."""
        ...
