"""Domain entities — pure Python business objects, no framework dependencies."""

from dataclasses import dataclass, field
from datetime import datetime, timezone

from blog_api.domain.entities.author import Author
from blog_api.domain.slug import slugify


@dataclass
class Article:
    """Core domain entity representing a blog article.

    ``slug`` is always derived from ``title``; ``image`` is the name of the
    article's blob under the article image prefix.
    """

    title: str
    body: str
    image: str
    author_id: int
    slug: str = ""
    id: int | None = None
    author: Author | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        if not self.slug:
            self.slug = slugify(self.title)

    def update(self, title: str, body: str, image: str | None = None) -> None:
        """Rewrite title and body, swap the image when given, and refresh timestamps."""
        self.title = title
        self.slug = slugify(title)
        self.body = body
        if image is not None:
            self.image = image
        self.updated_at = datetime.now(timezone.utc)
