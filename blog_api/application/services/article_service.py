"""Application service (use case) for Article operations."""

import logging
import secrets
import string
from collections.abc import Awaitable, Callable

from pydantic import ValidationError

from blog_api.application.interfaces import ArticleRepository, BlobStorage
from blog_api.application.schemas import ArticleFields, ImageUpload
from blog_api.application.services.image_inspection import (
    ALLOWED_IMAGE_FORMATS,
    ALLOWED_IMAGE_TYPES,
    detect_image_format,
)
from blog_api.domain.entities import Article, Page
from blog_api.domain.exceptions import (
    DuplicateEntityError,
    EntityNotFoundError,
    EntityValidationError,
    StorageError,
)

logger = logging.getLogger(__name__)

IMAGE_NAME_LENGTH = 32
_IMAGE_NAME_ALPHABET = string.ascii_letters + string.digits

_FIELD_MESSAGES = {
    "missing": "The {field} field is required.",
    "string_type": "The {field} must be a string.",
    "string_too_short": "The {field} must be at least {min_length} characters.",
    "string_too_long": "The {field} may not be greater than {max_length} characters.",
}
_TITLE_TAKEN = "The title has already been taken."
_IMAGE_REQUIRED = "The image field is required."
_IMAGE_NOT_AN_IMAGE = "The image must be an image."
_IMAGE_BAD_TYPE = "The image must be a file of type: " + ", ".join(ALLOWED_IMAGE_TYPES) + "."


def generate_image_name(extension: str) -> str:
    """Random ``<32 alphanumerics>.<extension>`` blob name. No collision check."""
    stem = "".join(secrets.choice(_IMAGE_NAME_ALPHABET) for _ in range(IMAGE_NAME_LENGTH))
    return f"{stem}.{extension}"


def _trim(value: str | None) -> str | None:
    """Strip surrounding whitespace from form input; blank input becomes None."""
    if not isinstance(value, str):
        return value
    return value.strip() or None


def _field_message(field: str, error: dict) -> str:
    template = _FIELD_MESSAGES.get(error["type"])
    if template is None:
        return error["msg"]
    return template.format(field=field, **error.get("ctx", {}))


class ArticleService:
    """Orchestrates article business logic. Depends on the repository and blob storage ports (DI).

    Image blobs and records are written in compensating order: a new blob is
    written first, the record saved, and only then is a replaced blob deleted.
    A failed save removes the blob it just wrote.
    """

    def __init__(
        self,
        repository: ArticleRepository,
        storage: BlobStorage,
        *,
        image_prefix: str = "article-images",
        default_author_id: int = 1,
        default_per_page: int = 15,
        max_per_page: int = 100,
    ):
        self._repository = repository
        self._storage = storage
        self._image_prefix = image_prefix
        self._default_author_id = default_author_id
        self._default_per_page = default_per_page
        self._max_per_page = max_per_page

    def image_url(self, article: Article) -> str:
        return self._storage.url(self._image_prefix, article.image)

    async def get_article(self, article_id: int) -> Article:
        article = await self._repository.get_by_id(article_id)
        if article is None:
            raise EntityNotFoundError("Article", article_id)
        return article

    async def list_articles(self, page: int = 1, per_page: int | None = None) -> Page[Article]:
        size = per_page or self._default_per_page
        size = min(max(size, 1), self._max_per_page)
        return await self._repository.paginate(page=max(page, 1), per_page=size)

    async def create_article(
        self,
        title: str | None,
        body: str | None,
        image: ImageUpload | None,
        author_id: int | None = None,
    ) -> Article:
        title, body = _trim(title), _trim(body)
        extension = await self._validate(title, body, image, image_required=True)

        image_name = await self._upload_image(image.content, extension)
        article = Article(
            title=title,
            body=body,
            image=image_name,
            author_id=author_id if author_id is not None else self._default_author_id,
        )
        created = await self._save_or_discard(self._repository.create, article, image_name)
        logger.info("Created article %d '%s' (image=%s)", created.id, created.slug, image_name)
        return created

    async def update_article(
        self,
        article_id: int,
        title: str | None,
        body: str | None,
        image: ImageUpload | None = None,
    ) -> Article:
        article = await self.get_article(article_id)
        title, body = _trim(title), _trim(body)
        extension = await self._validate(
            title, body, image, image_required=False, exclude_id=article_id
        )

        previous_image = article.image
        new_image = None
        if image is not None:
            new_image = await self._upload_image(image.content, extension)

        article.update(title=title, body=body, image=new_image)
        updated = await self._save_or_discard(self._repository.update, article, new_image)

        if new_image is not None:
            await self._storage.delete(self._image_prefix, previous_image)
            logger.info(
                "Replaced image of article %d: %s → %s", article_id, previous_image, new_image
            )
        logger.info("Updated article %d '%s'", article_id, updated.slug)
        return updated

    async def delete_article(self, article_id: int) -> None:
        article = await self.get_article(article_id)
        # Blob first; a storage failure leaves the record in place.
        await self._storage.delete(self._image_prefix, article.image)
        await self._repository.delete(article_id)
        logger.info("Deleted article %d and image %s", article_id, article.image)

    # ── Internals ───────────────────────────────────────────────────

    async def _validate(
        self,
        title: str | None,
        body: str | None,
        image: ImageUpload | None,
        *,
        image_required: bool,
        exclude_id: int | None = None,
    ) -> str | None:
        """Check every field rule and raise one error listing all failures.

        Returns the stored extension for the uploaded image, if any.
        """
        errors: dict[str, list[str]] = {}

        supplied = {
            name: value
            for name, value in (("title", title), ("body", body))
            if value is not None
        }
        try:
            ArticleFields.model_validate(supplied)
        except ValidationError as exc:
            for error in exc.errors():
                field = str(error["loc"][0])
                errors.setdefault(field, []).append(_field_message(field, error))

        if isinstance(title, str) and title:
            if await self._repository.exists_with_title(title, exclude_id=exclude_id):
                errors.setdefault("title", []).append(_TITLE_TAKEN)

        extension = None
        if image is None:
            if image_required:
                errors["image"] = [_IMAGE_REQUIRED]
        else:
            image_format = detect_image_format(image.content)
            if image_format is None:
                errors["image"] = [_IMAGE_NOT_AN_IMAGE, _IMAGE_BAD_TYPE]
            elif image_format not in ALLOWED_IMAGE_FORMATS:
                errors["image"] = [_IMAGE_BAD_TYPE]
            else:
                extension = ALLOWED_IMAGE_FORMATS[image_format]

        if errors:
            raise EntityValidationError(errors)
        return extension

    async def _upload_image(self, content: bytes, extension: str) -> str:
        name = generate_image_name(extension)
        await self._storage.store(self._image_prefix, name, content)
        return name

    async def _save_or_discard(
        self,
        save: Callable[[Article], Awaitable[Article]],
        article: Article,
        new_image: str | None,
    ) -> Article:
        try:
            return await save(article)
        except DuplicateEntityError as exc:
            await self._discard_image(new_image)
            raise EntityValidationError({"title": [_TITLE_TAKEN]}) from exc
        except Exception:
            await self._discard_image(new_image)
            raise

    async def _discard_image(self, name: str | None) -> None:
        """Remove a blob written for a save that did not go through."""
        if name is None:
            return
        try:
            await self._storage.delete(self._image_prefix, name)
        except StorageError:
            logger.warning("Could not remove orphaned image %s/%s", self._image_prefix, name)
