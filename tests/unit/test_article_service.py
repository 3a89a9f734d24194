"""Unit tests for the ArticleService."""

import dataclasses
import re

import pytest

from blog_api.application.interfaces import ArticleRepository, BlobStorage
from blog_api.application.schemas import ImageUpload
from blog_api.application.services import ArticleService
from blog_api.domain.entities import Article, Author, Page
from blog_api.domain.exceptions import (
    DuplicateEntityError,
    EntityNotFoundError,
    EntityValidationError,
    StorageError,
)

PREFIX = "article-images"
BODY = "A body that is long enough to pass validation."


class FakeArticleRepository(ArticleRepository):
    """In-memory fake repository for unit testing. Hands out copies, like a real database."""

    def __init__(self):
        self._articles: dict[int, Article] = {}
        self._next_id = 1
        self.fail_next_write: Exception | None = None

    def _raise_if_failing(self) -> None:
        if self.fail_next_write is not None:
            exc, self.fail_next_write = self.fail_next_write, None
            raise exc

    async def get_by_id(self, article_id: int) -> Article | None:
        article = self._articles.get(article_id)
        return dataclasses.replace(article) if article else None

    async def paginate(self, page: int = 1, per_page: int = 15) -> Page[Article]:
        articles = list(self._articles.values())
        start = (page - 1) * per_page
        return Page(
            items=[dataclasses.replace(a) for a in articles[start : start + per_page]],
            total=len(articles),
            per_page=per_page,
            current_page=page,
        )

    async def create(self, article: Article) -> Article:
        self._raise_if_failing()
        stored = dataclasses.replace(
            article,
            id=self._next_id,
            author=Author(id=article.author_id, name="Admin", email="admin@example.com"),
        )
        self._next_id += 1
        self._articles[stored.id] = stored
        return dataclasses.replace(stored)

    async def update(self, article: Article) -> Article:
        self._raise_if_failing()
        if article.id not in self._articles:
            raise ValueError(f"Article {article.id} not found")
        self._articles[article.id] = dataclasses.replace(article)
        return dataclasses.replace(article)

    async def delete(self, article_id: int) -> bool:
        if article_id in self._articles:
            del self._articles[article_id]
            return True
        return False

    async def exists_with_title(self, title: str, exclude_id: int | None = None) -> bool:
        return any(
            a.title == title and a.id != exclude_id for a in self._articles.values()
        )


class FakeBlobStorage(BlobStorage):
    """In-memory blob store."""

    def __init__(self):
        self.blobs: dict[tuple[str, str], bytes] = {}
        self.fail_deletes = False

    async def store(self, prefix: str, name: str, content: bytes) -> str:
        self.blobs[(prefix, name)] = content
        return name

    async def delete(self, prefix: str, name: str) -> bool:
        if self.fail_deletes:
            raise StorageError("delete blob", "disk unavailable")
        return self.blobs.pop((prefix, name), None) is not None

    async def exists(self, prefix: str, name: str) -> bool:
        return (prefix, name) in self.blobs

    async def read(self, prefix: str, name: str) -> bytes:
        return self.blobs[(prefix, name)]

    def url(self, prefix: str, name: str) -> str:
        return f"/storage/{prefix}/{name}"


@pytest.fixture
def repository() -> FakeArticleRepository:
    return FakeArticleRepository()


@pytest.fixture
def storage() -> FakeBlobStorage:
    return FakeBlobStorage()


@pytest.fixture
def service(repository, storage) -> ArticleService:
    return ArticleService(repository, storage, image_prefix=PREFIX)


@pytest.fixture
def png_upload(png_bytes) -> ImageUpload:
    return ImageUpload(filename="cover.png", content_type="image/png", content=png_bytes)


# ── Create ───────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_create_article_derives_slug(service, png_upload):
    article = await service.create_article("Hello World!!", BODY, png_upload)
    assert article.id is not None
    assert article.slug == "hello-world"


@pytest.mark.asyncio
async def test_create_article_stores_image_under_random_name(service, storage, png_upload):
    article = await service.create_article("Stored Image", BODY, png_upload)

    assert re.fullmatch(r"[A-Za-z0-9]{32}\.png", article.image)
    assert await storage.exists(PREFIX, article.image)
    assert await storage.read(PREFIX, article.image) == png_upload.content


@pytest.mark.asyncio
async def test_create_article_extension_follows_image_content(service, make_image):
    upload = ImageUpload(filename="photo.png", content=make_image("JPEG"))
    article = await service.create_article("Really a JPEG", BODY, upload)
    assert article.image.endswith(".jpg")


@pytest.mark.asyncio
async def test_create_article_uses_placeholder_author(service, png_upload):
    article = await service.create_article("Default Author", BODY, png_upload)
    assert article.author_id == 1
    assert article.author is not None


@pytest.mark.asyncio
async def test_create_article_accepts_explicit_author(service, png_upload):
    article = await service.create_article("Explicit Author", BODY, png_upload, author_id=7)
    assert article.author_id == 7


@pytest.mark.asyncio
async def test_create_rejects_short_title(service, repository, storage, png_upload):
    with pytest.raises(EntityValidationError) as exc_info:
        await service.create_article("Abcd", BODY, png_upload)

    assert list(exc_info.value.errors) == ["title"]
    assert exc_info.value.errors["title"] == ["The title must be at least 5 characters."]
    assert (await repository.paginate()).total == 0
    assert storage.blobs == {}


@pytest.mark.asyncio
async def test_create_rejects_long_title(service, storage, png_upload):
    with pytest.raises(EntityValidationError) as exc_info:
        await service.create_article("x" * 191, BODY, png_upload)

    assert exc_info.value.errors["title"] == [
        "The title may not be greater than 190 characters."
    ]
    assert storage.blobs == {}


@pytest.mark.asyncio
async def test_create_rejects_duplicate_title(service, repository, storage, png_upload):
    await service.create_article("Taken Title", BODY, png_upload)

    with pytest.raises(EntityValidationError) as exc_info:
        await service.create_article("Taken Title", BODY, png_upload)

    assert exc_info.value.errors["title"] == ["The title has already been taken."]
    assert (await repository.paginate()).total == 1
    assert len(storage.blobs) == 1


@pytest.mark.asyncio
async def test_create_reports_every_failing_field(service):
    with pytest.raises(EntityValidationError) as exc_info:
        await service.create_article("abc", "short", None)

    assert set(exc_info.value.errors) == {"title", "body", "image"}
    assert exc_info.value.errors["body"] == ["The body must be at least 10 characters."]
    assert exc_info.value.errors["image"] == ["The image field is required."]


@pytest.mark.asyncio
async def test_create_treats_missing_and_blank_fields_as_required(service, png_upload):
    with pytest.raises(EntityValidationError) as exc_info:
        await service.create_article(None, "", png_upload)

    assert exc_info.value.errors == {
        "title": ["The title field is required."],
        "body": ["The body field is required."],
    }


@pytest.mark.asyncio
async def test_create_treats_whitespace_title_as_missing(service, repository, storage, png_upload):
    with pytest.raises(EntityValidationError) as exc_info:
        await service.create_article("     ", BODY, png_upload)

    assert exc_info.value.errors == {"title": ["The title field is required."]}
    assert (await repository.paginate()).total == 0
    assert storage.blobs == {}


@pytest.mark.asyncio
async def test_create_measures_title_without_padding(service, png_upload):
    with pytest.raises(EntityValidationError) as exc_info:
        await service.create_article("  abc  ", BODY, png_upload)

    assert exc_info.value.errors == {"title": ["The title must be at least 5 characters."]}


@pytest.mark.asyncio
async def test_create_stores_trimmed_title_and_body(service, png_upload):
    article = await service.create_article("  Padded Title \n", f"\t{BODY}  ", png_upload)

    assert article.title == "Padded Title"
    assert article.slug == "padded-title"
    assert article.body == BODY


@pytest.mark.asyncio
async def test_update_rejects_whitespace_body(service, png_upload):
    created = await service.create_article("Trim On Update", BODY, png_upload)

    with pytest.raises(EntityValidationError) as exc_info:
        await service.update_article(created.id, "Trim On Update", "   \n  ")

    assert exc_info.value.errors == {"body": ["The body field is required."]}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("title", "body"),
    [
        ("x" * 5, "b" * 10),
        ("y" * 190, "c" * 100_000),
    ],
    ids=["shortest", "longest"],
)
async def test_create_accepts_lengths_at_the_limits(service, png_upload, title, body):
    article = await service.create_article(title, body, png_upload)

    assert len(article.title) == len(title)
    assert len(article.body) == len(body)


@pytest.mark.asyncio
async def test_create_rejects_body_over_limit(service, png_upload):
    with pytest.raises(EntityValidationError) as exc_info:
        await service.create_article("Huge Body", "b" * 100_001, png_upload)
    assert "body" in exc_info.value.errors


@pytest.mark.asyncio
async def test_create_rejects_non_image_upload(service, repository):
    upload = ImageUpload(filename="notes.png", content=b"definitely not an image")

    with pytest.raises(EntityValidationError) as exc_info:
        await service.create_article("Not An Image", BODY, upload)

    assert exc_info.value.errors["image"] == [
        "The image must be an image.",
        "The image must be a file of type: jpeg, jpg, png, bmp.",
    ]
    assert (await repository.paginate()).total == 0


@pytest.mark.asyncio
async def test_create_rejects_disallowed_image_format(service, storage, make_image):
    upload = ImageUpload(filename="anim.gif", content=make_image("GIF"))

    with pytest.raises(EntityValidationError) as exc_info:
        await service.create_article("Gif Upload", BODY, upload)

    assert exc_info.value.errors["image"] == [
        "The image must be a file of type: jpeg, jpg, png, bmp."
    ]
    assert storage.blobs == {}


@pytest.mark.asyncio
async def test_create_removes_blob_when_insert_fails(service, repository, storage, png_upload):
    repository.fail_next_write = StorageError("create article", "database unavailable")

    with pytest.raises(StorageError):
        await service.create_article("Doomed Insert", BODY, png_upload)

    assert storage.blobs == {}


@pytest.mark.asyncio
async def test_create_maps_racing_duplicate_to_validation_error(service, repository, storage, png_upload):
    repository.fail_next_write = DuplicateEntityError("Article", "title", "Raced Title")

    with pytest.raises(EntityValidationError) as exc_info:
        await service.create_article("Raced Title", BODY, png_upload)

    assert exc_info.value.errors == {"title": ["The title has already been taken."]}
    assert storage.blobs == {}


# ── Show / List ──────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_get_article_not_found(service):
    with pytest.raises(EntityNotFoundError):
        await service.get_article(999)


@pytest.mark.asyncio
async def test_get_article_image_is_retrievable(service, storage, png_upload):
    created = await service.create_article("Retrievable", BODY, png_upload)
    fetched = await service.get_article(created.id)
    assert await storage.exists(PREFIX, fetched.image)
    assert service.image_url(fetched) == f"/storage/{PREFIX}/{fetched.image}"


@pytest.mark.asyncio
async def test_list_articles_paginates(service, png_upload):
    for title in ("First Post", "Second Post", "Third Post"):
        await service.create_article(title, BODY, png_upload)

    first = await service.list_articles(page=1, per_page=2)
    assert [a.title for a in first.items] == ["First Post", "Second Post"]
    assert first.total == 3
    assert first.last_page == 2
    assert (first.from_, first.to) == (1, 2)

    second = await service.list_articles(page=2, per_page=2)
    assert [a.title for a in second.items] == ["Third Post"]
    assert (second.from_, second.to) == (3, 3)


@pytest.mark.asyncio
async def test_list_articles_defaults_and_clamps_page_size(repository, storage):
    service = ArticleService(repository, storage, default_per_page=15, max_per_page=100)

    assert (await service.list_articles()).per_page == 15
    assert (await service.list_articles(per_page=0)).per_page == 15
    assert (await service.list_articles(per_page=5000)).per_page == 100


# ── Update ───────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_update_allows_keeping_own_title(service, png_upload):
    created = await service.create_article("Same Title", BODY, png_upload)
    updated = await service.update_article(created.id, "Same Title", "A brand new body text.")
    assert updated.title == "Same Title"
    assert updated.body == "A brand new body text."


@pytest.mark.asyncio
async def test_update_rejects_title_of_another_article(service, png_upload):
    await service.create_article("Existing One", BODY, png_upload)
    second = await service.create_article("Existing Two", BODY, png_upload)

    with pytest.raises(EntityValidationError) as exc_info:
        await service.update_article(second.id, "Existing One", BODY)
    assert "title" in exc_info.value.errors


@pytest.mark.asyncio
async def test_update_recomputes_slug(service, png_upload):
    created = await service.create_article("Old Title", BODY, png_upload)
    updated = await service.update_article(created.id, "Brand New Title!", BODY)
    assert updated.slug == "brand-new-title"


@pytest.mark.asyncio
async def test_update_without_image_keeps_image(service, storage, png_upload):
    created = await service.create_article("Keep Image", BODY, png_upload)
    updated = await service.update_article(created.id, "Keep Image", BODY)

    assert updated.image == created.image
    assert await storage.exists(PREFIX, created.image)


@pytest.mark.asyncio
async def test_update_with_image_replaces_blob(service, storage, png_upload, make_image):
    created = await service.create_article("Swap Image", BODY, png_upload)
    replacement = ImageUpload(filename="new.bmp", content=make_image("BMP"))

    updated = await service.update_article(created.id, "Swap Image", BODY, replacement)

    assert updated.image != created.image
    assert updated.image.endswith(".bmp")
    assert not await storage.exists(PREFIX, created.image)
    assert await storage.read(PREFIX, updated.image) == replacement.content


@pytest.mark.asyncio
async def test_update_keeps_old_image_when_save_fails(service, repository, storage, png_upload, make_image):
    created = await service.create_article("Failed Save", BODY, png_upload)
    repository.fail_next_write = StorageError("update article", "database unavailable")

    with pytest.raises(StorageError):
        await service.update_article(
            created.id, "Failed Save", BODY, ImageUpload(content=make_image("JPEG"))
        )

    assert list(storage.blobs) == [(PREFIX, created.image)]
    assert (await service.get_article(created.id)).image == created.image


@pytest.mark.asyncio
async def test_update_not_found_is_reported_before_validation(service):
    with pytest.raises(EntityNotFoundError):
        await service.update_article(999, "x", "y")


@pytest.mark.asyncio
async def test_update_rejects_bad_replacement_image(service, storage, png_upload):
    created = await service.create_article("Bad Replacement", BODY, png_upload)

    with pytest.raises(EntityValidationError) as exc_info:
        await service.update_article(
            created.id, "Bad Replacement", BODY, ImageUpload(content=b"garbage")
        )

    assert "image" in exc_info.value.errors
    assert list(storage.blobs) == [(PREFIX, created.image)]


# ── Delete ───────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_delete_article_removes_record_and_blob(service, storage, png_upload):
    created = await service.create_article("Delete Me", BODY, png_upload)

    await service.delete_article(created.id)

    with pytest.raises(EntityNotFoundError):
        await service.get_article(created.id)
    assert not await storage.exists(PREFIX, created.image)


@pytest.mark.asyncio
async def test_delete_keeps_record_when_blob_delete_fails(service, storage, png_upload):
    created = await service.create_article("Sticky Record", BODY, png_upload)
    storage.fail_deletes = True

    with pytest.raises(StorageError):
        await service.delete_article(created.id)

    assert (await service.get_article(created.id)).id == created.id


@pytest.mark.asyncio
async def test_delete_tolerates_missing_blob(service, storage, png_upload):
    created = await service.create_article("Blob Already Gone", BODY, png_upload)
    storage.blobs.clear()

    await service.delete_article(created.id)

    with pytest.raises(EntityNotFoundError):
        await service.get_article(created.id)


@pytest.mark.asyncio
async def test_delete_article_not_found(service):
    with pytest.raises(EntityNotFoundError):
        await service.delete_article(999)
