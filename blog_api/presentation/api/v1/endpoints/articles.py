"""Article CRUD endpoints — multipart forms in, JSON envelopes out."""

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status

from blog_api.application.schemas import (
    ArticleEnvelope,
    ArticleListEnvelope,
    ArticlePageResponse,
    ArticleResponse,
    AuthorResponse,
    ImageUpload,
    MessageResponse,
)
from blog_api.application.services import ArticleService
from blog_api.domain.entities import Article
from blog_api.domain.exceptions import EntityNotFoundError, EntityValidationError, StorageError
from blog_api.infrastructure.dependencies import get_article_service

router = APIRouter(prefix="/articles", tags=["Articles"])

_INVALID_DATA = "The given data was invalid."
# Keeps the row offset inside a 64-bit database integer
_MAX_PAGE = 1_000_000


# ── Helpers ──────────────────────────────────────────────────────────

def _to_response(article: Article, service: ArticleService) -> ArticleResponse:
    return ArticleResponse(
        id=article.id,
        title=article.title,
        slug=article.slug,
        body=article.body,
        image=article.image,
        image_url=service.image_url(article),
        author_id=article.author_id,
        author=AuthorResponse.model_validate(article.author) if article.author else None,
        created_at=article.created_at,
        updated_at=article.updated_at,
    )


async def _to_image_upload(upload: UploadFile | None) -> ImageUpload | None:
    """Read an uploaded file; an empty file part counts as no upload."""
    if upload is None or not upload.filename:
        return None
    content = await upload.read()
    return ImageUpload(
        filename=upload.filename,
        content_type=upload.content_type,
        content=content,
    )


def _http_error(exc: Exception) -> HTTPException:
    if isinstance(exc, EntityNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, EntityValidationError):
        return HTTPException(
            status_code=422,
            detail={"message": _INVALID_DATA, "errors": exc.errors},
        )
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


# ── Endpoints ────────────────────────────────────────────────────────

@router.get("", response_model=ArticleListEnvelope)
async def list_articles(
    page: int = Query(1, ge=1, le=_MAX_PAGE),
    per_page: int | None = Query(None, ge=1),
    service: ArticleService = Depends(get_article_service),
) -> ArticleListEnvelope:
    """Retrieve a page of articles with their authors."""
    try:
        result = await service.list_articles(page=page, per_page=per_page)
    except StorageError as e:
        raise _http_error(e)
    return ArticleListEnvelope(
        articles=ArticlePageResponse(
            data=[_to_response(a, service) for a in result.items],
            total=result.total,
            per_page=result.per_page,
            current_page=result.current_page,
            last_page=result.last_page,
            from_=result.from_,
            to=result.to,
        )
    )


@router.post("", response_model=ArticleEnvelope, status_code=status.HTTP_201_CREATED)
async def create_article(
    title: str | None = Form(None),
    body: str | None = Form(None),
    image: UploadFile | None = File(None),
    service: ArticleService = Depends(get_article_service),
) -> ArticleEnvelope:
    """Create a new article from a multipart form with an image."""
    upload = await _to_image_upload(image)
    try:
        article = await service.create_article(title, body, upload)
    except (EntityValidationError, StorageError) as e:
        raise _http_error(e)
    return ArticleEnvelope(
        article=_to_response(article, service),
        message="New article has been created.",
    )


@router.get("/{article_id}", response_model=ArticleEnvelope, response_model_exclude_none=True)
async def get_article(
    article_id: int,
    service: ArticleService = Depends(get_article_service),
) -> ArticleEnvelope:
    """Retrieve a single article by ID."""
    try:
        article = await service.get_article(article_id)
    except (EntityNotFoundError, StorageError) as e:
        raise _http_error(e)
    return ArticleEnvelope(article=_to_response(article, service))


@router.api_route("/{article_id}", methods=["PUT", "PATCH"], response_model=ArticleEnvelope)
async def update_article(
    article_id: int,
    title: str | None = Form(None),
    body: str | None = Form(None),
    image: UploadFile | None = File(None),
    service: ArticleService = Depends(get_article_service),
) -> ArticleEnvelope:
    """Update an existing article; the image is replaced only when a new one is sent."""
    upload = await _to_image_upload(image)
    try:
        article = await service.update_article(article_id, title, body, upload)
    except (EntityNotFoundError, EntityValidationError, StorageError) as e:
        raise _http_error(e)
    return ArticleEnvelope(
        article=_to_response(article, service),
        message="Selected article has been updated.",
    )


@router.delete("/{article_id}", response_model=MessageResponse)
async def delete_article(
    article_id: int,
    service: ArticleService = Depends(get_article_service),
) -> MessageResponse:
    """Delete an article and its image."""
    try:
        await service.delete_article(article_id)
    except (EntityNotFoundError, StorageError) as e:
        raise _http_error(e)
    return MessageResponse(message="Selected article has been deleted.")
