"""Pydantic DTOs (Data Transfer Objects) for the Article feature."""

from datetime import datetime

from pydantic import BaseModel, Field

TITLE_MIN_LENGTH = 5
TITLE_MAX_LENGTH = 190
BODY_MIN_LENGTH = 10
BODY_MAX_LENGTH = 100_000


class ArticleFields(BaseModel):
    """Field rules shared by article create and update."""

    title: str = Field(
        ...,
        min_length=TITLE_MIN_LENGTH,
        max_length=TITLE_MAX_LENGTH,
        examples=["Getting Started with FastAPI"],
    )
    body: str = Field(
        ...,
        min_length=BODY_MIN_LENGTH,
        max_length=BODY_MAX_LENGTH,
        examples=["This is the body of a blog article."],
    )


class ImageUpload(BaseModel):
    """Raw uploaded image as received from the client."""

    filename: str = ""
    content_type: str | None = None
    content: bytes


class AuthorResponse(BaseModel):
    id: int
    name: str
    email: str

    model_config = {"from_attributes": True}


class ArticleResponse(BaseModel):
    """Schema returned to the client."""

    id: int
    title: str
    slug: str
    body: str
    image: str
    image_url: str
    author_id: int
    author: AuthorResponse | None = None
    created_at: datetime
    updated_at: datetime


class ArticlePageResponse(BaseModel):
    """One page of articles plus position metadata."""

    data: list[ArticleResponse]
    total: int
    per_page: int
    current_page: int
    last_page: int
    from_: int | None = Field(None, serialization_alias="from")
    to: int | None = None


class ArticleListEnvelope(BaseModel):
    articles: ArticlePageResponse


class ArticleEnvelope(BaseModel):
    article: ArticleResponse
    message: str | None = None


class MessageResponse(BaseModel):
    message: str
