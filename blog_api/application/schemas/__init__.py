from .article import (
    ArticleEnvelope,
    ArticleFields,
    ArticleListEnvelope,
    ArticlePageResponse,
    ArticleResponse,
    AuthorResponse,
    ImageUpload,
    MessageResponse,
)

__all__ = [
    "ArticleEnvelope",
    "ArticleFields",
    "ArticleListEnvelope",
    "ArticlePageResponse",
    "ArticleResponse",
    "AuthorResponse",
    "ImageUpload",
    "MessageResponse",
]
