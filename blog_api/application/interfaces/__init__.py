from .article_repository import ArticleRepository
from .blob_storage import BlobStorage

__all__ = [
    "ArticleRepository",
    "BlobStorage",
]
