from .author import AuthorModel
from .article import ArticleModel

__all__ = [
    "ArticleModel",
    "AuthorModel",
]
