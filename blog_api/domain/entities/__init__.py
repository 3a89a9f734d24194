from .author import Author
from .article import Article
from .page import Page

__all__ = [
    "Article",
    "Author",
    "Page",
]
