"""SQLAlchemy ORM model for the Author entity."""

from datetime import datetime, timezone
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from blog_api.infrastructure.database.base import Base

if TYPE_CHECKING:
    from blog_api.infrastructure.database.models.article import ArticleModel


class AuthorModel(Base):
    """ORM model — maps to the 'authors' table."""

    __tablename__ = "authors"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    articles: Mapped[list["ArticleModel"]] = relationship(back_populates="author")

    def __repr__(self) -> str:
        return f"<AuthorModel(id={self.id}, email='{self.email}')>"
