"""Domain entity for article authors — read-only from the article workflow."""

from dataclasses import dataclass, field
from datetime import datetime, timezone


@dataclass
class Author:
    """The person credited with an article."""

    name: str
    email: str
    id: int | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
