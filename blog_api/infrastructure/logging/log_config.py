"""Startup logging for the blog API.

Sets the root level and one level per logger family (SQL, uvicorn, blob
storage) from Settings, e.g. LOG_LEVEL_SQL=DEBUG to see every statement.
"""

import logging
import sys

from blog_api.config import Settings, get_settings

_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

# Settings field, then the logger names it controls
_LOGGER_FAMILIES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("log_level_sql", ("sqlalchemy.engine", "sqlalchemy.pool", "aiosqlite")),
    ("log_level_uvicorn", ("uvicorn", "uvicorn.access", "uvicorn.error")),
    ("log_level_storage", ("blog_api.infrastructure.storage",)),
)


def setup_logging(settings: Settings | None = None) -> None:
    """Apply the configured log levels; safe to call more than once."""
    settings = settings or get_settings()
    root = logging.getLogger()
    root.setLevel(_parse_level(settings.log_level))

    # Under pytest or a plain script nobody has attached a handler yet
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(_FORMAT))
        root.addHandler(handler)

    for field, names in _LOGGER_FAMILIES:
        level = _parse_level(getattr(settings, field))
        for name in names:
            logging.getLogger(name).setLevel(level)

    logging.getLogger(__name__).debug(
        "Log levels: root=%s sql=%s uvicorn=%s storage=%s",
        settings.log_level,
        settings.log_level_sql,
        settings.log_level_uvicorn,
        settings.log_level_storage,
    )


def _parse_level(raw: str) -> int:
    """Map a level name to its logging constant; unknown names mean INFO."""
    level = logging.getLevelName(raw.upper())
    return level if isinstance(level, int) else logging.INFO
