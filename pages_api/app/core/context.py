"""
Application context.

Everything that holds an external resource (the SQLite connection and
the HTTP session used for Cloudinary) is built once at startup into an
:class:`AppContext` and released on shutdown.  The FastAPI lifespan
stores the context on ``app.state``; request handlers reach it through
the dependencies in ``api.deps``.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator

from .config import Settings
from .db import Database
from ..services.media_service import MediaClient

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    settings: Settings
    db: Database
    media: MediaClient

    @classmethod
    def create(cls, settings: Settings) -> "AppContext":
        """Open the database, apply migrations and build the media client."""
        db = Database(settings.database_url).open()
        try:
            db.init()
        except Exception:
            db.close()
            raise
        return cls(settings=settings, db=db, media=MediaClient(settings))

    def close(self) -> None:
        self.media.close()
        self.db.close()


@contextmanager
def open_context(settings: Settings) -> Iterator[AppContext]:
    """Yield a ready context and always release it afterwards."""
    context = AppContext.create(settings)
    logger.info("Application context ready (database: %s)", context.db.path)
    try:
        yield context
    finally:
        context.close()
        logger.info("Application context closed")
