import logging

from oceanview.core.config import Settings
from oceanview.storage.base import Storage

logger = logging.getLogger(__name__)


def build_storage(settings: Settings) -> Storage:
    """Create the configured backend. The SQL schema itself is owned by Alembic."""
    if settings.STORAGE_BACKEND == "sql":
        from oceanview.db.session import SessionLocal
        from oceanview.storage.sql import SqlStorage

        logger.info("using SQL storage")
        return SqlStorage(SessionLocal)

    from oceanview.storage.memory import MemStorage

    logger.info("using in-memory storage")
    return MemStorage()
