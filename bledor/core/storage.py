# bledor/core/storage.py
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from bledor.core.errors import StorageError

logger = logging.getLogger(__name__)


def commit(db: Session) -> None:
    """Commit the unit of work, rolling back and raising StorageError on failure."""
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Commit failed: %s", exc)
        raise StorageError() from exc
