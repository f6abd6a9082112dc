"""Transaction helpers shared by the domain services"""

import logging

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


def commit_or_raise(db: Session, action: str, conflict_detail: str = "Record already exists") -> None:
    """Commit the session; roll back and map failures to HTTP errors.

    Unique/foreign key violations become 409, anything else 500.
    """
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"⚠️ Integrity error while trying to {action}: {e.orig}")
        raise HTTPException(status_code=409, detail=conflict_detail) from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"❌ Database error while trying to {action}: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to {action}") from e
