"""Transaction helpers shared by the service layer."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from threadline.core.errors import InternalError

logger = logging.getLogger(__name__)


@contextmanager
def unit_of_work(db: Session) -> Iterator[Session]:
    """Commit everything done inside the block, or nothing.

    Any exception rolls the session back. Storage failures are logged and
    re-raised as :class:`InternalError` so callers never see driver detail.
    """
    try:
        yield db
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Storage failure, transaction rolled back: %s", exc, exc_info=True)
        raise InternalError() from exc
    except Exception:
        db.rollback()
        raise
