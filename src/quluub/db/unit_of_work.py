"""Transaction helpers that keep service writes all-or-nothing."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from quluub.core.errors import UnavailableError

logger = logging.getLogger(__name__)


@contextmanager
def unit_of_work(db: Session) -> Iterator[Session]:
    """Run a block of writes and commit them once.

    Any exception rolls the session back before propagating. ``IntegrityError``
    is re-raised untouched so callers can map constraint violations to domain
    errors; other SQLAlchemy failures surface as ``UnavailableError``.
    """
    try:
        yield db
        db.commit()
    except IntegrityError:
        db.rollback()
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Store write failed: %s", exc, exc_info=True)
        raise UnavailableError("Storage is temporarily unavailable") from exc
    except Exception:
        db.rollback()
        raise


@contextmanager
def store_guard(db: Session) -> Iterator[Session]:
    """Translate store failures during reads into ``UnavailableError``."""
    try:
        yield db
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Store read failed: %s", exc, exc_info=True)
        raise UnavailableError("Storage is temporarily unavailable") from exc
