import logging
from collections.abc import Generator

from sqlalchemy import JSON, create_engine
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from helpdesk.core.config import settings
from helpdesk.core.exceptions import AppError, TransientStorageError

logger = logging.getLogger(__name__)

_connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(settings.DATABASE_URL, pool_pre_ping=True, connect_args=_connect_args)

SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)

# JSONB on PostgreSQL, plain JSON everywhere else (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


class Base(DeclarativeBase):
    pass


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def commit_or_rollback(
    db: Session, operation: str, on_integrity_error: AppError | None = None
) -> None:
    """Commit the unit of work or undo all of it.

    Every multi-row helpdesk write (assignment replacement, status change plus
    history row, role normalization) goes through here so a failure never leaves
    half of it applied.

    Args:
        db: Session holding the staged changes.
        operation: Short label used in the failure log line.
        on_integrity_error: Raised instead of ``TransientStorageError`` when a
            unique or foreign-key constraint rejects the commit.
    """
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.warning("Constraint violation during %s: %s", operation, exc.orig)
        if on_integrity_error is not None:
            raise on_integrity_error from exc
        raise TransientStorageError() from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Transaction failed during %s", operation)
        raise TransientStorageError() from exc
