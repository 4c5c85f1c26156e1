import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from orderledger.core.errors import TransactionFailure
from orderledger.database.engine import SQLITE_BEGIN_IMMEDIATE, engine

logger = logging.getLogger(__name__)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
    bind=engine,
)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """Run the enclosed block as one unit of work on ``db``.

    Commits when the block finishes and rolls back on any exception. Store
    errors are logged and surfaced as ``TransactionFailure``; domain errors
    propagate unchanged.

    On SQLite the transaction takes the write lock as it starts, provided
    ``db`` has no transaction open yet.
    """
    try:
        if not db.in_transaction():
            db.connection(execution_options={SQLITE_BEGIN_IMMEDIATE: True})
        yield db
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Transaction rolled back after store error.")
        raise TransactionFailure() from exc
    except BaseException:
        db.rollback()
        raise


__all__ = ["SessionLocal", "get_db", "transaction"]
