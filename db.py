import logging
import os
from contextlib import contextmanager
from functools import wraps
from datetime import datetime, timezone

from sqlalchemy import create_engine, event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from models import Base  # ensure models are imported so metadata knows all tables
from utils.exceptions import StorageError

logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./notetree.db")


def make_engine(url: str, **kwargs):
    """Create an engine; SQLite connections get foreign key enforcement."""
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    eng = create_engine(url, pool_pre_ping=True, connect_args=connect_args, **kwargs)

    if eng.dialect.name == "sqlite":
        @event.listens_for(eng, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return eng


engine = make_engine(DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(bind=None):
    Base.metadata.create_all(bind=bind or engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@contextmanager
def atomic(db: Session):
    """
    One unit of work against the record store.

    Everything issued inside the block is committed together; any exception
    rolls the whole block back. Driver/ORM failures surface as StorageError,
    domain errors propagate unchanged.
    """
    try:
        yield db
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Record store failure, transaction rolled back: {e}")
        raise StorageError("The record store rejected the operation.") from e
    except Exception:
        db.rollback()
        raise


def storage_guard(func):
    """
    Method decorator for services holding a session as `self.db`.

    Reads outside atomic() hit the store too; their driver/ORM failures are
    reported as StorageError like failed writes.
    """
    @wraps(func)
    def wrapper(self, *args, **kwargs):
        try:
            return func(self, *args, **kwargs)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Record store failure in {func.__qualname__}: {e}")
            raise StorageError("The record store is unavailable.") from e
    return wrapper
