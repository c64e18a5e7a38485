from contextlib import contextmanager
from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from typing import Generator, Iterator, Optional
import logging
import redis
from .config import settings
from .exceptions import ConflictError, StorageError

logger = logging.getLogger(__name__)

# Upper bound of the INTEGER primary keys
MAX_ROW_ID = 2**31 - 1

def is_row_id(value: int) -> bool:
    """True when value can name a row; larger ids overflow the driver."""
    return 1 <= value <= MAX_ROW_ID

def _engine_options(url: str) -> dict:
    """Connection pool settings for PostgreSQL, thread sharing for SQLite."""
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_size": 5,
        "max_overflow": 10,
        "pool_timeout": 30,
        "pool_recycle": 1800,  # Recycle connections after 30 minutes
    }

engine = create_engine(
    settings.get_database_url,
    **_engine_options(settings.get_database_url)
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

class RedisMock:
    """In-memory substitute for the few Redis commands used in tests."""

    def __init__(self):
        self.data = {}

    def setex(self, key, time, value):
        self.data[key] = str(value)
        return True

    def get(self, key):
        return self.data.get(key)

    def delete(self, key):
        return 1 if self.data.pop(key, None) is not None else 0

    def incr(self, key):
        self.data[key] = str(int(self.data.get(key, 0)) + 1)
        return int(self.data[key])

if settings.TESTING:
    redis_client = RedisMock()
else:
    redis_client = redis.from_url(settings.REDIS_URL, decode_responses=True)

# Database dependency
def get_db() -> Generator[Session, None, None]:
    """Get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

# Redis dependency
def get_redis():
    """Get Redis client."""
    return redis_client

# Database initialization
def init_db():
    """Initialize database tables."""
    from .. import models  # noqa: F401  registers every table on Base.metadata
    Base.metadata.create_all(bind=engine)

@contextmanager
def transaction(
    db: Session,
    action: str,
    integrity_error: Optional[str] = None,
) -> Iterator[Session]:
    """Commit on success, roll back on any error.

    Database failures surface as StorageError (or ConflictError when
    ``integrity_error`` is given and a constraint was violated).
    """
    try:
        yield db
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        if integrity_error:
            raise ConflictError(integrity_error) from exc
        logger.error(f"Failed to {action}: {exc}")
        raise StorageError() from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error(f"Failed to {action}: {exc}")
        raise StorageError() from exc
    except Exception:
        db.rollback()
        raise
