from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from typing import Dict, Generator
import threading
import redis
from redis.exceptions import LockError
from .config import settings

database_url = settings.get_database_url

if database_url.startswith("sqlite"):
    # SQLite is only used for local runs and tests
    engine = create_engine(
        database_url,
        connect_args={"check_same_thread": False},
    )
else:
    engine = create_engine(
        database_url,
        pool_size=5,
        max_overflow=10,
        pool_timeout=30,
        pool_recycle=1800,  # Recycle connections after 30 minutes
    )

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

# Redis setup - in-process stand-in for testing
if settings.TESTING:
    class _MockLock:
        def __init__(self, lock: threading.Lock, blocking_timeout):
            self._lock = lock
            self._blocking_timeout = blocking_timeout

        def __enter__(self):
            timeout = -1 if self._blocking_timeout is None else self._blocking_timeout
            if not self._lock.acquire(timeout=timeout):
                raise LockError("Unable to acquire lock within the time specified")
            return self

        def __exit__(self, exc_type, exc, tb):
            self._lock.release()

    class RedisMock:
        def __init__(self):
            self.data = {}
            self._locks: Dict[str, threading.Lock] = {}
            self._guard = threading.Lock()

        def get(self, key):
            return self.data.get(key)

        def delete(self, key):
            if key in self.data:
                del self.data[key]
            return 1

        def lock(self, name, timeout=None, blocking_timeout=None):
            with self._guard:
                lock = self._locks.setdefault(name, threading.Lock())
            return _MockLock(lock, blocking_timeout)

        def ping(self):
            return True

    redis_client = RedisMock()
else:
    # Real Redis client for production
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
    # Import models so they register with Base.metadata
    from ..models import appointment, doctor, patient  # noqa: F401

    Base.metadata.create_all(bind=engine)
