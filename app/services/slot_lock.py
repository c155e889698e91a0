from contextlib import contextmanager
from datetime import date, time
from typing import Iterator, Optional
import logging

from ..core.config import settings

logger = logging.getLogger(__name__)


class SlotLock:
    """Serializes check-then-insert for one (doctor, date, time) slot.

    Backed by a redis ``Lock`` so that every API worker, not just every
    thread in one process, sees the same lock. The lock expires after
    ``timeout`` seconds even if its holder dies, and acquiring it gives up
    after ``blocking_timeout`` seconds with ``redis.exceptions.LockError``.
    """

    def __init__(
        self,
        redis_client,
        timeout: Optional[int] = None,
        blocking_timeout: Optional[float] = None,
    ):
        self.redis = redis_client
        self.timeout = settings.SLOT_LOCK_TIMEOUT if timeout is None else timeout
        self.blocking_timeout = settings.SLOT_LOCK_WAIT if blocking_timeout is None else blocking_timeout

    @staticmethod
    def key(doctor_id: int, on: date, at: time) -> str:
        return f"appointment-slot:{doctor_id}:{on.isoformat()}:{at.isoformat()}"

    @contextmanager
    def hold(self, doctor_id: int, on: date, at: time) -> Iterator[None]:
        name = self.key(doctor_id, on, at)
        lock = self.redis.lock(
            name,
            timeout=self.timeout,
            blocking_timeout=self.blocking_timeout,
        )
        with lock:
            logger.debug(f"Acquired slot lock {name}")
            yield
        logger.debug(f"Released slot lock {name}")


__all__ = ["SlotLock"]
