# storefront/services/lock_service.py
import threading
import time
import uuid
from contextlib import contextmanager

import redis
from redis.exceptions import RedisError

from storefront.domain.errors import CollaboratorUnavailable
from storefront.utils.retry import redis_retry
from storefront.utils.settings import REDIS_URL, LOCK_BACKEND, LOCK_TTL_SECONDS, LOCK_WAIT_SECONDS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

#LUA porownaj i usun, atomicity
_RELEASE_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
else
    return 0
end
"""

#redis wykonuje skrypt lua atomowo, nie mozna wcisnac sie miedzy GET a DEL
#wiec lock zwalnia tylko ten kto go zalozyl (token)


def cart_lock_key(user_id: int) -> str:
    return f"cart:{user_id}:lock"


class RedisLockService:
    """
    Wzajemne wykluczanie per klucz (per uzytkownik) miedzy procesami.
    -SET NX EX z losowym tokenem
    -zwalnianie przez lua (porownaj i usun)
    -czekanie ograniczone czasem, potem CollaboratorUnavailable
    """

    poll_interval = 0.05

    def __init__(
        self,
        url: str | None = None,
        ttl: int = LOCK_TTL_SECONDS,
        wait: float = LOCK_WAIT_SECONDS,
        client: redis.Redis | None = None,
    ):
        self.redis = client or redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )
        self.ttl = ttl
        self.wait = wait

    @redis_retry()
    def _try_acquire(self, key: str, token: str) -> bool:
        #SET cart:1:lock "<token>" NX EX 30
        return bool(self.redis.set(name=key, value=token, nx=True, ex=self.ttl))

    @redis_retry()
    def _release(self, key: str, token: str) -> bool:
        return bool(self.redis.eval(_RELEASE_LUA, 1, key, token))

    def acquire(self, key: str) -> str:
        token = uuid.uuid4().hex
        deadline = time.monotonic() + self.wait
        try:
            while True:
                if self._try_acquire(key, token):
                    logger.debug(f"Acquired lock {key}")
                    return token
                if time.monotonic() >= deadline:
                    break
                time.sleep(self.poll_interval)
        except RedisError as e:
            raise CollaboratorUnavailable("Lock service unavailable", key=key) from e

        logger.warning(f"Timed out waiting for lock {key}")
        raise CollaboratorUnavailable("Timed out waiting for a concurrent request on the same resource", key=key)

    def release(self, key: str, token: str) -> None:
        try:
            released = self._release(key, token)
        except RedisError as e:
            # lock i tak wygasnie po ttl
            logger.error(f"Failed to release lock {key}: {e}")
            return
        if not released:
            logger.warning(f"Lock {key} expired before release, ttl {self.ttl}s too short")

    @contextmanager
    def hold(self, key: str):
        token = self.acquire(key)
        try:
            yield
        finally:
            self.release(key, token)


class _LocalSlot:
    __slots__ = ("lock", "users")

    def __init__(self):
        self.lock = threading.Lock()
        # trzymajacy + czekajacy, przy 0 wpis jest usuwany
        self.users = 0


class LocalLockService:
    """Ten sam kontrakt co RedisLockService, dla jednego procesu (dev, testy)."""

    def __init__(self, wait: float = LOCK_WAIT_SECONDS):
        self.wait = wait
        self._guard = threading.Lock()
        self._slots: dict[str, _LocalSlot] = {}

    def _enter(self, key: str) -> _LocalSlot:
        with self._guard:
            slot = self._slots.get(key)
            if slot is None:
                slot = self._slots[key] = _LocalSlot()
            slot.users += 1
            return slot

    def _leave(self, key: str, slot: _LocalSlot) -> None:
        with self._guard:
            slot.users -= 1
            if slot.users == 0:
                del self._slots[key]

    @contextmanager
    def hold(self, key: str):
        slot = self._enter(key)
        try:
            if not slot.lock.acquire(timeout=self.wait):
                logger.warning(f"Timed out waiting for lock {key}")
                raise CollaboratorUnavailable(
                    "Timed out waiting for a concurrent request on the same resource", key=key
                )
            try:
                yield
            finally:
                slot.lock.release()
        finally:
            self._leave(key, slot)


def build_lock_service(backend: str = LOCK_BACKEND):
    if backend == "local":
        return LocalLockService()
    if backend == "redis":
        return RedisLockService()
    raise ValueError(f"Unknown lock backend: {backend}")
