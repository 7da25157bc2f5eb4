"""Per-session serialization for cart mutations and cart checkout.

Two requests on the same session id would otherwise read the same cart,
both pass the stock check and the last write would win. A Redis lock keyed
on the session id makes them run one after the other across workers.
"""
import logging
from contextlib import contextmanager

from redis import Redis
from redis.exceptions import LockError

from evshop.core.config import settings
from evshop.core.errors import Busy

logger = logging.getLogger(__name__)

def get_client() -> Redis:
    return Redis.from_url(settings.REDIS_URL, decode_responses=True)

def lock_key(session_id: str) -> str:
    return f"cart-lock:{session_id}"

@contextmanager
def session_lock(session_id: str):
    if not settings.REDIS_URL:
        yield
        return
    lock = get_client().lock(
        lock_key(session_id),
        timeout=settings.CART_LOCK_TIMEOUT,
        blocking_timeout=settings.CART_LOCK_WAIT,
    )
    if not lock.acquire():
        raise Busy("Cart is being updated by another request, retry shortly")
    try:
        yield
    finally:
        try:
            lock.release()
        except LockError:
            # expired while held; another request may own the key now
            logger.warning("session lock for %s expired before release", session_id)
