# app/services/cart_store.py
import json
from typing import List

import redis

from app.domain.schemas import CartItem
from app.utils.retry import redis_retry
from app.utils.settings import REDIS_URL, CART_TTL_SECONDS
from app.utils.logging import get_logger

logger = get_logger(__name__)


class RedisCartStore:
    """
    Persistence port of the cart:
    - one JSON list per session under cart:<session_id>
    - TTL refreshed on every save, so an abandoned cart disappears by itself
    """

    def __init__(self, client: redis.Redis | None = None, url: str | None = None, ttl: int = CART_TTL_SECONDS):
        self.redis = client or redis.Redis.from_url(url or REDIS_URL, decode_responses=True)
        self.ttl = ttl

    @staticmethod
    def _key(session_id: str) -> str:
        return f"cart:{session_id}"

    @redis_retry()
    def load(self, session_id: str) -> List[CartItem]:
        raw = self.redis.get(self._key(session_id))
        if not raw:
            return []
        try:
            return [CartItem.model_validate(i) for i in json.loads(raw)]
        except (ValueError, TypeError) as e:
            #corrupted payload, start from an empty cart
            logger.warning(f"Discarding unreadable cart {session_id}: {e}")
            return []

    @redis_retry()
    def save(self, session_id: str, items: List[CartItem]) -> None:
        payload = json.dumps([i.model_dump() for i in items])
        self.redis.set(self._key(session_id), payload, ex=self.ttl)

    @redis_retry()
    def clear(self, session_id: str) -> None:
        self.redis.delete(self._key(session_id))
