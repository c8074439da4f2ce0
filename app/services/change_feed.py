# app/services/change_feed.py
import json
from enum import Enum
from typing import Any, Dict, Iterable, List

import redis

from app.utils.retry import redis_retry
from app.utils.settings import REDIS_URL
from app.utils.logging import get_logger

logger = get_logger(__name__)

CHANNEL_PREFIX = "changes:"


class ChangeOp(str, Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


def channel_for(table: str) -> str:
    return f"{CHANNEL_PREFIX}{table}"


class LiveIndex:
    """
    In-memory view of one table keyed by id.
    Seeded once from a snapshot, then patched event by event
    (upsert on INSERT/UPDATE, delete on DELETE) instead of reloading the list.
    """

    def __init__(self, table: str, records: Iterable[Dict[str, Any]] = ()):
        self.table = table
        self._rows: Dict[Any, Dict[str, Any]] = {}
        self.load(records)

    def load(self, records: Iterable[Dict[str, Any]]) -> None:
        self._rows = {r["id"]: dict(r) for r in records}

    def apply(self, event: Dict[str, Any]) -> None:
        if event.get("table") != self.table:
            return
        record = event.get("record") or {}
        row_id = record.get("id")
        if row_id is None:
            logger.warning(f"Ignoring {self.table} event without id: {event}")
            return

        op = ChangeOp(event["op"])
        if op is ChangeOp.DELETE:
            self._rows.pop(row_id, None)
        else:
            current = self._rows.get(row_id, {})
            self._rows[row_id] = {**current, **record}

    def get(self, row_id):
        return self._rows.get(row_id)

    def values(self, sort_key: str = "id", reverse: bool = False) -> List[Dict[str, Any]]:
        return sorted(self._rows.values(), key=lambda r: r.get(sort_key) or 0, reverse=reverse)

    def __len__(self):
        return len(self._rows)

    def __contains__(self, row_id):
        return row_id in self._rows


class ChangeFeed:
    """Per-table change events over redis pub/sub."""

    def __init__(self, client: redis.Redis | None = None, url: str | None = None):
        self.redis = client or redis.Redis.from_url(url or REDIS_URL, decode_responses=True)

    @redis_retry()
    def _publish(self, channel: str, payload: str) -> int:
        return self.redis.publish(channel, payload)

    def publish(self, table: str, op: ChangeOp, record: Dict[str, Any]) -> None:
        event = {"table": table, "op": ChangeOp(op).value, "record": record}
        try:
            self._publish(channel_for(table), json.dumps(event, default=str))
        except redis.RedisError as e:
            #listeners catch up on their next snapshot, the write itself already committed
            logger.warning(f"Change event for {table} #{record.get('id')} not published: {e}")

    def subscribe(self, tables: Iterable[str]):
        #subscribe confirmations are skipped in poll(), None from get_message means "nothing pending"
        pubsub = self.redis.pubsub()
        pubsub.subscribe(*[channel_for(t) for t in tables])
        return pubsub

    def poll(self, pubsub, indexes: Dict[str, LiveIndex], timeout: float = 0.0) -> int:
        """Drain pending messages into the matching indexes, returns the number applied."""
        applied = 0
        while True:
            message = pubsub.get_message(timeout=timeout)
            if message is None:
                return applied
            if message.get("type") != "message":
                continue
            try:
                event = json.loads(message["data"])
            except (TypeError, ValueError):
                logger.warning(f"Malformed change event on {message.get('channel')}")
                continue
            index = indexes.get(event.get("table"))
            if index is not None:
                index.apply(event)
                applied += 1
