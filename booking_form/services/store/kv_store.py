# booking_form/services/store/kv_store.py
"""
Key-value storage on a Redis-compatible service (Redis, Vercel KV).

Key format: booking:{id}
Value: JSON-encoded booking record.
"""

import json
import logging
from typing import Optional

from redis import Redis
from redis.exceptions import RedisError

from ...errors import StorageError
from ...schemas.bookings import BookingRecord
from .base import BookingStore, backfill_dates, normalize_email, parse_records

logger = logging.getLogger(__name__)


def create_redis_client(url: str, socket_timeout: float = 2.0) -> Redis:
    return Redis.from_url(
        url,
        decode_responses=True,
        socket_timeout=socket_timeout,
        socket_connect_timeout=socket_timeout,
    )


class KeyValueStore(BookingStore):
    """Incremental store: one key per booking, put/delete instead of save-all."""

    name = "kv"
    KEY_PREFIX = "booking"

    def __init__(self, redis: Redis):
        self.redis = redis

    def _key(self, booking_id: str) -> str:
        return f"{self.KEY_PREFIX}:{booking_id}"

    # ── Read ─────────────────────────────────────────────────────────────

    def load_all(self) -> list[BookingRecord]:
        try:
            keys = list(self.redis.scan_iter(match=f"{self.KEY_PREFIX}:*"))
            if not keys:
                return []
            values = self.redis.mget(keys)
        except RedisError:
            logger.exception("Error loading bookings from key-value store")
            return []

        raw = []
        for key, value in zip(keys, values):
            if value is None:
                continue
            try:
                raw.append(json.loads(value))
            except json.JSONDecodeError:
                logger.error(f"Invalid JSON in booking key: {key}")

        raw, changed = backfill_dates(raw)
        records = parse_records(raw)

        if changed:
            logger.info("Backfilled missing booking dates from timestamps")
            for record in records:
                self.put(record)

        # Ids are millisecond timestamps, so this is creation order
        return sorted(records, key=lambda r: (len(r.id), r.id))

    # ── Write ────────────────────────────────────────────────────────────

    def put(self, record: BookingRecord) -> None:
        try:
            self.redis.set(self._key(record.id), json.dumps(record.to_json(), ensure_ascii=False))
        except RedisError as e:
            raise StorageError(f"Failed to save booking {record.id}: {e}") from e

    def delete(self, booking_id: str) -> None:
        try:
            self.redis.delete(self._key(booking_id))
        except RedisError as e:
            raise StorageError(f"Failed to delete booking {booking_id}: {e}") from e

    def commit(
        self,
        existing: list[BookingRecord],
        record: BookingRecord,
        replaced: Optional[BookingRecord] = None,
    ) -> None:
        email = normalize_email(record.email)
        for old in existing:
            if normalize_email(old.email) == email:
                try:
                    self.delete(old.id)
                except StorageError:
                    # Stale duplicate is tolerated; the new booking still goes in
                    logger.exception(f"Error removing previous booking {old.id}")
        self.put(record)

    def close(self) -> None:
        self.redis.close()
