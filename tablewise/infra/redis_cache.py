import hashlib
import json
import logging
from typing import Callable

from redis.exceptions import RedisError

from .redis_client import get_sync_redis

logger = logging.getLogger("tablewise.cache")


def cache_key(namespace: str, payload: str) -> str:
    digest = hashlib.sha256(payload.encode("utf-8")).hexdigest()
    return f"tablewise:cache:{namespace}:{digest}"


def set_json_sync(key: str, ttl_sec: int, value: dict) -> None:
    try:
        get_sync_redis().set(key, json.dumps(value), ex=ttl_sec)
    except RedisError as e:
        logger.warning(f"Cache write failed for {key}: {e}")


def get_or_set_json_sync(key: str, ttl_sec: int, compute_func: Callable[[], dict]) -> tuple[dict, bool]:
    """Return (value, cache_hit). A cache outage or corrupt entry degrades to computing."""
    r = get_sync_redis()
    try:
        raw = r.get(key)
    except RedisError as e:
        logger.warning(f"Cache read failed for {key}: {e}")
        raw = None
    if raw:
        try:
            return json.loads(raw), True
        except ValueError as e:
            logger.warning(f"Corrupt cache entry {key}, recomputing: {e}")

    val = compute_func()
    set_json_sync(key, ttl_sec, val)
    return val, False
