"""Device-scoped key/value persistence.

Holds what a browser client would keep in local storage: planner filters and
assignments, per-recipe ratings, view preferences, grocery checklist state.
Values are JSON-serialized. Read and write failures are logged and never
raised; a failed load returns the caller's default.
"""

import copy
import json
import logging
from typing import Any, Optional, Protocol, Type, TypeVar

from pydantic import BaseModel, ValidationError
from redis import Redis
from redis.exceptions import RedisError

from .redis_client import get_sync_redis

logger = logging.getLogger("tablewise.store")

T = TypeVar("T", bound=BaseModel)


class KeyValueStore(Protocol):
    def load(self, key: str, default: Any = None) -> Any: ...

    def save(self, key: str, value: Any) -> None: ...


class MemoryStore:
    """In-process store, used by tests and when no Redis is configured."""

    def __init__(self):
        self._data: dict[str, str] = {}

    def load(self, key: str, default: Any = None) -> Any:
        raw = self._data.get(key)
        if raw is None:
            return copy.deepcopy(default)
        try:
            return json.loads(raw)
        except ValueError as e:
            logger.error(f"Corrupt value under {key}: {e}")
            return copy.deepcopy(default)

    def save(self, key: str, value: Any) -> None:
        try:
            self._data[key] = json.dumps(value)
        except (TypeError, ValueError) as e:
            logger.error(f"Failed to save {key}: {e}")


class RedisStore:
    def __init__(self, client: Optional[Redis] = None, prefix: str = "tablewise"):
        self._client = client
        self.prefix = prefix

    @property
    def client(self) -> Redis:
        return self._client or get_sync_redis()

    def _key(self, key: str) -> str:
        return f"{self.prefix}:{key}"

    def load(self, key: str, default: Any = None) -> Any:
        try:
            raw = self.client.get(self._key(key))
        except RedisError as e:
            logger.error(f"Error loading {key} from store: {e}")
            return copy.deepcopy(default)
        if raw is None:
            return copy.deepcopy(default)
        try:
            return json.loads(raw)
        except ValueError as e:
            logger.error(f"Corrupt value under {key}: {e}")
            return copy.deepcopy(default)

    def save(self, key: str, value: Any) -> None:
        try:
            self.client.set(self._key(key), json.dumps(value))
        except (RedisError, TypeError, ValueError) as e:
            logger.error(f"Error saving {key} to store: {e}")


def load_model(store: KeyValueStore, key: str, model: Type[T]) -> T:
    """Load a pydantic model, falling back to its defaults when missing or invalid."""
    raw = store.load(key)
    if raw is None:
        return model()
    try:
        return model.model_validate(raw)
    except ValidationError as e:
        logger.error(f"Stored {key} does not match {model.__name__}, using defaults: {e}")
        return model()


def save_model(store: KeyValueStore, key: str, value: BaseModel) -> None:
    store.save(key, value.model_dump(mode="json", by_alias=True))
