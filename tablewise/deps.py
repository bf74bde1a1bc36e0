"""FastAPI dependencies for the Tablewise API.

Provides:
- Device resolution (X-Device-Id header -> settings default)
- The device-local key/value store and the planner store built on it
"""

from typing import Optional

from fastapi import Depends, Header

from .infra.local_store import KeyValueStore, RedisStore
from .services.planner_store import PlannerStore
from .settings import settings


def get_device_id(
    x_device_id: Optional[str] = Header(None, alias="X-Device-Id"),
) -> str:
    """Planner data is scoped per device; a missing or blank header means the default device."""
    if x_device_id and x_device_id.strip():
        return x_device_id.strip()
    return settings.default_device_id


def get_local_store() -> KeyValueStore:
    return RedisStore()


def get_planner_store(
    device_id: str = Depends(get_device_id),
    store: KeyValueStore = Depends(get_local_store),
) -> PlannerStore:
    return PlannerStore(store, device_id)
