"""Per-recipe user metadata: "my pick" flag and star rating."""

from datetime import datetime, timezone
from typing import Iterable, Optional, TypeVar

from ..planner_schemas import RecipeUserMeta

V = TypeVar("V")


def toggle_my_pick(meta: Optional[RecipeUserMeta]) -> RecipeUserMeta:
    current = meta or RecipeUserMeta()
    return current.model_copy(update={"is_my_pick": not current.is_my_pick})


def set_rating(meta: Optional[RecipeUserMeta], rating: int, now: Optional[datetime] = None) -> RecipeUserMeta:
    if not 1 <= rating <= 5:
        raise ValueError(f"Rating must be between 1 and 5, got {rating}")
    current = meta or RecipeUserMeta()
    return current.model_copy(update={
        "rating": rating,
        "rated_at": now or datetime.now(timezone.utc),
    })


def prune_orphans(entries: dict[str, V], known_ids: Iterable[str]) -> tuple[dict[str, V], int]:
    """Drop entries keyed by recipe ids that no longer exist. Returns (kept, dropped count)."""
    known = set(known_ids)
    kept = {k: v for k, v in entries.items() if k in known}
    return kept, len(entries) - len(kept)
