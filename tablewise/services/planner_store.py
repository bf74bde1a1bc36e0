"""Device-scoped planner persistence on top of a KeyValueStore.

Each device owns four keys: planner state (filters, selection, plan), the
per-recipe user meta map, the per-recipe view preferences map and the list
of checked grocery keys.
"""

import logging
from typing import Iterable

from pydantic import TypeAdapter, ValidationError

from ..infra.local_store import KeyValueStore, load_model, save_model
from ..planner_schemas import PlannerState, RecipeUserMeta, RecipeViewPrefs
from .meal_plan import WeeklyPlan
from .user_meta import prune_orphans

logger = logging.getLogger("tablewise.planner")

STATE_KEY = "weekly_meals_state"
USER_META_KEY = "recipe_user_meta"
VIEW_PREFS_KEY = "recipe_view_prefs"
GROCERY_CHECKED_KEY = "grocery_checked"

_meta_map = TypeAdapter(dict[str, RecipeUserMeta])
_prefs_map = TypeAdapter(dict[str, RecipeViewPrefs])


class PlannerStore:
    def __init__(self, store: KeyValueStore, device_id: str):
        self.store = store
        self.device_id = device_id

    def _key(self, name: str) -> str:
        return f"device:{self.device_id}:{name}"

    def _load_map(self, name: str, adapter: TypeAdapter) -> dict:
        raw = self.store.load(self._key(name), {})
        if not isinstance(raw, dict):
            logger.error(f"Stored {name} for device {self.device_id} is not a map, resetting")
            return {}
        try:
            return adapter.validate_python(raw)
        except ValidationError as e:
            logger.error(f"Stored {name} for device {self.device_id} is invalid, resetting: {e}")
            return {}

    def _save_map(self, name: str, adapter: TypeAdapter, value: dict) -> None:
        self.store.save(self._key(name), adapter.dump_python(value, mode="json", by_alias=True))

    # --- Planner state ---

    def load_state(self) -> PlannerState:
        return load_model(self.store, self._key(STATE_KEY), PlannerState)

    def save_state(self, state: PlannerState) -> None:
        save_model(self.store, self._key(STATE_KEY), state)

    # --- User meta ---

    def load_user_meta(self) -> dict[str, RecipeUserMeta]:
        return self._load_map(USER_META_KEY, _meta_map)

    def save_user_meta(self, meta: dict[str, RecipeUserMeta]) -> None:
        self._save_map(USER_META_KEY, _meta_map, meta)

    # --- View prefs ---

    def load_view_prefs(self) -> dict[str, RecipeViewPrefs]:
        return self._load_map(VIEW_PREFS_KEY, _prefs_map)

    def save_view_prefs(self, prefs: dict[str, RecipeViewPrefs]) -> None:
        self._save_map(VIEW_PREFS_KEY, _prefs_map, prefs)

    # --- Grocery checklist ---

    def load_checked(self) -> list[str]:
        raw = self.store.load(self._key(GROCERY_CHECKED_KEY), [])
        if not isinstance(raw, list):
            return []
        return [k for k in raw if isinstance(k, str)]

    def save_checked(self, keys: list[str]) -> None:
        self.store.save(self._key(GROCERY_CHECKED_KEY), list(keys))

    def prune(self, known_ids: Iterable[str]) -> int:
        """Drop selections, assignments, meta and prefs for recipes that no longer exist."""
        known = set(known_ids)
        dropped = 0

        state = self.load_state()
        plan = WeeklyPlan(state.plan_assignments)
        orphans = plan.recipe_ids() - known
        stale_selected = [i for i in state.selected_ids if i not in known]
        if orphans or stale_selected:
            dropped += plan.drop_recipes(orphans) + len(stale_selected)
            state.plan_assignments = plan.assignments
            state.selected_ids = [i for i in state.selected_ids if i in known]
            self.save_state(state)

        meta, meta_dropped = prune_orphans(self.load_user_meta(), known)
        if meta_dropped:
            self.save_user_meta(meta)
            dropped += meta_dropped

        prefs, prefs_dropped = prune_orphans(self.load_view_prefs(), known)
        if prefs_dropped:
            self.save_view_prefs(prefs)
            dropped += prefs_dropped

        if dropped:
            logger.info(f"Pruned {dropped} planner entries for deleted recipes (device {self.device_id})")
        return dropped
