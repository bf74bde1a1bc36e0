"""Pydantic models for the weekly planner.

These are device-scoped: they are kept in the key/value store (or computed on
the fly), never in the recipes table.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import Field

from .schemas import CamelModel

PlanMealType = Literal["Breakfast", "Lunch", "Dinner"]


class PlannerRecipe(CamelModel):
    """A stored recipe plus inferred classification fields (read-only view)."""
    id: str
    title: str
    minutes: int
    meal_type: str
    tags: list[str] = Field(default_factory=list)
    tools: list[str] = Field(default_factory=list)
    source_type: str
    protein_type: str
    servings_range: str
    has_notes: bool = False
    modified_by_me: bool = False
    ingredients: list[str] = Field(default_factory=list)
    source_url: Optional[str] = None
    image: Optional[str] = None


class Filters(CamelModel):
    max_minutes: Optional[int] = Field(None, ge=0)
    dietary: list[str] = Field(default_factory=list)
    meal_type: list[str] = Field(default_factory=list)
    cooking_method: list[str] = Field(default_factory=list)
    source: list[str] = Field(default_factory=list)
    protein_type: list[str] = Field(default_factory=list)
    with_notes: bool = False
    modified_by_me: bool = False
    my_picks: bool = False
    min_rating: Optional[int] = Field(None, ge=1, le=5)
    servings: Optional[str] = None
    must_include: list[str] = Field(default_factory=list)
    must_exclude: list[str] = Field(default_factory=list)


class PlanAssignment(CamelModel):
    recipe_id: str
    meal_type: PlanMealType
    start_day: int = Field(..., ge=0, le=6)
    span_days: int = Field(1, ge=1, le=7)

    @property
    def end_day(self) -> int:
        """Exclusive end of the covered day range."""
        return self.start_day + self.span_days

    def covers(self, day: int) -> bool:
        return self.start_day <= day < self.end_day


class PlannerState(CamelModel):
    filters: Filters = Field(default_factory=Filters)
    selected_ids: list[str] = Field(default_factory=list)
    plan_assignments: list[PlanAssignment] = Field(default_factory=list)


class RecipeUserMeta(CamelModel):
    is_my_pick: bool = False
    rating: Optional[int] = Field(None, ge=1, le=5)
    rated_at: Optional[datetime] = None


class RecipeViewPrefs(CamelModel):
    units: Literal["metric", "imperial"] = "metric"
    servings: Optional[int] = Field(None, ge=1)
    layout: Literal["list", "steps"] = "list"
    notes: str = ""
    completed_steps: list[int] = Field(default_factory=list)


# --- Requests / responses ---

class PlaceRequest(CamelModel):
    recipe_id: str
    meal_type: PlanMealType
    day: int = Field(..., ge=0, le=6)


class SlotRequest(CamelModel):
    meal_type: PlanMealType
    day: int = Field(..., ge=0, le=6)


class PlanOut(CamelModel):
    changed: bool
    assignments: list[PlanAssignment]


class SelectionOut(CamelModel):
    selected_ids: list[str]
    max_selections_hit: bool
    can_generate: bool


class PlannerRecipesOut(CamelModel):
    recipes: list[PlannerRecipe]
    total_count: int
    active_filter_count: int


class RatingRequest(CamelModel):
    rating: int = Field(..., ge=1, le=5)


class GroceryItem(CamelModel):
    key: str
    ingredient: str
    recipes: list[str]
    checked: bool = False


class GroceryCategory(CamelModel):
    name: str
    items: list[GroceryItem]


class GroceryListOut(CamelModel):
    categories: list[GroceryCategory]
    recipes: list[str]
    total_items: int
    checked_count: int = 0
