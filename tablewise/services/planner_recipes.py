from typing import Iterable, Mapping, Optional

from ..models import Recipe
from ..planner_schemas import PlannerRecipe, RecipeViewPrefs
from .classification import (
    infer_meal_type,
    infer_minutes,
    infer_protein_type,
    infer_servings_range,
    infer_source_type,
    infer_tools,
    normalize_tag,
)


def _modified_after_creation(recipe: Recipe) -> bool:
    if recipe.created_at is None or recipe.updated_at is None:
        return False
    created, updated = recipe.created_at, recipe.updated_at
    # SQLite hands back naive datetimes; compare like with like
    if (created.tzinfo is None) != (updated.tzinfo is None):
        created, updated = created.replace(tzinfo=None), updated.replace(tzinfo=None)
    return updated > created


def to_planner_recipe(recipe: Recipe, prefs: Optional[RecipeViewPrefs] = None) -> PlannerRecipe:
    steps = list(recipe.steps or [])
    ingredients = list(recipe.ingredients or [])
    tags = list(recipe.tags or [])

    return PlannerRecipe(
        id=recipe.id,
        title=recipe.title,
        minutes=infer_minutes(recipe.cook_time, steps),
        meal_type=infer_meal_type(recipe.title, tags),
        tags=[normalize_tag(t) for t in tags],
        tools=infer_tools(steps),
        source_type=infer_source_type(recipe.source_url),
        protein_type=infer_protein_type(ingredients),
        servings_range=infer_servings_range(recipe.servings),
        has_notes=bool(prefs and prefs.notes.strip()),
        modified_by_me=_modified_after_creation(recipe),
        ingredients=ingredients,
        source_url=recipe.source_url,
        image=recipe.image,
    )


def to_planner_recipes(
    recipes: Iterable[Recipe],
    view_prefs: Optional[Mapping[str, RecipeViewPrefs]] = None,
) -> list[PlannerRecipe]:
    prefs = view_prefs or {}
    return [to_planner_recipe(r, prefs.get(r.id)) for r in recipes]
