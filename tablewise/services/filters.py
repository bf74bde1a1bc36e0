"""Filter engine for planner recipes.

filter_recipes() is a pure, order-preserving AND across independent criteria.
A criterion left at its empty value (None, empty list, False) passes every
recipe.
"""

from typing import Mapping, Optional, Sequence

from ..planner_schemas import Filters, PlannerRecipe, RecipeUserMeta

DIETARY_TAGS = {
    "Vegetarian": "vegetarian",
    "Kid friendly": "kidFriendly",
    "Gluten-free": "glutenFree",
}


def ingredient_matches(term: str, ingredient: str) -> bool:
    """Loose, case-insensitive containment in either direction ("chicken" ~ "grilled chicken")."""
    t = term.strip().lower()
    i = ingredient.strip().lower()
    if not t or not i:
        return False
    return t in i or i in t


def _has_ingredient(recipe: PlannerRecipe, term: str) -> bool:
    return any(ingredient_matches(term, ing) for ing in recipe.ingredients)


def matches(recipe: PlannerRecipe, filters: Filters, meta: Optional[RecipeUserMeta]) -> bool:
    if filters.max_minutes is not None and recipe.minutes > filters.max_minutes:
        return False

    if filters.dietary:
        for diet in filters.dietary:
            tag = DIETARY_TAGS.get(diet)
            if tag is not None and tag not in recipe.tags:
                return False

    if filters.meal_type and recipe.meal_type not in filters.meal_type:
        return False
    if filters.cooking_method and not any(m in recipe.tools for m in filters.cooking_method):
        return False
    if filters.source and recipe.source_type not in filters.source:
        return False
    if filters.protein_type and recipe.protein_type not in filters.protein_type:
        return False

    if filters.with_notes and not recipe.has_notes:
        return False
    if filters.modified_by_me and not recipe.modified_by_me:
        return False
    if filters.my_picks and not (meta and meta.is_my_pick):
        return False

    if filters.min_rating is not None:
        if meta is None or meta.rating is None or meta.rating < filters.min_rating:
            return False

    if filters.servings:
        if filters.servings.replace("+", "") not in recipe.servings_range:
            return False

    if filters.must_include:
        if not all(_has_ingredient(recipe, term) for term in filters.must_include):
            return False
    if filters.must_exclude:
        if any(_has_ingredient(recipe, term) for term in filters.must_exclude):
            return False

    return True


def filter_recipes(
    recipes: Sequence[PlannerRecipe],
    filters: Filters,
    user_meta: Optional[Mapping[str, RecipeUserMeta]] = None,
) -> list[PlannerRecipe]:
    meta = user_meta or {}
    return [r for r in recipes if matches(r, filters, meta.get(r.id))]


def count_active_filters(filters: Filters) -> int:
    count = 0
    if filters.max_minutes is not None:
        count += 1
    count += len(filters.dietary)
    count += len(filters.meal_type)
    count += len(filters.cooking_method)
    count += len(filters.source)
    count += len(filters.protein_type)
    count += sum(1 for flag in (filters.with_notes, filters.modified_by_me, filters.my_picks) if flag)
    if filters.min_rating is not None:
        count += 1
    if filters.servings:
        count += 1
    count += len(filters.must_include)
    count += len(filters.must_exclude)
    return count


def add_ingredient_term(terms: list[str], raw: str) -> list[str]:
    """Normalize a typed ingredient and append it unless blank or already present."""
    term = raw.strip().lower()
    if term and term not in terms:
        return [*terms, term]
    return list(terms)
