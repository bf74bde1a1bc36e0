"""Grocery list derived from the weekly plan.

Ingredients of the planned recipes are deduplicated case-insensitively (first
seen casing is displayed), tagged with the recipes that use them, and grouped
into a fixed category order by keyword lookup.
"""

from typing import Iterable, Optional, Protocol, Sequence

from ..planner_schemas import GroceryCategory, GroceryItem, GroceryListOut, PlanAssignment

OTHER = "Other"

# Checked in order; the first category with a matching keyword wins
INGREDIENT_CATEGORIES: dict[str, tuple[str, ...]] = {
    "Produce": (
        "broccoli", "bell pepper", "ginger", "lemon", "dill", "cucumber", "tomato",
        "olives", "lettuce", "spinach", "carrot", "celery", "onion", "garlic",
        "mushrooms", "rosemary", "thyme", "parsley", "potatoes", "cabbage slaw",
        "lime", "avocado", "romaine lettuce", "berries",
    ),
    "Meat & Poultry": (
        "chicken", "chicken breast", "grilled chicken", "whole chicken",
        "ground beef", "beef chuck", "bacon",
    ),
    "Seafood": ("salmon", "shrimp", "white fish"),
    "Dairy & Eggs": (
        "eggs", "cheese", "feta", "parmesan", "butter", "milk", "yogurt",
        "sour cream", "crema",
    ),
    "Grains & Pasta": (
        "rice", "arborio rice", "pasta", "bread", "oats", "quinoa", "tortilla",
        "corn tortillas", "taco shells", "breadcrumbs", "flour", "croutons",
    ),
    "Canned & Jarred": (
        "soy sauce", "olive oil", "vegetable broth", "beef broth", "hummus",
        "chickpeas", "lentils", "caesar dressing", "lemon tahini dressing", "white wine",
    ),
    "Spices & Seasonings": ("cumin", "black pepper", "red pepper flakes"),
    OTHER: ("honey", "lemon juice"),
}

CATEGORY_ORDER = (
    "Produce",
    "Meat & Poultry",
    "Seafood",
    "Dairy & Eggs",
    "Grains & Pasta",
    "Canned & Jarred",
    "Spices & Seasonings",
    OTHER,
)


class HasIngredients(Protocol):
    id: str
    title: str
    ingredients: Sequence[str]


def categorize_ingredient(ingredient: str) -> str:
    lowered = ingredient.strip().lower()
    if not lowered:
        return OTHER
    for category, keywords in INGREDIENT_CATEGORIES.items():
        if any(k in lowered or lowered in k for k in keywords):
            return category
    return OTHER


def build_grocery_list(
    assignments: Iterable[PlanAssignment],
    recipes: Iterable[HasIngredients],
    checked_keys: Optional[Iterable[str]] = None,
) -> GroceryListOut:
    planned_ids = {a.recipe_id for a in assignments}
    used = [r for r in recipes if r.id in planned_ids]
    checked = set(checked_keys or ())

    by_key: dict[str, GroceryItem] = {}
    contributors: dict[str, set[str]] = {}
    for recipe in used:
        for raw in recipe.ingredients:
            display = raw.strip()
            if not display:
                continue
            key = display.lower()
            item = by_key.get(key)
            if item is None:
                by_key[key] = GroceryItem(key=key, ingredient=display, recipes=[recipe.title])
                contributors[key] = {recipe.id}
            elif recipe.id not in contributors[key]:
                item.recipes.append(recipe.title)
                contributors[key].add(recipe.id)

    grouped: dict[str, list[GroceryItem]] = {}
    for item in by_key.values():
        item.checked = item.key in checked
        grouped.setdefault(categorize_ingredient(item.ingredient), []).append(item)

    categories = [
        GroceryCategory(
            name=name,
            items=sorted(grouped[name], key=lambda i: (i.ingredient.casefold(), i.ingredient)),
        )
        for name in CATEGORY_ORDER
        if grouped.get(name)
    ]

    return GroceryListOut(
        categories=categories,
        recipes=[r.title for r in used],
        total_items=len(by_key),
        checked_count=sum(1 for i in by_key.values() if i.checked),
    )


def toggle_checked(checked_keys: Sequence[str], key: str) -> list[str]:
    if key in checked_keys:
        return [k for k in checked_keys if k != key]
    return [*checked_keys, key]
