"""Derived planner fields for stored recipes.

Every heuristic is an ordered rule table of (pattern, category) pairs.
Meal type and protein take the first matching rule; tools collect every
matching rule. Nothing here is persisted, so editing a table reclassifies
all recipes on their next load.
"""

import re
from typing import Iterable, Optional, Sequence

BREAKFAST = "Breakfast"
LUNCH = "Lunch"
LUNCH_BOX = "Lunch box"
DINNER = "Dinner"

# (category, tag substrings, title pattern)
MEAL_TYPE_RULES: Sequence[tuple[str, tuple[str, ...], re.Pattern]] = (
    (BREAKFAST, ("breakfast",), re.compile(r"\bbreakfast|omelet|omelette|oat|toast\b")),
    (LUNCH_BOX, ("lunch box", "lunchbox"), re.compile(r"\blunch box|bento\b")),
    (LUNCH, ("lunch",), re.compile(r"\blunch|sandwich|wrap|salad\b")),
)

TOOL_RULES: Sequence[tuple[re.Pattern, str]] = (
    (re.compile(r"\bair ?fry|airfryer\b"), "Air fryer"),
    (re.compile(r"\boven|bake|roast\b"), "Oven"),
    (re.compile(r"\bstove|stovetop|boil|simmer|fry|saute|sautee|skillet|pan\b"), "Stovetop"),
    (re.compile(r"\bno cook|no-cook|assemble|chill|mix and serve\b"), "No-cook"),
)
DEFAULT_TOOL = "No-cook"

PROTEIN_RULES: Sequence[tuple[re.Pattern, str]] = (
    (re.compile(r"\bchicken|turkey\b"), "Chicken"),
    (re.compile(r"\bbeef|pork|lamb\b"), "Beef"),
    (re.compile(r"\bfish|salmon|shrimp|tuna|cod|tilapia|trout|seafood|crab|prawn\b"), "Seafood"),
)
DEFAULT_PROTEIN = "Plant-based"

TAG_ALIASES = {
    "kidfriendly": "kidFriendly",
    "vegetarian": "vegetarian",
    "glutenfree": "glutenFree",
}

SOURCE_IMPORTED = "Imported"
SOURCE_MINE = "My recipes"


def first_match(text: str, rules: Iterable[tuple[re.Pattern, str]], default: str) -> str:
    for pattern, category in rules:
        if pattern.search(text):
            return category
    return default


def all_matches(text: str, rules: Iterable[tuple[re.Pattern, str]], default: str) -> list[str]:
    found: list[str] = []
    for pattern, category in rules:
        if pattern.search(text) and category not in found:
            found.append(category)
    return found or [default]


def normalize_tag(tag: str) -> str:
    key = re.sub(r"[\s_-]+", "", tag.strip().lower())
    return TAG_ALIASES.get(key, tag.strip())


def infer_meal_type(title: str, tags: Optional[Sequence[str]]) -> str:
    lowered_tags = [t.lower() for t in (tags or [])]
    lowered_title = (title or "").lower()
    for category, tag_needles, title_pattern in MEAL_TYPE_RULES:
        if any(n in t for t in lowered_tags for n in tag_needles):
            return category
        if title_pattern.search(lowered_title):
            return category
    return DINNER


def infer_tools(steps: Sequence[str]) -> list[str]:
    return all_matches(" ".join(steps).lower(), TOOL_RULES, DEFAULT_TOOL)


def infer_protein_type(ingredients: Sequence[str]) -> str:
    return first_match(" ".join(ingredients).lower(), PROTEIN_RULES, DEFAULT_PROTEIN)


def infer_servings_range(servings: Optional[str]) -> str:
    if not servings:
        return "1-2"

    trimmed = str(servings).strip()
    if "-" in trimmed or "+" in trimmed:
        return trimmed

    match = re.match(r"^\d+", trimmed)
    if not match:
        return "1-2"
    count = int(match.group(0))
    if count <= 2:
        return "1-2"
    if count <= 4:
        return "3-4"
    return "5+"


def infer_minutes(cook_time: Optional[int], steps: Sequence[str]) -> int:
    if cook_time is not None and cook_time > 0:
        return cook_time
    return max(10, len(steps) * 10)


def infer_source_type(source_url: Optional[str]) -> str:
    return SOURCE_IMPORTED if source_url else SOURCE_MINE
