"""Rule-based splitting of pasted recipe text into title, ingredients and steps."""

from typing import Optional

from pydantic import BaseModel, Field

from ..core.text import clean_md, split_lines, looks_like_ingredient, strip_step_number

UNTITLED = "Untitled Recipe"

INGREDIENT_HEADERS = ("ingredients", "shopping list", "what you need")
STEP_HEADERS = ("instructions", "directions", "method", "preparation", "steps", "how to make")


class RecipeDraft(BaseModel):
    """Recipe fields being assembled before they are saved."""
    title: str = ""
    ingredients: list[str] = Field(default_factory=list)
    steps: list[str] = Field(default_factory=list)
    cook_time: Optional[int] = None
    servings: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    image: Optional[str] = None
    source_url: Optional[str] = None

    @property
    def has_content(self) -> bool:
        return bool(self.title.strip() or self.ingredients or self.steps)


def manual_entry(title: str, ingredients_text: str, steps_text: str) -> RecipeDraft:
    """Build a draft from the three manual-entry fields, one item per line."""
    return RecipeDraft(
        title=(title or "").strip() or UNTITLED,
        ingredients=split_lines(ingredients_text),
        steps=split_lines(steps_text),
    )


def _header(line: str, names: tuple[str, ...]) -> bool:
    lower = clean_md(line).lower().rstrip(":").strip()
    return len(lower) < 30 and any(lower == n or lower.startswith(n + " ") for n in names)


def split_recipe_text(text: str) -> RecipeDraft:
    """
    Split free text into a draft.

    The first line is the title. Section headers ("Ingredients:", "Steps:",
    "Method", ...) switch sections explicitly. Without headers, the leading
    run of quantity or bullet lines are ingredients and everything after the
    first other line is a step.
    """
    lines = split_lines(text)
    if not lines:
        return RecipeDraft(title=UNTITLED)

    title = clean_md(lines[0]) or UNTITLED
    ingredients: list[str] = []
    steps: list[str] = []

    section = None  # None until a header or the first non-ingredient line
    for line in lines[1:]:
        if _header(line, INGREDIENT_HEADERS):
            section = "ingredients"
            continue
        if _header(line, STEP_HEADERS):
            section = "steps"
            continue

        if section == "ingredients":
            ingredients.append(clean_md(line))
        elif section == "steps":
            steps.append(strip_step_number(clean_md(line)))
        elif looks_like_ingredient(line) and not steps:
            ingredients.append(clean_md(line))
        else:
            section = "steps"
            steps.append(strip_step_number(clean_md(line)))

    return RecipeDraft(title=title, ingredients=ingredients, steps=steps)
