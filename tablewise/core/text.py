import re

_UNICODE_FRACTIONS = "¼½¾⅐⅑⅒⅓⅔⅕⅖⅗⅘⅙⅚⅛⅜⅝⅞"

# "200g spaghetti", "1/2 cup milk", "½ onion", "- salt", "• pepper"
_INGREDIENT_LINE = re.compile(
    rf"^\s*(?:[-*•]\s+|\d|[{_UNICODE_FRACTIONS}]|(?:a|an|one|two|three|pinch|handful|dash)\s)",
    re.IGNORECASE,
)

# "1. Boil water", "2) Drain", "Step 3: Serve"
_NUMBERED_STEP = re.compile(r"^\s*(?:step\s*)?\d{1,2}\s*[.):\-]\s+", re.IGNORECASE)


def clean_md(text: str) -> str:
    """
    Sanitize markdown artifacts from text.
    Removes:
    - Leading headers (#, ##)
    - Bold markers (**, __)
    - Leading bullets (-, *, •)
    """
    if not text:
        return ""

    text = re.sub(r"(\*\*|__)(.*?)\1", r"\2", text)
    text = re.sub(r"^\s*#+\s+", "", text)
    text = re.sub(r"^\s*[-*•]\s+", "", text)

    return text.strip()


def split_lines(text: str) -> list[str]:
    """Split on newlines, trim each line and drop the blank ones."""
    if not text:
        return []
    return [line.strip() for line in text.split("\n") if line.strip()]


def looks_like_ingredient(line: str) -> bool:
    if _NUMBERED_STEP.match(line):
        return False
    return bool(_INGREDIENT_LINE.match(line))


def strip_step_number(line: str) -> str:
    return _NUMBERED_STEP.sub("", line, count=1).strip()
