"""Weekly meal-plan grid.

Seven days by three meal types. Each (meal type, day) cell is empty, the
start of an assignment, or covered by a multi-day assignment that started
earlier. For a given meal type, assignment day ranges never overlap and
always stay within the week.
"""

import enum
import logging
from typing import Iterable, Optional

from ..planner_schemas import PlanAssignment
from .classification import BREAKFAST, DINNER, LUNCH

logger = logging.getLogger("tablewise.planner")

DAYS_IN_WEEK = 7
PLAN_MEAL_TYPES = (BREAKFAST, LUNCH, DINNER)

MAX_SELECTED_RECIPES = 12
MIN_SELECTED_FOR_PLAN = 6


class CellState(str, enum.Enum):
    EMPTY = "empty"
    START = "start"
    SPAN = "span"


def _check_slot(meal_type: str, day: int) -> None:
    if meal_type not in PLAN_MEAL_TYPES:
        raise ValueError(f"Unknown meal type: {meal_type}")
    if not 0 <= day < DAYS_IN_WEEK:
        raise ValueError(f"Day must be between 0 and {DAYS_IN_WEEK - 1}, got {day}")


class WeeklyPlan:
    """Mutable set of plan assignments. Every operation returns True if it changed the plan."""

    def __init__(self, assignments: Optional[Iterable[PlanAssignment]] = None):
        self._assignments: list[PlanAssignment] = [a.model_copy() for a in (assignments or [])]

    @property
    def assignments(self) -> list[PlanAssignment]:
        return list(self._assignments)

    def recipe_ids(self) -> set[str]:
        return {a.recipe_id for a in self._assignments}

    def assignment_starting_at(self, meal_type: str, day: int) -> Optional[PlanAssignment]:
        for a in self._assignments:
            if a.meal_type == meal_type and a.start_day == day:
                return a
        return None

    def assignment_covering(self, meal_type: str, day: int) -> Optional[PlanAssignment]:
        for a in self._assignments:
            if a.meal_type == meal_type and a.covers(day):
                return a
        return None

    def cell_state(self, meal_type: str, day: int) -> CellState:
        _check_slot(meal_type, day)
        covering = self.assignment_covering(meal_type, day)
        if covering is None:
            return CellState.EMPTY
        return CellState.START if covering.start_day == day else CellState.SPAN

    def place(self, recipe_id: str, meal_type: str, day: int) -> bool:
        _check_slot(meal_type, day)
        if self.assignment_covering(meal_type, day) is not None:
            return False

        # A recipe holds at most one assignment per meal type
        self._assignments = [
            a for a in self._assignments
            if not (a.recipe_id == recipe_id and a.meal_type == meal_type)
        ]
        self._assignments.append(
            PlanAssignment(recipe_id=recipe_id, meal_type=meal_type, start_day=day, span_days=1)
        )
        return True

    def extend(self, meal_type: str, start_day: int) -> bool:
        _check_slot(meal_type, start_day)
        target = self.assignment_starting_at(meal_type, start_day)
        if target is None:
            return False

        next_day = target.end_day
        if next_day >= DAYS_IN_WEEK:
            return False
        blocker = self.assignment_covering(meal_type, next_day)
        if blocker is not None and blocker is not target:
            return False

        target.span_days += 1
        return True

    def shrink(self, meal_type: str, start_day: int) -> bool:
        _check_slot(meal_type, start_day)
        target = self.assignment_starting_at(meal_type, start_day)
        if target is None or target.span_days <= 1:
            return False
        target.span_days -= 1
        return True

    def remove(self, meal_type: str, day: int) -> bool:
        _check_slot(meal_type, day)
        target = self.assignment_starting_at(meal_type, day)
        if target is None:
            return False
        self._assignments.remove(target)
        return True

    def drop_recipes(self, recipe_ids: set[str]) -> int:
        """Remove every assignment pointing at one of recipe_ids; returns how many went."""
        before = len(self._assignments)
        self._assignments = [a for a in self._assignments if a.recipe_id not in recipe_ids]
        return before - len(self._assignments)

    def is_consistent(self) -> bool:
        seen: dict[tuple[str, int], str] = {}
        for a in self._assignments:
            if a.start_day < 0 or a.span_days < 1 or a.end_day > DAYS_IN_WEEK:
                return False
            for day in range(a.start_day, a.end_day):
                if (a.meal_type, day) in seen:
                    return False
                seen[(a.meal_type, day)] = a.recipe_id
        return True


def toggle_selection(selected_ids: list[str], recipe_id: str) -> tuple[list[str], bool]:
    """Add or remove recipe_id. Returns (new selection, max_selections_hit)."""
    if recipe_id in selected_ids:
        return [i for i in selected_ids if i != recipe_id], False
    if len(selected_ids) >= MAX_SELECTED_RECIPES:
        logger.info(f"Selection limit of {MAX_SELECTED_RECIPES} reached, ignoring {recipe_id}")
        return list(selected_ids), True
    return [*selected_ids, recipe_id], False


def can_generate_plan(selected_ids: list[str]) -> bool:
    return len(selected_ids) >= MIN_SELECTED_FOR_PLAN
