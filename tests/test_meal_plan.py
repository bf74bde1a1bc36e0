import pytest

from tablewise.planner_schemas import PlanAssignment
from tablewise.services.meal_plan import (
    MAX_SELECTED_RECIPES,
    CellState,
    WeeklyPlan,
    can_generate_plan,
    toggle_selection,
)


def _spans(plan, meal_type):
    return sorted(
        (a.start_day, a.span_days, a.recipe_id)
        for a in plan.assignments
        if a.meal_type == meal_type
    )


def test_place_into_empty_cell():
    plan = WeeklyPlan()
    assert plan.place("r1", "Dinner", 2) is True
    assert _spans(plan, "Dinner") == [(2, 1, "r1")]
    assert plan.cell_state("Dinner", 2) == CellState.START
    assert plan.cell_state("Dinner", 3) == CellState.EMPTY


def test_place_moves_existing_assignment_of_same_recipe_and_meal_type():
    plan = WeeklyPlan()
    plan.place("r1", "Dinner", 2)
    plan.place("r1", "Lunch", 2)

    assert plan.place("r1", "Dinner", 5) is True

    assert _spans(plan, "Dinner") == [(5, 1, "r1")]
    assert _spans(plan, "Lunch") == [(2, 1, "r1")]


def test_place_on_covered_cell_is_a_noop():
    plan = WeeklyPlan()
    plan.place("r1", "Dinner", 2)
    plan.extend("Dinner", 2)

    assert plan.place("r2", "Dinner", 3) is False
    assert plan.place("r2", "Dinner", 2) is False
    assert _spans(plan, "Dinner") == [(2, 2, "r1")]


def test_extend_until_blocked_by_next_assignment():
    plan = WeeklyPlan()
    plan.place("r1", "Dinner", 2)
    plan.place("r2", "Dinner", 5)

    assert plan.extend("Dinner", 2) is True
    assert plan.extend("Dinner", 2) is True
    assert plan.extend("Dinner", 2) is False

    assert _spans(plan, "Dinner") == [(2, 3, "r1"), (5, 1, "r2")]
    assert plan.cell_state("Dinner", 3) == CellState.SPAN
    assert plan.cell_state("Dinner", 4) == CellState.SPAN
    assert plan.cell_state("Dinner", 5) == CellState.START
    assert plan.is_consistent()


def test_extend_stops_at_end_of_week():
    plan = WeeklyPlan()
    plan.place("r1", "Breakfast", 5)
    assert plan.extend("Breakfast", 5) is True
    assert plan.extend("Breakfast", 5) is False
    assert _spans(plan, "Breakfast") == [(5, 2, "r1")]


def test_extend_ignores_other_meal_types():
    plan = WeeklyPlan()
    plan.place("r1", "Lunch", 0)
    plan.place("r2", "Dinner", 1)
    assert plan.extend("Lunch", 0) is True


def test_extend_without_assignment_is_a_noop():
    assert WeeklyPlan().extend("Dinner", 0) is False


def test_shrink_has_floor_of_one():
    plan = WeeklyPlan()
    plan.place("r1", "Lunch", 0)
    plan.extend("Lunch", 0)

    assert plan.shrink("Lunch", 0) is True
    assert plan.shrink("Lunch", 0) is False
    assert _spans(plan, "Lunch") == [(0, 1, "r1")]


def test_remove_only_at_start_day():
    plan = WeeklyPlan()
    plan.place("r1", "Dinner", 1)
    plan.extend("Dinner", 1)

    assert plan.remove("Dinner", 2) is False
    assert plan.remove("Dinner", 1) is True
    assert plan.assignments == []
    assert plan.remove("Dinner", 1) is False


@pytest.mark.parametrize("meal_type,day", [
    ("Brunch", 0),
    ("Lunch box", 0),
    ("Dinner", 7),
    ("Dinner", -1),
])
def test_invalid_slots_raise(meal_type, day):
    plan = WeeklyPlan()
    with pytest.raises(ValueError):
        plan.place("r1", meal_type, day)
    with pytest.raises(ValueError):
        plan.remove(meal_type, day)


def test_plan_does_not_mutate_input_assignments():
    original = [PlanAssignment(recipe_id="r1", meal_type="Dinner", start_day=0)]
    plan = WeeklyPlan(original)
    plan.extend("Dinner", 0)
    assert original[0].span_days == 1


def test_no_overlap_after_mixed_operations():
    plan = WeeklyPlan()
    for day, recipe in enumerate(["a", "b", "c", "d", "e", "f", "g"]):
        plan.place(recipe, "Dinner", day)
    plan.remove("Dinner", 3)
    plan.extend("Dinner", 2)
    plan.extend("Dinner", 2)
    plan.shrink("Dinner", 2)
    plan.place("h", "Dinner", 3)
    plan.extend("Dinner", 6)

    assert plan.is_consistent()
    covered = [plan.cell_state("Dinner", d) != CellState.EMPTY for d in range(7)]
    assert all(covered)


def test_drop_recipes():
    plan = WeeklyPlan()
    plan.place("keep", "Dinner", 0)
    plan.place("gone", "Lunch", 0)
    plan.place("gone", "Dinner", 3)

    assert plan.drop_recipes({"gone"}) == 2
    assert plan.recipe_ids() == {"keep"}


def test_toggle_selection_adds_and_removes():
    selected, hit = toggle_selection([], "r1")
    assert selected == ["r1"] and hit is False

    selected, hit = toggle_selection(selected, "r1")
    assert selected == [] and hit is False


def test_toggle_selection_caps_at_maximum():
    full = [f"r{i}" for i in range(MAX_SELECTED_RECIPES)]

    selected, hit = toggle_selection(full, "extra")
    assert selected == full
    assert hit is True

    # Removing still works at the cap
    selected, hit = toggle_selection(full, "r0")
    assert len(selected) == MAX_SELECTED_RECIPES - 1
    assert hit is False


def test_can_generate_plan_threshold():
    assert can_generate_plan([f"r{i}" for i in range(5)]) is False
    assert can_generate_plan([f"r{i}" for i in range(6)]) is True
