from tablewise.planner_schemas import Filters, PlannerRecipe, RecipeUserMeta
from tablewise.services.filters import (
    add_ingredient_term,
    count_active_filters,
    filter_recipes,
    ingredient_matches,
)


def _recipe(id, **overrides):
    fields = dict(
        id=id,
        title=id.title(),
        minutes=20,
        meal_type="Dinner",
        tags=[],
        tools=["Stovetop"],
        source_type="My recipes",
        protein_type="Plant-based",
        servings_range="3-4",
        ingredients=[],
    )
    fields.update(overrides)
    return PlannerRecipe(**fields)


def _ids(recipes):
    return [r.id for r in recipes]


RECIPES = [
    _recipe("a", minutes=15, tags=["vegetarian"], ingredients=["Eggplant", "tomato"]),
    _recipe("b", minutes=45, meal_type="Lunch", tools=["Oven"], protein_type="Chicken",
            ingredients=["grilled chicken", "lettuce"], source_type="Imported", servings_range="5+"),
    _recipe("c", minutes=30, tags=["vegetarian", "glutenFree"], tools=["Oven", "Stovetop"],
            ingredients=["2 eggs", "spinach"], has_notes=True, modified_by_me=True),
]


def test_empty_filters_return_everything_in_order():
    assert _ids(filter_recipes(RECIPES, Filters())) == ["a", "b", "c"]
    assert filter_recipes([], Filters()) == []


def test_max_minutes():
    assert _ids(filter_recipes(RECIPES, Filters(max_minutes=30))) == ["a", "c"]


def test_dietary_requires_every_selected_tag():
    assert _ids(filter_recipes(RECIPES, Filters(dietary=["Vegetarian"]))) == ["a", "c"]
    assert _ids(filter_recipes(RECIPES, Filters(dietary=["Vegetarian", "Gluten-free"]))) == ["c"]
    assert _ids(filter_recipes(RECIPES, Filters(dietary=["Kid friendly"]))) == []


def test_single_value_groups():
    assert _ids(filter_recipes(RECIPES, Filters(meal_type=["Lunch"]))) == ["b"]
    assert _ids(filter_recipes(RECIPES, Filters(source=["Imported"]))) == ["b"]
    assert _ids(filter_recipes(RECIPES, Filters(protein_type=["Chicken", "Beef"]))) == ["b"]


def test_cooking_method_intersects_tools():
    assert _ids(filter_recipes(RECIPES, Filters(cooking_method=["Oven"]))) == ["b", "c"]
    assert _ids(filter_recipes(RECIPES, Filters(cooking_method=["Air fryer"]))) == []


def test_flags():
    assert _ids(filter_recipes(RECIPES, Filters(with_notes=True))) == ["c"]
    assert _ids(filter_recipes(RECIPES, Filters(modified_by_me=True))) == ["c"]


def test_my_picks_and_min_rating_use_user_meta():
    meta = {
        "a": RecipeUserMeta(is_my_pick=True, rating=3),
        "b": RecipeUserMeta(rating=5),
    }
    assert _ids(filter_recipes(RECIPES, Filters(my_picks=True), meta)) == ["a"]
    assert _ids(filter_recipes(RECIPES, Filters(min_rating=4), meta)) == ["b"]
    assert _ids(filter_recipes(RECIPES, Filters(min_rating=1), meta)) == ["a", "b"]
    assert _ids(filter_recipes(RECIPES, Filters(my_picks=True))) == []


def test_servings_strips_plus():
    assert _ids(filter_recipes(RECIPES, Filters(servings="5+"))) == ["b"]
    assert _ids(filter_recipes(RECIPES, Filters(servings="3-4"))) == ["a", "c"]


def test_must_include_every_term():
    assert _ids(filter_recipes(RECIPES, Filters(must_include=["chicken"]))) == ["b"]
    assert _ids(filter_recipes(RECIPES, Filters(must_include=["egg", "spinach"]))) == ["c"]


def test_must_exclude_uses_loose_matching():
    # "egg" also matches "Eggplant"
    assert _ids(filter_recipes(RECIPES, Filters(must_exclude=["egg"]))) == ["b"]


def test_groups_combine_with_and():
    filters = Filters(max_minutes=40, dietary=["Vegetarian"], cooking_method=["Oven"])
    assert _ids(filter_recipes(RECIPES, filters)) == ["c"]


def test_ingredient_matches_both_directions():
    assert ingredient_matches("chicken", "Grilled Chicken")
    assert ingredient_matches("grilled chicken breast", "chicken")
    assert not ingredient_matches("beef", "chicken")
    assert not ingredient_matches("", "chicken")


def test_count_active_filters():
    assert count_active_filters(Filters()) == 0
    filters = Filters(
        max_minutes=30,
        dietary=["Vegetarian", "Gluten-free"],
        with_notes=True,
        min_rating=4,
        must_include=["garlic"],
    )
    assert count_active_filters(filters) == 6


def test_add_ingredient_term():
    assert add_ingredient_term([], "  Garlic ") == ["garlic"]
    assert add_ingredient_term(["garlic"], "GARLIC") == ["garlic"]
    assert add_ingredient_term(["garlic"], "   ") == ["garlic"]
