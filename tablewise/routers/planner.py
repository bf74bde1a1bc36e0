"""Weekly planner API router.

Everything here is scoped to the calling device (X-Device-Id header) and
kept in the key/value store. Recipes themselves come from the database and
are classified on every read.

Endpoints:
- GET /api/planner/state - Filters, selection and plan
- PUT|DELETE /api/planner/filters - Replace or reset filters
- GET /api/planner/recipes - Filtered planner recipes
- POST /api/planner/selection/{recipe_id} - Toggle selection
- POST /api/planner/plan/place|extend|shrink, DELETE /api/planner/plan/{meal_type}/{day}
- GET /api/planner/grocery-list, POST .../checked/{key}, DELETE .../checked
- GET /api/planner/recipes/{id}/meta, POST .../pick, PUT .../rating
- GET|PUT /api/planner/recipes/{id}/view-prefs
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session

from ..db import get_db
from ..deps import get_planner_store
from ..models import Recipe
from ..planner_schemas import (
    Filters,
    GroceryListOut,
    PlaceRequest,
    PlannerRecipesOut,
    PlannerState,
    PlanOut,
    RatingRequest,
    RecipeUserMeta,
    RecipeViewPrefs,
    SelectionOut,
    SlotRequest,
)
from ..services import filters as filter_engine
from ..services.grocery_list import build_grocery_list, toggle_checked
from ..services.meal_plan import WeeklyPlan, can_generate_plan, toggle_selection
from ..services.planner_recipes import to_planner_recipes
from ..services.planner_store import PlannerStore
from ..services.user_meta import set_rating, toggle_my_pick

router = APIRouter(prefix="/planner", tags=["planner"])
logger = logging.getLogger("tablewise.planner")


def _all_recipes(db: Session) -> list[Recipe]:
    return list(db.scalars(select(Recipe).order_by(Recipe.created_at.desc(), Recipe.id)).all())


def _synced_recipes(db: Session, planner: PlannerStore) -> list[Recipe]:
    """Load the collection and drop planner entries pointing at deleted recipes."""
    recipes = _all_recipes(db)
    planner.prune(r.id for r in recipes)
    return recipes


def _require_recipe(db: Session, recipe_id: str) -> Recipe:
    recipe = db.get(Recipe, recipe_id)
    if not recipe:
        raise HTTPException(status_code=404, detail="Recipe not found")
    return recipe


def _grocery_list(db: Session, planner: PlannerStore) -> GroceryListOut:
    recipes = _synced_recipes(db, planner)
    state = planner.load_state()
    return build_grocery_list(state.plan_assignments, recipes, planner.load_checked())


def _apply_plan(planner: PlannerStore, state: PlannerState, plan: WeeklyPlan, changed: bool) -> PlanOut:
    if changed:
        state.plan_assignments = plan.assignments
        planner.save_state(state)
    return PlanOut(changed=changed, assignments=plan.assignments)


# --- State & filters ---

@router.get("/state", response_model=PlannerState)
def get_state(
    db: Session = Depends(get_db),
    planner: PlannerStore = Depends(get_planner_store),
):
    _synced_recipes(db, planner)
    return planner.load_state()


@router.put("/filters", response_model=PlannerState)
def update_filters(
    payload: Filters,
    planner: PlannerStore = Depends(get_planner_store),
):
    must_include: list[str] = []
    for term in payload.must_include:
        must_include = filter_engine.add_ingredient_term(must_include, term)
    must_exclude: list[str] = []
    for term in payload.must_exclude:
        must_exclude = filter_engine.add_ingredient_term(must_exclude, term)

    state = planner.load_state()
    state.filters = payload.model_copy(update={
        "must_include": must_include,
        "must_exclude": must_exclude,
    })
    planner.save_state(state)
    return state


@router.delete("/filters", response_model=PlannerState)
def reset_filters(planner: PlannerStore = Depends(get_planner_store)):
    state = planner.load_state()
    state.filters = Filters()
    planner.save_state(state)
    return state


@router.get("/recipes", response_model=PlannerRecipesOut)
def list_planner_recipes(
    db: Session = Depends(get_db),
    planner: PlannerStore = Depends(get_planner_store),
):
    """Classified recipes narrowed by the device's saved filters."""
    recipes = to_planner_recipes(_synced_recipes(db, planner), planner.load_view_prefs())
    state = planner.load_state()
    visible = filter_engine.filter_recipes(recipes, state.filters, planner.load_user_meta())
    return PlannerRecipesOut(
        recipes=visible,
        total_count=len(recipes),
        active_filter_count=filter_engine.count_active_filters(state.filters),
    )


# --- Selection ---

@router.post("/selection/{recipe_id}", response_model=SelectionOut)
def toggle_recipe_selection(
    recipe_id: str,
    db: Session = Depends(get_db),
    planner: PlannerStore = Depends(get_planner_store),
):
    state = planner.load_state()
    if recipe_id not in state.selected_ids:
        _require_recipe(db, recipe_id)

    selected, limit_hit = toggle_selection(state.selected_ids, recipe_id)
    if selected != state.selected_ids:
        state.selected_ids = selected
        planner.save_state(state)

    return SelectionOut(
        selected_ids=selected,
        max_selections_hit=limit_hit,
        can_generate=can_generate_plan(selected),
    )


# --- Plan grid ---

@router.post("/plan/place", response_model=PlanOut)
def place_recipe(
    payload: PlaceRequest,
    db: Session = Depends(get_db),
    planner: PlannerStore = Depends(get_planner_store),
):
    _require_recipe(db, payload.recipe_id)
    state = planner.load_state()
    plan = WeeklyPlan(state.plan_assignments)
    changed = plan.place(payload.recipe_id, payload.meal_type, payload.day)
    if not changed:
        logger.info(f"{payload.meal_type} day {payload.day} already covered, placement ignored")
    return _apply_plan(planner, state, plan, changed)


@router.post("/plan/extend", response_model=PlanOut)
def extend_assignment(
    payload: SlotRequest,
    planner: PlannerStore = Depends(get_planner_store),
):
    state = planner.load_state()
    plan = WeeklyPlan(state.plan_assignments)
    return _apply_plan(planner, state, plan, plan.extend(payload.meal_type, payload.day))


@router.post("/plan/shrink", response_model=PlanOut)
def shrink_assignment(
    payload: SlotRequest,
    planner: PlannerStore = Depends(get_planner_store),
):
    state = planner.load_state()
    plan = WeeklyPlan(state.plan_assignments)
    return _apply_plan(planner, state, plan, plan.shrink(payload.meal_type, payload.day))


@router.delete("/plan/{meal_type}/{day}", response_model=PlanOut)
def remove_assignment(
    meal_type: str,
    day: int,
    planner: PlannerStore = Depends(get_planner_store),
):
    state = planner.load_state()
    plan = WeeklyPlan(state.plan_assignments)
    try:
        changed = plan.remove(meal_type, day)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _apply_plan(planner, state, plan, changed)


# --- Grocery list ---

@router.get("/grocery-list", response_model=GroceryListOut)
def get_grocery_list(
    db: Session = Depends(get_db),
    planner: PlannerStore = Depends(get_planner_store),
):
    return _grocery_list(db, planner)


@router.post("/grocery-list/checked/{key:path}", response_model=GroceryListOut)
def toggle_grocery_item(
    key: str,
    db: Session = Depends(get_db),
    planner: PlannerStore = Depends(get_planner_store),
):
    planner.save_checked(toggle_checked(planner.load_checked(), key.strip().lower()))
    return _grocery_list(db, planner)


@router.delete("/grocery-list/checked", response_model=GroceryListOut)
def clear_grocery_checks(
    db: Session = Depends(get_db),
    planner: PlannerStore = Depends(get_planner_store),
):
    planner.save_checked([])
    return _grocery_list(db, planner)


# --- Per-recipe meta & view prefs ---

@router.get("/recipes/{recipe_id}/meta", response_model=RecipeUserMeta)
def get_recipe_meta(
    recipe_id: str,
    db: Session = Depends(get_db),
    planner: PlannerStore = Depends(get_planner_store),
):
    _require_recipe(db, recipe_id)
    return planner.load_user_meta().get(recipe_id) or RecipeUserMeta()


@router.post("/recipes/{recipe_id}/pick", response_model=RecipeUserMeta)
def toggle_recipe_pick(
    recipe_id: str,
    db: Session = Depends(get_db),
    planner: PlannerStore = Depends(get_planner_store),
):
    _require_recipe(db, recipe_id)
    meta = planner.load_user_meta()
    meta[recipe_id] = toggle_my_pick(meta.get(recipe_id))
    planner.save_user_meta(meta)
    return meta[recipe_id]


@router.put("/recipes/{recipe_id}/rating", response_model=RecipeUserMeta)
def rate_recipe(
    recipe_id: str,
    payload: RatingRequest,
    db: Session = Depends(get_db),
    planner: PlannerStore = Depends(get_planner_store),
):
    _require_recipe(db, recipe_id)
    meta = planner.load_user_meta()
    meta[recipe_id] = set_rating(meta.get(recipe_id), payload.rating)
    planner.save_user_meta(meta)
    return meta[recipe_id]


@router.get("/recipes/{recipe_id}/view-prefs", response_model=RecipeViewPrefs)
def get_view_prefs(
    recipe_id: str,
    db: Session = Depends(get_db),
    planner: PlannerStore = Depends(get_planner_store),
):
    _require_recipe(db, recipe_id)
    return planner.load_view_prefs().get(recipe_id) or RecipeViewPrefs()


@router.put("/recipes/{recipe_id}/view-prefs", response_model=RecipeViewPrefs)
def update_view_prefs(
    recipe_id: str,
    payload: RecipeViewPrefs,
    db: Session = Depends(get_db),
    planner: PlannerStore = Depends(get_planner_store),
):
    recipe = _require_recipe(db, recipe_id)
    step_count = len(recipe.steps or [])
    prefs = payload.model_copy(update={
        "completed_steps": sorted({i for i in payload.completed_steps if 0 <= i < step_count}),
    })
    all_prefs = planner.load_view_prefs()
    all_prefs[recipe_id] = prefs
    planner.save_view_prefs(all_prefs)
    return prefs
