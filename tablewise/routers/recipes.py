"""Recipes CRUD API router.

Endpoints:
- GET /api/recipes - List recipes, newest first
- POST /api/recipes - Create recipe
- POST /api/recipes/import - Create recipe from free text or recorded audio
- GET /api/recipes/{id} - Get recipe
- PATCH /api/recipes/{id} - Update recipe
- DELETE /api/recipes/{id} - Delete recipe
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy import select
from sqlalchemy.orm import Session

from ..db import get_db
from ..infra.rate_limit import AI_RATE_LIMIT, limiter
from ..models import Recipe, utcnow
from ..schemas import DeleteResult, RecipeCreate, RecipeImportRequest, RecipeOut, RecipePatch
from ..services.ai_service import AIServiceError, decode_audio
from ..services.importer import OverwriteConfirmationRequired, RecipeImporter, draft_to_create
from ..services.recipe_text import RecipeDraft

router = APIRouter()
logger = logging.getLogger("tablewise.recipes")


def _get_recipe_or_404(db: Session, recipe_id: str) -> Recipe:
    recipe = db.get(Recipe, recipe_id)
    if not recipe:
        raise HTTPException(status_code=404, detail="Recipe not found")
    return recipe


def _create_recipe(db: Session, payload: RecipeCreate) -> Recipe:
    now = utcnow()
    recipe = Recipe(
        title=payload.title.strip(),
        ingredients=list(payload.ingredients),
        steps=list(payload.steps),
        image=payload.image,
        source_url=payload.source_url,
        cook_time=payload.cook_time,
        servings=payload.servings,
        tags=payload.tags,
        created_at=now,
        updated_at=now,
    )
    db.add(recipe)
    db.commit()
    db.refresh(recipe)
    logger.info(f"Created recipe {recipe.id} ({recipe.title!r})")
    return recipe


@router.get("/recipes", response_model=list[RecipeOut])
def list_recipes(db: Session = Depends(get_db)):
    """List all recipes, newest first."""
    return db.scalars(
        select(Recipe).order_by(Recipe.created_at.desc(), Recipe.id)
    ).all()


@router.post("/recipes", response_model=RecipeOut, status_code=201)
def create_recipe(payload: RecipeCreate, db: Session = Depends(get_db)):
    return _create_recipe(db, payload)


@router.post("/recipes/import", response_model=RecipeOut, status_code=201)
@limiter.limit(AI_RATE_LIMIT)
def import_recipe(
    request: Request,  # Required for rate limiter
    payload: RecipeImportRequest,
    db: Session = Depends(get_db),
):
    """
    Import a recipe from pasted text or recorded audio.

    Audio is transcribed and structured by the AI service. Text is structured
    by the AI service unless `structure` is false, in which case it is split
    locally into title, ingredients and steps. A draft the user already typed
    is only replaced when `confirmOverwrite` is set, otherwise 409.
    """
    text = (payload.text or "").strip()
    if not text and not payload.audio:
        raise HTTPException(status_code=400, detail="Provide recipe text or audio")

    importer = RecipeImporter()
    draft = RecipeDraft(
        title=payload.title or "",
        ingredients=payload.ingredients,
        steps=payload.steps,
        image=payload.image,
        source_url=payload.source_url,
    )
    confirm = payload.confirm_overwrite

    try:
        if payload.audio:
            audio = decode_audio(payload.audio)
            draft = importer.fill_from_audio(
                draft, audio, mime_type=payload.mime_type, language=payload.language,
                confirm_overwrite=confirm,
            )
        elif payload.structure:
            draft = importer.fill_from_text(draft, text, confirm_overwrite=confirm)
        else:
            draft = importer.fill_from_paste(draft, text, confirm_overwrite=confirm)
    except OverwriteConfirmationRequired as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except AIServiceError as e:
        logger.error(f"Recipe import failed: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    return _create_recipe(db, draft_to_create(draft))


@router.get("/recipes/{recipe_id}", response_model=RecipeOut)
def get_recipe(recipe_id: str, db: Session = Depends(get_db)):
    return _get_recipe_or_404(db, recipe_id)


@router.patch("/recipes/{recipe_id}", response_model=RecipeOut)
def update_recipe(recipe_id: str, payload: RecipePatch, db: Session = Depends(get_db)):
    """Update the supplied fields; updatedAt is bumped on every patch."""
    recipe = _get_recipe_or_404(db, recipe_id)

    changes = payload.model_dump(exclude_unset=True)
    if changes.get("title") is not None:
        changes["title"] = changes["title"].strip()
    for field in ("title", "ingredients", "steps"):
        # Required columns cannot be nulled out
        if field in changes and changes[field] is None:
            del changes[field]

    for field, value in changes.items():
        setattr(recipe, field, value)
    recipe.updated_at = utcnow()

    db.commit()
    db.refresh(recipe)
    logger.info(f"Updated recipe {recipe.id}: {sorted(changes)}")
    return recipe


@router.delete("/recipes/{recipe_id}", response_model=DeleteResult)
def delete_recipe(recipe_id: str, db: Session = Depends(get_db)):
    recipe = _get_recipe_or_404(db, recipe_id)
    db.delete(recipe)
    db.commit()
    logger.info(f"Deleted recipe {recipe_id}")
    return DeleteResult(success=True)
