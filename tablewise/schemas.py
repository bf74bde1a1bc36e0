"""Pydantic schemas for the Tablewise API.

Request/response models for:
- Recipes (CRUD and import)
- AI transcription and recipe structuring

The wire format is camelCase; requests accept snake_case as well.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# --- Recipe ---

class RecipeCreate(CamelModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., min_length=1, max_length=200)
    ingredients: list[str] = Field(default_factory=list)
    steps: list[str] = Field(default_factory=list)
    image: Optional[str] = None
    source_url: Optional[str] = Field(None, max_length=2048)
    cook_time: Optional[int] = Field(None, ge=0)
    servings: Optional[str] = Field(None, max_length=40)
    tags: Optional[list[str]] = None


class RecipePatch(CamelModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    ingredients: Optional[list[str]] = None
    steps: Optional[list[str]] = None
    image: Optional[str] = None
    source_url: Optional[str] = Field(None, max_length=2048)
    cook_time: Optional[int] = Field(None, ge=0)
    servings: Optional[str] = Field(None, max_length=40)
    tags: Optional[list[str]] = None


class RecipeOut(CamelModel):
    id: str
    title: str
    ingredients: list[str]
    steps: list[str]
    image: Optional[str] = None
    source_url: Optional[str] = None
    cook_time: Optional[int] = None
    servings: Optional[str] = None
    tags: Optional[list[str]] = None
    created_at: datetime
    updated_at: datetime


class DeleteResult(CamelModel):
    success: bool = True


class RecipeImportRequest(CamelModel):
    """Import a recipe from free text or recorded audio.

    With ``structure`` off, text is split locally (no AI call); audio always
    goes through transcription and structuring.

    ``title``, ``ingredients`` and ``steps`` carry what the user already typed.
    When any of them is set the import is refused with 409 unless
    ``confirm_overwrite`` is true.
    """
    text: Optional[str] = None
    audio: Optional[str] = None  # base64
    mime_type: Optional[str] = None
    language: Optional[str] = None
    image: Optional[str] = None
    source_url: Optional[str] = Field(None, max_length=2048)
    structure: bool = True
    title: Optional[str] = None
    ingredients: list[str] = Field(default_factory=list)
    steps: list[str] = Field(default_factory=list)
    confirm_overwrite: bool = False


# --- AI ---

class TranscribeRequest(CamelModel):
    audio: str
    mime_type: Optional[str] = None
    language: Optional[str] = None


class TranscribeResponse(CamelModel):
    transcript: str


class ParseRecipeRequest(CamelModel):
    transcript: str


class ParsedRecipe(CamelModel):
    """Structured recipe returned by the AI parser."""
    title: str
    ingredients: list[str] = Field(default_factory=list)
    steps: list[str] = Field(default_factory=list)
    cook_time: Optional[int] = None
    servings: Optional[str] = None
    tags: Optional[list[str]] = None
