"""Recipe importer.

Fills a RecipeDraft from free text or recorded audio, delegating
transcription and structuring to the AI service. A fill never overwrites a
draft that already has a title, ingredients or steps unless the caller
confirms it, and a failed AI call leaves the draft as it was.
"""

import logging
from typing import Optional

from .ai_service import AIService, ai_service
from .recipe_text import UNTITLED, RecipeDraft, split_recipe_text
from ..schemas import ParsedRecipe, RecipeCreate

logger = logging.getLogger("tablewise.importer")


class OverwriteConfirmationRequired(Exception):
    """The draft already holds user-entered content."""


class RecipeImporter:
    def __init__(self, ai: Optional[AIService] = None):
        self.ai = ai or ai_service

    def _check_overwrite(self, draft: RecipeDraft, confirm_overwrite: bool) -> None:
        if draft.has_content and not confirm_overwrite:
            raise OverwriteConfirmationRequired(
                "This will replace the title, ingredients and steps you already entered."
            )

    def _merge(self, draft: RecipeDraft, parsed: ParsedRecipe) -> RecipeDraft:
        return draft.model_copy(update={
            "title": parsed.title,
            "ingredients": list(parsed.ingredients),
            "steps": list(parsed.steps),
            "cook_time": parsed.cook_time if parsed.cook_time is not None else draft.cook_time,
            "servings": parsed.servings or draft.servings,
            "tags": list(parsed.tags) if parsed.tags else list(draft.tags),
        })

    def fill_from_text(self, draft: RecipeDraft, text: str, confirm_overwrite: bool = False) -> RecipeDraft:
        """Structure text with the AI parser and return the filled draft."""
        self._check_overwrite(draft, confirm_overwrite)
        parsed = self.ai.parse_recipe(text)
        return self._merge(draft, parsed)

    def fill_from_audio(
        self,
        draft: RecipeDraft,
        audio: bytes,
        mime_type: Optional[str] = None,
        language: Optional[str] = None,
        confirm_overwrite: bool = False,
    ) -> RecipeDraft:
        """Transcribe audio, structure the transcript and return the filled draft."""
        self._check_overwrite(draft, confirm_overwrite)
        transcript = self.ai.transcribe(audio, mime_type=mime_type, language=language)
        logger.info(f"Dictation transcribed ({len(transcript)} chars), structuring")
        parsed = self.ai.parse_recipe(transcript)
        return self._merge(draft, parsed)

    def fill_from_paste(self, draft: RecipeDraft, text: str, confirm_overwrite: bool = False) -> RecipeDraft:
        """Split text locally, no AI involved."""
        self._check_overwrite(draft, confirm_overwrite)
        local = split_recipe_text(text)
        return draft.model_copy(update={
            "title": local.title,
            "ingredients": local.ingredients,
            "steps": local.steps,
        })


def draft_to_create(draft: RecipeDraft) -> RecipeCreate:
    return RecipeCreate(
        title=(draft.title.strip() or UNTITLED)[:200],
        ingredients=draft.ingredients,
        steps=draft.steps,
        image=draft.image,
        source_url=draft.source_url,
        cook_time=draft.cook_time,
        servings=draft.servings,
        tags=draft.tags or None,
    )
