import base64
import binascii
import logging
from typing import List, Optional
from pydantic import BaseModel, Field, ValidationError

from ..core.ai_client import ai_client
from ..core.text import clean_md
from ..infra.redis_cache import cache_key, get_or_set_json_sync, set_json_sync
from ..schemas import ParsedRecipe
from ..settings import settings
from .recipe_text import split_recipe_text

logger = logging.getLogger("tablewise.ai")

DEFAULT_AUDIO_MIME = "audio/webm"

# extension -> canonical MIME type, checked in order against the supplied type
AUDIO_FORMATS = [
    ("webm", ("webm",), "audio/webm"),
    ("mp3", ("mpeg", "mp3"), "audio/mpeg"),
    ("mp4", ("mp4", "m4a"), "audio/mp4"),
    ("wav", ("wav",), "audio/wav"),
    ("ogg", ("ogg",), "audio/ogg"),
]

ALLOWED_TAGS = {"kidFriendly", "vegetarian", "glutenFree"}

PARSE_SYSTEM_PROMPT = """
You are a recipe parser. The user gives you a spoken or pasted recipe transcript.
Extract a structured recipe.

Rules:
- title: a clear, concise recipe name.
- ingredients: one entry per ingredient, including quantity and unit if mentioned
  (e.g. "200g rice", "2 tbsp olive oil", "1 large onion, diced").
- steps: clear cooking instructions, each a complete sentence.
- cook_time: estimated total cooking time in minutes (integer).
- servings: estimated servings as a range like "1-2", "3-4" or "5+".
- tags: only tags that apply from this list: "kidFriendly", "vegetarian", "glutenFree".
- If information is missing, make reasonable assumptions based on the recipe.
"""

MOCK_TRANSCRIPT = "Mock Recipe\n1 cup mock ingredient\nMix ingredients.\nServe."


class AIServiceError(Exception):
    """The transcription or structuring service failed or answered nonsense."""


class RecipeStructure(BaseModel):
    title: str
    ingredients: List[str]
    steps: List[str]
    cook_time: Optional[int] = Field(None, ge=0)
    servings: Optional[str] = None
    tags: Optional[List[str]] = None


def infer_audio_format(mime_type: Optional[str]) -> tuple[str, str]:
    """Return (file extension, canonical MIME type) for a recorder's MIME type."""
    if not mime_type:
        return "webm", DEFAULT_AUDIO_MIME
    normalized = mime_type.lower()
    for ext, needles, canonical in AUDIO_FORMATS:
        if any(n in normalized for n in needles):
            return ext, canonical
    return "webm", DEFAULT_AUDIO_MIME


def decode_audio(data: Optional[str]) -> bytes:
    """Decode base64 audio, accepting a data URI prefix. Raises ValueError when unusable."""
    if not data or not data.strip():
        raise ValueError("Audio data is required")
    payload = data.strip()
    if payload.startswith("data:") and "," in payload:
        payload = payload.split(",", 1)[1]
    # MIME-style base64 wraps lines
    payload = "".join(payload.split())
    try:
        audio = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError("Audio data is invalid") from e
    if not audio:
        raise ValueError("Audio data is invalid")
    return audio


class AIService:
    def __init__(self):
        self.mode = settings.ai_mode

    def transcribe(self, audio: bytes, mime_type: Optional[str] = None, language: Optional[str] = None) -> str:
        """Turn recorded audio into text. Raises AIServiceError on failure."""
        if not audio:
            raise ValueError("Audio data is invalid")

        if self.mode == "mock":
            return MOCK_TRANSCRIPT

        ext, canonical = infer_audio_format(mime_type)
        transcript = ai_client.transcribe_audio(audio, canonical, language=language)
        if transcript is None:
            raise AIServiceError(ai_client.last_error or "Failed to transcribe audio")

        logger.info(f"Transcribed dictation.{ext} into {len(transcript)} chars")
        return transcript.strip()

    def parse_recipe(self, transcript: str) -> ParsedRecipe:
        """Structure a transcript into title/ingredients/steps. Raises AIServiceError on failure."""
        text = (transcript or "").strip()
        if not text:
            raise ValueError("Transcript text is required")

        if self.mode == "mock":
            return self._mock_parse(text)

        key = cache_key("parse-recipe", text)

        def compute() -> dict:
            return self._parse_with_ai(text).model_dump()

        data, hit = get_or_set_json_sync(key, settings.ai_cache_ttl_sec, compute)
        if not hit:
            return ParsedRecipe.model_validate(data)

        try:
            parsed = ParsedRecipe.model_validate(data)
        except ValidationError as e:
            logger.warning(f"Cached parse-recipe entry is unusable, recomputing: {e}")
            data = compute()
            set_json_sync(key, settings.ai_cache_ttl_sec, data)
            return ParsedRecipe.model_validate(data)
        logger.info("parse-recipe cache hit")
        return parsed

    def _parse_with_ai(self, text: str) -> ParsedRecipe:
        response = ai_client.generate_content_sync(
            prompt=text,
            system_instruction=PARSE_SYSTEM_PROMPT,
            response_model=RecipeStructure,
        )

        if response is None:
            if ai_client.last_error:
                raise AIServiceError(ai_client.last_error)
            raise AIServiceError("AI returned invalid format. Please try again.")

        if isinstance(response, dict):
            try:
                response = RecipeStructure.model_validate(response)
            except ValueError as e:
                logger.error(f"Malformed recipe structure from AI: {e}")
                raise AIServiceError("AI returned invalid format. Please try again.") from e

        return self._sanitize(response)

    def _sanitize(self, structure: RecipeStructure) -> ParsedRecipe:
        title = clean_md(structure.title)
        if not title:
            raise AIServiceError("AI returned a recipe without a title")

        return ParsedRecipe(
            title=title,
            ingredients=[clean_md(i) for i in structure.ingredients if clean_md(i)],
            steps=[clean_md(s) for s in structure.steps if clean_md(s)],
            cook_time=structure.cook_time,
            servings=(structure.servings or "").strip() or None,
            tags=[t for t in (structure.tags or []) if t in ALLOWED_TAGS],
        )

    def _mock_parse(self, text: str) -> ParsedRecipe:
        """Deterministic local split used when no AI backend is configured."""
        draft = split_recipe_text(text)
        return ParsedRecipe(
            title=draft.title,
            ingredients=draft.ingredients,
            steps=draft.steps,
            tags=[],
        )


ai_service = AIService()
