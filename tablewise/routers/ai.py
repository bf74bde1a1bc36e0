"""AI endpoints: audio transcription and recipe structuring.

Both are rate limited per client address. Upstream failures surface as 500
with the service's message; bad input is a 400.
"""

import logging

from fastapi import APIRouter, HTTPException, Request

from ..infra.rate_limit import AI_RATE_LIMIT, limiter
from ..schemas import ParsedRecipe, ParseRecipeRequest, TranscribeRequest, TranscribeResponse
from ..services.ai_service import AIServiceError, ai_service, decode_audio

router = APIRouter(tags=["ai"])
logger = logging.getLogger("tablewise.ai")


@router.post("/transcribe-audio", response_model=TranscribeResponse)
@limiter.limit(AI_RATE_LIMIT)
def transcribe_audio(request: Request, payload: TranscribeRequest):
    try:
        audio = decode_audio(payload.audio)
        transcript = ai_service.transcribe(
            audio, mime_type=payload.mime_type, language=payload.language
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except AIServiceError as e:
        logger.error(f"Transcription error: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    return TranscribeResponse(transcript=transcript)


@router.post("/parse-recipe", response_model=ParsedRecipe, response_model_exclude_none=True)
@limiter.limit(AI_RATE_LIMIT)
def parse_recipe(request: Request, payload: ParseRecipeRequest):
    """Structure a transcript into {title, ingredients, steps, cookTime?, servings?, tags?}."""
    try:
        return ai_service.parse_recipe(payload.transcript)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except AIServiceError as e:
        logger.error(f"Parse error: {e}")
        raise HTTPException(status_code=500, detail=str(e))
