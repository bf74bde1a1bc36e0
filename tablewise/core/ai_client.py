import logging
from typing import Optional, Any, Type, TypeVar
from pydantic import BaseModel
from google import genai
from google.genai import types

from ..settings import settings

logger = logging.getLogger("tablewise.ai")

T = TypeVar("T", bound=BaseModel)


class AIClient:
    _instance = None

    def __init__(self):
        self.api_key = settings.gemini_api_key
        self.mode = settings.ai_mode  # "mock" or "gemini"
        self._client: Optional[genai.Client] = None
        self.last_error: Optional[str] = None

        if self.mode == "gemini" and self.api_key:
            self._client = genai.Client(api_key=self.api_key)

    @classmethod
    def get_instance(cls):
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def is_available(self) -> bool:
        return self.mode == "gemini" and self._client is not None

    def _record_error(self, e: Exception) -> None:
        self.last_error = f"{e.__class__.__name__}: {str(e)}"

    def transcribe_audio(
        self,
        audio: bytes,
        mime_type: str,
        language: Optional[str] = None,
        model: Optional[str] = None,
    ) -> Optional[str]:
        """
        Transcribe recorded audio to plain text.
        Returns None if AI is unavailable or the call fails (see last_error).
        """
        self.last_error = None
        if not self.is_available():
            logger.warning("AI is not available (mode=%s), skipping transcription", self.mode)
            return None

        model_id = model or settings.gemini_transcribe_model
        instruction = "Transcribe this audio verbatim. Return only the transcript text."
        if language:
            instruction += f" The speaker's language is '{language}'; transcribe in that language."

        try:
            logger.info(f"Transcribing {len(audio)} bytes of {mime_type} with model={model_id}")
            response = self._client.models.generate_content(
                model=model_id,
                contents=[
                    types.Part.from_bytes(data=audio, mime_type=mime_type),
                    instruction,
                ],
                config=types.GenerateContentConfig(response_mime_type="text/plain"),
            )
            return response.text or ""
        except Exception as e:
            self._record_error(e)
            logger.error(f"Gemini transcription failed: {e}")
            return None

    def generate_content_sync(
        self,
        prompt: str,
        response_model: Optional[Type[T]] = None,
        model: Optional[str] = None,
        system_instruction: Optional[str] = None
    ) -> Any:
        """
        Generate text, or structured JSON parsed into response_model.
        Returns None if AI is unavailable or the call fails (see last_error).
        """
        self.last_error = None
        if not self.is_available():
            logger.warning("AI is not available (mode=%s), skipping generation", self.mode)
            return None

        model_id = model or settings.gemini_text_model
        config = types.GenerateContentConfig(
            response_mime_type="application/json" if response_model else "text/plain",
            response_schema=response_model if response_model else None,
            system_instruction=system_instruction
        )

        try:
            response = self._client.models.generate_content(
                model=model_id,
                contents=prompt,
                config=config
            )
            if not response.text:
                logger.warning("Gemini returned empty response")
                return None
            return response.parsed if response_model else response.text
        except Exception as e:
            self._record_error(e)
            logger.error(f"Gemini generation failed: {e}")
            return None


# Singleton instance access
ai_client = AIClient.get_instance()
