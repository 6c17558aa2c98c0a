"""Gemini (Google AI) text generator."""

import logging

import google.generativeai as genai
from google.generativeai import GenerativeModel

from ytsage.utils.api_keys import resolve_api_key
from ytsage.utils.classifier import classify_ai_error

from .base import TextGenerator

logger = logging.getLogger(__name__)


class GeminiGenerator(TextGenerator):
    """Text generation through the Gemini API.

    Uses the SDK's async ``generate_content_async`` so back-off and other
    analyses keep running while a request is in flight.
    """

    name = "gemini"

    DEFAULT_MODEL = "gemini-flash-latest"

    def __init__(
        self,
        api_key: str | None = None,
        model: str = DEFAULT_MODEL,
        temperature: float = 0.7,
    ) -> None:
        """Initialize Gemini generator.

        Args:
            api_key: Google AI API key (defaults to GEMINI_API_KEY / GOOGLE_API_KEY)
            model: Gemini model name
            temperature: Sampling temperature

        Raises:
            APIKeyError: If no valid API key is available
        """
        self.api_key = resolve_api_key("gemini", api_key)
        self.model_name = model
        self.temperature = temperature

        genai.configure(api_key=self.api_key)
        self.model = GenerativeModel(self.model_name)

    async def generate(self, prompt: str, max_tokens: int = 2048) -> str:
        generation_config = {
            "temperature": self.temperature,
            "max_output_tokens": max_tokens,
        }

        try:
            response = await self.model.generate_content_async(
                prompt, generation_config=generation_config
            )
            # .text raises ValueError when the response has no text parts
            # (e.g. blocked by safety filters)
            text = response.text
        except Exception as e:
            raise classify_ai_error(e) from e

        logger.debug(f"Gemini returned {len(text or '')} characters")
        return text or ""
