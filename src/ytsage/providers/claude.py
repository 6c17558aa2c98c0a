"""Claude (Anthropic) text generator."""

import logging

from anthropic import AsyncAnthropic

from ytsage.utils.api_keys import resolve_api_key
from ytsage.utils.classifier import classify_ai_error

from .base import TextGenerator

logger = logging.getLogger(__name__)


class ClaudeGenerator(TextGenerator):
    """Text generation through the Anthropic Messages API."""

    name = "claude"

    DEFAULT_MODEL = "claude-sonnet-4-5"

    def __init__(
        self,
        api_key: str | None = None,
        model: str = DEFAULT_MODEL,
        temperature: float = 0.7,
    ) -> None:
        """Initialize Claude generator.

        Args:
            api_key: Anthropic API key (defaults to ANTHROPIC_API_KEY env var)
            model: Claude model name
            temperature: Sampling temperature

        Raises:
            APIKeyError: If no valid API key is available
        """
        self.api_key = resolve_api_key("claude", api_key)
        self.model_name = model
        self.temperature = temperature
        # The SDK's own retries are disabled; ytsage's executor owns back-off
        self.client = AsyncAnthropic(api_key=self.api_key, max_retries=0)

    async def generate(self, prompt: str, max_tokens: int = 2048) -> str:
        try:
            message = await self.client.messages.create(
                model=self.model_name,
                max_tokens=max_tokens,
                temperature=self.temperature,
                messages=[{"role": "user", "content": prompt}],
            )
        except Exception as e:
            raise classify_ai_error(e) from e

        text = "".join(
            block.text for block in message.content if getattr(block, "type", None) == "text"
        )
        logger.debug(f"Claude returned {len(text)} characters")
        return text
