"""Provider selection from configuration."""

from ytsage.config.schema import AIConfig

from .base import TextGenerator


def create_generator(config: AIConfig) -> TextGenerator:
    """Create the configured text generator.

    Args:
        config: AI provider configuration

    Returns:
        GeminiGenerator or ClaudeGenerator

    Raises:
        APIKeyError: If the selected provider has no valid API key
    """
    if config.provider == "claude":
        from .claude import ClaudeGenerator

        return ClaudeGenerator(
            api_key=config.claude_api_key,
            model=config.claude_model,
            temperature=config.temperature,
        )

    from .gemini import GeminiGenerator

    return GeminiGenerator(
        api_key=config.gemini_api_key,
        model=config.gemini_model,
        temperature=config.temperature,
    )
