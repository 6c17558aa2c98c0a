"""Abstract interface for text-generation providers."""

from abc import ABC, abstractmethod


class TextGenerator(ABC):
    """A generative text model reachable through a provider SDK.

    Implementations raise :class:`~ytsage.utils.errors.ClassifiedError` for
    every provider failure so the retry executor can decide eligibility.
    """

    #: Provider name used in logs and error details
    name: str = "generator"

    @abstractmethod
    async def generate(self, prompt: str, max_tokens: int = 2048) -> str:
        """Generate text for a prompt.

        Args:
            prompt: Full prompt text
            max_tokens: Maximum output tokens

        Returns:
            Generated text (may be empty)

        Raises:
            ClassifiedError: If the provider call fails
        """
