"""Abstract base class for LLM service providers.

Defines the contract for the chat-completion service used for per-group
summaries, quiz generation, and image captioning.  To the pipeline the
service is a single opaque call: prompt in, text out, fails or succeeds.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


# Concrete implementation: OpenAILLMProvider (luminai/providers/llm/)
class ILLMProvider(ABC):
    """Contract for LLM services used throughout the LuminAI pipeline.

    Providers must support plain text completion; vision (image captioning)
    is optional and declared via :meth:`supports_vision`.
    """

    @abstractmethod
    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.3,
        max_tokens: int = 1024,
    ) -> str:
        """Generate a text completion from the model.

        An empty ``system_prompt`` sends only the user message.

        Raises
        ------
        luminai.utils.errors.CompletionError
            If the API call fails or returns no content.
        """

    @abstractmethod
    async def vision_extract(self, image_bytes: bytes, prompt: str, media_type: str) -> str:
        """Describe an image using the model's vision capability.

        Raises
        ------
        luminai.utils.errors.CompletionError
            If the provider has no vision model or the call fails.
        """

    @abstractmethod
    def supports_vision(self) -> bool:
        """Return ``True`` if this provider can process image inputs."""

    @abstractmethod
    def get_model_name(self) -> str:
        """Return the text model used by :meth:`complete`."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this LLM provider."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if credentials are configured (no network call)."""
