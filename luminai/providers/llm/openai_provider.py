"""OpenAI-compatible LLM provider adapter.

Wraps the ``openai`` async client to implement :class:`ILLMProvider`.
By default the client points at OpenRouter, which exposes an
OpenAI-compatible chat API in front of many hosted models; any other
compatible host can be used by changing ``openai_base_url``.
"""

from __future__ import annotations

import base64

import openai
import structlog

from luminai.config.settings import Settings
from luminai.interfaces.llm_provider import ILLMProvider
from luminai.utils.errors import CompletionError

logger = structlog.get_logger(logger_name=__name__)


class OpenAILLMProvider(ILLMProvider):
    """LLM provider backed by an OpenAI-compatible chat-completions API.

    A text model serves summaries and quizzes; a separate vision model
    serves image captions.  OpenRouter attribution headers
    (``HTTP-Referer`` / ``X-Title``) are sent on every request.
    """

    def __init__(self, settings: Settings, client: openai.AsyncOpenAI | None = None) -> None:
        self._settings = settings
        self._api_key = settings.openai_api_key

        # 25s keeps a slow model from holding the HTTP request open
        # past typical proxy timeouts.
        self._client = client or openai.AsyncOpenAI(
            api_key=self._api_key or "unset",
            base_url=settings.openai_base_url or None,
            timeout=openai.Timeout(25.0, connect=5.0),
            default_headers={
                "HTTP-Referer": settings.openai_app_referer,
                "X-Title": settings.openai_app_title,
            },
        )
        self._text_model = settings.openai_text_model
        self._vision_model = settings.openai_vision_model
        self._provider_label = "openai-compatible" if settings.openai_base_url else "openai"

    # ------------------------------------------------------------------
    # ILLMProvider implementation
    # ------------------------------------------------------------------

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.3,
        max_tokens: int = 1024,
    ) -> str:
        """Generate a text completion via the chat API."""
        messages: list[dict[str, str]] = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": user_prompt})

        try:
            response = await self._client.chat.completions.create(
                model=self._text_model,
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except openai.APITimeoutError as exc:
            raise CompletionError(
                message=f"{self._provider_label} timed out after 25s",
                provider_name=self.get_provider_name(),
                details=str(exc),
            ) from exc
        except openai.APIError as exc:
            raise CompletionError(
                message=f"{self._provider_label} API error",
                provider_name=self.get_provider_name(),
                details=str(exc),
            ) from exc

        content = response.choices[0].message.content if response.choices else None
        if content is None:
            raise CompletionError(
                message=f"{self._provider_label} returned empty response",
                provider_name=self.get_provider_name(),
            )
        logger.info(
            "openai_completion",
            model=self._text_model,
            provider=self._provider_label,
            tokens=response.usage.total_tokens if response.usage else None,
        )
        return content.strip()

    async def vision_extract(self, image_bytes: bytes, prompt: str, media_type: str) -> str:
        """Describe an image with the configured vision model.

        The image travels inline as a ``data:<mime>;base64,...`` URI.
        """
        if not self.supports_vision():
            raise CompletionError(
                message="Vision not supported by this provider configuration",
                provider_name=self.get_provider_name(),
            )
        b64 = base64.b64encode(image_bytes).decode("utf-8")
        try:
            response = await self._client.chat.completions.create(
                model=self._vision_model,
                messages=[
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": prompt},
                            {
                                "type": "image_url",
                                "image_url": {"url": f"data:{media_type};base64,{b64}"},
                            },
                        ],
                    }
                ],
                max_tokens=300,
            )
        except openai.APIError as exc:
            raise CompletionError(
                message=f"{self._provider_label} vision API error",
                provider_name=self.get_provider_name(),
                details=str(exc),
            ) from exc

        content = response.choices[0].message.content if response.choices else None
        logger.info(
            "openai_vision_extract",
            model=self._vision_model,
            provider=self._provider_label,
            tokens=response.usage.total_tokens if response.usage else None,
        )
        return (content or "").strip()

    def supports_vision(self) -> bool:
        return bool(self._vision_model)

    def get_model_name(self) -> str:
        return self._text_model

    def get_provider_name(self) -> str:
        return self._provider_label

    def is_available(self) -> bool:
        """Return ``True`` if an API key is configured (doesn't verify it works)."""
        return bool(self._api_key)
