"""Short image captions via the vision model.

Vision models on shared hosts regularly return an empty reply or claim
there is "no image"; each caption request therefore runs under the caption
retry policy (default 15 attempts, 1 s apart) before giving up.
"""

from __future__ import annotations

import mimetypes
from typing import TYPE_CHECKING

import structlog

from luminai.utils.errors import CompletionError, ValidationError
from luminai.utils.retry import ResilientCaller, SleepFn, caption_policy

if TYPE_CHECKING:
    from luminai.interfaces.document_store import IDocumentStore
    from luminai.interfaces.llm_provider import ILLMProvider

logger = structlog.get_logger(logger_name=__name__)

CAPTION_PROMPT = "Please describe the main content and key insights of this image in 2-3 lines."


class CaptionService:
    """Describes a previously uploaded image in two or three lines."""

    def __init__(
        self,
        llm_provider: ILLMProvider,
        document_store: IDocumentStore,
        max_attempts: int = 15,
        retry_delay: float = 1.0,
        sleep: SleepFn | None = None,
        prompt: str = CAPTION_PROMPT,
    ) -> None:
        self._llm = llm_provider
        self._prompt = prompt
        self._document_store = document_store
        self._caller: ResilientCaller[str] = ResilientCaller(
            caption_policy(max_attempts=max_attempts, delay=retry_delay),
            sleep=sleep,
        )

    @property
    def prompt(self) -> str:
        return self._prompt

    async def caption(self, image_file_name: str) -> str:
        """Return an accepted caption for the stored image.

        Raises
        ------
        ValidationError
            If the name is empty or does not look like an image.
        NotFoundError
            If no image is stored under that name.
        CompletionError
            If every attempt was rejected.
        """
        if not image_file_name:
            raise ValidationError("Missing fileName")

        image_bytes = await self._document_store.read_image(image_file_name)

        media_type, _ = mimetypes.guess_type(image_file_name)
        if not media_type or not media_type.startswith("image/"):
            raise ValidationError("Unsupported or missing image type")

        outcome = await self._caller.run(
            lambda: self._llm.vision_extract(image_bytes, self._prompt, media_type)
        )
        if not outcome.accepted:
            raise CompletionError(
                message="Caption was empty or invalid",
                provider_name=self._llm.get_provider_name(),
                details=str(outcome.last_error) if outcome.last_error else None,
            )

        caption = (outcome.value or "").strip()
        logger.info(
            "caption_generated",
            image=image_file_name,
            attempts=outcome.attempts,
            length=len(caption),
        )
        return caption
