"""Summarization orchestrator.

Runs the full summarize-a-document pass for one client request:

    namespace -> retrieve groups -> summarize each group -> join -> teardown

Groups are summarized sequentially, one completion call each.  A group whose
call fails, or whose summary is shorter than ``min_summary_length``, is
skipped; the pass as a whole only fails on configuration or retrieval
errors.  When retrieval finds nothing the pass ends with a soft
:class:`NoContentWarning` and the namespace is left untouched.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING

import structlog

from luminai.models.summary import (
    GroupOutcome,
    NoContentWarning,
    SummaryMetadata,
    SummaryResult,
    SummaryStyle,
    TeardownResult,
)
from luminai.utils.errors import ConfigurationError, NoContentFound, ValidationError
from luminai.utils.namespace import build_namespace
from luminai.utils.retry import ResilientCaller, SleepFn, single_attempt_policy

if TYPE_CHECKING:
    from luminai.config.settings import Settings
    from luminai.interfaces.document_store import IDocumentStore
    from luminai.interfaces.llm_provider import ILLMProvider
    from luminai.services.retrieval_service import RetrievalService
    from luminai.services.teardown_service import TeardownService

logger = structlog.get_logger(logger_name=__name__)

FALLBACK_SUMMARY = (
    "Unable to generate a summary from this document. "
    "It may be empty, poorly scanned, or unsupported."
)
NO_CONTENT_WARNING = "No relevant chunks found. Make sure the document is embedded correctly."

_STYLE_INSTRUCTIONS: dict[SummaryStyle, str] = {
    SummaryStyle.DETAILED: "detailed and comprehensive",
    SummaryStyle.CONCISE: "concise and focused",
}


def build_system_prompt(style: SummaryStyle) -> str:
    return (
        "You are an expert document summarizer. Your task is to extract only the "
        "most meaningful and relevant content from the input text...\n"
        f"Return a summary that is {_STYLE_INSTRUCTIONS[style]}."
    )


def build_user_prompt(group: str) -> str:
    return f"Summarize this content:\n\n{group}"


class SummarizationService:
    """Produces a summary for a previously ingested document."""

    def __init__(
        self,
        llm_provider: ILLMProvider,
        retrieval_service: RetrievalService,
        teardown_service: TeardownService,
        settings: Settings,
        sleep: SleepFn | None = None,
        document_store: IDocumentStore | None = None,
    ) -> None:
        self._llm = llm_provider
        self._document_store = document_store
        self._retrieval = retrieval_service
        self._teardown = teardown_service
        self._settings = settings
        self._caller: ResilientCaller[str] = ResilientCaller(single_attempt_policy(), sleep=sleep)

    async def summarize(
        self,
        client_id: str,
        file_name: str,
        style: SummaryStyle = SummaryStyle.CONCISE,
    ) -> SummaryResult | NoContentWarning:
        """Summarize *file_name* for *client_id*.

        Raises
        ------
        ValidationError
            If *client_id* or *file_name* is empty.
        ConfigurationError
            If service credentials are missing (checked before any call).
        ExternalServiceError
            If the vector index cannot be queried.
        """
        if not client_id or not file_name:
            raise ValidationError("Missing clientId or fileName")

        missing = self._settings.missing_service_keys()
        if missing:
            logger.error("summarize_missing_configuration", missing=missing)
            raise ConfigurationError()

        namespace = build_namespace(client_id, file_name)
        log = logger.bind(namespace=namespace, style=style.value)
        owner_verified = await self._verify_owner(client_id, file_name)

        try:
            retrieval = await self._retrieval.retrieve_groups(namespace)
        except NoContentFound as signal:
            log.warning("summarize_no_content")
            return NoContentWarning(
                warning=NO_CONTENT_WARNING,
                client_id=client_id,
                file_name=file_name,
                namespace=signal.namespace,
                query_used=signal.query,
            )

        system_prompt = build_system_prompt(style)
        outcomes: list[GroupOutcome] = []
        for index, group in enumerate(retrieval.groups):
            outcomes.append(await self._summarize_group(index, group, system_prompt))

        accepted = [o.summary for o in outcomes if o.ok]
        summary = " ".join(accepted).strip() if accepted else FALLBACK_SUMMARY

        teardown = await self._maybe_teardown(namespace, client_id, file_name, len(accepted))

        log.info(
            "summarize_complete",
            chunks_used=len(retrieval.chunks),
            groups=len(retrieval.groups),
            accepted=len(accepted),
            namespace_deleted=teardown.namespace_deleted,
            files_deleted=teardown.files_deleted,
        )
        return SummaryResult(
            summary=summary,
            metadata=SummaryMetadata(
                client_id=client_id,
                file_name=file_name,
                namespace=namespace,
                chunks_used=len(retrieval.chunks),
                group_count=len(retrieval.groups),
                summarized_chunks=len(accepted),
                model=self._llm.get_model_name(),
                style=style,
                timestamp=datetime.now(tz=timezone.utc),  # noqa: UP017
                namespace_deleted=teardown.namespace_deleted,
                files_deleted=teardown.files_deleted,
                owner_verified=owner_verified,
            ),
            outcomes=outcomes,
        )

    async def _verify_owner(self, client_id: str, file_name: str) -> bool:
        """Check the upload record names *client_id*.

        A mismatch is logged but does not block the pass: the namespace is
        derived from *client_id*, so only that client's fragments are read,
        and teardown re-checks ownership before touching any file.
        """
        if self._document_store is None:
            return False
        metadata = await self._document_store.read_metadata(file_name)
        if metadata is None:
            logger.warning("summarize_metadata_missing", file_name=file_name)
            return False
        if not metadata.is_owned_by(client_id):
            logger.warning(
                "summarize_ownership_mismatch", file_name=file_name, client_id=client_id
            )
            return False
        return True

    async def _summarize_group(self, index: int, group: str, system_prompt: str) -> GroupOutcome:
        outcome = await self._caller.run(
            lambda: self._llm.complete(
                system_prompt=system_prompt,
                user_prompt=build_user_prompt(group),
                temperature=self._settings.summary_temperature,
            )
        )
        if not outcome.accepted:
            reason = str(outcome.last_error) if outcome.last_error else "empty completion"
            logger.warning("summary_group_skipped", group=index, reason=reason)
            return GroupOutcome(index=index, error=reason)

        summary = (outcome.value or "").strip()
        min_length = self._settings.min_summary_length
        if len(summary) < min_length:
            logger.warning("summary_group_too_short", group=index, length=len(summary))
            return GroupOutcome(index=index, error=f"summary shorter than {min_length} characters")
        return GroupOutcome(index=index, summary=summary)

    async def _maybe_teardown(
        self,
        namespace: str,
        client_id: str,
        file_name: str,
        accepted_count: int,
    ) -> TeardownResult:
        if self._settings.teardown_policy == "on_success" and accepted_count == 0:
            logger.info("teardown_skipped", namespace=namespace, reason="no_accepted_groups")
            return TeardownResult()
        return await self._teardown.teardown(namespace, client_id, file_name)
