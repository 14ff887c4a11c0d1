"""Unit tests for the SummarizationService orchestrator."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from luminai.models.summary import (
    NoContentWarning,
    RetrievalResult,
    SummaryResult,
    SummaryStyle,
    TeardownResult,
)
from luminai.services.retrieval_service import RetrievalService
from luminai.services.summarization_service import (
    FALLBACK_SUMMARY,
    SummarizationService,
    build_system_prompt,
)
from luminai.services.teardown_service import TeardownService
from luminai.utils.errors import (
    CompletionError,
    ConfigurationError,
    ExternalServiceError,
    NoContentFound,
    ValidationError,
)

_LONG_SUMMARY_A = "The document explains how plants convert sunlight into stored chemical energy."
_LONG_SUMMARY_B = "It then describes the Calvin cycle and the factors that limit photosynthesis."


def _retrieval(groups: list[str]) -> MagicMock:
    mock = MagicMock(spec=RetrievalService)
    mock.retrieve_groups = AsyncMock(
        return_value=RetrievalResult(
            namespace="client-1_notes",
            query="q",
            chunks=[f"chunk {i}" for i in range(len(groups) * 2)],
            groups=groups,
        )
    )
    return mock


def _teardown(namespace_deleted: bool = True, files_deleted: bool = True) -> MagicMock:
    mock = MagicMock(spec=TeardownService)
    mock.teardown = AsyncMock(
        return_value=TeardownResult(
            namespace_deleted=namespace_deleted, files_deleted=files_deleted
        )
    )
    return mock


def _service(
    llm: MagicMock,
    retrieval: MagicMock,
    teardown: MagicMock,
    settings,
    document_store=None,
) -> SummarizationService:
    return SummarizationService(
        llm_provider=llm,
        retrieval_service=retrieval,
        teardown_service=teardown,
        settings=settings,
        document_store=document_store,
    )


class TestPrompts:
    def test_style_changes_system_prompt(self) -> None:
        assert "concise and focused" in build_system_prompt(SummaryStyle.CONCISE)
        assert "detailed and comprehensive" in build_system_prompt(SummaryStyle.DETAILED)


class TestSummarize:
    @pytest.mark.asyncio
    async def test_happy_path_joins_summaries_and_tears_down(self, mock_llm, settings) -> None:
        mock_llm.complete.side_effect = [_LONG_SUMMARY_A, _LONG_SUMMARY_B]
        teardown = _teardown()
        service = _service(mock_llm, _retrieval(["group one", "group two"]), teardown, settings)

        result = await service.summarize("client-1", "notes.pdf", SummaryStyle.DETAILED)

        assert isinstance(result, SummaryResult)
        assert result.summary == f"{_LONG_SUMMARY_A} {_LONG_SUMMARY_B}"
        meta = result.metadata
        assert meta.namespace == "client-1_notes"
        assert meta.chunks_used == 4
        assert meta.group_count == 2
        assert meta.summarized_chunks == 2
        assert meta.style is SummaryStyle.DETAILED
        assert meta.model == "mistralai/mistral-7b-instruct"
        assert meta.namespace_deleted is True
        assert meta.files_deleted is True
        teardown.teardown.assert_awaited_once_with("client-1_notes", "client-1", "notes.pdf")

    @pytest.mark.asyncio
    async def test_groups_are_summarized_in_order(self, mock_llm, settings) -> None:
        mock_llm.complete.side_effect = [_LONG_SUMMARY_A, _LONG_SUMMARY_B]
        service = _service(mock_llm, _retrieval(["first", "second"]), _teardown(), settings)

        await service.summarize("client-1", "notes.pdf")

        prompts = [c.kwargs["user_prompt"] for c in mock_llm.complete.await_args_list]
        assert prompts == ["Summarize this content:\n\nfirst", "Summarize this content:\n\nsecond"]
        assert mock_llm.complete.await_args_list[0].kwargs["temperature"] == 0.3

    @pytest.mark.asyncio
    async def test_failed_and_short_groups_are_skipped(self, mock_llm, settings) -> None:
        mock_llm.complete.side_effect = [
            CompletionError("timeout", "mock_llm"),
            "Too short.",
            _LONG_SUMMARY_B,
        ]
        service = _service(mock_llm, _retrieval(["g1", "g2", "g3"]), _teardown(), settings)

        result = await service.summarize("client-1", "notes.pdf")

        assert isinstance(result, SummaryResult)
        assert result.summary == _LONG_SUMMARY_B
        assert result.metadata.summarized_chunks == 1
        assert result.metadata.group_count == 3
        assert [o.ok for o in result.outcomes] == [False, False, True]

    @pytest.mark.asyncio
    async def test_all_groups_fail_returns_fallback(self, mock_llm, settings) -> None:
        mock_llm.complete.side_effect = CompletionError("down", "mock_llm")
        teardown = _teardown()
        service = _service(mock_llm, _retrieval(["g1", "g2"]), teardown, settings)

        result = await service.summarize("client-1", "notes.pdf")

        assert result.summary == FALLBACK_SUMMARY
        assert result.metadata.summarized_chunks == 0
        teardown.teardown.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_on_success_policy_keeps_namespace_when_nothing_accepted(
        self, mock_llm, settings_factory
    ) -> None:
        mock_llm.complete.side_effect = CompletionError("down", "mock_llm")
        teardown = _teardown()
        service = _service(
            mock_llm,
            _retrieval(["g1"]),
            teardown,
            settings_factory(teardown_policy="on_success"),
        )

        result = await service.summarize("client-1", "notes.pdf")

        assert result.metadata.namespace_deleted is False
        assert result.metadata.files_deleted is False
        teardown.teardown.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_no_content_returns_warning_without_teardown(self, mock_llm, settings) -> None:
        retrieval = MagicMock(spec=RetrievalService)
        retrieval.retrieve_groups = AsyncMock(
            side_effect=NoContentFound(namespace="client-1_notes", query="the query")
        )
        teardown = _teardown()
        service = _service(mock_llm, retrieval, teardown, settings)

        result = await service.summarize("client-1", "notes.pdf")

        assert isinstance(result, NoContentWarning)
        assert result.namespace == "client-1_notes"
        assert result.query_used == "the query"
        teardown.teardown.assert_not_awaited()
        mock_llm.complete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_configuration_fails_before_any_call(
        self, mock_llm, settings_factory
    ) -> None:
        retrieval = _retrieval(["g1"])
        service = _service(mock_llm, retrieval, _teardown(), settings_factory(openai_api_key=""))

        with pytest.raises(ConfigurationError):
            await service.summarize("client-1", "notes.pdf")

        retrieval.retrieve_groups.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_fields_raise_validation_error(self, mock_llm, settings) -> None:
        service = _service(mock_llm, _retrieval(["g"]), _teardown(), settings)

        with pytest.raises(ValidationError):
            await service.summarize("", "notes.pdf")

    @pytest.mark.asyncio
    async def test_vector_index_failure_propagates(self, mock_llm, settings) -> None:
        retrieval = MagicMock(spec=RetrievalService)
        retrieval.retrieve_groups = AsyncMock(
            side_effect=ExternalServiceError("down", "chromadb", service="vector_index")
        )
        service = _service(mock_llm, retrieval, _teardown(), settings)

        with pytest.raises(ExternalServiceError):
            await service.summarize("client-1", "notes.pdf")

    @pytest.mark.asyncio
    async def test_custom_threshold(self, mock_llm, settings_factory) -> None:
        mock_llm.complete.return_value = "Tiny but fine."
        service = _service(
            mock_llm,
            _retrieval(["g1"]),
            _teardown(),
            settings_factory(min_summary_length=5),
        )

        result = await service.summarize("client-1", "notes.pdf")

        assert result.summary == "Tiny but fine."


class TestOwnership:
    @pytest.mark.asyncio
    async def test_owner_is_verified_before_summarizing(
        self, mock_llm, settings, document_store
    ) -> None:
        await document_store.save_document("notes.pdf", b"%PDF", "client-1")
        mock_llm.complete.return_value = _LONG_SUMMARY_A
        service = _service(mock_llm, _retrieval(["g1"]), _teardown(), settings, document_store)

        result = await service.summarize("client-1", "notes.pdf")

        assert result.metadata.owner_verified is True

    @pytest.mark.asyncio
    async def test_other_client_is_flagged_but_served(
        self, mock_llm, settings, document_store
    ) -> None:
        await document_store.save_document("notes.pdf", b"%PDF", "client-1")
        mock_llm.complete.return_value = _LONG_SUMMARY_A
        retrieval = _retrieval(["g1"])
        service = _service(mock_llm, retrieval, _teardown(), settings, document_store)

        result = await service.summarize("client-2", "notes.pdf")

        assert result.metadata.owner_verified is False
        # Reads stay inside the requesting client's own namespace.
        retrieval.retrieve_groups.assert_awaited_once_with("client-2_notes")

    @pytest.mark.asyncio
    async def test_missing_record_is_not_verified(
        self, mock_llm, settings, document_store
    ) -> None:
        mock_llm.complete.return_value = _LONG_SUMMARY_A
        service = _service(mock_llm, _retrieval(["g1"]), _teardown(), settings, document_store)

        result = await service.summarize("client-1", "notes.pdf")

        assert result.metadata.owner_verified is False
