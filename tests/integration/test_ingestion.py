"""Integration tests for the document ingestion pipeline.

Verifies end-to-end ingestion of text and PDF uploads into a namespace
using a mocked embedding provider and the in-memory vector store (no real
API calls).
"""

from __future__ import annotations

from pathlib import Path

import fitz
import pytest

from luminai.models.rag import make_chunk_id
from luminai.services.ingestion.chunker import TextChunker, merge_fragments
from luminai.services.ingestion.ingestion_service import IngestionService
from luminai.services.retrieval_service import RetrievalService
from luminai.services.teardown_service import TeardownService
from luminai.utils.errors import ExternalServiceError, NotFoundError, ValidationError

# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def _build_ingestion_service(document_store, embedding_provider, vector_store) -> IngestionService:
    """Construct an IngestionService wired to mock providers."""
    return IngestionService(
        document_store=document_store,
        chunker=TextChunker(chunk_size=300, overlap=60),
        embedding_provider=embedding_provider,
        vector_store=vector_store,
    )


def _pdf_bytes(pages: list[str]) -> bytes:
    doc = fitz.open()
    for text in pages:
        page = doc.new_page()
        page.insert_text((72, 72), text)
    data = doc.tobytes()
    doc.close()
    return data


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


class TestIngestion:
    @pytest.mark.asyncio
    async def test_text_document_is_chunked_embedded_and_stored(
        self,
        document_store,
        mock_embedding_provider,
        memory_vector_store,
        sample_document_text: str,
    ) -> None:
        await document_store.save_document("bio.txt", sample_document_text.encode(), "client-1")
        service = _build_ingestion_service(
            document_store, mock_embedding_provider, memory_vector_store
        )

        result = await service.ingest_document("bio.txt", "client-1")

        assert result.namespace == "client-1_bio"
        assert result.chunks_created > 1
        assert result.total_characters == len(sample_document_text)
        stored = list(memory_vector_store.namespaces["client-1_bio"].values())
        assert len(stored) == result.chunks_created
        assert merge_fragments(stored) == sample_document_text
        # One batch embedding call for every fragment.
        mock_embedding_provider.embed.assert_awaited_once()
        assert len(mock_embedding_provider.embed.await_args.args[0]) == result.chunks_created

    @pytest.mark.asyncio
    async def test_pdf_document(
        self, document_store, mock_embedding_provider, memory_vector_store
    ) -> None:
        data = _pdf_bytes(["Leaves capture light.", "Roots absorb water."])
        await document_store.save_document("plants.pdf", data, "client-1")
        service = _build_ingestion_service(
            document_store, mock_embedding_provider, memory_vector_store
        )

        result = await service.ingest_document("plants.pdf", "client-1")

        assert result.chunks_created == 1
        chunk = next(iter(memory_vector_store.namespaces["client-1_plants"].values()))
        assert "Leaves capture light." in chunk.text
        assert "Roots absorb water." in chunk.text
        assert chunk.source_file == "plants.pdf"

    @pytest.mark.asyncio
    async def test_reingestion_overwrites_by_identity(
        self,
        document_store,
        mock_embedding_provider,
        memory_vector_store,
        sample_document_text: str,
    ) -> None:
        await document_store.save_document("bio.txt", sample_document_text.encode(), "client-1")
        service = _build_ingestion_service(
            document_store, mock_embedding_provider, memory_vector_store
        )

        first = await service.ingest_document("bio.txt", "client-1")
        second = await service.ingest_document("bio.txt", "client-1")

        assert first.chunks_created == second.chunks_created
        assert await memory_vector_store.count("client-1_bio") == first.chunks_created
        assert make_chunk_id("client-1_bio", 0) in memory_vector_store.namespaces["client-1_bio"]

    @pytest.mark.asyncio
    async def test_empty_document_stores_nothing(
        self, document_store, mock_embedding_provider, memory_vector_store
    ) -> None:
        await document_store.save_document("blank.txt", b"   \n\n  ", "client-1")
        service = _build_ingestion_service(
            document_store, mock_embedding_provider, memory_vector_store
        )

        result = await service.ingest_document("blank.txt", "client-1")

        assert result.chunks_created == 0
        mock_embedding_provider.embed.assert_not_awaited()
        assert await memory_vector_store.count("client-1_blank") == 0

    @pytest.mark.asyncio
    async def test_missing_blob(self, document_store, mock_embedding_provider, memory_vector_store) -> None:
        service = _build_ingestion_service(
            document_store, mock_embedding_provider, memory_vector_store
        )

        with pytest.raises(NotFoundError):
            await service.ingest_document("absent.txt", "client-1")

    @pytest.mark.asyncio
    async def test_missing_arguments(
        self, document_store, mock_embedding_provider, memory_vector_store
    ) -> None:
        service = _build_ingestion_service(
            document_store, mock_embedding_provider, memory_vector_store
        )

        with pytest.raises(ValidationError):
            await service.ingest_document("bio.txt", "")

    @pytest.mark.asyncio
    async def test_embedding_failure_propagates(
        self, document_store, mock_embedding_provider, memory_vector_store
    ) -> None:
        await document_store.save_document("bio.txt", b"Some text to embed.", "client-1")
        mock_embedding_provider.embed.side_effect = ExternalServiceError(
            "down", "mock_embedding", service="embedding"
        )
        service = _build_ingestion_service(
            document_store, mock_embedding_provider, memory_vector_store
        )

        with pytest.raises(ExternalServiceError):
            await service.ingest_document("bio.txt", "client-1")

        assert await memory_vector_store.count("client-1_bio") == 0


class TestIngestRetrieveTeardown:
    @pytest.mark.asyncio
    async def test_namespaces_are_isolated_between_clients(
        self,
        document_store,
        mock_embedding_provider,
        memory_vector_store,
        tmp_path: Path,
    ) -> None:
        service = _build_ingestion_service(
            document_store, mock_embedding_provider, memory_vector_store
        )
        await document_store.save_document("notes.txt", b"Client one's notes.", "client-1")
        await service.ingest_document("notes.txt", "client-1")
        await document_store.save_document("notes.txt", b"Client two's notes.", "client-2")
        await service.ingest_document("notes.txt", "client-2")

        retrieval = RetrievalService(vector_store=memory_vector_store)
        first = await retrieval.retrieve_groups("client-1_notes")
        second = await retrieval.retrieve_groups("client-2_notes")

        assert first.chunks == ["Client one's notes."]
        assert second.chunks == ["Client two's notes."]

        teardown = TeardownService(memory_vector_store, document_store)
        result = await teardown.teardown("client-1_notes", "client-1", "notes.txt")

        # The namespace goes; the blob now belongs to client-2, so it stays.
        assert result.namespace_deleted is True
        assert result.files_deleted is False
        assert await memory_vector_store.count("client-2_notes") == 1
        assert (tmp_path / "uploads" / "notes.txt").exists()
