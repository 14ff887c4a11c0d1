"""Orchestrator for the document ingestion pipeline.

Pipeline stages: **extract -> chunk -> embed -> store**.

The :class:`IngestionService` coordinates its collaborators without any of
them knowing about each other:

    1. IDocumentStore / TextExtractor -- locate the uploaded blob, read its text
    2. TextChunker -- split the text into overlapping ~1000-character windows
    3. IEmbeddingProvider -- embed every fragment in a single batch call
    4. IVectorStoreProvider -- upsert fragments under the document's namespace

The run is not transactional: a failure after some fragments were stored
leaves them in place, and a retry overwrites them by fragment identity.
"""

from __future__ import annotations

import asyncio
import time
from typing import TYPE_CHECKING

import structlog

from luminai.models.rag import IngestionResult
from luminai.services.ingestion.chunker import TextChunker
from luminai.services.ingestion.text_extractor import TextExtractor
from luminai.utils.errors import NotFoundError, ValidationError
from luminai.utils.namespace import build_namespace

if TYPE_CHECKING:
    from luminai.interfaces.document_store import IDocumentStore
    from luminai.interfaces.embedding_provider import IEmbeddingProvider
    from luminai.interfaces.vector_store_provider import IVectorStoreProvider

logger = structlog.get_logger(logger_name=__name__)


class IngestionService:
    """Turns a stored document into namespaced, embedded fragments."""

    def __init__(
        self,
        document_store: IDocumentStore,
        chunker: TextChunker,
        embedding_provider: IEmbeddingProvider,
        vector_store: IVectorStoreProvider,
        text_extractor: TextExtractor | None = None,
    ) -> None:
        self._document_store = document_store
        self._chunker = chunker
        self._embedding_provider = embedding_provider
        self._vector_store = vector_store
        self._text_extractor = text_extractor or TextExtractor()

    async def ingest_document(self, file_name: str, client_id: str) -> IngestionResult:
        """Ingest one uploaded document for *client_id*.

        Raises
        ------
        ValidationError
            If either argument is empty.
        NotFoundError
            If no blob is stored under *file_name*.
        ExternalServiceError
            If the embedding or vector-index call fails.
        """
        if not file_name or not client_id:
            raise ValidationError("Missing documentName or clientId")

        start = time.monotonic()
        namespace = build_namespace(client_id, file_name)

        if not await self._document_store.document_exists(file_name):
            raise NotFoundError(f"Document not found: {file_name}")

        # Step 1: extract text (PyMuPDF is synchronous).
        text = await asyncio.to_thread(
            self._text_extractor.extract,
            self._document_store.document_path(file_name),
        )

        # Step 2: chunk.
        chunks = self._chunker.chunk(
            text, {"namespace": namespace, "source_file": file_name}
        )
        if not chunks:
            logger.warning("ingest_no_text", file_name=file_name, namespace=namespace)
            return IngestionResult(
                file_name=file_name,
                namespace=namespace,
                total_characters=len(text),
                ingestion_time=round(time.monotonic() - start, 3),
            )

        # Step 3: embed every fragment in one batch.
        embeddings = await self._embedding_provider.embed([c.text for c in chunks])

        # Step 4: store.
        stored = await self._vector_store.upsert(namespace, chunks, embeddings)

        elapsed = time.monotonic() - start
        logger.info(
            "document_ingested",
            file_name=file_name,
            namespace=namespace,
            chunks=stored,
            characters=len(text),
            elapsed_s=round(elapsed, 2),
        )
        return IngestionResult(
            file_name=file_name,
            namespace=namespace,
            chunks_created=stored,
            total_characters=len(text),
            ingestion_time=round(elapsed, 3),
        )
