"""ChromaDB vector store provider adapter.

Wraps ``chromadb.PersistentClient`` to implement :class:`IVectorStoreProvider`.
Uses cosine distance for similarity search.  Fully local, free, and
Python-native -- no external service required.

Namespaces are stored as a ``namespace`` metadata field on every fragment in
a single collection; every read and delete carries a ``where`` clause on that
field so operations never cross namespaces.

The Chroma client is synchronous, so every collection call made from an
async method runs in a worker thread via :func:`asyncio.to_thread`.
"""

from __future__ import annotations

import asyncio
import os
from typing import Any

# ChromaDB ships PostHog telemetry; turn it off before the import so a
# version mismatch in the bundled client cannot raise at capture time.
os.environ["ANONYMIZED_TELEMETRY"] = "False"

import posthog

posthog.disabled = True

import chromadb
import structlog

from luminai.interfaces.embedding_provider import IEmbeddingProvider
from luminai.interfaces.vector_store_provider import IVectorStoreProvider
from luminai.models.rag import DocumentChunk, RetrievedChunk
from luminai.utils.errors import ExternalServiceError

logger = structlog.get_logger(logger_name=__name__)


class _NoopEmbeddingFunction(chromadb.EmbeddingFunction[list[str]]):
    """No-op embedding function that prevents ChromaDB from loading a model.

    LuminAI always passes pre-computed embeddings, so ChromaDB's built-in
    embedding is never invoked.
    """

    def __call__(self, input: list[str]) -> list[list[float]]:
        raise NotImplementedError(
            "LuminAI uses pre-computed embeddings; "
            "ChromaDB's built-in embedding should never be called."
        )

    def name(self) -> str:
        return "noop_precomputed"


class ChromaDBProvider(IVectorStoreProvider):
    """Vector store provider backed by ChromaDB with local persistence.

    An :class:`IEmbeddingProvider` is injected at init time so the provider
    can embed query text before passing it to ChromaDB.
    """

    def __init__(
        self,
        embedding_provider: IEmbeddingProvider,
        persist_directory: str = "./data/chromadb",
        collection_name: str = "luminai_documents",
        client: Any | None = None,
    ) -> None:
        self._embedding_provider = embedding_provider
        self._persist_directory = persist_directory
        self._collection_name = collection_name
        self._client = client or chromadb.PersistentClient(
            path=persist_directory,
            settings=chromadb.config.Settings(anonymized_telemetry=False),
        )
        # Collections persisted with a different embedding function reject
        # the no-op one; fall back to whatever was persisted.
        try:
            self._collection = self._client.get_or_create_collection(
                name=collection_name,
                metadata={"hnsw:space": "cosine"},
                embedding_function=_NoopEmbeddingFunction(),
            )
        except ValueError:
            self._collection = self._client.get_or_create_collection(
                name=collection_name,
                metadata={"hnsw:space": "cosine"},
            )

    # ------------------------------------------------------------------
    # IVectorStoreProvider implementation
    # ------------------------------------------------------------------

    async def upsert(
        self,
        namespace: str,
        chunks: list[DocumentChunk],
        embeddings: list[list[float]],
        batch_size: int = 500,
    ) -> int:
        """Upsert pre-embedded fragments in batches of *batch_size*."""
        if len(chunks) != len(embeddings):
            raise ValueError(
                f"chunks and embeddings length mismatch: {len(chunks)} != {len(embeddings)}"
            )
        if not chunks:
            return 0

        try:
            total_stored = 0
            for start in range(0, len(chunks), batch_size):
                end = min(start + batch_size, len(chunks))
                batch_chunks = chunks[start:end]

                await asyncio.to_thread(
                    self._collection.upsert,
                    ids=[c.chunk_id for c in batch_chunks],
                    embeddings=embeddings[start:end],
                    documents=[c.text for c in batch_chunks],
                    metadatas=[self._chunk_to_metadata(c, namespace) for c in batch_chunks],
                )
                total_stored += len(batch_chunks)

            logger.info(
                "chromadb_upsert",
                namespace=namespace,
                count=total_stored,
                batches=(len(chunks) + batch_size - 1) // batch_size,
            )
            return total_stored

        except Exception as exc:
            raise ExternalServiceError(
                message="ChromaDB upsert failed",
                provider_name=self.get_provider_name(),
                service="vector_index",
                details=str(exc),
            ) from exc

    async def query(
        self,
        namespace: str,
        query_text: str,
        top_k: int = 20,
    ) -> list[RetrievedChunk]:
        """Perform semantic search restricted to *namespace*."""
        try:
            available = await asyncio.to_thread(self._count_sync, namespace)
            if available == 0:
                logger.info("chromadb_query_empty_namespace", namespace=namespace)
                return []

            query_embedding = await self._embedding_provider.embed_single(query_text)
            results = await asyncio.to_thread(
                self._collection.query,
                query_embeddings=[query_embedding],
                n_results=min(top_k, available),
                where={"namespace": namespace},
            )

            if not results["documents"] or not results["documents"][0]:
                return []

            documents = results["documents"][0]
            metadatas = results["metadatas"][0] if results["metadatas"] else [{}] * len(documents)
            distances = results["distances"][0] if results["distances"] else [0.0] * len(documents)
            ids = results["ids"][0] if results.get("ids") else [""] * len(documents)

            retrieved: list[RetrievedChunk] = []
            for chunk_id, doc_text, meta, distance in zip(
                ids, documents, metadatas, distances, strict=True
            ):
                if not doc_text:
                    continue
                similarity = max(0.0, min(1.0, 1.0 - distance))
                retrieved.append(
                    RetrievedChunk(
                        chunk=self._metadata_to_chunk(chunk_id, meta or {}, doc_text),
                        similarity_score=similarity,
                    )
                )

            logger.info(
                "chromadb_query",
                namespace=namespace,
                query_length=len(query_text),
                results_count=len(retrieved),
                top_score=retrieved[0].similarity_score if retrieved else 0.0,
            )
            return retrieved

        except ExternalServiceError:
            raise
        except Exception as exc:
            raise ExternalServiceError(
                message="ChromaDB query failed",
                provider_name=self.get_provider_name(),
                service="vector_index",
                details=str(exc),
            ) from exc

    async def delete_namespace(self, namespace: str) -> int:
        """Delete every fragment stored under *namespace* (no-op if absent)."""
        try:
            count = await asyncio.to_thread(self._count_sync, namespace)
            if count > 0:
                await asyncio.to_thread(self._collection.delete, where={"namespace": namespace})

            logger.info(
                "chromadb_delete_namespace",
                namespace=namespace,
                deleted_count=count,
            )
            return count

        except Exception as exc:
            raise ExternalServiceError(
                message="ChromaDB delete_namespace failed",
                provider_name=self.get_provider_name(),
                service="vector_index",
                details=str(exc),
            ) from exc

    async def count(self, namespace: str) -> int:
        try:
            return await asyncio.to_thread(self._count_sync, namespace)
        except Exception as exc:
            raise ExternalServiceError(
                message="ChromaDB count failed",
                provider_name=self.get_provider_name(),
                service="vector_index",
                details=str(exc),
            ) from exc

    def get_provider_name(self) -> str:
        return "chromadb"

    def is_available(self) -> bool:
        """Return ``True`` if the ChromaDB collection is accessible."""
        try:
            self._collection.count()
            return True
        except Exception:
            return False

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------


    def _count_sync(self, namespace: str) -> int:
        existing = self._collection.get(where={"namespace": namespace}, include=[])
        return len(existing["ids"]) if existing["ids"] else 0

    @staticmethod
    def _chunk_to_metadata(chunk: DocumentChunk, namespace: str) -> dict[str, str | int]:
        """ChromaDB metadata values must be str, int, float, or bool."""
        return {
            "namespace": namespace,
            "chunk_index": chunk.chunk_index,
            "source_file": chunk.source_file,
            "start_offset": chunk.start_offset,
        }

    @staticmethod
    def _metadata_to_chunk(chunk_id: str, meta: dict[str, Any], text: str) -> DocumentChunk:
        return DocumentChunk(
            chunk_id=chunk_id,
            text=text,
            namespace=str(meta.get("namespace", "")),
            chunk_index=int(meta.get("chunk_index", 0)),
            source_file=str(meta.get("source_file", "")),
            start_offset=int(meta.get("start_offset", 0)),
        )
