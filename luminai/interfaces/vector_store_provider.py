"""Abstract base class for vector-store service providers.

Defines the namespace-scoped contract for storing, querying, and deleting
embedded document fragments.  Every operation takes the isolation key
produced by :func:`luminai.utils.namespace.build_namespace`; no operation
ever reads or writes outside its namespace.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from luminai.models.rag import DocumentChunk, RetrievedChunk


# Concrete implementation: ChromaDBProvider (luminai/providers/vector_store/)
class IVectorStoreProvider(ABC):
    """Contract for vector-store services used by the RAG pipeline.

    All query and mutation methods are async to support network-backed
    stores without blocking the event loop.
    """

    @abstractmethod
    async def upsert(
        self,
        namespace: str,
        chunks: list[DocumentChunk],
        embeddings: list[list[float]],
    ) -> int:
        """Insert or overwrite pre-embedded fragments under *namespace*.

        Idempotent per ``chunk_id``: upserting the same fragment twice leaves
        one stored entry.

        Returns
        -------
        int
            The number of fragments written.

        Raises
        ------
        ValueError
            If ``len(chunks) != len(embeddings)``.
        luminai.utils.errors.ExternalServiceError
            Tagged ``service="vector_index"`` if the store operation fails.
        """

    @abstractmethod
    async def query(
        self,
        namespace: str,
        query_text: str,
        top_k: int = 20,
    ) -> list[RetrievedChunk]:
        """Return up to *top_k* fragments from *namespace* ranked by similarity.

        May return an empty list when the namespace is empty or missing.
        """

    @abstractmethod
    async def delete_namespace(self, namespace: str) -> int:
        """Remove every fragment stored under *namespace*.

        Idempotent: deleting a namespace that does not exist is not an error
        and returns ``0``.

        Returns
        -------
        int
            The number of fragments removed.
        """

    @abstractmethod
    async def count(self, namespace: str) -> int:
        """Return the number of fragments stored under *namespace*."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"chromadb"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the store is accessible."""
