"""Vector store provider implementations.

ChromaDB is the sole vector store implementation.  Every document namespace
lives in one persistent collection, partitioned by a ``namespace`` metadata
field.  Data persists at CHROMADB_PERSIST_DIR (default: ./data/chromadb).
"""

from luminai.providers.vector_store.chromadb_provider import ChromaDBProvider

__all__ = ["ChromaDBProvider"]
