"""Embedding provider implementations.

Embeddings convert text into numeric vectors that capture semantic meaning.
These vectors are stored in ChromaDB and used for similarity search.

Two implementations of IEmbeddingProvider:
    1. SentenceTransformerEmbeddingProvider -- all-MiniLM-L6-v2 (384 dims),
       runs locally, no API key.  Default.
    2. OpenAIEmbeddingProvider -- OpenAI-compatible /embeddings endpoint.

Note: SentenceTransformerEmbeddingProvider imports ``sentence_transformers``
lazily, so this package imports cleanly when the optional ``local`` extra is
not installed.
"""

from luminai.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider
from luminai.providers.embedding.sentence_transformer_embedding_provider import (
    SentenceTransformerEmbeddingProvider,
)

__all__ = ["OpenAIEmbeddingProvider", "SentenceTransformerEmbeddingProvider"]
