"""Public interface definitions for all external service providers.

Every external service in the LuminAI pipeline is accessed exclusively
through the abstract base classes defined in this package.  Concrete
adapters implement these interfaces and are constructed once in
``luminai/main.py``, then injected into the services that need them, so
tests can substitute fakes without touching module-level state.

CONCRETE PROVIDER MAP:
    Interface              ->  Concrete implementations (in luminai/providers/)
    ---------------------------------------------------------------------
    ILLMProvider           ->  OpenAILLMProvider
    IEmbeddingProvider     ->  OpenAIEmbeddingProvider,
                               SentenceTransformerEmbeddingProvider
    IVectorStoreProvider   ->  ChromaDBProvider
    IDocumentStore         ->  LocalDocumentStore
"""

from luminai.interfaces.document_store import IDocumentStore
from luminai.interfaces.embedding_provider import IEmbeddingProvider
from luminai.interfaces.llm_provider import ILLMProvider
from luminai.interfaces.vector_store_provider import IVectorStoreProvider

__all__ = [
    "IDocumentStore",
    "IEmbeddingProvider",
    "ILLMProvider",
    "IVectorStoreProvider",
]
