"""Shared pytest fixtures for the LuminAI test suite."""

from __future__ import annotations

from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from luminai.config.settings import Settings
from luminai.interfaces.embedding_provider import IEmbeddingProvider
from luminai.interfaces.llm_provider import ILLMProvider
from luminai.interfaces.vector_store_provider import IVectorStoreProvider
from luminai.models.rag import DocumentChunk, RetrievedChunk, make_chunk_id
from luminai.providers.storage.local_document_store import LocalDocumentStore

# ---------------------------------------------------------------------------
# Settings / paths
# ---------------------------------------------------------------------------


def make_settings(**overrides: Any) -> Settings:
    """Build Settings without reading a developer's .env file."""
    defaults: dict[str, Any] = {
        "openai_api_key": "sk-test",
        "embedding_provider": "sentence_transformer",
    }
    defaults.update(overrides)
    return Settings(_env_file=None, **defaults)


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def document_store(tmp_path: Path) -> LocalDocumentStore:
    """A filesystem document store rooted in a temporary directory."""
    store = LocalDocumentStore(
        uploads_dir=tmp_path / "uploads",
        metadata_dir=tmp_path / "metadata",
        image_uploads_dir=tmp_path / "uploads_img",
        image_metadata_dir=tmp_path / "metadata_img",
    )
    store.initialize()
    return store


# ---------------------------------------------------------------------------
# Sample text
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_document_text() -> str:
    """Several paragraphs of prose, long enough to produce multiple fragments."""
    paragraphs = [
        (
            "Photosynthesis is the process by which green plants convert light "
            "energy into chemical energy. It takes place mainly in the leaves, "
            "inside organelles called chloroplasts. "
        )
        * 3,
        (
            "The light-dependent reactions capture energy from sunlight and store "
            "it in ATP and NADPH. Water molecules are split and oxygen is released "
            "as a by-product. "
        )
        * 3,
        (
            "The Calvin cycle uses ATP and NADPH to fix carbon dioxide into sugars. "
            "This stage does not require light directly but depends on the products "
            "of the light reactions. "
        )
        * 3,
        (
            "Rates of photosynthesis depend on light intensity, carbon dioxide "
            "concentration and temperature. Each factor can become limiting. "
        )
        * 3,
    ]
    return "\n\n".join(p.strip() for p in paragraphs)


def make_retrieved(text: str, namespace: str = "client_doc", index: int = 0) -> RetrievedChunk:
    return RetrievedChunk(
        chunk=DocumentChunk(
            chunk_id=make_chunk_id(namespace, index),
            text=text,
            namespace=namespace,
            chunk_index=index,
            source_file="doc.pdf",
        ),
        similarity_score=0.9,
    )


# ---------------------------------------------------------------------------
# Provider fakes
# ---------------------------------------------------------------------------


class InMemoryVectorStore(IVectorStoreProvider):
    """Namespace-scoped vector store kept in a dict; query returns insertion order."""

    def __init__(self) -> None:
        self.namespaces: dict[str, dict[str, DocumentChunk]] = {}
        self.fail_delete = False

    async def upsert(
        self,
        namespace: str,
        chunks: list[DocumentChunk],
        embeddings: list[list[float]],
    ) -> int:
        bucket = self.namespaces.setdefault(namespace, {})
        for chunk in chunks:
            bucket[chunk.chunk_id] = chunk
        return len(chunks)

    async def query(self, namespace: str, query_text: str, top_k: int = 20) -> list[RetrievedChunk]:
        bucket = self.namespaces.get(namespace, {})
        return [
            RetrievedChunk(chunk=chunk, similarity_score=0.5)
            for chunk in list(bucket.values())[:top_k]
        ]

    async def delete_namespace(self, namespace: str) -> int:
        if self.fail_delete:
            from luminai.utils.errors import ExternalServiceError

            raise ExternalServiceError("delete failed", "memory", service="vector_index")
        return len(self.namespaces.pop(namespace, {}))

    async def count(self, namespace: str) -> int:
        return len(self.namespaces.get(namespace, {}))

    def get_provider_name(self) -> str:
        return "memory"

    def is_available(self) -> bool:
        return True


@pytest.fixture
def memory_vector_store() -> InMemoryVectorStore:
    return InMemoryVectorStore()


@pytest.fixture
def mock_llm() -> MagicMock:
    """Mock ILLMProvider; ``complete`` returns a long-enough summary by default."""
    mock = MagicMock(spec=ILLMProvider)
    mock.complete = AsyncMock(
        return_value="Plants turn light into chemical energy stored as sugar in their leaves."
    )
    mock.vision_extract = AsyncMock(return_value="A bar chart of yearly sales by region.")
    mock.supports_vision.return_value = True
    mock.get_model_name.return_value = "mistralai/mistral-7b-instruct"
    mock.get_provider_name.return_value = "mock_llm"
    mock.is_available.return_value = True
    return mock


@pytest.fixture
def mock_embedding_provider() -> MagicMock:
    """Mock IEmbeddingProvider returning one 8-dim vector per input."""
    mock = MagicMock(spec=IEmbeddingProvider)

    async def _embed(texts: list[str]) -> list[list[float]]:
        return [[float(i % 7) / 7.0 + 0.1] * 8 for i, _ in enumerate(texts)]

    mock.embed = AsyncMock(side_effect=_embed)
    mock.embed_single = AsyncMock(return_value=[0.1] * 8)
    mock.get_dimension.return_value = 8
    mock.get_provider_name.return_value = "mock_embedding"
    mock.is_available.return_value = True
    return mock


@pytest.fixture
def no_sleep() -> AsyncMock:
    """Injected sleep that records delays without waiting."""
    return AsyncMock(return_value=None)


@pytest.fixture
def settings_factory():
    """Return :func:`make_settings` so tests can override individual keys."""
    return make_settings


@pytest.fixture
def retrieved_factory():
    """Return :func:`make_retrieved` for building search hits."""
    return make_retrieved
