"""Unit tests for embedding provider adapters: OpenAI-compatible and local."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import openai
import pytest

from luminai.config.settings import Settings
from luminai.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider
from luminai.providers.embedding.sentence_transformer_embedding_provider import (
    SentenceTransformerEmbeddingProvider,
)
from luminai.utils.errors import ExternalServiceError

_PATCH_TARGET = "luminai.providers.embedding.openai_embedding_provider.openai.AsyncOpenAI"


def _settings(**overrides) -> Settings:
    defaults = {
        "openai_api_key": "sk-test",
        "embedding_provider": "openai",
        "openai_embedding_model": "text-embedding-3-small",
    }
    defaults.update(overrides)
    return Settings(_env_file=None, **defaults)


def _embedding_response(vectors: list[list[float]]) -> MagicMock:
    response = MagicMock()
    response.data = [MagicMock(embedding=v) for v in vectors]
    response.usage = MagicMock(total_tokens=10 * len(vectors))
    return response


# ======================================================================
# OpenAI-compatible Embedding Provider
# ======================================================================


class TestOpenAIEmbeddingProvider:
    @pytest.fixture()
    def settings(self) -> Settings:
        return _settings()

    def test_get_provider_name(self, settings: Settings) -> None:
        with patch(_PATCH_TARGET):
            provider = OpenAIEmbeddingProvider(settings)
        assert provider.get_provider_name() == "openai_embedding"

    def test_custom_host_changes_label(self) -> None:
        with patch(_PATCH_TARGET) as client_cls:
            provider = OpenAIEmbeddingProvider(
                _settings(embedding_base_url="http://embeddings.local/v1")
            )
        assert provider.get_provider_name() == "openai-compatible_embedding"
        assert client_cls.call_args.kwargs["base_url"] == "http://embeddings.local/v1"

    def test_dedicated_key_takes_precedence(self) -> None:
        with patch(_PATCH_TARGET) as client_cls:
            OpenAIEmbeddingProvider(_settings(embedding_api_key="emb-key"))
        assert client_cls.call_args.kwargs["api_key"] == "emb-key"

    def test_is_available_without_key(self) -> None:
        with patch(_PATCH_TARGET):
            provider = OpenAIEmbeddingProvider(_settings(openai_api_key=""))
        assert provider.is_available() is False

    def test_get_dimension(self, settings: Settings) -> None:
        with patch(_PATCH_TARGET):
            provider = OpenAIEmbeddingProvider(settings)
        assert provider.get_dimension() == 1536

    @pytest.mark.asyncio
    async def test_embed_success(self, settings: Settings) -> None:
        mock_client = AsyncMock()
        mock_client.embeddings.create = AsyncMock(
            return_value=_embedding_response([[0.1] * 1536, [0.2] * 1536])
        )

        with patch(_PATCH_TARGET, return_value=mock_client):
            provider = OpenAIEmbeddingProvider(settings)
            result = await provider.embed(["hello", "world"])

        assert len(result) == 2
        assert len(result[0]) == 1536
        mock_client.embeddings.create.assert_awaited_once_with(
            input=["hello", "world"], model="text-embedding-3-small"
        )

    @pytest.mark.asyncio
    async def test_embed_empty_input(self, settings: Settings) -> None:
        mock_client = AsyncMock()
        with patch(_PATCH_TARGET, return_value=mock_client):
            provider = OpenAIEmbeddingProvider(settings)
            assert await provider.embed([]) == []
        mock_client.embeddings.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_embed_single(self, settings: Settings) -> None:
        mock_client = AsyncMock()
        mock_client.embeddings.create = AsyncMock(return_value=_embedding_response([[0.5] * 1536]))

        with patch(_PATCH_TARGET, return_value=mock_client):
            provider = OpenAIEmbeddingProvider(settings)
            result = await provider.embed_single("hello")

        assert result == [0.5] * 1536

    @pytest.mark.asyncio
    async def test_embed_error(self, settings: Settings) -> None:
        mock_client = AsyncMock()
        mock_client.embeddings.create = AsyncMock(
            side_effect=openai.APIError(message="Rate limit", request=MagicMock(), body=None)
        )

        with patch(_PATCH_TARGET, return_value=mock_client):
            provider = OpenAIEmbeddingProvider(settings)
            with pytest.raises(ExternalServiceError) as exc_info:
                await provider.embed(["test"])

        assert exc_info.value.service == "embedding"


# ======================================================================
# Local sentence-transformers Embedding Provider
# ======================================================================


class TestSentenceTransformerEmbeddingProvider:
    def test_defaults(self) -> None:
        provider = SentenceTransformerEmbeddingProvider()

        assert provider.get_dimension() == 384
        assert provider.get_provider_name() == "sentence_transformer_all-MiniLM-L6-v2"

    @pytest.mark.asyncio
    async def test_embed_uses_loaded_model(self) -> None:
        vectors = MagicMock()
        vectors.tolist.return_value = [[0.1, 0.2], [0.3, 0.4]]
        model = MagicMock()
        model.encode.return_value = vectors

        provider = SentenceTransformerEmbeddingProvider()
        provider._model = model

        result = await provider.embed(["a", "b"])

        assert result == [[0.1, 0.2], [0.3, 0.4]]
        model.encode.assert_called_once_with(
            ["a", "b"], normalize_embeddings=True, show_progress_bar=False
        )

    @pytest.mark.asyncio
    async def test_encode_failure_is_wrapped(self) -> None:
        model = MagicMock()
        model.encode.side_effect = RuntimeError("CUDA out of memory")

        provider = SentenceTransformerEmbeddingProvider()
        provider._model = model

        with pytest.raises(ExternalServiceError) as exc_info:
            await provider.embed(["a"])

        assert exc_info.value.service == "embedding"

    @pytest.mark.asyncio
    async def test_embed_empty_input_skips_model(self) -> None:
        provider = SentenceTransformerEmbeddingProvider()
        assert await provider.embed([]) == []
        assert provider._model is None
