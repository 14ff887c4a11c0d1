"""LuminAI FastAPI application entry point.

Wires together all providers, services, and routes via dependency injection.
Loads configuration from ``.env`` and ``config/config.yaml`` and configures
structured logging.  Every adapter is built once in :func:`_build_all` and
stored on ``app.state``; nothing holds a module-level client.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import structlog
import uvicorn
from fastapi import FastAPI

from luminai.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from luminai.api.routes import router as api_router
from luminai.config.loader import load_config
from luminai.config.settings import Settings
from luminai.interfaces.embedding_provider import IEmbeddingProvider
from luminai.providers.llm.openai_provider import OpenAILLMProvider
from luminai.providers.storage.local_document_store import LocalDocumentStore
from luminai.providers.vector_store.chromadb_provider import ChromaDBProvider
from luminai.services.caption_service import CAPTION_PROMPT, CaptionService
from luminai.services.ingestion.chunker import TextChunker
from luminai.services.ingestion.ingestion_service import IngestionService
from luminai.services.quiz_service import QuizService
from luminai.services.retrieval_service import RetrievalService
from luminai.services.summarization_service import SummarizationService
from luminai.services.teardown_service import TeardownService
from luminai.utils.logging import configure_logging, get_logger

# ---------------------------------------------------------------------------
# Module-level settings & logging
# ---------------------------------------------------------------------------

settings = Settings()
config = load_config(settings=settings)

configure_logging(
    log_level=settings.log_level,
    app_env=settings.app_env,
)
_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Provider selection
# ---------------------------------------------------------------------------


def _build_embedding_provider(app_settings: Settings) -> IEmbeddingProvider:
    """Return the embedding provider named by ``EMBEDDING_PROVIDER``.

    The local sentence-transformers model is imported lazily so the remote
    configuration does not need PyTorch installed.
    """
    if app_settings.embedding_provider == "openai":
        from luminai.providers.embedding.openai_embedding_provider import (
            OpenAIEmbeddingProvider,
        )

        return OpenAIEmbeddingProvider(settings=app_settings)

    from luminai.providers.embedding.sentence_transformer_embedding_provider import (
        SentenceTransformerEmbeddingProvider,
    )

    return SentenceTransformerEmbeddingProvider(model_name=app_settings.sentence_transformer_model)


# ---------------------------------------------------------------------------
# Full DI assembly for the FastAPI application
# ---------------------------------------------------------------------------


def _build_all(app_settings: Settings, app_config: dict[str, Any] | None = None) -> dict[str, Any]:
    """Construct every provider and service instance for the application.

    Returns a flat dict of named components to be stored on ``app.state``.
    """
    app_config = app_config or {}

    # -- Providers --
    llm = OpenAILLMProvider(settings=app_settings)
    embedding_provider = _build_embedding_provider(app_settings)
    vector_store = ChromaDBProvider(
        embedding_provider=embedding_provider,
        persist_directory=app_settings.chromadb_persist_dir,
        collection_name=app_settings.chromadb_collection,
    )
    document_store = LocalDocumentStore(
        uploads_dir=app_settings.uploads_dir,
        metadata_dir=app_settings.metadata_dir,
        image_uploads_dir=app_settings.image_uploads_dir,
        image_metadata_dir=app_settings.image_metadata_dir,
    )
    document_store.initialize()

    # -- Services --
    ingestion_service = IngestionService(
        document_store=document_store,
        chunker=TextChunker(
            chunk_size=app_settings.chunk_size,
            overlap=app_settings.chunk_overlap,
        ),
        embedding_provider=embedding_provider,
        vector_store=vector_store,
    )
    retrieval_service = RetrievalService(
        vector_store=vector_store,
        query=app_settings.retrieval_query,
        top_k=app_settings.retrieval_top_k,
        max_group_chars=app_settings.summary_group_max_chars,
    )
    teardown_service = TeardownService(vector_store=vector_store, document_store=document_store)
    summarization_service = SummarizationService(
        llm_provider=llm,
        retrieval_service=retrieval_service,
        teardown_service=teardown_service,
        settings=app_settings,
        document_store=document_store,
    )
    quiz_service = QuizService(
        llm_provider=llm,
        question_count=app_settings.quiz_question_count,
        option_count=app_config.get("quiz", {}).get("option_count", 4),
    )
    caption_service = CaptionService(
        llm_provider=llm,
        document_store=document_store,
        max_attempts=app_settings.caption_max_attempts,
        retry_delay=app_settings.caption_retry_delay,
        prompt=app_config.get("caption", {}).get("prompt", CAPTION_PROMPT),
    )

    # -- Provider registry for /health --
    provider_registry: dict[str, Any] = {
        "llm": llm.is_available(),
        "vision": llm.supports_vision(),
        "embedding": embedding_provider.is_available(),
        "embedding_provider": embedding_provider.get_provider_name(),
        "vector_store": vector_store.is_available(),
    }

    return {
        "settings": app_settings,
        "llm": llm,
        "embedding_provider": embedding_provider,
        "vector_store": vector_store,
        "document_store": document_store,
        "ingestion_service": ingestion_service,
        "summarization_service": summarization_service,
        "quiz_service": quiz_service,
        "caption_service": caption_service,
        "provider_registry": provider_registry,
    }


# ---------------------------------------------------------------------------
# Application lifespan (startup / shutdown)
# ---------------------------------------------------------------------------


@asynccontextmanager
async def _lifespan(application: FastAPI):  # noqa: ANN201
    """Initialise all providers and services on startup."""
    components = _build_all(settings, config)

    for key, value in components.items():
        setattr(application.state, key, value)

    missing = settings.missing_service_keys()
    if missing:
        _logger.warning("missing_service_configuration", missing=missing)

    _logger.info(
        "app_startup",
        version="0.1.0",
        environment=settings.app_env,
        text_model=settings.openai_text_model,
        embedding_provider=components["embedding_provider"].get_provider_name(),
    )

    yield

    _logger.info("app_shutdown")


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app() -> FastAPI:
    """Build and configure the FastAPI application."""
    application = FastAPI(
        title="LuminAI API",
        version="0.1.0",
        description=(
            "Upload a document, embed it into a per-client namespace, then "
            "generate a summary and a short quiz from its most relevant passages. "
            "Images can be uploaded and captioned by a vision model."
        ),
        lifespan=_lifespan,
    )

    # -- Middleware (order matters: last added = first executed) --
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application, allowed_origins=config.get("app", {}).get("cors_origins"))

    # -- API routes --
    application.include_router(api_router)

    return application


app = create_app()

# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    uvicorn.run(
        "luminai.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=(settings.app_env == "development"),
    )
