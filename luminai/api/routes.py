"""FastAPI API routes for the LuminAI document service.

Service dependencies are resolved from ``app.state`` via FastAPI's
``Depends`` using the ``Annotated`` pattern; main.py's ``_build_all``
populates the state at startup.

Endpoint                        Method  Description
------------------------------  ------  ------------------------------------
/api/v1/documents/upload        POST    Store a document blob + owner record
/api/v1/documents/latest        POST    Most recent upload for a client
/api/v1/documents/ingest        POST    Extract, chunk, embed, and index
/api/v1/documents/summarize     POST    Retrieve, group, summarize, tear down
/api/v1/quiz                    POST    Three-question quiz from a summary
/api/v1/images/upload           POST    Store an image under a unique name
/api/v1/images/caption          POST    Two-to-three line image caption
/api/v1/health                  GET     Health check + provider status

Domain errors raised here or in the services are turned into JSON bodies by
``ErrorHandlingMiddleware``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import JSONResponse

from luminai.api.schemas import (
    CaptionRequest,
    CaptionResponse,
    DocumentUploadResponse,
    ErrorResponse,
    HealthResponse,
    ImageUploadResponse,
    IngestRequest,
    IngestResponse,
    LatestDocumentRequest,
    LatestDocumentResponse,
    QuizRequest,
    QuizResponse,
    SummarizeErrorResponse,
    SummarizeRequest,
    SummarizeResponse,
    SummarizeWarningResponse,
    SummaryData,
)
from luminai.interfaces.document_store import IDocumentStore
from luminai.models.summary import NoContentWarning
from luminai.services.caption_service import CaptionService
from luminai.services.ingestion.ingestion_service import IngestionService
from luminai.services.ingestion.text_extractor import TextExtractor
from luminai.services.quiz_service import QuizService
from luminai.services.summarization_service import SummarizationService
from luminai.utils.errors import ConfigurationError, NotFoundError, ValidationError
from luminai.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

router = APIRouter(prefix="/api/v1")

_MAX_FILE_SIZE = 20 * 1024 * 1024  # 20 MB
# Read uploads in 64 KB increments so oversized files are rejected early.
_UPLOAD_CHUNK_SIZE = 64 * 1024


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


def _get_ingestion_service(request: Request) -> IngestionService:
    return request.app.state.ingestion_service


def _get_summarization_service(request: Request) -> SummarizationService:
    return request.app.state.summarization_service


def _get_quiz_service(request: Request) -> QuizService:
    return request.app.state.quiz_service


def _get_caption_service(request: Request) -> CaptionService:
    return request.app.state.caption_service


def _get_document_store(request: Request) -> IDocumentStore:
    return request.app.state.document_store


IngestionDep = Annotated[IngestionService, Depends(_get_ingestion_service)]
SummarizationDep = Annotated[SummarizationService, Depends(_get_summarization_service)]
QuizDep = Annotated[QuizService, Depends(_get_quiz_service)]
CaptionDep = Annotated[CaptionService, Depends(_get_caption_service)]
DocumentStoreDep = Annotated[IDocumentStore, Depends(_get_document_store)]


async def _read_upload(file: UploadFile) -> bytes:
    """Read *file* in chunks, rejecting it once it passes the size cap."""
    chunks: list[bytes] = []
    total_size = 0
    while True:
        chunk = await file.read(_UPLOAD_CHUNK_SIZE)
        if not chunk:
            break
        total_size += len(chunk)
        if total_size > _MAX_FILE_SIZE:
            raise HTTPException(
                status_code=413,
                detail=f"File too large: maximum is {_MAX_FILE_SIZE // (1024 * 1024)} MB.",
            )
        chunks.append(chunk)
    return b"".join(chunks)


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------


@router.post(
    "/documents/upload",
    response_model=DocumentUploadResponse,
    responses={400: {"model": ErrorResponse}, 413: {"model": ErrorResponse}},
    summary="Upload a document for later ingestion",
)
async def upload_document(
    document_store: DocumentStoreDep,
    file: Annotated[UploadFile | None, File()] = None,
    client_id: Annotated[str | None, Form(alias="clientId")] = None,
) -> DocumentUploadResponse:
    if file is None or not file.filename or not client_id:
        raise ValidationError("File or clientId missing")

    suffix = Path(file.filename).suffix.lower()
    if suffix not in TextExtractor.SUPPORTED_SUFFIXES:
        raise HTTPException(
            status_code=415,
            detail=(
                f"Unsupported file type: {suffix or file.filename}. "
                f"Allowed: {', '.join(sorted(TextExtractor.SUPPORTED_SUFFIXES))}"
            ),
        )

    data = await _read_upload(file)
    metadata = await document_store.save_document(file.filename, data, client_id)
    return DocumentUploadResponse(file_name=metadata.file_name)


@router.post(
    "/documents/latest",
    response_model=LatestDocumentResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Most recently uploaded document for a client",
)
async def latest_document(
    body: LatestDocumentRequest,
    document_store: DocumentStoreDep,
) -> LatestDocumentResponse:
    if not body.client_id:
        raise ValidationError("Missing clientId")

    records = await document_store.list_metadata(body.client_id)
    if not records:
        raise NotFoundError("No files found for this clientId")

    latest = max(records, key=lambda record: record.uploaded_at)
    return LatestDocumentResponse(file_name=latest.file_name)


@router.post(
    "/documents/ingest",
    response_model=IngestResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
    summary="Extract, chunk, embed, and index an uploaded document",
)
async def ingest_document(body: IngestRequest, ingestion: IngestionDep) -> IngestResponse:
    if not body.file_name or not body.client_id:
        raise ValidationError("Missing documentName or clientId")

    result = await ingestion.ingest_document(body.file_name, body.client_id)
    return IngestResponse(
        message="Embedding complete",
        namespace=result.namespace,
        chunks=result.chunks_created,
    )


@router.post(
    "/documents/summarize",
    response_model=SummarizeResponse | SummarizeWarningResponse,
    responses={
        400: {"model": ErrorResponse},
        500: {"model": SummarizeErrorResponse},
    },
    summary="Summarize an ingested document and tear down its namespace",
)
async def summarize_document(
    body: SummarizeRequest,
    summarization: SummarizationDep,
) -> Any:
    if not body.client_id or not body.file_name:
        raise ValidationError("Missing clientId or fileName")

    try:
        result = await summarization.summarize(body.client_id, body.file_name, body.style)
    except (ValidationError, ConfigurationError):
        raise
    except Exception as exc:
        _logger.exception(
            "summarize_failed",
            client_id=body.client_id,
            file_name=body.file_name,
            error=str(exc),
        )
        return JSONResponse(
            status_code=500,
            content=SummarizeErrorResponse(details=str(exc)).model_dump(),
        )

    if isinstance(result, NoContentWarning):
        return SummarizeWarningResponse(
            warning=result.warning,
            metadata=result.model_dump(by_alias=True, exclude={"warning"}),
        )
    return SummarizeResponse(data=SummaryData(summary=result.summary, metadata=result.metadata))


# ---------------------------------------------------------------------------
# Quiz
# ---------------------------------------------------------------------------


@router.post(
    "/quiz",
    response_model=QuizResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    summary="Generate a three-question multiple-choice quiz from a summary",
)
async def generate_quiz(body: QuizRequest, quiz: QuizDep) -> QuizResponse:
    questions = await quiz.generate(body.summary or "")
    return QuizResponse(quiz=questions)


# ---------------------------------------------------------------------------
# Images
# ---------------------------------------------------------------------------


@router.post(
    "/images/upload",
    response_model=ImageUploadResponse,
    responses={400: {"model": ErrorResponse}, 413: {"model": ErrorResponse}},
    summary="Upload an image for captioning",
)
async def upload_image(
    document_store: DocumentStoreDep,
    file: Annotated[UploadFile | None, File()] = None,
    client_id: Annotated[str | None, Form(alias="clientId")] = None,
) -> ImageUploadResponse:
    if file is None or not file.filename or not client_id:
        raise ValidationError("Missing file or clientId")

    content_type = file.content_type or ""
    if not content_type.startswith("image/"):
        raise HTTPException(status_code=415, detail=f"Unsupported file type: {content_type}")

    data = await _read_upload(file)
    metadata = await document_store.save_image(file.filename, data, content_type, client_id)
    return ImageUploadResponse(filename=metadata.saved_name, metadata=metadata.to_record())


@router.post(
    "/images/caption",
    response_model=CaptionResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
    summary="Describe an uploaded image in two or three lines",
)
async def caption_image(body: CaptionRequest, captions: CaptionDep) -> CaptionResponse:
    if not body.image_file_name:
        raise ValidationError("Missing fileName")

    caption = await captions.caption(body.image_file_name)
    return CaptionResponse(caption=caption)


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Application health check",
)
async def health_check(request: Request) -> HealthResponse:
    """Return application health, version, and provider availability."""
    providers: dict[str, Any] = {}
    if hasattr(request.app.state, "provider_registry"):
        providers = dict(request.app.state.provider_registry)

    settings = getattr(request.app.state, "settings", None)
    missing = settings.missing_service_keys() if settings is not None else []
    providers["missing_configuration"] = missing

    critical = ("llm", "embedding", "vector_store")
    if all(providers.get(name, False) for name in critical) and not missing:
        status = "healthy"
    elif providers.get("vector_store", False):
        status = "degraded"
    else:
        status = "unhealthy"

    return HealthResponse(status=status, version="0.1.0", providers=providers)
