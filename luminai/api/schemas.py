"""Pydantic request/response schemas for the LuminAI API.

Defines the public contract for every REST endpoint: ingestion,
summarization, quiz generation, image captioning, uploads, and health.

Request bodies accept camelCase keys (``clientId``, ``fileName``) as sent by
the browser UI; ``documentName`` is accepted as a synonym for ``fileName``
and ``imageFileName`` for the image name.  Required fields are declared
optional here and checked in the routes so that a missing field answers
400 rather than FastAPI's default 422.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from luminai.models.quiz import QuizQuestion
from luminai.models.summary import SummaryMetadata, SummaryStyle


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class IngestRequest(_CamelModel):
    """Embed a previously uploaded document into its namespace."""

    file_name: str | None = Field(
        default=None,
        validation_alias=AliasChoices("documentName", "fileName", "file_name"),
    )
    client_id: str | None = None


class SummarizeRequest(_CamelModel):
    """Summarize a previously ingested document."""

    client_id: str | None = None
    file_name: str | None = Field(
        default=None,
        validation_alias=AliasChoices("documentName", "fileName", "file_name"),
    )
    style: SummaryStyle = Field(
        default=SummaryStyle.CONCISE,
        validation_alias=AliasChoices("style", "type"),
    )


class QuizRequest(BaseModel):
    summary: str | None = None


class CaptionRequest(_CamelModel):
    image_file_name: str | None = Field(
        default=None,
        validation_alias=AliasChoices("imageFileName", "fileName", "image_file_name"),
    )


class LatestDocumentRequest(_CamelModel):
    client_id: str | None = None


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class IngestResponse(BaseModel):
    message: str
    namespace: str
    chunks: int = Field(ge=0, description="Fragments stored under the namespace.")


class SummaryData(BaseModel):
    summary: str
    metadata: SummaryMetadata


class SummarizeResponse(BaseModel):
    """A completed summarization pass (which may carry the fallback sentence)."""

    success: Literal[True] = True
    data: SummaryData


class SummarizeWarningResponse(BaseModel):
    """Soft warning: the namespace had nothing to summarize.  Still HTTP 200."""

    success: Literal[False] = False
    warning: str
    metadata: dict[str, str]


class QuizResponse(BaseModel):
    quiz: list[QuizQuestion]


class CaptionResponse(BaseModel):
    success: bool = True
    caption: str


class DocumentUploadResponse(_CamelModel):
    success: bool = True
    file_name: str


class LatestDocumentResponse(_CamelModel):
    file_name: str


class ImageUploadResponse(BaseModel):
    message: str = "Upload successful"
    filename: str
    metadata: dict[str, Any]


class HealthResponse(BaseModel):
    """Application health check response."""

    status: str
    version: str
    providers: dict[str, Any]


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str
    detail: str | None = None
    details: str | None = None


class SummarizeErrorResponse(BaseModel):
    """Body for an unexpected failure during summarization."""

    success: Literal[False] = False
    error: str = "Summary generation failed"
    details: str | None = None
    suggestion: str = "Make sure the document was embedded first, and try again."
