"""LuminAI API layer: routes, schemas, and middleware."""

from luminai.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from luminai.api.routes import router
from luminai.api.schemas import (
    ErrorResponse,
    HealthResponse,
    IngestResponse,
    QuizResponse,
    SummarizeResponse,
    SummarizeWarningResponse,
)

__all__ = [
    "ErrorHandlingMiddleware",
    "RequestLoggingMiddleware",
    "configure_cors",
    "router",
    "ErrorResponse",
    "HealthResponse",
    "IngestResponse",
    "QuizResponse",
    "SummarizeResponse",
    "SummarizeWarningResponse",
]
