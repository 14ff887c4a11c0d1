"""Custom exception hierarchy for LuminAI.

All application exceptions inherit from :class:`LuminAIError`, which
carries an optional ``provider_name`` so error handlers can identify which
external service (e.g. "openai", "chromadb") caused the failure, plus the
HTTP ``status_code`` the API layer should answer with.

The hierarchy is organized by failure domain:

    LuminAIError  (base -- catch-all for any LuminAI error)
    +-- ValidationError        (missing / malformed request fields, 400)
    +-- NotFoundError          (referenced document or image absent, 404)
    +-- ConfigurationError     (service credentials absent, 500)
    +-- ExternalServiceError   (embedding / vector index / completion, 500)
        +-- CompletionError    (chat-completion service failure)

:class:`NoContentFound` is deliberately *not* part of the error hierarchy.
It is a control-flow signal raised by the retrieval stage when a namespace
returns zero fragments; the summarization orchestrator turns it into a soft
warning instead of a failed request.
"""

from __future__ import annotations

from typing import Any


class LuminAIError(Exception):
    """Base exception for all LuminAI errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name`` identifying which external service triggered the
    error.  The ``__str__`` method prefixes the provider name in brackets
    for structured log output, e.g. ``[openai] Rate limit exceeded``.
    """

    status_code: int = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Request errors
# ---------------------------------------------------------------------------

class ValidationError(LuminAIError):
    """Raised when a request is missing required fields. Never retried."""

    status_code = 400

    def __init__(
        self,
        message: str = "Missing required fields",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class NotFoundError(LuminAIError):
    """Raised when a referenced document, image, or metadata record is absent."""

    status_code = 404

    def __init__(
        self,
        message: str = "Resource not found",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Configuration errors
# ---------------------------------------------------------------------------

class ConfigurationError(LuminAIError):
    """Raised when required service credentials are absent.

    Surfaced before any external call is attempted.
    """

    def __init__(
        self,
        message: str = "Missing environment configuration.",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# External service errors
# ---------------------------------------------------------------------------

class ExternalServiceError(LuminAIError):
    """Raised when the embedding, vector-index or completion service fails.

    ``service`` tags which collaborator failed (``"embedding"``,
    ``"vector_index"`` or ``"completion"``) and ``details`` carries the
    upstream error text for the response body.
    """

    def __init__(
        self,
        message: str = "External service call failed",
        provider_name: str | None = None,
        service: str = "unknown",
        details: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
        self._service = service
        self._details = details

    @property
    def service(self) -> str:
        return self._service

    @property
    def details(self) -> str | None:
        return self._details


class CompletionError(ExternalServiceError):
    """Raised when a chat-completion call fails or returns unusable output."""

    def __init__(
        self,
        message: str = "Completion service call failed",
        provider_name: str | None = None,
        details: str | None = None,
    ) -> None:
        super().__init__(
            message=message,
            provider_name=provider_name,
            service="completion",
            details=details,
        )


# ---------------------------------------------------------------------------
# Retrieval signal
# ---------------------------------------------------------------------------

class NoContentFound(Exception):  # noqa: N818 -- a signal, not an error
    """Similarity search returned zero fragments for a namespace.

    Carries the diagnostic metadata the caller needs to render a soft
    warning: the namespace that was searched and the query that was used.
    """

    def __init__(self, namespace: str, query: str) -> None:
        self.namespace = namespace
        self.query = query
        super().__init__(f"No relevant chunks found in namespace '{namespace}'")

    def to_metadata(self) -> dict[str, Any]:
        return {"namespace": self.namespace, "queryUsed": self.query}
