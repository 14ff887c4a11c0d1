"""Utility modules for LuminAI.

Available utility modules (all re-exported here for convenience):

- **errors** -- Domain-specific exception hierarchy rooted at LuminAIError;
  each carries the HTTP status the API layer answers with.  Also defines
  the NoContentFound retrieval signal.
- **logging** -- structlog setup with a dual-renderer pattern: coloured
  console output in development, structured JSON in production.
- **namespace** -- per-client, per-document isolation key for the vector
  index.
- **retry** -- bounded-retry state machine with pluggable acceptance
  predicates and an injectable sleep.
"""

# -- Domain exception hierarchy --------------------------------------------
from luminai.utils.errors import (
    CompletionError,
    ConfigurationError,
    ExternalServiceError,
    LuminAIError,
    NoContentFound,
    NotFoundError,
    ValidationError,
)

# -- Structured logging setup ----------------------------------------------
from luminai.utils.logging import configure_logging, get_logger

# -- Isolation key ---------------------------------------------------------
from luminai.utils.namespace import build_namespace, document_base_name

# -- Bounded retry ---------------------------------------------------------
from luminai.utils.retry import (
    ResilientCaller,
    RetryOutcome,
    RetryPolicy,
    RetryState,
    caption_policy,
    single_attempt_policy,
)

__all__ = [
    "CompletionError",
    "ConfigurationError",
    "ExternalServiceError",
    "LuminAIError",
    "NoContentFound",
    "NotFoundError",
    "ResilientCaller",
    "RetryOutcome",
    "RetryPolicy",
    "RetryState",
    "ValidationError",
    "build_namespace",
    "caption_policy",
    "configure_logging",
    "document_base_name",
    "get_logger",
    "single_attempt_policy",
]
