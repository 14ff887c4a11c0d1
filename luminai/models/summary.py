"""Models produced by the retrieval, summarization, and teardown stages.

None of these are persisted: a summary exists only in the response payload
of the request that produced it.  Serialization uses camelCase aliases
(``chunksUsed``, ``summarizedChunks``, ``namespaceDeleted``...) to match the
HTTP contract.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class SummaryStyle(str, Enum):
    """Length/depth flag injected into the summarization system prompt."""

    CONCISE = "concise"
    DETAILED = "detailed"


class RetrievalResult(BaseModel):
    """Deduplicated fragments and the size-bounded groups packed from them."""

    model_config = ConfigDict(frozen=True)

    namespace: str
    query: str
    chunks: list[str] = Field(default_factory=list)
    groups: list[str] = Field(default_factory=list)


class GroupOutcome(BaseModel):
    """Result of summarizing one group: a summary or the reason it was skipped."""

    model_config = ConfigDict(frozen=True)

    index: int = Field(ge=0)
    summary: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.summary is not None


class TeardownResult(BaseModel):
    """Which parts of a namespace teardown actually happened."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    namespace_deleted: bool = False
    files_deleted: bool = False


class SummaryMetadata(BaseModel):
    """Accounting attached to a completed summarization pass."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    client_id: str
    file_name: str
    namespace: str
    chunks_used: int = Field(ge=0, description="Unique fragments fed into grouping.")
    group_count: int = Field(ge=0, description="Summary groups packed from the fragments.")
    summarized_chunks: int = Field(ge=0, description="Groups whose summary was accepted.")
    model: str
    style: SummaryStyle
    timestamp: datetime
    namespace_deleted: bool = False
    files_deleted: bool = False
    owner_verified: bool = Field(
        default=False, description="The upload record names the requesting client."
    )


class SummaryResult(BaseModel):
    """A completed summarization pass (possibly with the fallback sentence)."""

    model_config = ConfigDict(frozen=True)

    summary: str
    metadata: SummaryMetadata
    outcomes: list[GroupOutcome] = Field(default_factory=list, exclude=True)


class NoContentWarning(BaseModel):
    """Soft-warning result when retrieval found nothing in the namespace."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    warning: str
    client_id: str
    file_name: str
    namespace: str
    query_used: str
