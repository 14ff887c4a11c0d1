"""LuminAI domain models -- re-exports all public model classes.

The models are organized across four submodules by domain concern:
    - document.py -- persisted upload metadata (documents and images)
    - rag.py      -- vector-store fragments, retrieval results, ingestion stats
    - summary.py  -- retrieval groups, per-group outcomes, summary + teardown results
    - quiz.py     -- multiple-choice quiz questions
"""

from __future__ import annotations

from luminai.models.document import DocumentMetadata, ImageMetadata
from luminai.models.quiz import QuizQuestion
from luminai.models.rag import DocumentChunk, IngestionResult, RetrievedChunk, make_chunk_id
from luminai.models.summary import (
    GroupOutcome,
    NoContentWarning,
    RetrievalResult,
    SummaryMetadata,
    SummaryResult,
    SummaryStyle,
    TeardownResult,
)

__all__ = [
    "DocumentChunk",
    "DocumentMetadata",
    "GroupOutcome",
    "ImageMetadata",
    "IngestionResult",
    "NoContentWarning",
    "QuizQuestion",
    "RetrievalResult",
    "RetrievedChunk",
    "SummaryMetadata",
    "SummaryResult",
    "SummaryStyle",
    "TeardownResult",
    "make_chunk_id",
]
