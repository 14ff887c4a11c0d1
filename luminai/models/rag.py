"""RAG pipeline data models for the LuminAI document service.

Defines Pydantic v2 models for document fragments, retrieval results, and
ingestion statistics.  All models use frozen config to enforce immutability.

Pipeline overview:

    1. INGESTION: an uploaded document's text is split into overlapping
       fragments (:class:`DocumentChunk`).
    2. EMBEDDING: each fragment is converted into a vector.
    3. STORAGE: fragments + vectors are upserted into the vector index under
       the document's namespace.
    4. RETRIEVAL: a fixed analytical query pulls the most relevant fragments
       back out (:class:`RetrievedChunk`).
    5. GENERATION: retrieved fragments are regrouped and summarized.
"""

from __future__ import annotations

import hashlib

from pydantic import BaseModel, ConfigDict, Field


def make_chunk_id(namespace: str, chunk_index: int) -> str:
    """Return the stable fragment identity for ``(namespace, chunk_index)``.

    Re-ingesting the same document produces the same identities, so an
    upsert overwrites instead of duplicating.
    """
    digest = hashlib.sha256(f"{namespace}:{chunk_index}".encode()).hexdigest()
    return f"{namespace}-{chunk_index:05d}-{digest[:12]}"


class DocumentChunk(BaseModel):
    """A fragment of a document's extracted text, ready for embedding and storage."""

    model_config = ConfigDict(frozen=True)

    chunk_id: str = Field(description="Stable fragment identity (namespace + ordinal).")
    text: str = Field(min_length=1, description="The fragment's textual content.")
    namespace: str = Field(default="", description="Isolation key the fragment belongs to.")
    chunk_index: int = Field(default=0, ge=0, description="Ordinal position in the document.")
    source_file: str = Field(default="", description="Filename of the parent document.")
    start_offset: int = Field(
        default=0,
        ge=0,
        description="Character offset of the fragment within the extracted text.",
    )


class RetrievedChunk(BaseModel):
    """A fragment returned from a similarity search, with its score.

    No minimum score is enforced; ranking is the vector index's job.
    """

    model_config = ConfigDict(frozen=True)

    chunk: DocumentChunk = Field(description="The retrieved fragment.")
    similarity_score: float = Field(
        default=0.0,
        ge=0.0,
        le=1.0,
        description="Cosine similarity between the query and this fragment.",
    )

    @property
    def text(self) -> str:
        return self.chunk.text


class IngestionResult(BaseModel):
    """Summary of a single document ingestion run."""

    model_config = ConfigDict(frozen=True)

    file_name: str = Field(description="Filename of the ingested document.")
    namespace: str = Field(description="Namespace the fragments were stored under.")
    chunks_created: int = Field(default=0, ge=0, description="Number of fragments stored.")
    total_characters: int = Field(
        default=0, ge=0, description="Length of the extracted text in characters."
    )
    ingestion_time: float = Field(
        default=0.0, ge=0.0, description="Wall-clock time in seconds for the run."
    )
