"""Document ingestion pipeline for the LuminAI vector index.

Orchestrates **extract -> chunk -> embed -> store**:

1. **Extract** (text_extractor.py / TextExtractor) -- PDF text via PyMuPDF,
   plain text for ``.txt`` / ``.md``.
2. **Chunk** (chunker.py / TextChunker) -- ~1000-character windows with up
   to 200 characters of overlap, split on paragraph, line, sentence and
   word boundaries in that order of preference.
3. **Embed** (via IEmbeddingProvider) -- one batch call per document.
4. **Store** (via IVectorStoreProvider) -- upsert under the document's
   namespace.
"""

from luminai.services.ingestion.chunker import TextChunker, merge_fragments
from luminai.services.ingestion.ingestion_service import IngestionService
from luminai.services.ingestion.text_extractor import TextExtractor

__all__ = [
    "IngestionService",
    "TextChunker",
    "TextExtractor",
    "merge_fragments",
]
