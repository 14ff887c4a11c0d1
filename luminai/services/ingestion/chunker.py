"""Recursive character chunking with overlapping windows.

Splits extracted document text into :class:`~luminai.models.rag.DocumentChunk`
objects of at most ``chunk_size`` characters, with consecutive fragments
sharing up to ``chunk_overlap`` characters of text.

Window boundaries prefer, in order: a paragraph break (``"\\n\\n"``), a line
break (``"\\n"``), a sentence end (``". "``), and a word break (``" "``).
When none of those occurs inside the window, the window is cut at exactly
``chunk_size`` characters.

Every fragment is an exact slice of the source text and carries its
``start_offset``, so :func:`merge_fragments` can rebuild the original text
by dropping the overlapping prefixes.
"""

from __future__ import annotations

import structlog

from luminai.models.rag import DocumentChunk, make_chunk_id

logger = structlog.get_logger(logger_name=__name__)

DEFAULT_SEPARATORS: tuple[str, ...] = ("\n\n", "\n", ". ", " ")


class TextChunker:
    """Splits text into overlapping, boundary-aware character windows.

    Parameters
    ----------
    chunk_size:
        Maximum number of characters per fragment (default 1000).
    overlap:
        Maximum number of characters shared by consecutive fragments
        (default 200).  Must be smaller than ``chunk_size``.
    separators:
        Boundary strings in order of preference.
    """

    def __init__(
        self,
        chunk_size: int = 1000,
        overlap: int = 200,
        separators: tuple[str, ...] = DEFAULT_SEPARATORS,
    ) -> None:
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        if not 0 <= overlap < chunk_size:
            raise ValueError("overlap must be >= 0 and smaller than chunk_size")
        self._chunk_size = chunk_size
        self._overlap = overlap
        self._separators = separators

    @property
    def chunk_size(self) -> int:
        return self._chunk_size

    @property
    def overlap(self) -> int:
        return self._overlap

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def chunk(self, text: str, source_metadata: dict[str, object]) -> list[DocumentChunk]:
        """Split *text* into overlapping :class:`DocumentChunk` objects.

        Parameters
        ----------
        text:
            The full extracted text of one document.
        source_metadata:
            Expected keys: ``namespace`` and ``source_file``.  Both are
            copied into every fragment; ``namespace`` also seeds the
            fragment identity.

        Returns
        -------
        list[DocumentChunk]
            One fragment per window, in document order.  Empty or
            whitespace-only input returns an empty list.
        """
        if not text or not text.strip():
            return []

        namespace = str(source_metadata.get("namespace", ""))
        source_file = str(source_metadata.get("source_file", ""))

        chunks: list[DocumentChunk] = []
        for start, end in self._window_spans(text):
            piece = text[start:end]
            if not piece:
                continue
            index = len(chunks)
            chunks.append(
                DocumentChunk(
                    chunk_id=make_chunk_id(namespace, index),
                    text=piece,
                    namespace=namespace,
                    chunk_index=index,
                    source_file=source_file,
                    start_offset=start,
                )
            )

        logger.debug(
            "chunking_complete",
            num_chunks=len(chunks),
            total_characters=len(text),
            namespace=namespace,
        )
        return chunks

    def split_text(self, text: str) -> list[str]:
        """Return the raw window slices of *text* (no metadata)."""
        if not text:
            return []
        return [text[start:end] for start, end in self._window_spans(text)]

    # ------------------------------------------------------------------
    # Window selection
    # ------------------------------------------------------------------

    def _window_spans(self, text: str) -> list[tuple[int, int]]:
        spans: list[tuple[int, int]] = []
        length = len(text)
        start = 0
        while start < length:
            limit = start + self._chunk_size
            if limit >= length:
                spans.append((start, length))
                break

            end = self._find_break(text, start, limit)
            spans.append((start, end))

            next_start = self._find_overlap_start(text, end)
            if next_start <= start:
                next_start = end
            start = next_start
        return spans

    def _find_break(self, text: str, start: int, limit: int) -> int:
        """Return the end of the window beginning at *start*.

        The break lands just after the last occurrence of the most preferred
        separator found in ``text[start:limit]``.  Breaks that would leave a
        window no longer than the overlap are ignored so the walk always
        advances.
        """
        floor = start + self._overlap
        for sep in self._separators:
            idx = text.rfind(sep, start, limit)
            if idx == -1:
                continue
            end = idx + len(sep)
            if end > floor:
                return end
        return limit

    def _find_overlap_start(self, text: str, end: int) -> int:
        """Pick where the next window begins, within ``overlap`` of *end*.

        Prefers to start right after a separator so the shared text begins
        on a boundary; falls back to exactly ``overlap`` characters back.
        """
        if self._overlap == 0:
            return end
        lower = end - self._overlap
        for sep in self._separators:
            idx = text.find(sep, lower, end)
            if idx == -1:
                continue
            candidate = idx + len(sep)
            if candidate < end:
                return candidate
        return lower


def merge_fragments(chunks: list[DocumentChunk]) -> str:
    """Rebuild the source text from fragments produced by :class:`TextChunker`.

    Fragments must be in document order.  The overlapping prefix of each
    fragment (the part before the end of the text rebuilt so far) is dropped.

    Raises
    ------
    ValueError
        If a fragment starts past the end of the text rebuilt so far.
    """
    merged = ""
    for chunk in sorted(chunks, key=lambda c: c.chunk_index):
        if chunk.start_offset > len(merged):
            raise ValueError(
                f"fragment {chunk.chunk_index} starts at {chunk.start_offset}, "
                f"past the {len(merged)} characters rebuilt so far"
            )
        merged += chunk.text[len(merged) - chunk.start_offset :]
    return merged
