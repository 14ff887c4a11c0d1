"""Retrieval-and-grouping stage of the summarization pipeline.

Pulls the fragments that best answer a fixed analytical query out of a
document's namespace, removes duplicates, and packs them into groups small
enough for a single completion call.

The pure helpers (:func:`dedupe_chunks`, :func:`pack_groups`,
:func:`truncate_at_last_sentence`) carry all of the text logic and are
usable without any provider.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from luminai.config.settings import ANALYTICAL_QUERY
from luminai.models.summary import RetrievalResult
from luminai.utils.errors import NoContentFound

if TYPE_CHECKING:
    from luminai.interfaces.vector_store_provider import IVectorStoreProvider

logger = structlog.get_logger(logger_name=__name__)

GROUP_SEPARATOR = "\n\n"


def dedupe_chunks(texts: list[str]) -> list[str]:
    """Drop repeated fragments, comparing whitespace-trimmed text.

    First-seen order is preserved and the trimmed text is returned.  Blank
    fragments are dropped.
    """
    seen: set[str] = set()
    unique: list[str] = []
    for text in texts:
        trimmed = text.strip()
        if not trimmed or trimmed in seen:
            continue
        seen.add(trimmed)
        unique.append(trimmed)
    return unique


def truncate_at_last_sentence(text: str, max_length: int) -> str:
    """Bound *text* to *max_length* characters, preferring a sentence end.

    Text already within the bound is returned unchanged.  Otherwise the
    prefix is cut just after the last ``"."`` found before its final
    character; when there is none the raw prefix is returned.  A period in
    the final slot is not treated as a sentence end, since the character
    that follows it lies outside the bound.

    >>> truncate_at_last_sentence("A. B. C", 5)
    'A.'
    """
    if len(text) <= max_length:
        return text
    prefix = text[:max_length]
    last_period = prefix.rfind(".", 0, max_length - 1)
    if last_period == -1:
        return prefix
    return prefix[: last_period + 1]


def pack_groups(chunks: list[str], max_chars: int = 1800) -> list[str]:
    """Greedily pack *chunks* into blank-line-joined groups of <= *max_chars*.

    A chunk that would push the current group past the bound starts a new
    group.  A single chunk longer than the bound is first shortened with
    :func:`truncate_at_last_sentence`, so no group ever exceeds it.
    """
    groups: list[str] = []
    buffer = ""
    for chunk in chunks:
        piece = truncate_at_last_sentence(chunk, max_chars)
        if not piece:
            continue
        if not buffer:
            buffer = piece
        elif len(buffer) + len(GROUP_SEPARATOR) + len(piece) > max_chars:
            groups.append(buffer.strip())
            buffer = piece
        else:
            buffer += GROUP_SEPARATOR + piece
    if buffer.strip():
        groups.append(buffer.strip())
    return groups


class RetrievalService:
    """Runs the fixed analytical query against one namespace and groups the hits."""

    def __init__(
        self,
        vector_store: IVectorStoreProvider,
        query: str = ANALYTICAL_QUERY,
        top_k: int = 20,
        max_group_chars: int = 1800,
    ) -> None:
        self._vector_store = vector_store
        self._query = query
        self._top_k = top_k
        self._max_group_chars = max_group_chars

    @property
    def query(self) -> str:
        return self._query

    async def retrieve_groups(self, namespace: str) -> RetrievalResult:
        """Retrieve, deduplicate and pack the namespace's most relevant fragments.

        Raises
        ------
        NoContentFound
            If the similarity search returned no fragments.
        ExternalServiceError
            If the vector index call fails.
        """
        hits = await self._vector_store.query(namespace, self._query, top_k=self._top_k)
        if not hits:
            logger.info("retrieval_no_content", namespace=namespace)
            raise NoContentFound(namespace=namespace, query=self._query)

        chunks = dedupe_chunks([hit.text for hit in hits])
        if not chunks:
            raise NoContentFound(namespace=namespace, query=self._query)

        groups = [
            truncate_at_last_sentence(group, self._max_group_chars)
            for group in pack_groups(chunks, self._max_group_chars)
        ]

        logger.info(
            "retrieval_complete",
            namespace=namespace,
            hits=len(hits),
            unique_chunks=len(chunks),
            groups=len(groups),
        )
        return RetrievalResult(
            namespace=namespace,
            query=self._query,
            chunks=chunks,
            groups=groups,
        )
