"""Plain-text extraction from uploaded documents.

PDFs are read page by page with PyMuPDF (``fitz``); ``.txt`` and ``.md``
files are decoded as UTF-8.  Pages are joined with a blank line so the
chunker sees page breaks as paragraph boundaries.
"""

from __future__ import annotations

from pathlib import Path

import fitz  # PyMuPDF -- the "fitz" import name is a PyMuPDF convention
import structlog

from luminai.utils.errors import NotFoundError, ValidationError

logger = structlog.get_logger(logger_name=__name__)

_TEXT_SUFFIXES = frozenset({".txt", ".md", ".markdown"})


class TextExtractor:
    """Reads a stored document and returns its text content."""

    SUPPORTED_SUFFIXES = frozenset({".pdf"}) | _TEXT_SUFFIXES

    def extract(self, file_path: str) -> str:
        """Return the extracted text of the file at *file_path*.

        Raises
        ------
        NotFoundError
            If the file does not exist.
        ValidationError
            If the file type is not supported.
        """
        path = Path(file_path)
        if not path.is_file():
            raise NotFoundError(f"Document not found: {path.name}")

        suffix = path.suffix.lower()
        if suffix == ".pdf":
            return self._extract_pdf(path)
        if suffix in _TEXT_SUFFIXES:
            return path.read_text(encoding="utf-8", errors="replace")
        raise ValidationError(f"Unsupported document type: {suffix or path.name}")

    @staticmethod
    def _extract_pdf(path: Path) -> str:
        pages: list[str] = []
        try:
            doc = fitz.open(str(path))
        except RuntimeError as exc:
            # FileDataError and friends subclass RuntimeError.
            logger.error("pdf_open_failed", file_path=str(path), error=str(exc))
            raise ValidationError(f"Unreadable PDF: {path.name}") from exc
        with doc:
            for page in doc:
                text = page.get_text("text").strip()
                if text:
                    pages.append(text)

        if not pages:
            logger.warning("pdf_no_text_extracted", file_path=str(path))
        else:
            logger.info("pdf_text_extracted", file_path=str(path), pages=len(pages))
        return "\n\n".join(pages)
