"""Filesystem-backed document store.

Documents live at ``{uploads_dir}/{fileName}`` with a JSON ownership record
at ``{metadata_dir}/{fileName}.json``.  Images get a unique generated name
(``{epoch_ms}-{uuid}.{ext}``) under ``image_uploads_dir`` with a matching
record under ``image_metadata_dir``.  Blocking file I/O runs in a worker
thread via :func:`asyncio.to_thread`.
"""

from __future__ import annotations

import asyncio
import json
import time
import uuid
from pathlib import Path

import structlog
from pydantic import ValidationError as PydanticValidationError

from luminai.interfaces.document_store import IDocumentStore
from luminai.models.document import DocumentMetadata, ImageMetadata
from luminai.utils.errors import NotFoundError, ValidationError

logger = structlog.get_logger(logger_name=__name__)


def _safe_name(file_name: str) -> str:
    """Reject names that would escape the storage directory."""
    name = Path(file_name).name
    if not name or name != file_name or name in {".", ".."}:
        raise ValidationError(f"Invalid file name: {file_name!r}")
    return name


class LocalDocumentStore(IDocumentStore):
    """Blob and metadata store on the local filesystem."""

    def __init__(
        self,
        uploads_dir: str | Path = "./public/uploads",
        metadata_dir: str | Path = "./public/metadata",
        image_uploads_dir: str | Path = "./public/uploads_img",
        image_metadata_dir: str | Path = "./public/metadata_img",
    ) -> None:
        self._uploads_dir = Path(uploads_dir)
        self._metadata_dir = Path(metadata_dir)
        self._image_uploads_dir = Path(image_uploads_dir)
        self._image_metadata_dir = Path(image_metadata_dir)

    def initialize(self) -> None:
        """Create the storage directories if they don't exist."""
        for directory in (
            self._uploads_dir,
            self._metadata_dir,
            self._image_uploads_dir,
            self._image_metadata_dir,
        ):
            directory.mkdir(parents=True, exist_ok=True)
        logger.info("document_store_initialized", uploads_dir=str(self._uploads_dir))

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    async def save_document(self, file_name: str, data: bytes, client_id: str) -> DocumentMetadata:
        name = _safe_name(file_name)
        metadata = DocumentMetadata(file_name=name, client_id=client_id)

        def _write() -> None:
            self._uploads_dir.mkdir(parents=True, exist_ok=True)
            self._metadata_dir.mkdir(parents=True, exist_ok=True)
            (self._uploads_dir / name).write_bytes(data)
            self._metadata_path(name).write_text(
                json.dumps(metadata.to_record(), indent=2), encoding="utf-8"
            )

        await asyncio.to_thread(_write)
        logger.info("document_saved", file_name=name, client_id=client_id, size=len(data))
        return metadata

    async def document_exists(self, file_name: str) -> bool:
        return await asyncio.to_thread(Path(self.document_path(file_name)).is_file)

    def document_path(self, file_name: str) -> str:
        return str(self._uploads_dir / _safe_name(file_name))

    async def read_metadata(self, file_name: str) -> DocumentMetadata | None:
        path = self._metadata_path(_safe_name(file_name))
        return await asyncio.to_thread(self._load_metadata, path)

    async def delete_document(self, file_name: str) -> bool:
        name = _safe_name(file_name)

        def _unlink() -> bool:
            removed = False
            for path in (self._uploads_dir / name, self._metadata_path(name)):
                try:
                    path.unlink()
                    removed = True
                except FileNotFoundError:
                    continue
            return removed

        removed = await asyncio.to_thread(_unlink)
        logger.info("document_deleted", file_name=name, removed=removed)
        return removed

    async def list_metadata(self, client_id: str) -> list[DocumentMetadata]:
        def _scan() -> list[DocumentMetadata]:
            if not self._metadata_dir.is_dir():
                return []
            records = []
            for path in self._metadata_dir.glob("*.json"):
                record = self._load_metadata(path)
                if record is not None and record.is_owned_by(client_id):
                    records.append(record)
            return records

        return await asyncio.to_thread(_scan)

    # ------------------------------------------------------------------
    # Images
    # ------------------------------------------------------------------

    async def save_image(
        self,
        original_name: str,
        data: bytes,
        content_type: str,
        client_id: str,
    ) -> ImageMetadata:
        ext = Path(original_name).suffix.lstrip(".").lower() or "bin"
        saved_name = f"{int(time.time() * 1000)}-{uuid.uuid4()}.{ext}"
        metadata = ImageMetadata(
            original_name=original_name,
            saved_name=saved_name,
            content_type=content_type,
            size=len(data),
            client_id=client_id,
        )

        def _write() -> None:
            self._image_uploads_dir.mkdir(parents=True, exist_ok=True)
            self._image_metadata_dir.mkdir(parents=True, exist_ok=True)
            (self._image_uploads_dir / saved_name).write_bytes(data)
            (self._image_metadata_dir / f"{saved_name}.json").write_text(
                json.dumps(metadata.to_record(), indent=2), encoding="utf-8"
            )

        await asyncio.to_thread(_write)
        logger.info("image_saved", saved_name=saved_name, client_id=client_id, size=len(data))
        return metadata

    async def read_image(self, saved_name: str) -> bytes:
        path = self._image_uploads_dir / _safe_name(saved_name)
        try:
            return await asyncio.to_thread(path.read_bytes)
        except FileNotFoundError as exc:
            raise NotFoundError(f"Image not found: {saved_name}") from exc

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _metadata_path(self, name: str) -> Path:
        return self._metadata_dir / f"{name}.json"

    @staticmethod
    def _load_metadata(path: Path) -> DocumentMetadata | None:
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
            return DocumentMetadata.model_validate(raw)
        except FileNotFoundError:
            return None
        except (json.JSONDecodeError, PydanticValidationError, OSError) as exc:
            logger.warning("metadata_unreadable", path=str(path), error=str(exc))
            return None
