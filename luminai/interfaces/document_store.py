"""Abstract base class for the blob + metadata store behind uploads.

Raw documents and images are kept in a simple blob store keyed by
filename, each with a JSON metadata record recording the owning client.
This is the only shared mutable resource across concurrent requests; there
is no cross-request locking, so concurrent writes to the same filename are
last-writer-wins.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from luminai.models.document import DocumentMetadata, ImageMetadata


# Concrete implementation: LocalDocumentStore (luminai/providers/storage/)
class IDocumentStore(ABC):
    """Contract for document/image blob and metadata persistence."""

    # -- Documents ---------------------------------------------------------

    @abstractmethod
    async def save_document(self, file_name: str, data: bytes, client_id: str) -> DocumentMetadata:
        """Write the blob and its ownership record, overwriting any previous one."""

    @abstractmethod
    async def document_exists(self, file_name: str) -> bool:
        """Return ``True`` if the raw document blob is present."""

    @abstractmethod
    def document_path(self, file_name: str) -> str:
        """Return a local filesystem path for the blob (for text extraction)."""

    @abstractmethod
    async def read_metadata(self, file_name: str) -> DocumentMetadata | None:
        """Return the ownership record, or ``None`` if missing or unreadable."""

    @abstractmethod
    async def delete_document(self, file_name: str) -> bool:
        """Delete the blob and its metadata record.

        Returns ``True`` only if at least one of the two existed and was removed.
        """

    @abstractmethod
    async def list_metadata(self, client_id: str) -> list[DocumentMetadata]:
        """Return every readable metadata record owned by *client_id*."""

    # -- Images ------------------------------------------------------------

    @abstractmethod
    async def save_image(
        self,
        original_name: str,
        data: bytes,
        content_type: str,
        client_id: str,
    ) -> ImageMetadata:
        """Store an image under a freshly generated unique name."""

    @abstractmethod
    async def read_image(self, saved_name: str) -> bytes:
        """Return the image bytes.

        Raises
        ------
        luminai.utils.errors.NotFoundError
            If no image is stored under *saved_name*.
        """
