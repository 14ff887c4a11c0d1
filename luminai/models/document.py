"""Persisted metadata records for uploaded documents and images.

The metadata record is the only durable state the pipeline depends on
besides the vector index.  It is stored as JSON keyed by filename, with
camelCase keys (``fileName``, ``clientId``, ``uploadedAt``) so records
written by earlier versions of the service remain readable.
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)  # noqa: UP017


class DocumentMetadata(BaseModel):
    """Ownership record for an uploaded document."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    file_name: str = Field(alias="fileName")
    client_id: str = Field(alias="clientId")
    uploaded_at: datetime = Field(default_factory=_utcnow, alias="uploadedAt")

    def is_owned_by(self, client_id: str) -> bool:
        return self.client_id == client_id

    def to_record(self) -> dict[str, str]:
        return {
            "fileName": self.file_name,
            "clientId": self.client_id,
            "uploadedAt": self.uploaded_at.isoformat(),
        }


class ImageMetadata(BaseModel):
    """Metadata record for an uploaded image awaiting captioning."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    original_name: str = Field(alias="originalName")
    saved_name: str = Field(alias="savedName")
    content_type: str = Field(default="", alias="type")
    size: int = Field(default=0, ge=0)
    client_id: str = Field(alias="clientId")
    uploaded_at: datetime = Field(default_factory=_utcnow, alias="uploadedAt")

    def to_record(self) -> dict[str, str | int]:
        return {
            "originalName": self.original_name,
            "savedName": self.saved_name,
            "type": self.content_type,
            "size": self.size,
            "clientId": self.client_id,
            "uploadedAt": self.uploaded_at.isoformat(),
        }
