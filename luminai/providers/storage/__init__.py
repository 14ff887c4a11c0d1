"""Blob + metadata storage for uploaded documents and images."""

from luminai.providers.storage.local_document_store import LocalDocumentStore

__all__ = ["LocalDocumentStore"]
