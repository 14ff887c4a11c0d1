"""Namespace lifecycle: tear down a document's vectors and stored files.

Teardown is best-effort and never raises.  The namespace delete is always
attempted; the raw document and its metadata record are deleted only when
the record names the requesting client as the owner.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from luminai.models.summary import TeardownResult

if TYPE_CHECKING:
    from luminai.interfaces.document_store import IDocumentStore
    from luminai.interfaces.vector_store_provider import IVectorStoreProvider

logger = structlog.get_logger(logger_name=__name__)


class TeardownService:
    """Removes a summarized document's namespace and owned files."""

    def __init__(
        self,
        vector_store: IVectorStoreProvider,
        document_store: IDocumentStore,
    ) -> None:
        self._vector_store = vector_store
        self._document_store = document_store

    async def teardown(self, namespace: str, client_id: str, file_name: str) -> TeardownResult:
        namespace_deleted = await self._delete_namespace(namespace)
        files_deleted = await self._delete_owned_files(client_id, file_name)

        logger.info(
            "teardown_complete",
            namespace=namespace,
            namespace_deleted=namespace_deleted,
            files_deleted=files_deleted,
        )
        return TeardownResult(namespace_deleted=namespace_deleted, files_deleted=files_deleted)

    async def _delete_namespace(self, namespace: str) -> bool:
        try:
            removed = await self._vector_store.delete_namespace(namespace)
        except Exception as exc:
            logger.warning("teardown_namespace_failed", namespace=namespace, error=str(exc))
            return False
        return removed > 0

    async def _delete_owned_files(self, client_id: str, file_name: str) -> bool:
        try:
            metadata = await self._document_store.read_metadata(file_name)
            if metadata is None:
                logger.info("teardown_metadata_missing", file_name=file_name)
                return False
            if not metadata.is_owned_by(client_id):
                logger.warning(
                    "teardown_ownership_mismatch",
                    file_name=file_name,
                    client_id=client_id,
                )
                return False
            return await self._document_store.delete_document(file_name)
        except Exception as exc:
            logger.warning("teardown_files_failed", file_name=file_name, error=str(exc))
            return False
