"""Text responses for the MCP tools, independent of the transport."""

import logging
from typing import Any, Optional

from coderag.errors import RagError, UnexpectedError
from coderag.service import RagService

logger = logging.getLogger(__name__)


class ToolHandler:
    """Run service operations and turn their outcome into short messages.

    Expected failures (``RagError``) become ``"Error: <message>"``; anything
    else is logged with its traceback and reported the same way.
    """

    def __init__(self, service: RagService):
        self.service = service

    @staticmethod
    def _error(tool: str, exc: Exception) -> str:
        if isinstance(exc, RagError):
            logger.error(f"{tool} failed: {exc}")
            return f"Error: {exc}"
        logger.exception(f"Unexpected error in {tool}")
        error = UnexpectedError(f"Unexpected failure: {exc}")
        return f"Error: {error}"

    def index_documents(self, path: str) -> str:
        try:
            report = self.service.index(path)
        except Exception as e:
            return self._error("index_documents", e)

        message = (
            f"Successfully indexed {report.chunks_indexed} chunks "
            f"from {report.files} files in {path}"
        )
        if report.chunks_skipped:
            message += f" ({report.chunks_skipped} chunks skipped)"
        return message

    def query_documents(
        self,
        query: str,
        k: Optional[int] = None,
        filter: Optional[dict[str, Any]] = None,
    ) -> str:
        try:
            return self.service.query(query, k=k, where=filter)
        except Exception as e:
            return self._error("query_documents", e)

    def remove_document(self, path: str) -> str:
        try:
            self.service.remove_document(path)
        except Exception as e:
            return self._error("remove_document", e)
        return f"Successfully requested removal of document: {path}"

    def remove_all_documents(self, confirm: bool) -> str:
        try:
            removed = self.service.remove_all(confirm)
        except Exception as e:
            return self._error("remove_all_documents", e)
        return f"Successfully removed all documents ({removed} chunks)."

    def list_documents(self) -> str:
        try:
            paths = self.service.list_sources()
        except Exception as e:
            return self._error("list_documents", e)

        if not paths:
            return "No documents found in the index."
        lines = "\n".join(f"- {path}" for path in paths)
        return f"Found {len(paths)} unique document paths in the index:\n\n{lines}"
