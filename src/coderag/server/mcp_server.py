"""FastMCP server implementation for coderag."""

import asyncio
from typing import Any, Optional

from mcp.server.fastmcp import FastMCP

from coderag.server.tools import ToolHandler
from coderag.service import RagService


def create_mcp_server(service: RagService) -> FastMCP:
    """Create an MCP server exposing the index of one project.

    Design: 1 process = 1 project root. Tool arguments are validated by
    FastMCP against the signatures below before any store access; the
    blocking work runs in a worker thread so calls can overlap.

    Args:
        service: The process-wide RagService

    Returns:
        Configured FastMCP server instance
    """
    mcp = FastMCP(
        name="coderag",
    )
    handler = ToolHandler(service)
    default_k = service.settings.top_k

    @mcp.tool()
    async def index_documents(path: str) -> str:
        """Add documents from the specified path to the RAG index.

        Args:
            path: File or directory to index, relative to the project root

        Returns:
            Summary of how many chunks were indexed
        """
        return await asyncio.to_thread(handler.index_documents, path)

    @mcp.tool()
    async def query_documents(
        query: str,
        k: int = default_k,
        filter: Optional[dict[str, Any]] = None,
    ) -> str:
        """Query indexed documents using semantic search.

        Args:
            query: The question to search documents for
            k: Number of chunks to return (default: 15)
            filter: Optional metadata filter, e.g. {"contentType": "code"}
                or {"language": "py"}

        Returns:
            Matching chunks as [DOCUMENT:name] ... [/DOCUMENT:name] blocks
        """
        return await asyncio.to_thread(handler.query_documents, query, k, filter)

    @mcp.tool()
    async def remove_document(path: str) -> str:
        """Remove a specific document from the index by file path.

        Args:
            path: Source path of the file to remove (relative to the project root)
        """
        return await asyncio.to_thread(handler.remove_document, path)

    @mcp.tool()
    async def remove_all_documents(confirm: bool) -> str:
        """Remove all documents from the index.

        Args:
            confirm: Must be true to remove all indexed data
        """
        return await asyncio.to_thread(handler.remove_all_documents, confirm)

    @mcp.tool()
    async def list_documents() -> str:
        """List all document paths in the index."""
        return await asyncio.to_thread(handler.list_documents)

    return mcp
