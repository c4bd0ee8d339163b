"""MCP transport for coderag."""

from coderag.server.mcp_server import create_mcp_server
from coderag.server.tools import ToolHandler

__all__ = ["ToolHandler", "create_mcp_server"]
