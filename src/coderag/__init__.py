"""coderag - semantic project index served over MCP."""

__version__ = "0.1.0"
