"""CLI entry point for coderag."""

import argparse
import json
import logging
import sys
from dataclasses import replace
from typing import Literal, Optional, cast

from coderag.config import Settings
from coderag.errors import InvalidArgumentError, RagError
from coderag.service import RagService, start_background_indexing

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    """Send logs to stderr; stdout belongs to the stdio MCP transport."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        stream=sys.stderr,
    )


def serve(service: RagService, transport: str = "stdio", startup_index: bool = True) -> None:
    """Start the MCP server, optionally indexing the project in the background.

    Args:
        service: The process-wide RagService
        transport: Transport protocol (stdio or sse)
        startup_index: Index the project root in a background thread first
    """
    # Import here to avoid loading MCP unless needed
    from coderag.server import create_mcp_server

    if startup_index:
        start_background_indexing(service)
    else:
        logger.info("Automatic project indexing is disabled")

    logger.info(f"Serving {service.settings.project_root} via {transport}")
    mcp = create_mcp_server(service)
    mcp.run(transport=cast(Literal["stdio", "sse", "streamable-http"], transport))


def index(service: RagService, path: str) -> None:
    """Index a file or directory and print a summary."""
    report = service.index(path)
    print(
        f"Indexed {report.chunks_indexed} chunks from {report.files} files in {report.path}"
        + (f" ({report.chunks_skipped} skipped)" if report.chunks_skipped else "")
    )


def query(service: RagService, text: str, k: Optional[int], filter_json: Optional[str]) -> None:
    """Run a similarity query and print the formatted result blocks."""
    where = None
    if filter_json:
        try:
            where = json.loads(filter_json)
        except json.JSONDecodeError as e:
            raise InvalidArgumentError(f"--filter is not valid JSON: {e}") from e
    print(service.query(text, k=k, where=where))


def list_documents(service: RagService) -> None:
    """Print every indexed source path."""
    paths = service.list_sources()
    if not paths:
        print("No documents found in the index.")
        return
    for path in paths:
        print(path)


def remove(service: RagService, path: str) -> None:
    """Remove one document's chunks from the index."""
    service.remove_document(path)
    print(f"Removed {path}")


def clear(service: RagService, confirm: bool) -> None:
    """Remove everything from the index."""
    removed = service.remove_all(confirm)
    print(f"Removed {removed} chunks")


def scan(service: RagService, path: Optional[str]) -> None:
    """Show what indexing would pick up, without embedding anything."""
    scanner = service.scanner()
    start = service.resolve(path) if path else None
    counts: dict[str, int] = {}
    for chunk in scanner.scan(start):
        source = chunk.metadata.source_path or "?"
        counts[source] = counts.get(source, 0) + 1

    for source, count in counts.items():
        print(f"{source:<60} {count:>6} chunks")
    print()
    print(f"{len(counts)} files, {sum(counts.values())} chunks")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="coderag",
        description="coderag - semantic search over a project, served over MCP",
    )
    parser.add_argument(
        "--root",
        help="Project root (default: RAG_PROJECT_ROOT or the current directory)",
    )
    parser.add_argument(
        "--store",
        choices=["chroma", "sqlite"],
        help="Vector store backend (default: VECTOR_STORE or chroma)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # serve command
    serve_parser = subparsers.add_parser("serve", help="Start the MCP server")
    serve_parser.add_argument(
        "--transport",
        choices=["stdio", "sse"],
        default="stdio",
        help="Transport protocol (default: stdio)",
    )
    serve_parser.add_argument(
        "--no-startup-index",
        action="store_true",
        help="Do not index the project root on startup",
    )

    # index command
    index_parser = subparsers.add_parser("index", help="Index a file or directory")
    index_parser.add_argument("path", help="Path relative to the project root")

    # query command
    query_parser = subparsers.add_parser("query", help="Query the index")
    query_parser.add_argument("text", help="Query text")
    query_parser.add_argument("-k", type=int, default=None, help="Number of results")
    query_parser.add_argument(
        "--filter",
        dest="filter_json",
        help='Metadata filter as JSON, e.g. \'{"contentType": "code"}\'',
    )

    # list command
    subparsers.add_parser("list", help="List indexed document paths")

    # remove command
    remove_parser = subparsers.add_parser("remove", help="Remove one document")
    remove_parser.add_argument("path", help="Source path as shown by 'list'")

    # clear command
    clear_parser = subparsers.add_parser("clear", help="Remove all documents")
    clear_parser.add_argument(
        "--yes",
        action="store_true",
        help="Confirm removal of everything in the index",
    )

    # scan command
    scan_parser = subparsers.add_parser(
        "scan", help="Show files and chunk counts without indexing"
    )
    scan_parser.add_argument("path", nargs="?", help="Directory to scan (default: root)")

    return parser


def main(argv: Optional[list[str]] = None) -> None:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    try:
        settings = Settings.from_env(project_root=args.root)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)
    if args.store:
        settings = replace(settings, vector_store=args.store)

    configure_logging(settings.log_level)
    service = RagService(settings)

    try:
        if args.command == "serve":
            startup_index = settings.index_on_startup and not args.no_startup_index
            serve(service, args.transport, startup_index)
        elif args.command == "index":
            index(service, args.path)
        elif args.command == "query":
            query(service, args.text, args.k, args.filter_json)
        elif args.command == "list":
            list_documents(service)
        elif args.command == "remove":
            remove(service, args.path)
        elif args.command == "clear":
            clear(service, args.yes)
        elif args.command == "scan":
            scan(service, args.path)
    except RagError as e:
        logger.error(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
