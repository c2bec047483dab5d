"""CLI entry point for DocVault."""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Literal, cast

from docvault.config import get_settings
from docvault.conversion import DocumentConverter
from docvault.exceptions import DocVaultError
from docvault.models import DocumentStatus, SearchOptions
from docvault.processors import default_registry
from docvault.search import DocumentSearcher
from docvault.service import DocumentService
from docvault.storage import DocumentStore
from docvault.utils import format_file_size

logger = logging.getLogger(__name__)


def extract(path: str, as_json: bool = False) -> None:
    """Print the extracted text of a file.

    Args:
        path: File to extract
        as_json: Print text, type and metadata as JSON instead
    """
    registry = default_registry()
    try:
        content = registry.process_document(path)
    except DocVaultError as e:
        logger.error(f"Error: {e}")
        sys.exit(1)

    if as_json:
        print(
            json.dumps(
                {
                    "type": content.type,
                    "metadata": content.metadata,
                    "processed_at": content.processed_at.isoformat(),
                    "text": content.text,
                },
                indent=2,
            )
        )
    else:
        print(content.text)


def search(query: str, paths: list[str], options: SearchOptions, with_metadata: bool = False) -> None:
    """Search files and print matches with their context."""
    searcher = DocumentSearcher(default_registry())
    try:
        if with_metadata:
            results = searcher.search_with_metadata(paths, query, options)
        else:
            results = searcher.search_in_multiple_documents(paths, query, options)
    except DocVaultError as e:
        logger.error(f"Error: {e}")
        sys.exit(1)

    for path, result in results.items():
        print(f"{path} ({result.total_matches} matches)")
        for match in result.matches:
            if options.context_lines > 0 and match.line_number > 0:
                print(match.context)
                print("    --")
            else:
                print(f"  {match.line_number}: {match.content}")
        print("")

    stats = searcher.get_search_statistics(results)
    print(
        f"{stats.total_matches} matches in {stats.total_files_searched} files "
        f"(avg {stats.average_matches_per_file:.1f} per file)"
    )


def convert(paths: list[str], fmt: str, output_dir: str) -> None:
    """Convert files into ``output_dir``; exits non-zero if any failed."""
    converter = DocumentConverter(default_registry())
    results = converter.batch_convert(paths, output_dir, fmt)

    failed = 0
    for path, outcome in results.items():
        if outcome.startswith("Error:"):
            failed += 1
        print(f"{path} -> {outcome}")

    if failed:
        sys.exit(1)


def types() -> None:
    """Print supported extensions and the processor handling each."""
    registry = default_registry()
    for ext, name in sorted(registry.supported_extensions().items()):
        status = registry.get_processor(ext).status
        note = "" if status.available else f"  (unavailable: {status.reason})"
        print(f"  .{ext:<10} {name}{note}")


def info(folder: str) -> None:
    """Ingest a folder into a fresh store and print a summary.

    Args:
        folder: Directory to scan
    """
    folder_path = Path(folder)
    if not folder_path.is_dir():
        logger.error(f"Folder not found: {folder}")
        sys.exit(1)

    with DocumentService(DocumentStore()) as service:
        docs = service.ingest_folder(folder_path)

        by_type: dict[str, int] = {}
        for doc in docs:
            by_type[doc.type] = by_type.get(doc.type, 0) + 1
        errors = [d for d in docs if d.status == DocumentStatus.ERROR]
        stats = service.store.stats()

        print(f"Folder: {folder_path.absolute()}")
        print(f"  Size: {format_file_size(sum(d.size for d in docs))}")
        print("")
        print("Types:")
        for ext, count in sorted(by_type.items()):
            print(f"  {ext}: {count}")
        print("")
        print("Contents:")
        print(f"  Documents: {stats['documents']}")
        print(f"  Chunks: {stats['chunks']}")
        print(f"  Errors: {len(errors)}")


def serve(folder: str, transport: str = "stdio") -> None:
    """Ingest a folder and serve it over MCP.

    Args:
        folder: Directory to ingest
        transport: Transport protocol (stdio or sse)
    """
    folder_path = Path(folder)
    if not folder_path.is_dir():
        logger.error(f"Folder not found: {folder}")
        sys.exit(1)

    # Import here to avoid loading MCP unless needed
    from docvault.server import create_mcp_server

    with DocumentService(DocumentStore()) as service:
        service.ingest_folder(folder_path)

        logger.info(f"Serving {folder} via {transport}")
        mcp = create_mcp_server(service)
        mcp.run(transport=cast(Literal["stdio", "sse", "streamable-http"], transport))


def main() -> None:
    """Main CLI entry point."""
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(message)s",
        stream=sys.stderr,
    )

    parser = argparse.ArgumentParser(
        prog="docvault",
        description="DocVault - document extraction, search and conversion",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # extract command
    extract_parser = subparsers.add_parser("extract", help="Print the extracted text of a file")
    extract_parser.add_argument("path", help="File to extract")
    extract_parser.add_argument(
        "--json",
        action="store_true",
        help="Print type, metadata and text as JSON",
    )

    # search command
    search_parser = subparsers.add_parser("search", help="Search files for a query")
    search_parser.add_argument("query", help="Text or pattern to search for")
    search_parser.add_argument("paths", nargs="+", help="Files to search")
    search_parser.add_argument("--case-sensitive", action="store_true")
    search_parser.add_argument("--whole-words", action="store_true")
    search_parser.add_argument("--regex", action="store_true", help="Treat query as a regex")
    search_parser.add_argument(
        "--max-matches",
        type=int,
        default=0,
        help="Maximum matches per file (default: 0, unlimited)",
    )
    search_parser.add_argument(
        "--context",
        type=int,
        default=0,
        help="Lines of context around each match",
    )
    search_parser.add_argument(
        "--metadata",
        action="store_true",
        help="Also search extracted metadata",
    )

    # convert command
    convert_parser = subparsers.add_parser("convert", help="Convert files to another format")
    convert_parser.add_argument("paths", nargs="+", help="Files to convert")
    convert_parser.add_argument(
        "-f",
        "--format",
        default="markdown",
        help="Output format: markdown, html or text (default: markdown)",
    )
    convert_parser.add_argument(
        "-o",
        "--output-dir",
        default=None,
        help="Output directory (default: DOCVAULT_CONVERTED_PATH)",
    )

    # types command
    subparsers.add_parser("types", help="List supported file types")

    # info command
    info_parser = subparsers.add_parser("info", help="Summarize the documents in a folder")
    info_parser.add_argument("folder", help="Folder to scan")

    # serve command
    serve_parser = subparsers.add_parser("serve", help="Start MCP server for a folder")
    serve_parser.add_argument("folder", help="Folder to ingest and serve")
    serve_parser.add_argument(
        "--transport",
        choices=["stdio", "sse"],
        default="stdio",
        help="Transport protocol (default: stdio)",
    )

    args = parser.parse_args()

    if args.command == "extract":
        extract(args.path, args.json)
    elif args.command == "search":
        options = SearchOptions(
            case_sensitive=args.case_sensitive,
            whole_words=args.whole_words,
            use_regex=args.regex,
            max_matches=args.max_matches,
            context_lines=args.context,
        )
        search(args.query, args.paths, options, args.metadata)
    elif args.command == "convert":
        convert(args.paths, args.format, args.output_dir or str(settings.converted_path))
    elif args.command == "types":
        types()
    elif args.command == "info":
        info(args.folder)
    elif args.command == "serve":
        serve(args.folder, args.transport)


if __name__ == "__main__":
    main()
