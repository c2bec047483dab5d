"""FastMCP server exposing a DocVault document service."""

from mcp.server.fastmcp import FastMCP

from docvault.exceptions import DocVaultError, NotFoundError
from docvault.models import Document, SearchOptions
from docvault.service import DocumentService
from docvault.utils import format_file_size, truncate


def create_mcp_server(service: DocumentService) -> FastMCP:
    """Create an MCP server backed by ``service``.

    The service (and the store inside it) is built by the caller and shared
    by every tool call.

    Args:
        service: Document service to expose

    Returns:
        Configured FastMCP server instance
    """
    mcp = FastMCP(name="docvault")

    def resolve(ref: str) -> Document:
        # Accept either a document id or its name
        try:
            return service.get_document(ref)
        except NotFoundError:
            for doc in service.list_documents():
                if doc.name == ref:
                    return doc
            raise

    @mcp.tool()
    def ls(path: str = "") -> str:
        """List stored documents.

        Args:
            path: Optional name prefix to filter results (e.g., "docs/")

        Returns:
            One line per document with id, name, size, type and status
        """
        docs = [d for d in service.list_documents() if d.name.startswith(path)]
        if not docs:
            return f"No documents found matching '{path}'"

        docs.sort(key=lambda d: d.name)
        return "\n".join(
            f"{d.id:>6}  {d.name:<50} {format_file_size(d.size):>10} {d.type:<8} {d.status.value}"
            for d in docs
        )

    @mcp.tool()
    def read(document: str) -> str:
        """Read a document's extracted text.

        Args:
            document: Document id or name (as shown in ls output)

        Returns:
            The extracted text, or an error message
        """
        try:
            doc = resolve(document)
            return service.get_document_content(doc.id).text
        except DocVaultError as e:
            return f"Error: {e}"

    @mcp.tool()
    def search(
        query: str,
        case_sensitive: bool = False,
        whole_words: bool = False,
        regex: bool = False,
        max_matches: int = 20,
    ) -> str:
        """Keyword or regex search across every stored document.

        Args:
            query: Text or pattern to look for
            case_sensitive: Match case exactly
            whole_words: Only match whole words
            regex: Treat the query as a regular expression
            max_matches: Maximum hits per document (0 for no limit)

        Returns:
            Matching lines grouped by document
        """
        options = SearchOptions(
            case_sensitive=case_sensitive,
            whole_words=whole_words,
            use_regex=regex,
            max_matches=max_matches,
        )
        try:
            results = service.advanced_search(query, options)
        except DocVaultError as e:
            return f"Error: {e}"

        if not results:
            return f"No results found for: {query}"

        lines = []
        for doc_id, result in results.items():
            lines.append(f"{result.file_name} (id {doc_id}, {result.total_matches} matches)")
            for match in result.matches:
                lines.append(f"  {match.line_number}: {truncate(match.content.strip(), 200)}")
            lines.append("")

        return "\n".join(lines)

    @mcp.tool()
    def convert(document: str, format: str = "markdown") -> str:
        """Convert a document to markdown, html or text.

        Args:
            document: Document id or name
            format: Output format (markdown, html or text)

        Returns:
            Path of the written file, or an error message
        """
        try:
            doc = resolve(document)
            output = service.convert_document(doc.id, format)
        except DocVaultError as e:
            return f"Error: {e}"
        return f"Converted {doc.name} -> {output}"

    @mcp.tool()
    def types() -> str:
        """List the file extensions DocVault can extract."""
        return ", ".join(service.supported_types())

    return mcp
