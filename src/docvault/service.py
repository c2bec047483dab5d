"""Document service composing the store, registry, searcher and converter."""

import logging
import os
import shutil
import time
from pathlib import Path
from typing import Optional

from docvault.chunkers import ParagraphChunker
from docvault.config import Settings, get_settings
from docvault.conversion import DocumentConverter, normalize_format
from docvault.conversion.converter import OUTPUT_EXTENSIONS
from docvault.exceptions import DocVaultError, ExtractionFailedError, ValidationFailedError
from docvault.models import (
    Document,
    DocumentContent,
    DocumentStatus,
    SearchOptions,
    SearchResult,
)
from docvault.processors import ProcessorRegistry, default_registry, extension_of
from docvault.protocols import ChunkingStrategy
from docvault.search import DocumentSearcher
from docvault.storage import DocumentStore
from docvault.utils import (
    FileInfo,
    analyze_content,
    clean_text,
    complexity_score,
    detect_language,
    extract_links,
    get_file_info,
    strip_html,
    truncate,
)

logger = logging.getLogger(__name__)

SUMMARY_LENGTH = 200

SKIP_PARTS = {
    "__pycache__",
    "node_modules",
    "venv",
    "env",
    "dist",
    "build",
}


def should_skip(rel_path: Path) -> bool:
    """Skip hidden files, version control and common build artefacts."""
    for part in rel_path.parts:
        if part.startswith(".") or part in SKIP_PARTS or part.endswith(".egg-info"):
            return True
    return False


class DocumentService:
    """High-level document operations used by the CLI and the MCP server.

    Every collaborator is injected; omitted ones get defaults built from
    ``settings``. ``close()`` empties the uploads directory and closes the
    store, so close the service rather than the store when done.
    """

    def __init__(
        self,
        store: DocumentStore,
        registry: Optional[ProcessorRegistry] = None,
        settings: Optional[Settings] = None,
        chunker: Optional[ChunkingStrategy] = None,
    ):
        self.store = store
        self.registry = registry or default_registry()
        self.settings = settings or get_settings()
        self.chunker = chunker or ParagraphChunker()
        self.searcher = DocumentSearcher(self.registry)
        self.converter = DocumentConverter(self.registry)

    # Ingestion

    def upload_document(
        self, path: Path | str, name: Optional[str] = None, copy: bool = True
    ) -> Document:
        """Validate, extract, chunk and store a file.

        Args:
            path: File to add
            name: Display name (defaults to the file name)
            copy: Copy the file into ``uploads_path`` instead of referencing it in place

        Returns:
            The stored document. Its status is ``error`` if extraction failed.

        Raises:
            ValidationFailedError: missing, disallowed or oversized file
        """
        path = Path(path)
        self.registry.validate_file(
            path,
            max_size=self.settings.max_file_size,
            allowed_types=self.settings.allowed_types,
        )
        name = name or path.name

        if copy:
            path = self._copy_to_uploads(path, name)

        doc = Document(
            name=name,
            type=extension_of(path),
            size=path.stat().st_size,
            path=str(path),
        )

        try:
            content = self.registry.process_document(path)
        except DocVaultError as e:
            logger.error(f"Failed to process {name}: {e}")
            doc.status = DocumentStatus.ERROR
            doc.metadata = {"error": str(e)}
            return self.store.create_document(doc)

        chunks = self.chunker.chunk(content.text, "")
        doc.status = DocumentStatus.READY
        doc.metadata = dict(content.metadata)
        doc.chunks = len(chunks)

        stored, _ = self.store.create_document_with_chunks(doc, chunks)

        logger.info(f"Document uploaded: {name} ({len(chunks)} chunks)")
        return stored

    def _copy_to_uploads(self, path: Path, name: str) -> Path:
        uploads = Path(self.settings.uploads_path)
        # Relative names from folder ingest become one flat file name
        flat = name.replace("\\", "/").strip("/").replace("/", "_") or path.name
        target = uploads / f"{int(time.time())}_{flat}"
        counter = 1
        while target.exists():
            target = uploads / f"{int(time.time())}_{counter}_{flat}"
            counter += 1

        try:
            uploads.mkdir(parents=True, exist_ok=True)
            shutil.copy2(path, target)
        except OSError as e:
            raise DocVaultError(f"cannot copy {name} to uploads: {e}") from e
        return target

    def ingest_folder(self, folder: Path | str, copy: bool = False) -> list[Document]:
        """Add every supported and allowed file under ``folder``.

        Hidden files and build artefacts are skipped. Files that fail
        validation are logged and left out.
        """
        folder = Path(folder)
        if not folder.is_dir():
            raise ValidationFailedError(f"not a directory: {folder}")

        allowed = {t.lower().lstrip(".") for t in self.settings.allowed_types}
        supported = self.registry.supported_types() & allowed
        documents = []
        skipped = 0

        for root, _, files in os.walk(folder):
            for filename in sorted(files):
                full_path = Path(root) / filename
                rel_path = full_path.relative_to(folder)

                if should_skip(rel_path) or extension_of(full_path) not in supported:
                    continue

                try:
                    documents.append(self.upload_document(full_path, str(rel_path), copy=copy))
                except DocVaultError as e:
                    logger.warning(f"Skipping {rel_path}: {e}")
                    skipped += 1

        logger.info(f"Ingested {len(documents)} documents from {folder} ({skipped} skipped)")
        return documents

    # Records

    def get_document(self, doc_id: str) -> Document:
        return self.store.get_document(doc_id)

    def list_documents(self) -> list[Document]:
        docs = self.store.list_documents()
        docs.sort(key=lambda d: d.upload_date, reverse=True)
        return docs

    def delete_document(self, doc_id: str, remove_file: bool = True) -> None:
        """Delete a document and its chunks.

        The file is removed only when it lives under ``uploads_path``; a
        failed removal is logged, the record is gone either way.
        """
        doc = self.store.get_document(doc_id)
        self.store.delete_document(doc_id)

        if remove_file and doc.path and self._is_upload(Path(doc.path)):
            try:
                Path(doc.path).unlink()
            except OSError as e:
                logger.warning(f"Failed to remove file {doc.path}: {e}")

    def _is_upload(self, path: Path) -> bool:
        uploads = Path(self.settings.uploads_path).resolve()
        return uploads in path.resolve().parents

    # Content

    def get_document_content(self, doc_id: str) -> DocumentContent:
        doc = self.store.get_document(doc_id)
        return self.registry.process_document(doc.path)

    def get_document_preview(self, doc_id: str, max_lines: Optional[int] = None) -> str:
        doc = self.store.get_document(doc_id)
        return self.registry.get_preview(doc.path, max_lines or self.settings.preview_lines)

    def get_document_file_info(self, doc_id: str) -> FileInfo:
        doc = self.store.get_document(doc_id)
        content = self.registry.process_document(doc.path)
        try:
            return get_file_info(doc.path, content)
        except OSError as e:
            raise ExtractionFailedError(doc.path, e) from e

    def get_document_analysis(self, doc_id: str) -> dict:
        """Line and word statistics plus language, complexity, links and a summary."""
        content = self.get_document_content(doc_id)
        text = content.text
        analysis = analyze_content(text)
        analysis["type"] = content.type
        analysis["language"] = detect_language(text)
        analysis["complexity"] = complexity_score(text)
        analysis["links"] = extract_links(text)
        analysis["summary"] = truncate(clean_text(strip_html(text)), SUMMARY_LENGTH)
        return analysis

    # Search

    def search_documents(self, query: str) -> list[Document]:
        """Documents whose name or type contains ``query``, ignoring case."""
        query = query.lower()
        return [
            doc
            for doc in self.list_documents()
            if query in doc.name.lower() or query in doc.type.lower()
        ]

    def search_in_document(
        self, doc_id: str, query: str, options: Optional[SearchOptions] = None
    ) -> SearchResult:
        doc = self.store.get_document(doc_id)
        return self.searcher.search_in_document(doc.path, query, options)

    def advanced_search(
        self,
        query: str,
        options: Optional[SearchOptions] = None,
        include_metadata: bool = False,
    ) -> dict[str, SearchResult]:
        """Search every stored document, keyed by document id."""
        by_path = {doc.path: doc.id for doc in self.store.list_documents() if doc.path}

        if include_metadata:
            results = self.searcher.search_with_metadata(by_path, query, options)
        else:
            results = self.searcher.search_in_multiple_documents(by_path, query, options)

        return {by_path[path]: result for path, result in results.items()}

    # Conversion

    def convert_document(
        self, doc_id: str, fmt: str, output_path: Optional[Path | str] = None
    ) -> Path:
        """Convert a stored document and return the output path.

        Defaults to ``<converted_path>/<stem>.<ext>``.
        """
        doc = self.store.get_document(doc_id)
        if output_path is None:
            ext = OUTPUT_EXTENSIONS[normalize_format(fmt)]
            output_path = Path(self.settings.converted_path) / f"{Path(doc.name).stem}.{ext}"

        self.converter.convert(doc.path, output_path, fmt)
        return Path(output_path)

    def supported_types(self) -> list[str]:
        return sorted(self.registry.supported_types())

    # Teardown

    def cleanup_uploads(self) -> int:
        """Remove everything under ``uploads_path``, keeping the directory.

        Entries that cannot be removed are logged and left in place.

        Returns:
            Number of entries removed
        """
        uploads = Path(self.settings.uploads_path)
        if not uploads.is_dir():
            return 0

        removed = 0
        for entry in list(uploads.iterdir()):
            try:
                if entry.is_dir() and not entry.is_symlink():
                    shutil.rmtree(entry)
                else:
                    entry.unlink()
            except OSError as e:
                logger.warning(f"Failed to remove {entry}: {e}")
                continue
            removed += 1

        logger.info(f"Cleaned up {removed} entries from {uploads}")
        return removed

    def close(self) -> None:
        """Empty the uploads directory and close the store."""
        self.cleanup_uploads()
        self.store.close()

    def __enter__(self) -> "DocumentService":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
