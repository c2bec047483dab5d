"""Extension to processor mapping and extraction dispatch."""

import logging
import threading
from dataclasses import dataclass, field, replace
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional

from docvault.exceptions import (
    DocVaultError,
    ExtractionFailedError,
    UnsupportedFileTypeError,
    ValidationFailedError,
)
from docvault.models import DocumentContent
from docvault.protocols import FormatProcessor

logger = logging.getLogger(__name__)


def normalize_extension(ext: str) -> str:
    """Lower-case an extension and strip its leading dot.

    >>> normalize_extension(".PDF")
    'pdf'
    """
    return ext.strip().lower().lstrip(".")


def extension_of(path: Path | str) -> str:
    """Return the normalized extension of a file path ("" if it has none)."""
    return normalize_extension(Path(path).suffix)


@dataclass
class ProcessingStats:
    """Counters kept by the registry across extraction calls."""

    total_processed: int = 0
    successfully_parsed: int = 0
    failed: int = 0
    type_counts: dict[str, int] = field(default_factory=dict)
    last_processed: Optional[datetime] = None


class ProcessorRegistry:
    """Maps normalized file extensions to FormatProcessor instances.

    The registry holds no document state; the only shared mutable data is the
    processing counters, which have their own lock.
    """

    def __init__(self, processors: Iterable[FormatProcessor] = ()):
        self._processors: dict[str, FormatProcessor] = {}
        self._stats = ProcessingStats()
        self._stats_lock = threading.Lock()
        for processor in processors:
            self.register(processor)

    def register(self, processor: FormatProcessor) -> None:
        """Register a processor for every type it supports. Last registration wins."""
        for ext in processor.supported_types():
            ext = normalize_extension(ext)
            previous = self._processors.get(ext)
            if previous is not None and previous is not processor:
                logger.debug(
                    f"Replacing {type(previous).__name__} with {type(processor).__name__} for .{ext}"
                )
            self._processors[ext] = processor

    def get_processor(self, extension: str) -> Optional[FormatProcessor]:
        return self._processors.get(normalize_extension(extension))

    def supported_types(self) -> set[str]:
        return set(self._processors)

    def supported_extensions(self) -> dict[str, str]:
        """Map each extension to the name of its processor class."""
        return {ext: type(p).__name__ for ext, p in self._processors.items()}

    def process_document(self, path: Path | str) -> DocumentContent:
        """Extract text and metadata from the file at ``path``.

        Raises:
            UnsupportedFileTypeError: no processor for the extension
            ExtractionFailedError: the processor could not read the file
        """
        path = Path(path)
        ext = extension_of(path)
        logger.debug(f"Processing document: {path.name}")

        processor = self._processors.get(ext)
        if processor is None:
            self._record(ext, success=False, attempted=False)
            raise UnsupportedFileTypeError(ext)

        try:
            content = processor.read(path)
        except DocVaultError:
            self._record(ext, success=False)
            raise
        except OSError as e:
            self._record(ext, success=False)
            raise ExtractionFailedError(path, e) from e

        self._record(ext, success=True)
        logger.debug(f"Processed {path.name} ({ext})")
        return content

    def process_multiple(self, paths: Iterable[Path | str]) -> dict[str, DocumentContent]:
        """Extract several files; failures are logged and left out of the result."""
        paths = list(paths)
        results: dict[str, DocumentContent] = {}
        for path in paths:
            try:
                results[str(path)] = self.process_document(path)
            except DocVaultError as e:
                logger.warning(f"Error processing {Path(path).name}: {e}")

        logger.info(f"Processed {len(results)} out of {len(paths)} documents")
        return results

    def validate_file(
        self,
        path: Path | str,
        max_size: Optional[int] = None,
        allowed_types: Optional[Iterable[str]] = None,
    ) -> None:
        """Check that a file exists, has a supported (and allowed) type, and is not too big.

        Raises:
            ValidationFailedError: describing the first failed check
        """
        path = Path(path)
        if not path.is_file():
            raise ValidationFailedError(f"file does not exist: {path}")

        ext = extension_of(path)
        if ext not in self._processors:
            raise ValidationFailedError(f"unsupported file type: {ext or '<none>'}")

        if allowed_types is not None:
            allowed = {normalize_extension(t) for t in allowed_types}
            if ext not in allowed:
                raise ValidationFailedError(f"file type not allowed: {ext}")

        if max_size is not None:
            try:
                size = path.stat().st_size
            except OSError as e:
                raise ValidationFailedError(f"cannot read file info: {e}") from e
            if size > max_size:
                raise ValidationFailedError(f"file too large: {size} bytes (max: {max_size} bytes)")

    def get_preview(self, path: Path | str, max_lines: int) -> str:
        """Return the first ``max_lines`` lines of the extracted text."""
        content = self.process_document(path)
        lines = content.text.split("\n")
        if len(lines) <= max_lines:
            return content.text
        preview = "\n".join(lines[:max_lines])
        return f"{preview}\n... ({len(lines) - max_lines} more lines)"

    def get_processor_info(self, extension: str) -> dict:
        ext = normalize_extension(extension)
        processor = self._processors.get(ext)
        if processor is None:
            return {
                "supported": False,
                "error": f"No processor available for type: {ext}",
            }

        status = processor.status
        with self._stats_lock:
            processed = self._stats.type_counts.get(ext, 0)
        return {
            "supported": True,
            "processor_type": type(processor).__name__,
            "supported_types": sorted(processor.supported_types()),
            "available": status.available,
            "reason": status.reason,
            "processed_count": processed,
        }

    @property
    def stats(self) -> ProcessingStats:
        """Snapshot of the processing counters."""
        with self._stats_lock:
            return replace(self._stats, type_counts=dict(self._stats.type_counts))

    def reset_stats(self) -> None:
        with self._stats_lock:
            self._stats = ProcessingStats()
        logger.info("Processing stats reset")

    def _record(self, ext: str, success: bool, attempted: bool = True) -> None:
        with self._stats_lock:
            if attempted:
                self._stats.total_processed += 1
                self._stats.last_processed = datetime.now()
            if success:
                self._stats.successfully_parsed += 1
                self._stats.type_counts[ext] = self._stats.type_counts.get(ext, 0) + 1
            else:
                self._stats.failed += 1
