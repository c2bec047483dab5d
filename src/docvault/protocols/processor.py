"""Protocol for file format processors."""

from pathlib import Path
from typing import Protocol, runtime_checkable

from docvault.models import DocumentContent, ExtractorStatus


@runtime_checkable
class FormatProcessor(Protocol):
    """Protocol for file format processors.

    Implementations read one file format into normalized text and metadata.
    Uses structural subtyping - no inheritance required.
    """

    @property
    def status(self) -> ExtractorStatus:
        """Return whether the backing extraction library is usable."""
        ...

    def supported_types(self) -> set[str]:
        """Return lower-case extensions handled, without the leading dot."""
        ...

    def read(self, path: Path | str) -> DocumentContent:
        """Extract text and metadata from the file at ``path``.

        Raises ExtractionFailedError when the bytes cannot be read or parsed.
        """
        ...
