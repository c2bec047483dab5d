"""Processors backed by optional extraction libraries (PDF, DOCX).

If the backing library is not installed the processor stays registered but
reports ``ExtractorStatus.missing`` and returns placeholder content, so
listing and preview keep working.
"""

import logging
from pathlib import Path

from docvault.exceptions import ExtractionFailedError
from docvault.models import DocumentContent, ExtractorStatus
from docvault.processors.base import file_size
from docvault.utils.text import count_lines, count_words

logger = logging.getLogger(__name__)

try:
    from pypdf import PdfReader
    from pypdf.errors import PyPdfError
except ImportError:
    PdfReader = None
    PyPdfError = None

try:
    import docx
except ImportError:
    docx = None


def _library_status(module: object, package: str) -> ExtractorStatus:
    if module is None:
        return ExtractorStatus.missing(f"{package} is not installed")
    return ExtractorStatus.ok()


def placeholder_content(fmt: str, status: ExtractorStatus) -> DocumentContent:
    """Content returned when an extractor is unavailable."""
    return DocumentContent(
        text=f"{fmt.upper()} processing not implemented: {status.reason}",
        type=fmt,
        metadata={
            "status": "placeholder",
            "reason": status.reason or "",
        },
    )


def _fallback_content(fmt: str, path: Path, size: int) -> DocumentContent:
    """Content for a readable file that produced no text."""
    return DocumentContent(
        text=(
            f"{fmt.upper()} file detected: {path.name}\n"
            f"No text content could be extracted. File contains {size} bytes."
        ),
        type=fmt,
        metadata={
            "file_size": str(size),
            "status": "basic_fallback",
            "method": "fallback",
        },
    )


def _text_metadata(text: str, size: int, method: str) -> dict[str, str]:
    return {
        "file_size": str(size),
        "word_count": str(count_words(text)),
        "line_count": str(count_lines(text)),
        "char_count": str(len(text)),
        "status": "advanced_extraction",
        "method": method,
    }


class PdfProcessor:
    """Processor for PDF files using pypdf."""

    def __init__(self, status: ExtractorStatus | None = None):
        self._status = status or _library_status(PdfReader, "pypdf")

    @property
    def status(self) -> ExtractorStatus:
        return self._status

    def supported_types(self) -> set[str]:
        return {"pdf"}

    def read(self, path: Path | str) -> DocumentContent:
        if not self._status.available:
            return placeholder_content("pdf", self._status)

        path = Path(path)
        size = file_size(path)

        try:
            reader = PdfReader(path)
            pages = []
            for index, page in enumerate(reader.pages, start=1):
                text = page.extract_text() or ""
                if text.strip():
                    pages.append(f"--- Page {index} ---\n{text}\n\n")
        except (OSError, PyPdfError, ValueError) as e:
            raise ExtractionFailedError(path, e) from e

        logger.debug(f"PDF {path.name} has {len(reader.pages)} pages")

        if not pages:
            logger.warning(f"No text extracted from PDF {path.name}")
            return _fallback_content("pdf", path, size)

        text = "".join(pages)
        metadata = _text_metadata(text, size, "pypdf")
        metadata["page_count"] = str(len(reader.pages))
        return DocumentContent(text=text, type="pdf", metadata=metadata)


class DocxProcessor:
    """Processor for Word documents using python-docx."""

    def __init__(self, status: ExtractorStatus | None = None):
        self._status = status or _library_status(docx, "python-docx")

    @property
    def status(self) -> ExtractorStatus:
        return self._status

    def supported_types(self) -> set[str]:
        return {"docx"}

    def read(self, path: Path | str) -> DocumentContent:
        if not self._status.available:
            return placeholder_content("docx", self._status)

        path = Path(path)
        size = file_size(path)

        try:
            document = docx.Document(str(path))
        except Exception as e:
            # python-docx surfaces zip, xml and package errors without a common base
            raise ExtractionFailedError(path, e) from e

        paragraphs = [p.text.replace("\r\n", "\n").replace("\r", "\n") for p in document.paragraphs]
        text = self._collapse_blank_lines("\n".join(paragraphs))

        if not text.strip():
            logger.warning(f"No text extracted from DOCX {path.name}")
            return _fallback_content("docx", path, size)

        metadata = _text_metadata(text, size, "python-docx")
        metadata["paragraph_count"] = str(sum(1 for p in paragraphs if p.strip()))
        return DocumentContent(text=text, type="docx", metadata=metadata)

    @staticmethod
    def _collapse_blank_lines(text: str) -> str:
        """Keep at most one blank line in a row."""
        kept: list[str] = []
        for line in text.split("\n"):
            if line.strip() or not kept or kept[-1].strip():
                kept.append(line)
        return "\n".join(kept)
