"""Processors for plain text and Markdown files."""

from pathlib import Path

from docvault.models import DocumentContent, ExtractorStatus
from docvault.processors.base import read_text
from docvault.utils.text import count_lines, count_words


class PlainTextProcessor:
    """Processor for .txt files."""

    status = ExtractorStatus.ok()

    def supported_types(self) -> set[str]:
        return {"txt", "text"}

    def read(self, path: Path | str) -> DocumentContent:
        text = read_text(path, "TXT")

        return DocumentContent(
            text=text,
            type="txt",
            metadata={
                "word_count": str(count_words(text)),
                "line_count": str(count_lines(text)),
                "char_count": str(len(text)),
            },
        )


class MarkdownProcessor:
    """Processor for Markdown files. The text is kept as written."""

    status = ExtractorStatus.ok()

    def supported_types(self) -> set[str]:
        return {"md", "markdown"}

    def read(self, path: Path | str) -> DocumentContent:
        text = read_text(path, "Markdown")

        lines = text.split("\n")
        header_count = sum(1 for line in lines if line.strip().startswith("#"))

        return DocumentContent(
            text=text,
            type="markdown",
            metadata={
                "word_count": str(count_words(text)),
                "line_count": str(len(lines)),
                "header_count": str(header_count),
            },
        )
