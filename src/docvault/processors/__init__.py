"""Format processors and the registry that dispatches to them."""

from docvault.processors.html import HtmlProcessor
from docvault.processors.optional import DocxProcessor, PdfProcessor
from docvault.processors.registry import (
    ProcessingStats,
    ProcessorRegistry,
    extension_of,
    normalize_extension,
)
from docvault.processors.structured import (
    CodeProcessor,
    CsvProcessor,
    JsonProcessor,
    LogProcessor,
    XmlProcessor,
)
from docvault.processors.text import MarkdownProcessor, PlainTextProcessor


def default_registry() -> ProcessorRegistry:
    """Build a registry with every built-in processor.

    PDF and DOCX are registered even when their libraries are missing;
    they then return placeholder content.
    """
    return ProcessorRegistry(
        [
            PlainTextProcessor(),
            MarkdownProcessor(),
            HtmlProcessor(),
            PdfProcessor(),
            DocxProcessor(),
            JsonProcessor(),
            XmlProcessor(),
            CsvProcessor(),
            LogProcessor(),
            CodeProcessor(),
        ]
    )


__all__ = [
    "CodeProcessor",
    "CsvProcessor",
    "DocxProcessor",
    "HtmlProcessor",
    "JsonProcessor",
    "LogProcessor",
    "MarkdownProcessor",
    "PdfProcessor",
    "PlainTextProcessor",
    "ProcessingStats",
    "ProcessorRegistry",
    "XmlProcessor",
    "default_registry",
    "extension_of",
    "normalize_extension",
]
