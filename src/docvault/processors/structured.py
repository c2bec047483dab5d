"""Processors for structured data, logs and source code.

All of these return the file text unchanged; only the metadata differs.
"""

import json
import xml.etree.ElementTree as ET
from pathlib import Path

from docvault.models import DocumentContent, ExtractorStatus
from docvault.processors.base import read_text
from docvault.utils.text import count_lines


class JsonProcessor:
    """Processor for JSON files. Invalid JSON is reported, not raised."""

    status = ExtractorStatus.ok()

    def supported_types(self) -> set[str]:
        return {"json"}

    def read(self, path: Path | str) -> DocumentContent:
        text = read_text(path, "JSON")

        try:
            json.loads(text)
        except json.JSONDecodeError as e:
            return DocumentContent(
                text=text,
                type="json",
                metadata={
                    "status": "invalid_json",
                    "error": str(e),
                    "char_count": str(len(text)),
                },
            )

        return DocumentContent(
            text=text,
            type="json",
            metadata={
                "line_count": str(count_lines(text)),
                "char_count": str(len(text)),
                "status": "valid_json",
            },
        )


class XmlProcessor:
    """Processor for XML files. Invalid XML is reported, not raised."""

    status = ExtractorStatus.ok()

    def supported_types(self) -> set[str]:
        return {"xml"}

    def read(self, path: Path | str) -> DocumentContent:
        text = read_text(path, "XML")

        try:
            root = ET.fromstring(text)
        except ET.ParseError as e:
            return DocumentContent(
                text=text,
                type="xml",
                metadata={
                    "status": "invalid_xml",
                    "error": str(e),
                    "char_count": str(len(text)),
                },
            )

        return DocumentContent(
            text=text,
            type="xml",
            metadata={
                "element_count": str(sum(1 for _ in root.iter())),
                "char_count": str(len(text)),
                "status": "valid_xml",
            },
        )


class CsvProcessor:
    """Processor for CSV files."""

    status = ExtractorStatus.ok()

    def supported_types(self) -> set[str]:
        return {"csv"}

    def read(self, path: Path | str) -> DocumentContent:
        text = read_text(path, "CSV")
        lines = text.split("\n")

        actual_lines = sum(1 for line in lines if line.strip())
        # Column estimate from the header row
        columns = len(lines[0].split(",")) if lines[0].strip() else 0

        return DocumentContent(
            text=text,
            type="csv",
            metadata={
                "lines": str(actual_lines),
                "columns": str(columns),
                "estimated_rows": str(max(actual_lines - 1, 0)),
                "char_count": str(len(text)),
            },
        )


class LogProcessor:
    """Processor for log files, counting lines per severity."""

    status = ExtractorStatus.ok()

    def supported_types(self) -> set[str]:
        return {"log", "logs"}

    def read(self, path: Path | str) -> DocumentContent:
        text = read_text(path, "log")
        lines = text.split("\n")

        error_count = warning_count = info_count = 0
        for line in lines:
            lower = line.lower()
            if "err" in lower:
                error_count += 1
            elif "warn" in lower:
                warning_count += 1
            elif "info" in lower:
                info_count += 1

        return DocumentContent(
            text=text,
            type="log",
            metadata={
                "total_lines": str(len(lines)),
                "error_lines": str(error_count),
                "warning_lines": str(warning_count),
                "info_lines": str(info_count),
                "char_count": str(len(text)),
            },
        )


LANGUAGES = {
    ".go": "Go",
    ".py": "Python",
    ".js": "JavaScript",
    ".java": "Java",
    ".c": "C",
    ".cpp": "C++",
    ".cs": "C#",
    ".php": "PHP",
    ".rb": "Ruby",
    ".sh": "Shell",
    ".bash": "Bash",
    ".sql": "SQL",
    ".css": "CSS",
}

SLASH_COMMENT_EXTENSIONS = {".go", ".js", ".java", ".c", ".cpp", ".cs"}
HASH_COMMENT_EXTENSIONS = {".py", ".sh", ".bash"}


class CodeProcessor:
    """Processor for source code, counting code, comment and blank lines."""

    status = ExtractorStatus.ok()

    def supported_types(self) -> set[str]:
        return {ext.lstrip(".") for ext in LANGUAGES}

    def read(self, path: Path | str) -> DocumentContent:
        text = read_text(path, "code")
        lines = text.split("\n")
        ext = Path(path).suffix.lower()

        code_lines = comment_lines = empty_lines = 0
        for line in lines:
            stripped = line.strip()
            if not stripped:
                empty_lines += 1
            elif self._is_comment(stripped, ext):
                comment_lines += 1
            else:
                code_lines += 1

        return DocumentContent(
            text=text,
            type="code",
            metadata={
                "total_lines": str(len(lines)),
                "code_lines": str(code_lines),
                "comment_lines": str(comment_lines),
                "empty_lines": str(empty_lines),
                "language": LANGUAGES.get(ext, "Unknown"),
                "char_count": str(len(text)),
            },
        )

    @staticmethod
    def _is_comment(line: str, ext: str) -> bool:
        if ext in SLASH_COMMENT_EXTENSIONS:
            return line.startswith(("//", "/*"))
        if ext in HASH_COMMENT_EXTENSIONS:
            return line.startswith("#")
        return line.startswith(("//", "#", "--"))
