"""Utility functions for DocVault."""

from docvault.utils.file_info import FileInfo, get_file_info
from docvault.utils.text import (
    analyze_content,
    clean_text,
    complexity_score,
    count_lines,
    count_words,
    detect_language,
    extract_links,
    format_file_size,
    strip_html,
    truncate,
)

__all__ = [
    "FileInfo",
    "analyze_content",
    "clean_text",
    "complexity_score",
    "count_lines",
    "count_words",
    "detect_language",
    "extract_links",
    "format_file_size",
    "get_file_info",
    "strip_html",
    "truncate",
]
