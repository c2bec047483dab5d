"""Data models for DocVault."""

from docvault.models.document import (
    Chunk,
    Document,
    DocumentContent,
    DocumentStatus,
    ExtractorStatus,
    Model,
    Prompt,
    User,
)
from docvault.models.search import Match, SearchOptions, SearchResult, SearchStatistics

__all__ = [
    "Chunk",
    "Document",
    "DocumentContent",
    "DocumentStatus",
    "ExtractorStatus",
    "Match",
    "Model",
    "Prompt",
    "SearchOptions",
    "SearchResult",
    "SearchStatistics",
    "User",
]
