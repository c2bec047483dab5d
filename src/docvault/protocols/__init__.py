"""Protocol definitions for extensible components."""

from docvault.protocols.chunker import ChunkingStrategy
from docvault.protocols.processor import FormatProcessor

__all__ = ["FormatProcessor", "ChunkingStrategy"]
