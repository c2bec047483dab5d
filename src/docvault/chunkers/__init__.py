"""Text chunking strategies."""

from docvault.chunkers.paragraph_chunker import ParagraphChunker

__all__ = ["ParagraphChunker"]
