"""Paragraph-based chunking strategy."""

from docvault.models import Chunk


class ParagraphChunker:
    """Split on blank lines, hard-split long paragraphs, merge tiny ones.

    - Paragraph boundaries are double newlines
    - Paragraphs over ``max_size`` characters are cut into fixed windows
    - Fragments under ``min_size`` are merged with their neighbours
    """

    MAX_CHUNK_SIZE = 1000
    MIN_CHUNK_SIZE = 50
    SEPARATOR = "\n\n"

    def __init__(self, max_size: int = MAX_CHUNK_SIZE, min_size: int = MIN_CHUNK_SIZE):
        if min_size > max_size:
            raise ValueError("min_size must not exceed max_size")
        self.max_size = max_size
        self.min_size = min_size

    def chunk(self, text: str, document_id: str) -> list[Chunk]:
        """Split text into chunks with character offsets.

        Args:
            text: Extracted document text
            document_id: Id of the owning document

        Returns:
            Chunks numbered from 0 in text order
        """
        if not text or not text.strip():
            return []

        spans: list[tuple[int, int]] = []  # (start, end) into text
        pending: tuple[int, int] | None = None
        offset = 0

        for paragraph in text.split(self.SEPARATOR):
            start, end = offset, offset + len(paragraph)
            offset = end + len(self.SEPARATOR)

            if len(paragraph) > self.max_size:
                if pending:
                    spans.append(pending)
                    pending = None
                for i in range(start, end, self.max_size):
                    spans.append((i, min(i + self.max_size, end)))

            elif len(paragraph) < self.min_size:
                pending = (pending[0], end) if pending else (start, end)
                if pending[1] - pending[0] >= self.min_size:
                    spans.append(pending)
                    pending = None

            else:
                if pending:
                    spans.append(pending)
                    pending = None
                spans.append((start, end))

        if pending:
            spans.append(pending)

        chunks = []
        for start, end in spans:
            content = text[start:end]
            if not content.strip():
                continue
            chunks.append(
                Chunk(
                    document_id=document_id,
                    content=content,
                    chunk_index=len(chunks),
                    start_char=start,
                    end_char=end,
                )
            )
        return chunks
