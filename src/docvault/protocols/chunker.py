"""Protocol for splitting extracted text into stored chunks."""

from typing import Protocol, runtime_checkable

from docvault.models import Chunk


@runtime_checkable
class ChunkingStrategy(Protocol):
    """Splits a document's extracted text into ordered chunks.

    The service calls this once per upload; the resulting chunks are stored
    under the document and removed with it.
    """

    def chunk(self, text: str, document_id: str) -> list[Chunk]:
        """Return chunks of ``text`` owned by ``document_id``, indexed from 0."""
        ...
