"""Core data models for documents, chunks and the other stored records."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class DocumentStatus(str, Enum):
    PROCESSING = "processing"
    READY = "ready"
    ERROR = "error"


@dataclass
class Document:
    """A stored record describing an uploaded file.

    The file bytes stay on disk at ``path``; only the description lives in memory.
    """

    id: str = ""
    name: str = ""
    type: str = ""  # normalized extension, no leading dot
    size: int = 0
    upload_date: str = ""
    status: DocumentStatus = DocumentStatus.PROCESSING
    path: str = ""
    metadata: dict[str, str] = field(default_factory=dict)
    chunks: int = 0  # advisory
    embeddings: bool = False


@dataclass
class Chunk:
    """A slice of a document's extracted text."""

    document_id: str
    content: str
    chunk_index: int
    start_char: int = 0
    end_char: int = 0
    id: str = ""
    created_at: str = ""


@dataclass
class Model:
    """An AI model known to the system."""

    id: str
    name: str = ""
    size: str = ""
    type: str = ""
    status: str = ""
    download_progress: float = 0.0
    description: str = ""
    model_type: str = ""
    url: str = ""


@dataclass
class User:
    user_id: int
    username: str
    created_at: str = ""


@dataclass
class Prompt:
    id: int
    user_id: int
    prompt_text: str
    answer_text: str
    created_at: str = ""


@dataclass
class DocumentContent:
    """Text and metadata extracted from a file.

    Recomputed on every extraction; never stored.
    """

    text: str
    type: str
    metadata: dict[str, str] = field(default_factory=dict)
    processed_at: datetime = field(default_factory=datetime.now)


@dataclass(frozen=True)
class ExtractorStatus:
    """Whether a processor's backing extraction library can be used."""

    available: bool
    reason: Optional[str] = None

    @classmethod
    def ok(cls) -> "ExtractorStatus":
        return cls(available=True)

    @classmethod
    def missing(cls, reason: str) -> "ExtractorStatus":
        return cls(available=False, reason=reason)
