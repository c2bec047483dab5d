"""File information combining filesystem stats and extracted content."""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from pathlib import Path

from docvault.models import DocumentContent
from docvault.utils.text import count_lines, count_words, format_file_size


@dataclass
class FileInfo:
    name: str
    size: int
    extension: str
    modified_time: datetime
    word_count: int
    line_count: int
    char_count: int
    metadata: dict[str, str] = field(default_factory=dict)

    @property
    def formatted_size(self) -> str:
        return format_file_size(self.size)

    def to_dict(self) -> dict:
        data = asdict(self)
        data["modified_time"] = self.modified_time.isoformat()
        data["formatted_size"] = self.formatted_size
        return data


def get_file_info(path: Path | str, content: DocumentContent) -> FileInfo:
    """Build a FileInfo for ``path`` from its stat and extracted content.

    Raises OSError if the file cannot be stat'ed.
    """
    path = Path(path)
    stat = path.stat()

    return FileInfo(
        name=path.name,
        size=stat.st_size,
        extension=path.suffix.lower(),
        modified_time=datetime.fromtimestamp(stat.st_mtime),
        word_count=count_words(content.text),
        line_count=count_lines(content.text),
        char_count=len(content.text),
        metadata=dict(content.metadata),
    )
