"""Search options and result models."""

from dataclasses import asdict, dataclass, field
from datetime import datetime


@dataclass
class SearchOptions:
    """Controls how a query is matched against document lines.

    Precedence: ``use_regex`` overrides ``whole_words``, which overrides
    plain substring matching. ``max_matches`` of 0 means unlimited.
    """

    case_sensitive: bool = False
    whole_words: bool = False
    use_regex: bool = False
    max_matches: int = 0
    context_lines: int = 0


@dataclass
class Match:
    """A single hit. ``line_number`` is 1-based, 0 for metadata hits."""

    line_number: int
    content: str
    context: str = ""


@dataclass
class SearchResult:
    file_path: str
    file_name: str
    matches: list[Match] = field(default_factory=list)
    total_matches: int = 0
    processed_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict:
        data = asdict(self)
        data["processed_at"] = self.processed_at.isoformat()
        return data


@dataclass
class SearchStatistics:
    total_files_searched: int = 0
    total_matches: int = 0
    file_types: dict[str, int] = field(default_factory=dict)
    average_matches_per_file: float = 0.0

    def to_dict(self) -> dict:
        return asdict(self)
