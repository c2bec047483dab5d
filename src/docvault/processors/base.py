"""Shared helpers for format processors."""

from pathlib import Path

from docvault.exceptions import ExtractionFailedError


def read_text(path: Path | str, label: str) -> str:
    """Read a file as UTF-8 text, keeping line endings as they are on disk.

    Raises:
        ExtractionFailedError: if the file cannot be read
    """
    try:
        raw = Path(path).read_bytes()
    except OSError as e:
        raise ExtractionFailedError(path, f"failed to read {label} file: {e}") from e
    return raw.decode("utf-8", errors="replace")


def file_size(path: Path | str) -> int:
    try:
        return Path(path).stat().st_size
    except OSError as e:
        raise ExtractionFailedError(path, e) from e
