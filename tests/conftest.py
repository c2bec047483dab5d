from pathlib import Path

import pytest

from docvault.config import Settings
from docvault.processors import default_registry
from docvault.storage import DocumentStore


@pytest.fixture
def registry():
    return default_registry()


@pytest.fixture
def store():
    with DocumentStore() as s:
        yield s


@pytest.fixture
def settings(tmp_path):
    return Settings(
        uploads_path=tmp_path / "uploads",
        converted_path=tmp_path / "converted",
    )


@pytest.fixture
def write(tmp_path):
    """Write a file under tmp_path and return its path."""

    def _write(name: str, content: str | bytes) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_bytes(content.encode("utf-8"))
        return path

    return _write
