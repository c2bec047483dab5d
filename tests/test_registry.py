import pytest

from docvault.exceptions import (
    ExtractionFailedError,
    UnsupportedFileTypeError,
    ValidationFailedError,
)
from docvault.models import DocumentContent, ExtractorStatus
from docvault.processors import (
    MarkdownProcessor,
    PlainTextProcessor,
    ProcessorRegistry,
    extension_of,
    normalize_extension,
)


class UpperProcessor:
    status = ExtractorStatus.ok()

    def supported_types(self):
        return {"txt"}

    def read(self, path):
        return DocumentContent(text=path.read_text().upper(), type="txt")


def test_normalize_extension():
    assert normalize_extension(".PDF") == "pdf"
    assert normalize_extension("md") == "md"
    assert extension_of("dir/Report.TXT") == "txt"
    assert extension_of("Makefile") == ""


def test_unregistered_extension(registry, write):
    path = write("data.xyz", "irrelevant")

    with pytest.raises(UnsupportedFileTypeError) as exc:
        registry.process_document(path)
    assert exc.value.extension == "xyz"


def test_extension_match_ignores_case(registry, write):
    content = registry.process_document(write("LOUD.TXT", "quiet"))
    assert content.text == "quiet"


def test_last_registration_wins(write):
    registry = ProcessorRegistry([PlainTextProcessor()])
    registry.register(UpperProcessor())

    assert registry.process_document(write("a.txt", "abc")).text == "ABC"
    # "text" is still served by the first processor
    assert isinstance(registry.get_processor("text"), PlainTextProcessor)


def test_supported_types(registry):
    types = registry.supported_types()
    for ext in ("txt", "md", "markdown", "html", "htm", "pdf", "docx", "json", "xml", "csv"):
        assert ext in types


def test_process_is_idempotent(registry, write):
    path = write("page.html", "<html><head><title>T</title></head><body><p>x</p></body></html>")

    first = registry.process_document(path)
    second = registry.process_document(path)

    assert first.text == second.text
    assert first.metadata == second.metadata


def test_missing_file_is_extraction_failure(registry, tmp_path):
    with pytest.raises(ExtractionFailedError):
        registry.process_document(tmp_path / "nope.md")


def test_process_multiple_skips_failures(registry, write):
    good = write("good.txt", "fine")
    bad = write("bad.xyz", "nope")

    results = registry.process_multiple([good, bad])

    assert list(results) == [str(good)]


def test_validate_file(registry, write, tmp_path):
    path = write("notes.md", "x" * 100)

    registry.validate_file(path, max_size=1000, allowed_types=["md"])

    with pytest.raises(ValidationFailedError, match="does not exist"):
        registry.validate_file(tmp_path / "missing.md")
    with pytest.raises(ValidationFailedError, match="unsupported"):
        registry.validate_file(write("x.xyz", "y"))
    with pytest.raises(ValidationFailedError, match="not allowed"):
        registry.validate_file(path, allowed_types=[".txt"])
    with pytest.raises(ValidationFailedError, match="too large"):
        registry.validate_file(path, max_size=10)


def test_preview(registry, write):
    path = write("lines.txt", "a\nb\nc\n")

    assert registry.get_preview(path, 10) == "a\nb\nc\n"
    assert registry.get_preview(path, 2) == "a\nb\n... (2 more lines)"


def test_stats_and_info(write):
    registry = ProcessorRegistry([PlainTextProcessor(), MarkdownProcessor()])
    registry.process_document(write("a.txt", "1"))
    registry.process_document(write("b.md", "2"))
    with pytest.raises(ExtractionFailedError):
        registry.process_document(write("c.txt", "3").with_name("gone.txt"))

    stats = registry.stats
    assert stats.total_processed == 3
    assert stats.successfully_parsed == 2
    assert stats.failed == 1
    assert stats.type_counts == {"txt": 1, "md": 1}

    info = registry.get_processor_info(".TXT")
    assert info["supported"] is True
    assert info["processor_type"] == "PlainTextProcessor"
    assert info["available"] is True
    assert info["processed_count"] == 1

    assert registry.get_processor_info("xyz")["supported"] is False

    registry.reset_stats()
    assert registry.stats.total_processed == 0
