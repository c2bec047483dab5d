import pytest

from docvault.conversion import DocumentConverter, normalize_format
from docvault.exceptions import UnsupportedFileTypeError, ValidationFailedError


@pytest.fixture
def converter(registry):
    return DocumentConverter(registry)


def test_plain_text_round_trip(converter, write, tmp_path):
    original = "line one\r\nline two\n\nlast line without newline"
    source = write("notes.txt", original)
    output = tmp_path / "out" / "nested" / "notes.txt"

    converter.convert_to_plain_text(source, output)

    assert output.read_bytes() == original.encode("utf-8")


def test_markdown_for_plain_text(converter, write, tmp_path):
    source = write("notes.txt", "Hello | world\n")
    output = tmp_path / "notes.md"

    converter.convert_to_markdown(source, output)
    markdown = output.read_text(encoding="utf-8")

    assert markdown.startswith("# notes.txt\n\n| Property | Value |\n| --- | --- |\n| type | txt |\n")
    assert "| word_count | 3 |" in markdown
    assert "## Content\n\nHello | world\n" in markdown
    assert "```" not in markdown


def test_markdown_fences_structured_types(converter, write, tmp_path):
    source = write("data.json", '{"key": "a|b"}')
    output = tmp_path / "data.md"

    converter.convert_to_markdown(source, output)
    markdown = output.read_text(encoding="utf-8")

    assert '```json\n{"key": "a|b"}\n```' in markdown
    assert "| status | valid_json |" in markdown


def test_markdown_code_fence_uses_language(converter, write, tmp_path):
    source = write("tool.py", "print('hi')\n")
    output = tmp_path / "tool.md"

    converter.convert_to_markdown(source, output)

    assert "```Python\nprint('hi')\n```" in output.read_text(encoding="utf-8")


def test_html_paragraphs_are_escaped(converter, write, tmp_path):
    source = write("notes.txt", "a < b\nsecond\n\nnext & last\n")
    output = tmp_path / "notes.html"

    converter.convert_to_html(source, output)
    page = output.read_text(encoding="utf-8")

    assert page.startswith("<!DOCTYPE html>")
    assert "<title>notes.txt</title>" in page
    assert "<style>" in page
    assert "<p>a &lt; b<br>\nsecond</p>" in page
    assert "<p>next &amp; last</p>" in page
    assert "<tr><th>type</th><td>txt</td></tr>" in page


def test_html_structured_body_is_a_code_block(converter, write, tmp_path):
    source = write("data.xml", "<root><a/></root>")
    output = tmp_path / "data.html"

    converter.convert_to_html(source, output)

    assert "<pre><code>&lt;root&gt;&lt;a/&gt;&lt;/root&gt;</code></pre>" in output.read_text(
        encoding="utf-8"
    )


def test_html_body_passes_through_for_html(converter, write, tmp_path):
    source = write("page.html", "<html><body><p>Hi <b>there</b></p></body></html>")
    output = tmp_path / "page.out.html"

    converter.convert_to_html(source, output)

    assert '<div class="content">\n<p>Hi <b>there</b></p>\n</div>' in output.read_text(encoding="utf-8")


def test_html_passthrough_keeps_entities_escaped(converter, write, tmp_path):
    source = write(
        "page.html",
        "<html><head><title>T</title></head><body>"
        "<p onclick=\"steal()\">5 &lt; 6 and &lt;script&gt;alert(1)&lt;/script&gt;</p>"
        "<script>alert(2)</script><!-- note -->"
        "</body></html>",
    )
    output = tmp_path / "page.out.html"

    converter.convert_to_html(source, output)
    page = output.read_text(encoding="utf-8")

    assert "<p>5 &lt; 6 and &lt;script&gt;alert(1)&lt;/script&gt;</p>" in page
    assert "<script>" not in page
    assert "onclick" not in page
    assert "note" not in page


def test_convert_dispatch(converter, write, tmp_path):
    source = write("notes.txt", "body\n")

    converter.convert(source, tmp_path / "a.txt", "plain")
    converter.convert(source, tmp_path / "b.md", "MD")
    converter.convert(source, tmp_path / "c.htm", "htm")

    assert (tmp_path / "a.txt").read_text() == "body\n"
    assert (tmp_path / "b.md").read_text().startswith("# notes.txt")
    assert (tmp_path / "c.htm").read_text().startswith("<!DOCTYPE html>")

    with pytest.raises(ValidationFailedError):
        converter.convert(source, tmp_path / "d.pdf", "pdf")


def test_convert_unsupported_input(converter, write, tmp_path):
    with pytest.raises(UnsupportedFileTypeError):
        converter.convert(write("blob.xyz", "?"), tmp_path / "blob.md", "markdown")


def test_normalize_format():
    assert normalize_format(" Markdown ") == "markdown"
    assert normalize_format("txt") == "text"
    with pytest.raises(ValidationFailedError):
        normalize_format("rtf")


def test_batch_convert_records_failures(converter, write, tmp_path):
    good = write("good.md", "# Good\n")
    unsupported = write("bad.xyz", "?")
    missing = tmp_path / "missing.txt"
    out_dir = tmp_path / "converted"

    results = converter.batch_convert([good, unsupported, missing], out_dir, "html")

    assert results[str(good)] == str(out_dir / "good.html")
    assert (out_dir / "good.html").exists()
    assert results[str(unsupported)].startswith("Error: unsupported file type")
    assert results[str(missing)].startswith("Error: ")


def test_batch_convert_unknown_format(converter, write, tmp_path):
    good = write("good.md", "# Good\n")

    results = converter.batch_convert([good], tmp_path, "rtf")

    assert results == {str(good): "Error: unsupported output format: rtf"}


def test_batch_convert_keeps_same_stem_outputs_apart(converter, write, tmp_path):
    first = write("a/report.txt", "from a\n")
    second = write("b/report.txt", "from b\n")
    third = write("report.md", "from md\n")
    out_dir = tmp_path / "out"

    results = converter.batch_convert([first, second, third], out_dir, "text")

    assert results[str(first)] == str(out_dir / "report.txt")
    assert results[str(second)] == str(out_dir / "report_1.txt")
    assert results[str(third)] == str(out_dir / "report_2.txt")
    assert (out_dir / "report.txt").read_text() == "from a\n"
    assert (out_dir / "report_1.txt").read_text() == "from b\n"
    assert (out_dir / "report_2.txt").read_text() == "from md\n"
