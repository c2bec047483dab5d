"""Render extracted documents as Markdown, HTML or plain text."""

import html
import logging
from pathlib import Path
from typing import Iterable, Optional

from docvault.exceptions import DocVaultError, ValidationFailedError
from docvault.models import DocumentContent
from docvault.processors.base import read_text
from docvault.processors.html import sanitized_body
from docvault.processors.registry import ProcessorRegistry

logger = logging.getLogger(__name__)

# Types whose body is shown as a code block
CODE_TYPES = {"json", "xml", "csv", "code"}

FORMAT_ALIASES = {
    "markdown": "markdown",
    "md": "markdown",
    "html": "html",
    "htm": "html",
    "text": "text",
    "txt": "text",
    "plain": "text",
}

OUTPUT_EXTENSIONS = {"markdown": "md", "html": "html", "text": "txt"}

HTML_STYLE = """\
body { font-family: Arial, sans-serif; margin: 40px; line-height: 1.5; }
h1 { color: #333; }
table.metadata { border-collapse: collapse; margin-bottom: 24px; }
table.metadata th, table.metadata td { border: 1px solid #ccc; padding: 4px 8px; text-align: left; }
pre { background: #f4f4f4; padding: 10px; overflow-x: auto; }"""


def normalize_format(fmt: str) -> str:
    """Map a format name or alias to markdown, html or text.

    Raises:
        ValidationFailedError: unknown format
    """
    normalized = FORMAT_ALIASES.get(fmt.strip().lower())
    if normalized is None:
        raise ValidationFailedError(f"unsupported output format: {fmt}")
    return normalized


def unique_name(stem: str, ext: str, taken: set[str]) -> str:
    """First of ``stem.ext``, ``stem_1.ext``, ... not in ``taken``; records it."""
    name = f"{stem}.{ext}"
    counter = 1
    while name.lower() in taken:
        name = f"{stem}_{counter}.{ext}"
        counter += 1
    taken.add(name.lower())
    return name


def fence_language(content: DocumentContent) -> str:
    if content.type == "code":
        return content.metadata.get("language", "")
    return content.type


def _escape_cell(value: str) -> str:
    return value.replace("|", "\\|").replace("\n", " ")


def _property_rows(content: DocumentContent) -> list[tuple[str, str]]:
    rows = [
        ("type", content.type),
        ("processed_at", content.processed_at.isoformat(timespec="seconds")),
    ]
    rows.extend((key, content.metadata[key]) for key in sorted(content.metadata))
    return rows


def render_markdown(name: str, content: DocumentContent) -> str:
    parts = [
        f"# {name}",
        "",
        "| Property | Value |",
        "| --- | --- |",
    ]
    parts.extend(f"| {_escape_cell(k)} | {_escape_cell(v)} |" for k, v in _property_rows(content))
    parts += ["", "## Content", ""]

    if content.type in CODE_TYPES:
        body = content.text if content.text.endswith("\n") else content.text + "\n"
        parts.append(f"```{fence_language(content)}\n{body}```")
    else:
        parts.append(content.text)

    return "\n".join(parts) + "\n"


def render_html(name: str, content: DocumentContent, markup: Optional[str] = None) -> str:
    """Standalone HTML page for ``content``.

    For html documents ``markup`` is the sanitized source body and is used
    as-is; without it the extracted text is escaped like any other text.
    """
    title = html.escape(name)
    rows = "\n".join(
        f"<tr><th>{html.escape(k)}</th><td>{html.escape(v)}</td></tr>"
        for k, v in _property_rows(content)
    )

    if content.type == "html" and markup is not None:
        body = markup
    elif content.type in CODE_TYPES:
        body = f"<pre><code>{html.escape(content.text)}</code></pre>"
    else:
        paragraphs = [p.strip() for p in content.text.replace("\r\n", "\n").split("\n\n")]
        body = "\n".join(
            "<p>" + html.escape(p).replace("\n", "<br>\n") + "</p>" for p in paragraphs if p
        )

    return f"""<!DOCTYPE html>
<html>
<head>
<meta charset="UTF-8">
<title>{title}</title>
<style>
{HTML_STYLE}
</style>
</head>
<body>
<h1>{title}</h1>
<table class="metadata">
<tr><th>Property</th><th>Value</th></tr>
{rows}
</table>
<div class="content">
{body}
</div>
</body>
</html>
"""


class DocumentConverter:
    """Converts documents to other formats, extracting them through a registry."""

    def __init__(self, registry: ProcessorRegistry):
        self.registry = registry

    def convert_to_markdown(self, input_path: Path | str, output_path: Path | str) -> None:
        input_path = Path(input_path)
        content = self.registry.process_document(input_path)
        self._write(output_path, render_markdown(input_path.name, content))

    def convert_to_html(self, input_path: Path | str, output_path: Path | str) -> None:
        input_path = Path(input_path)
        content = self.registry.process_document(input_path)
        markup = None
        if content.type == "html":
            markup = sanitized_body(read_text(input_path, "HTML"))
        self._write(output_path, render_html(input_path.name, content, markup))

    def convert_to_plain_text(self, input_path: Path | str, output_path: Path | str) -> None:
        """Write the extracted text unchanged."""
        content = self.registry.process_document(input_path)
        self._write(output_path, content.text)

    def convert(self, input_path: Path | str, output_path: Path | str, fmt: str) -> None:
        """Convert to ``fmt`` (markdown/md, html/htm, text/txt/plain).

        Raises:
            ValidationFailedError: unknown format
            UnsupportedFileTypeError: no processor for the input
            ExtractionFailedError: the input could not be read
            DocVaultError: the output could not be written
        """
        target = normalize_format(fmt)
        if target == "markdown":
            self.convert_to_markdown(input_path, output_path)
        elif target == "html":
            self.convert_to_html(input_path, output_path)
        else:
            self.convert_to_plain_text(input_path, output_path)
        logger.info(f"Converted {Path(input_path).name} -> {output_path}")

    def batch_convert(
        self, input_paths: Iterable[Path | str], output_dir: Path | str, fmt: str
    ) -> dict[str, str]:
        """Convert each input into ``output_dir``.

        Inputs sharing a stem get numbered names (``report.txt``,
        ``report_1.txt``, ...) so no output is written twice in one batch.

        Returns:
            Input path mapped to the written output path, or to
            ``"Error: <message>"`` when that input failed
        """
        output_dir = Path(output_dir)
        results: dict[str, str] = {}

        try:
            ext = OUTPUT_EXTENSIONS[normalize_format(fmt)]
        except ValidationFailedError as e:
            for path in input_paths:
                results[str(path)] = f"Error: {e}"
            return results

        failed = 0
        taken: set[str] = set()
        for path in input_paths:
            output_path = output_dir / unique_name(Path(path).stem, ext, taken)
            try:
                self.convert(path, output_path, fmt)
            except DocVaultError as e:
                logger.warning(f"Error converting {path}: {e}")
                results[str(path)] = f"Error: {e}"
                failed += 1
                continue
            results[str(path)] = str(output_path)

        logger.info(f"Batch conversion finished: {len(results) - failed} ok, {failed} failed")
        return results

    @staticmethod
    def _write(output_path: Path | str, text: str) -> None:
        output_path = Path(output_path)
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            # newline="" keeps the extracted line endings as they are
            with output_path.open("w", encoding="utf-8", newline="") as f:
                f.write(text)
        except OSError as e:
            raise DocVaultError(f"failed to write {output_path}: {e}") from e
