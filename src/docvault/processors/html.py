"""Processor for HTML files."""

import logging
import re
from pathlib import Path

from bs4 import BeautifulSoup, Comment, NavigableString, Tag

from docvault.models import DocumentContent, ExtractorStatus
from docvault.processors.base import read_text
from docvault.utils.text import count_words

logger = logging.getLogger(__name__)

_TITLE_RE = re.compile(r"<title[^>]*>(.*?)</title>", re.IGNORECASE | re.DOTALL)

# Elements dropped before text extraction or markup passthrough
STRIPPED_TAGS = ["script", "style", "noscript", "iframe", "object", "embed"]


def sanitized_body(markup: str) -> str:
    """Return the inner markup of ``<body>`` without active content.

    Script-like elements, comments and ``on*`` event attributes are removed;
    entities stay escaped.
    """
    soup = BeautifulSoup(markup, "html.parser")
    for tag in soup(STRIPPED_TAGS):
        tag.decompose()
    for comment in soup.find_all(string=lambda s: isinstance(s, Comment)):
        comment.extract()
    for tag in soup.find_all(True):
        for attr in [a for a in tag.attrs if a.lower().startswith("on")]:
            del tag[attr]
        for attr in ("href", "src"):
            value = tag.get(attr)
            if isinstance(value, str) and value.strip().lower().startswith("javascript:"):
                del tag[attr]

    root = soup.body or soup
    if root is soup and soup.head:
        soup.head.decompose()
    return "".join(str(child) for child in root.contents).strip()


def count_tags(markup: str) -> dict[str, int]:
    """Count links, images and headers by raw tag occurrence."""
    lower = markup.lower()
    return {
        "link_count": lower.count("<a "),
        "image_count": lower.count("<img"),
        "header_count": sum(lower.count(f"<h{level}") for level in range(1, 7)),
    }


class HtmlProcessor:
    """Processor for HTML files.

    Tag counts are taken from the raw markup before anything is stripped.
    Body text comes from BeautifulSoup; if that yields nothing the markup
    is reduced with a plain tag strip instead.
    """

    status = ExtractorStatus.ok()

    def supported_types(self) -> set[str]:
        return {"html", "htm"}

    def read(self, path: Path | str) -> DocumentContent:
        markup = read_text(path, "HTML")
        counts = count_tags(markup)

        text, title = self._extract(markup)
        if text.strip():
            method, status = "beautifulsoup", "advanced_extraction"
        else:
            logger.warning(f"No structured text in {Path(path).name}, using basic tag strip")
            text = self._strip_tags(markup)
            title = self._basic_title(markup)
            method, status = "basic", "fallback_extraction"

        metadata = {
            "title": title,
            "word_count": str(count_words(text)),
            "char_count": str(len(text)),
            **{key: str(value) for key, value in counts.items()},
            "method": method,
            "status": status,
        }
        return DocumentContent(text=text, type="html", metadata=metadata)

    def _extract(self, markup: str) -> tuple[str, str]:
        """Render the document body one block per line."""
        soup = BeautifulSoup(markup, "html.parser")
        for tag in soup(STRIPPED_TAGS):
            tag.decompose()

        title = soup.title.get_text(strip=True) if soup.title else ""

        parts: list[str] = []
        if title:
            parts.append(f"TITLE: {title}\n\n")

        body = soup.body
        if body is None:
            if soup.title:
                soup.title.extract()
            parts.append(soup.get_text(" ", strip=True))
            return "".join(parts), title

        for child in body.children:
            if isinstance(child, Comment):
                continue
            if isinstance(child, NavigableString):
                text = child.strip()
                tag_name = ""
            elif isinstance(child, Tag):
                text = child.get_text(" ", strip=True)
                tag_name = child.name
            else:
                continue
            if not text:
                continue

            if tag_name in ("h1", "h2", "h3"):
                parts.append(f"\n{tag_name.upper()}: {text}\n")
            elif tag_name == "p":
                parts.append(f"{text}\n\n")
            else:
                parts.append(f"{text}\n")

        return "".join(parts), title

    @staticmethod
    def _strip_tags(markup: str) -> str:
        # Each tag becomes a space, then whitespace runs collapse
        text = re.sub(r"<[^>]*>", " ", markup)
        return re.sub(r"\s+", " ", text).strip()

    @staticmethod
    def _basic_title(markup: str) -> str:
        match = _TITLE_RE.search(markup)
        return match.group(1).strip() if match else ""
