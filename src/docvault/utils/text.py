"""Text analysis and cleanup helpers."""

import html
import re

_TAG_RE = re.compile(r"<[^>]*>")
_URL_RE = re.compile(r"https?://[^\s<>\"{}|\\^`\[\]]+")
_WHITESPACE_RE = re.compile(r"\s+")
_SENTENCE_END_RE = re.compile(r"[.!?]")

# Common function words used by detect_language
LANGUAGE_MARKERS = {
    "en": ["the", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with", "by"],
    "de": ["der", "die", "das", "und", "oder", "aber", "in", "auf", "mit", "von", "zu", "für"],
    "tr": ["ve", "veya", "ama", "ile", "den", "dan", "için", "gibi", "kadar", "daha"],
}


def count_words(text: str) -> int:
    return len(text.split())


def count_lines(text: str) -> int:
    """Count lines the way a newline split does (a trailing newline adds one)."""
    return text.count("\n") + 1


def strip_html(content: str) -> str:
    """Remove HTML tags and unescape entities."""
    return html.unescape(_TAG_RE.sub("", content))


def extract_links(text: str) -> list[str]:
    return _URL_RE.findall(text)


def truncate(text: str, length: int) -> str:
    """Truncate text to ``length`` characters, appending an ellipsis."""
    if len(text) <= length:
        return text
    return text[:length] + "..."


def clean_text(text: str) -> str:
    """Collapse all whitespace runs to single spaces."""
    return _WHITESPACE_RE.sub(" ", text).strip()


def format_file_size(size: int) -> str:
    """Convert bytes to a human readable size (1.5 KB, 3.0 MB, ...)."""
    unit = 1024
    if size < unit:
        return f"{size} B"
    div, exp = unit, 0
    n = size // unit
    while n >= unit:
        div *= unit
        exp += 1
        n //= unit
    return f"{size / div:.1f} {'KMGTPE'[exp]}B"


def detect_language(text: str) -> str:
    """Guess the language of ``text`` from function word frequency.

    Returns one of "en", "de", "tr" or "unknown".
    """
    lowered = text.lower()
    counts = {
        lang: sum(lowered.count(f" {word} ") for word in words)
        for lang, words in LANGUAGE_MARKERS.items()
    }

    if counts["en"] > counts["de"] and counts["en"] > counts["tr"]:
        return "en"
    if counts["de"] > counts["tr"]:
        return "de"
    if counts["tr"] > 0:
        return "tr"
    return "unknown"


def complexity_score(text: str) -> int:
    """Rough readability complexity from 0 to 100."""
    words = text.split()
    if not words:
        return 0

    sentences = [s for s in _SENTENCE_END_RE.split(text) if s]
    avg_words_per_sentence = len(words) / max(len(sentences), 1)

    long_words = sum(1 for w in words if len(w) > 6)
    avg_word_length = sum(len(w) for w in words) / len(words)
    long_word_ratio = long_words / len(words)

    score = int(avg_words_per_sentence * 2 + avg_word_length * 10 + long_word_ratio * 50)
    return min(score, 100)


def analyze_content(content: str) -> dict:
    """Line, word and character statistics for a block of text."""
    lines = content.split("\n")
    words = content.split()

    empty_lines = sum(1 for line in lines if not line.strip())

    max_line_length = max(len(line) for line in lines)
    non_empty = [len(line) for line in lines if line]
    min_line_length = min(non_empty) if non_empty else 0

    avg_line_length = len(content) / len(lines)
    avg_word_length = sum(len(w) for w in words) / len(words) if words else 0.0

    return {
        "total_lines": len(lines),
        "empty_lines": empty_lines,
        "content_lines": len(lines) - empty_lines,
        "total_words": len(words),
        "total_chars": len(content),
        "max_line_length": max_line_length,
        "min_line_length": min_line_length,
        "avg_line_length": f"{avg_line_length:.1f}",
        "avg_word_length": f"{avg_word_length:.1f}",
        "has_content": bool(content.strip()),
    }
