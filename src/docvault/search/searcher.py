"""Line-oriented and metadata search over extracted documents."""

import logging
import re
from pathlib import Path
from typing import Callable, Iterable

from docvault.exceptions import DocVaultError, ValidationFailedError
from docvault.models import Match, SearchOptions, SearchResult, SearchStatistics
from docvault.processors.registry import ProcessorRegistry, extension_of

logger = logging.getLogger(__name__)

HIT_PREFIX = ">>> "
CONTEXT_PREFIX = "    "


def build_matcher(query: str, options: SearchOptions) -> Callable[[str], bool]:
    """Return a predicate testing one line against ``query``.

    Regex wins over whole-word matching, which wins over substring matching.
    Without ``case_sensitive``, regexes get ``re.IGNORECASE`` and the other
    modes compare lower-cased operands.

    Raises:
        ValidationFailedError: empty query or invalid regular expression
    """
    if not query:
        raise ValidationFailedError("search query must not be empty")

    if options.use_regex:
        flags = 0 if options.case_sensitive else re.IGNORECASE
        try:
            pattern = re.compile(query, flags)
        except re.error as e:
            raise ValidationFailedError(f"invalid regular expression: {e}") from e
        return lambda line: pattern.search(line) is not None

    needle = query if options.case_sensitive else query.lower()

    if options.whole_words:
        pattern = re.compile(r"\b" + re.escape(needle) + r"\b")
        if options.case_sensitive:
            return lambda line: pattern.search(line) is not None
        return lambda line: pattern.search(line.lower()) is not None

    if options.case_sensitive:
        return lambda line: needle in line
    return lambda line: needle in line.lower()


def extract_context(lines: list[str], index: int, context_lines: int) -> str:
    """Lines around ``lines[index]``, the hit marked with ``>>> ``."""
    start = max(0, index - context_lines)
    end = min(len(lines), index + context_lines + 1)
    return "\n".join(
        (HIT_PREFIX if i == index else CONTEXT_PREFIX) + lines[i] for i in range(start, end)
    )


def search_text(text: str, matches: Callable[[str], bool], options: SearchOptions) -> list[Match]:
    """Scan ``text`` line by line in order, stopping at ``max_matches`` when set."""
    lines = text.split("\n")
    found = []
    for i, line in enumerate(lines):
        if not matches(line):
            continue
        found.append(
            Match(
                line_number=i + 1,
                content=line,
                context=extract_context(lines, i, options.context_lines),
            )
        )
        if options.max_matches > 0 and len(found) >= options.max_matches:
            break
    return found


class DocumentSearcher:
    """Searches documents by extracting them through a registry on each call.

    Holds no state besides the registry, so one instance can be shared.
    """

    def __init__(self, registry: ProcessorRegistry):
        self.registry = registry

    def search_in_document(
        self, path: Path | str, query: str, options: SearchOptions | None = None
    ) -> SearchResult:
        """Search one document.

        Args:
            path: File to extract and search
            query: Substring, word or regular expression depending on options
            options: Matching options (defaults apply when omitted)

        Returns:
            SearchResult with matches in line order

        Raises:
            ValidationFailedError: empty query or bad regex
            UnsupportedFileTypeError: no processor for the file
            ExtractionFailedError: the file could not be read
        """
        options = options or SearchOptions()
        matcher = build_matcher(query, options)
        path = Path(path)

        content = self.registry.process_document(path)
        matches = search_text(content.text, matcher, options)

        logger.debug(f"Found {len(matches)} matches for '{query}' in {path.name}")
        return SearchResult(
            file_path=str(path),
            file_name=path.name,
            matches=matches,
            total_matches=len(matches),
        )

    def search_in_multiple_documents(
        self, paths: Iterable[Path | str], query: str, options: SearchOptions | None = None
    ) -> dict[str, SearchResult]:
        """Search several documents, keeping only those with hits.

        A document that fails to extract is logged and skipped.
        """
        options = options or SearchOptions()
        build_matcher(query, options)  # reject a bad query before touching files

        paths = list(paths)
        results: dict[str, SearchResult] = {}
        for path in paths:
            try:
                result = self.search_in_document(path, query, options)
            except DocVaultError as e:
                logger.warning(f"Error searching {path}: {e}")
                continue
            if result.total_matches > 0:
                results[str(path)] = result

        logger.info(f"Search for '{query}' matched {len(results)} of {len(paths)} documents")
        return results

    def search_with_metadata(
        self, paths: Iterable[Path | str], query: str, options: SearchOptions | None = None
    ) -> dict[str, SearchResult]:
        """Like search_in_multiple_documents, also matching ``key: value`` metadata pairs.

        Metadata hits have line number 0, follow the content hits in key
        order and count toward ``max_matches``.
        """
        options = options or SearchOptions()
        matcher = build_matcher(query, options)
        limit = options.max_matches

        results: dict[str, SearchResult] = {}
        for path in paths:
            path = Path(path)
            try:
                content = self.registry.process_document(path)
            except DocVaultError as e:
                logger.warning(f"Error searching {path}: {e}")
                continue

            matches = search_text(content.text, matcher, options)
            for key in sorted(content.metadata):
                if limit > 0 and len(matches) >= limit:
                    break
                value = content.metadata[key]
                if matcher(f"{key}: {value}"):
                    matches.append(
                        Match(
                            line_number=0,
                            content=f"[META] {key}: {value}",
                            context=f"Metadata field: {key}",
                        )
                    )

            if matches:
                results[str(path)] = SearchResult(
                    file_path=str(path),
                    file_name=path.name,
                    matches=matches,
                    total_matches=len(matches),
                )

        return results

    @staticmethod
    def get_search_statistics(results: dict[str, SearchResult]) -> SearchStatistics:
        total_matches = sum(r.total_matches for r in results.values())

        file_types: dict[str, int] = {}
        for path in results:
            ext = extension_of(path) or "no_extension"
            file_types[ext] = file_types.get(ext, 0) + 1

        return SearchStatistics(
            total_files_searched=len(results),
            total_matches=total_matches,
            file_types=file_types,
            average_matches_per_file=total_matches / len(results) if results else 0.0,
        )

    @staticmethod
    def highlight_matches(text: str, query: str, options: SearchOptions | None = None) -> str:
        """Wrap every hit of ``query`` in ``text`` with ``<mark>`` tags.

        An empty query or invalid regex leaves the text unchanged.
        """
        options = options or SearchOptions()
        if not query:
            return text

        source = query if options.use_regex else re.escape(query)
        if options.whole_words and not options.use_regex:
            source = r"\b" + source + r"\b"
        flags = 0 if options.case_sensitive else re.IGNORECASE

        try:
            pattern = re.compile(source, flags)
        except re.error:
            return text
        return pattern.sub(lambda m: f"<mark>{m.group(0)}</mark>", text)
