from docvault.search.searcher import DocumentSearcher, build_matcher, extract_context

__all__ = ["DocumentSearcher", "build_matcher", "extract_context"]
