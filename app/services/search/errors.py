"""Shared error classes for the search engine and its lookup tables."""

from __future__ import annotations


class SearchError(RuntimeError):
    """Base exception raised by the search service."""

    def __init__(self, message: str, code: str = "SEARCH_ERROR") -> None:
        super().__init__(message)
        self.code = code


class SearchValidationError(SearchError):
    """Raised when a query is rejected before any record is scored."""

    def __init__(self, message: str, code: str = "INVALID_QUERY") -> None:
        super().__init__(message, code=code)


class LexiconError(SearchError):
    """Raised when the synonym/alias lexicon cannot be loaded or validated."""

    def __init__(self, message: str, code: str = "LEXICON_LOAD_ERROR") -> None:
        super().__init__(message, code=code)
