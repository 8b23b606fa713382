"""
Shared validation utilities
"""
from typing import Optional
from .constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, MAX_SEARCH_TERM_LENGTH


def validate_pagination(limit: Optional[int] = None, offset: Optional[int] = None) -> tuple[int, int]:
    """Validate and normalize pagination parameters"""
    limit = limit or DEFAULT_PAGE_SIZE
    offset = offset or 0

    if limit < 1:
        limit = DEFAULT_PAGE_SIZE
    if limit > MAX_PAGE_SIZE:
        limit = MAX_PAGE_SIZE
    if offset < 0:
        offset = 0

    return limit, offset


def normalize_search_term(term: Optional[str]) -> Optional[str]:
    """Trim a free-text search term; blank terms mean "no filter"."""
    if term is None:
        return None
    term = term.strip()
    if not term:
        return None
    return term[:MAX_SEARCH_TERM_LENGTH]
