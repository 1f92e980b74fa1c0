"""Validation utilities for custom keywords and section keyword mappings.

This module provides the shared validation and sanitization functions used by
the chunker configuration model and the keyword enrichment step. Validators
return a list of human-readable problems; an empty list means the input is
valid.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping

KEYWORD_MAX_LENGTH = 100
WHITESPACE_RUN_RE = re.compile(r"\s+")
LINE_BREAK_RE = re.compile(r"[\r\n]")


def validate_keyword(keyword: str | None) -> str | None:
    """Validate a single keyword.

    Keywords must:
    - Not be empty or whitespace only
    - Be 100 characters or less
    - Not contain line breaks
    - Not carry leading or trailing whitespace

    Args:
        keyword: The keyword to validate

    Returns:
        A description of the problem, or None if the keyword is valid
    """
    if keyword is None or not keyword.strip():
        return "Keyword cannot be empty or whitespace"
    if len(keyword) > KEYWORD_MAX_LENGTH:
        return (
            f"Keyword '{keyword[:20]}...' exceeds maximum length of "
            f"{KEYWORD_MAX_LENGTH} characters"
        )
    if LINE_BREAK_RE.search(keyword):
        return f"Keyword '{keyword.strip()}' cannot contain line breaks"
    if keyword != keyword.strip():
        return f"Keyword '{keyword}' has leading or trailing whitespace"
    return None


def validate_keywords(keywords: Iterable[str | None] | None) -> list[str]:
    """Validate a keyword list, including case-insensitive duplicates.

    Args:
        keywords: Keywords to validate

    Returns:
        List of problems found, empty when all keywords are valid

    Example:
        >>> validate_keywords(["api", "API"])
        ["Duplicate keyword 'API' (case-insensitive)"]
    """
    if keywords is None:
        return []

    errors: list[str] = []
    seen: set[str] = set()
    for keyword in keywords:
        problem = validate_keyword(keyword)
        if problem is not None or keyword is None:
            errors.append(problem or "Keyword cannot be empty or whitespace")
            continue
        folded = keyword.casefold()
        if folded in seen:
            errors.append(f"Duplicate keyword '{keyword}' (case-insensitive)")
        seen.add(folded)
    return errors


def validate_section_mappings(
    mappings: Mapping[str, Iterable[str | None]] | None,
) -> list[str]:
    """Validate section pattern -> keyword mappings.

    Each key must be a non-empty regular expression that compiles, and each
    value must be a valid keyword list.

    Args:
        mappings: Section title patterns mapped to keyword lists

    Returns:
        List of problems found, empty when all mappings are valid
    """
    if mappings is None:
        return []

    errors: list[str] = []
    for pattern, keywords in mappings.items():
        if not pattern or not pattern.strip():
            errors.append("Section mapping pattern cannot be empty")
            continue
        try:
            re.compile(pattern)
        except re.error as e:
            errors.append(f"Invalid regex pattern '{pattern}': {e}")
            continue
        for problem in validate_keywords(keywords):
            errors.append(f"Section '{pattern}': {problem}")
    return errors


def sanitize_keyword(keyword: str) -> str:
    """Trim, collapse internal whitespace runs to one space, and lowercase."""
    return WHITESPACE_RUN_RE.sub(" ", keyword.strip()).lower()


def sanitize_keywords(keywords: Iterable[str | None] | None) -> list[str]:
    """Sanitize keywords, dropping blanks and duplicates while keeping order."""
    if keywords is None:
        return []

    result: list[str] = []
    for keyword in keywords:
        if keyword is None or not keyword.strip():
            continue
        cleaned = sanitize_keyword(keyword)
        if cleaned not in result:
            result.append(cleaned)
    return result
