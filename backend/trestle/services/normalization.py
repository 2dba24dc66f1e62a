"""
Text normalization utilities.

Used for search terms and for codes (SKUs, order numbers, project codes)
arriving in query strings. Normalizations are composable: each is a
small function that can be chained.
"""

import re


def normalize_whitespace(value: str) -> str:
    """Collapse whitespace and strip."""
    return re.sub(r"\s+", " ", value.strip())


def normalize_case(value: str) -> str:
    """Lowercase for case-insensitive comparison."""
    return value.lower()


def normalize_search(value: str) -> str:
    """
    Standard search term normalization chain.
    '  Steel   BEAM ' → 'steel beam'
    """
    return normalize_case(normalize_whitespace(value))


def normalize_code(value: str) -> str:
    """
    Business codes are upper-case and hyphen-separated.
    ' brg 0042 ' → 'BRG-0042'
    'stl-beam_200' → 'STL-BEAM-200'
    """
    collapsed = normalize_whitespace(value)
    return re.sub(r"[\s_]+", "-", collapsed).upper()
