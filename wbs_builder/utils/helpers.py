"""General utility helper functions."""
from typing import Any, Dict, Iterable, Optional
import math
import re

from wbs_builder.config.field_mappings import PLACEHOLDER_VALUES

_WHITESPACE = re.compile(r'\s+')


def safe_str(value: Any) -> str:
    """
    Convert a cell value to a stripped string.

    None and NaN (as produced by pandas for empty cells) become ''.
    """
    if value is None:
        return ''
    if isinstance(value, float) and math.isnan(value):
        return ''
    return str(value).strip()


def normalize_identifier(value: Any) -> str:
    """
    Normalize an equipment identifier for matching.

    Trims, upper-cases and collapses internal whitespace. Placeholder values
    ('-') normalize to ''.

    Args:
        value: Raw identifier

    Returns:
        Normalized identifier (e.g. ' uh101-f ' -> 'UH101-F')
    """
    text = _WHITESPACE.sub(' ', safe_str(value)).upper()
    if text in PLACEHOLDER_VALUES:
        return ''
    return text


def strip_marker(identifier: str) -> str:
    """Remove a single leading '+' or '-' marker from an identifier."""
    if identifier[:1] in ('+', '-'):
        return identifier[1:]
    return identifier


def first_present(record: Dict[str, Any], keys: Iterable[str]) -> Optional[Any]:
    """
    Get the first non-empty value among synonym keys.

    Args:
        record: Source dictionary
        keys: Candidate keys in priority order

    Returns:
        The first value whose string form is non-empty, or None
    """
    for key in keys:
        if key in record and safe_str(record[key]) != '':
            return record[key]
    return None


def parse_bool(value: Any) -> Optional[bool]:
    """Parse a truthy/falsy cell value; None when the cell is empty."""
    if isinstance(value, bool):
        return value
    text = safe_str(value).upper()
    if text == '':
        return None
    return text in ('TRUE', 'Y', 'YES', '1')
