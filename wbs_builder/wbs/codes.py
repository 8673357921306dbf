"""
Dotted WBS code helpers.

Codes are compared segment-wise as integers ('1.3.10.1' sorts after
'1.3.2.9'). Sequence allocation lives in WbsArena.
"""

from typing import Iterable, List, Optional, Tuple

from wbs_builder.models import WBSNode

SEPARATOR = '.'
ROOT_CODE = '1'


def split_code(code: str) -> List[str]:
    """Split a dotted code into its segments."""
    return [part for part in str(code).strip().split(SEPARATOR) if part != '']


def code_sort_key(code: str) -> Tuple[Tuple[int, int, str], ...]:
    """
    Sort key comparing segments numerically.

    Non-numeric segments sort after numeric ones at the same position and
    compare lexically among themselves.
    """
    key = []
    for part in split_code(code):
        if part.isdigit():
            key.append((0, int(part), ''))
        else:
            key.append((1, 0, part))
    return tuple(key)


def compare_codes(a: str, b: str) -> int:
    """Three-way comparison of two dotted codes (-1, 0, 1)."""
    ka, kb = code_sort_key(a), code_sort_key(b)
    return (ka > kb) - (ka < kb)


def sort_nodes(nodes: Iterable[WBSNode]) -> List[WBSNode]:
    """Sort nodes by dotted-numeric code (stable depth-first order)."""
    return sorted(nodes, key=lambda node: code_sort_key(node.code))


def child_code(parent_code: str, sequence: int) -> str:
    """Code of the sequence-th child of parent_code."""
    return f'{parent_code}{SEPARATOR}{sequence}'


def parent_of(code: str) -> Optional[str]:
    """Code with its final segment removed; None for a single-segment code."""
    parts = split_code(code)
    if len(parts) <= 1:
        return None
    return SEPARATOR.join(parts[:-1])


def last_segment(code: str) -> Optional[int]:
    """Trailing integer segment, or None when it is not numeric."""
    parts = split_code(code)
    if parts and parts[-1].isdigit():
        return int(parts[-1])
    return None


def code_depth(code: str) -> int:
    """Number of segments ('1' -> 1, '1.3.2' -> 3)."""
    return len(split_code(code))
