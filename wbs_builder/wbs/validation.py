"""
Structural validation of a finished WBS tree.

Problems are reported, never raised: callers always get their tree back
together with the ValidationReport.
"""

import logging
from typing import Any, Dict, Iterable, List

from wbs_builder.models import ValidationReport, WBSNode
from .codes import code_depth, parent_of, sort_nodes

logger = logging.getLogger(__name__)


def validate_wbs_tree(nodes: Iterable[WBSNode]) -> ValidationReport:
    """
    Check a WBS node list for structural integrity.

    Errors: duplicate codes, missing code or name, a parent code that is not
    the node's own code minus its last segment, a parent code that names no
    node in the tree. Warnings: more than one root, orphaned children,
    fallback placements.

    Args:
        nodes: WBS nodes in any order

    Returns:
        ValidationReport with errors, warnings and statistics
    """
    nodes = list(nodes)
    report = ValidationReport()
    codes = set()

    for node in nodes:
        if not node.code:
            report.add_error(f'Node {node.name!r} has no WBS code')
            continue
        if node.code in codes:
            report.add_error(f'Duplicate WBS code: {node.code}')
        codes.add(node.code)
        if not node.name:
            report.add_error(f'{node.code}: missing name')

    roots = []
    for node in nodes:
        if not node.code:
            continue
        if node.parent_code is None:
            roots.append(node)
            continue
        if node.parent_code != parent_of(node.code):
            report.add_error(
                f'{node.code}: parent code {node.parent_code} is not its code prefix'
            )
        if node.parent_code not in codes:
            report.add_error(f'{node.code}: parent {node.parent_code} does not exist')

    if len(roots) != 1:
        report.add_warning(f'Expected exactly one root node, found {len(roots)}')

    orphaned = [n for n in nodes if n.is_orphaned]
    for node in orphaned:
        report.add_warning(f'{node.code}: {node.identifier} placed without its parent')

    fallback = [n for n in nodes if n.is_fallback]
    for node in fallback:
        report.add_warning(f'{node.code}: {node.identifier} placed in the unplaced equipment section')

    report.statistics = {
        'total_nodes': len(nodes),
        'equipment_nodes': sum(1 for n in nodes if n.is_equipment),
        'structural_nodes': sum(1 for n in nodes if n.is_structural),
        'new_nodes': sum(1 for n in nodes if n.is_new),
        'orphaned_nodes': len(orphaned),
        'fallback_nodes': len(fallback),
        'root_nodes': len(roots),
        'max_level': max((code_depth(n.code) for n in nodes if n.code), default=0),
    }

    if report.is_valid:
        logger.info(f'WBS validation passed ({len(nodes)} nodes)')
    else:
        for error in report.errors:
            logger.error(error)
    return report


def build_wbs_tree(nodes: Iterable[WBSNode]) -> List[Dict[str, Any]]:
    """
    Nest a flat node list for display.

    Returns:
        Root dictionaries (WBSNode.to_dict() plus 'children'), children in
        dotted-code order. Nodes whose parent is missing become roots.
    """
    entries: Dict[str, Dict[str, Any]] = {}
    ordered = sort_nodes(nodes)
    for node in ordered:
        entries.setdefault(node.code, {**node.to_dict(), 'children': []})

    roots = []
    placed = set()
    for node in ordered:
        if node.code in placed:
            continue
        placed.add(node.code)
        entry = entries[node.code]
        parent = entries.get(node.parent_code) if node.parent_code else None
        if parent is None or parent is entry:
            roots.append(entry)
        else:
            parent['children'].append(entry)
    return roots
