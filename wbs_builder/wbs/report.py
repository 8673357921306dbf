"""
Export and report rows for generated or reconciled WBS trees.

Rows are plain dictionaries whose keys match the schemas in schemas/wbs.py,
so they can go straight into a DataFrame and through validated_df_to_csv().
"""

from typing import Any, Dict, Iterable, List, Union

from wbs_builder.models import GenerationResult, ReconciliationResult, WBSNode
from .codes import sort_nodes

EXPORT_COLUMNS = ['wbs_code', 'parent_wbs_code', 'wbs_name']


def export_rows(nodes: Iterable[WBSNode], new_only: bool = False) -> List[Dict[str, str]]:
    """
    Three-column P6 import rows (wbs_code, parent_wbs_code, wbs_name).

    Args:
        nodes: WBS nodes in any order
        new_only: Keep only nodes allocated by a reconciliation

    Returns:
        Rows sorted by dotted code; equipment with commissioning status N is
        never exported
    """
    rows = []
    for node in sort_nodes(nodes):
        if new_only and not node.is_new:
            continue
        if node.commissioning_status == 'N':
            continue
        rows.append({
            'wbs_code': node.code,
            'parent_wbs_code': node.parent_code or '',
            'wbs_name': node.name,
        })
    return rows


def structure_rows(nodes: Iterable[WBSNode]) -> List[Dict[str, Any]]:
    """Full node rows, one per node, sorted by dotted code."""
    return [node.to_dict() for node in sort_nodes(nodes)]


def change_rows(result: ReconciliationResult) -> List[Dict[str, str]]:
    """
    One row per added, modified or removed equipment item.

    Added rows carry the newly allocated code; modified rows list their
    changed fields as 'field: old -> new' joined by '; '.
    """
    new_codes = {node.identifier: node.code for node in result.new_wbs_items if node.is_equipment}
    rows = []

    for item in result.added:
        rows.append({
            'change_type': 'added',
            'equipment_number': item.identifier,
            'description': item.description,
            'commissioning_status': item.commissioning_status,
            'subsystem': item.subsystem.label,
            'category': item.category,
            'wbs_code': new_codes.get(item.identifier, ''),
            'changes': '',
        })

    for modified in result.modified:
        item = modified.equipment
        rows.append({
            'change_type': 'modified',
            'equipment_number': item.identifier,
            'description': item.description,
            'commissioning_status': item.commissioning_status,
            'subsystem': item.subsystem.label,
            'category': item.category,
            'wbs_code': modified.existing_node.code,
            'changes': '; '.join(
                f'{change.field}: {change.old} -> {change.new}' for change in modified.changes
            ),
        })

    for node in result.removed:
        rows.append({
            'change_type': 'removed',
            'equipment_number': node.identifier or '',
            'description': node.description or '',
            'commissioning_status': node.commissioning_status or '',
            'subsystem': node.subsystem or '',
            'category': node.category or '',
            'wbs_code': node.code,
            'changes': '',
        })

    return rows


def category_summary_rows(buckets: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Per-category counts from the aggregator's buckets."""
    return [
        {
            'category': bucket.code,
            'category_name': bucket.name,
            'equipment_count': bucket.count,
            'parent_count': len(bucket.parents),
            'child_count': len(bucket.children),
        }
        for bucket in buckets.values()
    ]


def summary_text(result: Union[GenerationResult, ReconciliationResult]) -> str:
    """Human-readable summary for the console and the export package."""
    lines = []
    if isinstance(result, ReconciliationResult):
        summary = result.get_summary()
        lines.append('WBS Reconciliation Summary')
        lines.append('=' * 26)
        lines.append(f"Added:          {summary['added']}")
        lines.append(f"Modified:       {summary['modified']}")
        lines.append(f"Removed:        {summary['removed']}")
        lines.append(f"Unchanged:      {summary['unchanged']}")
        lines.append(f"New WBS nodes:  {summary['new_wbs_items']}")
        if result.subsystems.new:
            labels = ', '.join(s.label for s in result.subsystems.new)
            lines.append(f'New subsystems: {labels}')
        if summary['fallback_items']:
            lines.append(f"Unplaced items: {summary['fallback_items']}")
    else:
        stats = result.get_statistics()
        lines.append(f'WBS Generation Summary: {result.project_name}')
        lines.append('=' * 24)
        lines.append(f"Total nodes:      {stats['total_nodes']}")
        lines.append(f"Equipment nodes:  {stats['equipment_nodes']}")
        lines.append(f"Structural nodes: {stats['structural_nodes']}")
        lines.append(f"Orphaned:         {stats['orphaned_children']}")

    lines.append(f'Warnings:       {len(result.warnings)}')
    lines.append(f"Validation:     {'passed' if result.validation.is_valid else 'FAILED'}")
    for error in result.validation.errors[:10]:
        lines.append(f'  - {error}')
    return '\n'.join(lines)
