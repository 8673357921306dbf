"""
Parent/child relationship analysis for equipment lists.

A record with no parent reference (empty, '-', or its own identifier) is a
parent; any other record is a child and produces one Relationship edge. The
stored relation is flat: resolve_top_parent() walks a child's chain up to the
nearest record that is itself a parent.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set, Union

from wbs_builder.config.field_mappings import EQUIPMENT_FIELD_SYNONYMS
from wbs_builder.models import EquipmentRecord, Relationship
from wbs_builder.utils.helpers import first_present, normalize_identifier, strip_marker

logger = logging.getLogger(__name__)

EquipmentLike = Union[EquipmentRecord, Mapping[str, Any]]


@dataclass
class RelationshipAnalysis:
    """Parent/child partition of an equipment list."""

    relationships: List[Relationship] = field(default_factory=list)
    parent_set: Set[str] = field(default_factory=set)
    child_set: Set[str] = field(default_factory=set)
    referenced_parents: Set[str] = field(default_factory=set)
    lookup: Dict[str, EquipmentLike] = field(default_factory=dict)

    @property
    def successful_matches(self) -> int:
        return sum(1 for rel in self.relationships if rel.parent_exists)

    def resolve_top_parent(self, identifier: str) -> Optional[str]:
        """
        Nearest ancestor of identifier that is a parent record.

        Returns:
            The parent identifier, the identifier itself for parents, or None
            when the chain breaks (missing record) or loops
        """
        edges = {rel.child: rel.matched_parent for rel in self.relationships}
        current = identifier
        seen = set()
        while current in self.child_set:
            if current in seen:
                logger.warning(f'Parent reference cycle through {identifier}')
                return None
            seen.add(current)
            current = edges.get(current)
            if current is None:
                return None
        return current if current in self.parent_set else None


def find_parent_match(parent_identifier: str, lookup: Mapping[str, Any]) -> Optional[str]:
    """
    Match a declared parent against the lookup.

    Tries the identifier as written, then with a leading '+' / '-' marker
    removed on either side ('UH101' matches '+UH101' and vice versa).
    """
    if parent_identifier in lookup:
        return parent_identifier

    bare = strip_marker(parent_identifier)
    for candidate in (bare, f'+{bare}', f'-{bare}'):
        if candidate in lookup:
            return candidate
    return None


def _identifier_of(record: EquipmentLike) -> str:
    if isinstance(record, EquipmentRecord):
        return record.identifier
    return normalize_identifier(first_present(record, EQUIPMENT_FIELD_SYNONYMS['identifier']))


def _parent_of(record: EquipmentLike) -> str:
    if isinstance(record, EquipmentRecord):
        return record.parent_identifier or ''
    return normalize_identifier(first_present(record, EQUIPMENT_FIELD_SYNONYMS['parent_identifier']))


def analyze_relationships(equipment: Iterable[EquipmentLike]) -> RelationshipAnalysis:
    """
    Partition equipment into parents and children.

    Args:
        equipment: EquipmentRecords, or raw dicts using any synonym field name

    Returns:
        RelationshipAnalysis whose parent_set and child_set are disjoint and
        together cover every non-empty identifier
    """
    equipment = list(equipment)
    analysis = RelationshipAnalysis()

    for record in equipment:
        identifier = _identifier_of(record)
        if identifier:
            analysis.lookup.setdefault(identifier, record)

    for record in equipment:
        identifier = _identifier_of(record)
        if not identifier:
            continue

        parent = _parent_of(record)
        if not parent or parent == identifier:
            analysis.parent_set.add(identifier)
            continue

        matched = find_parent_match(parent, analysis.lookup)
        analysis.child_set.add(identifier)
        analysis.relationships.append(Relationship(
            child=identifier,
            parent=parent,
            parent_exists=matched is not None,
            matched_parent=matched,
        ))
        analysis.referenced_parents.add(matched or parent)
        logger.debug(f'{identifier} -> {parent} ({"matched " + matched if matched else "no match"})')

    # A record listed twice with different parent references stays a child
    analysis.parent_set -= analysis.child_set

    logger.info(
        f'Relationship analysis: {len(analysis.parent_set)} parents, '
        f'{len(analysis.child_set)} children, '
        f'{analysis.successful_matches}/{len(analysis.relationships)} parent matches'
    )
    return analysis
