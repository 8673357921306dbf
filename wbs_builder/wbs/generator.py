"""
First-time WBS generation.

Layout (level: content):
    1: project root '1'
    2: M | Milestones (1.1), P | Pre-requisites (1.2), one 'S<n> | ...'
       section per subsystem from 1.3, TBC | To Be Confirmed, E | Energisation
    3: every declared category under each subsystem, TBC equipment,
       the four energisation phases
    4: parent equipment and orphaned children
    5: children, directly after their parent
"""

import logging
from typing import Dict, Iterable, List, Mapping, Optional, Union

from wbs_builder.classifiers.categories import EQUIPMENT_CATEGORIES, UNRECOGNISED_CATEGORY
from wbs_builder.config.field_mappings import (
    ENERGISATION_NAME,
    ENERGISATION_PHASES,
    MILESTONES_NAME,
    PREREQUISITES_NAME,
    TBC_SECTION_NAME,
)
from wbs_builder.config.settings import settings
from wbs_builder.models import (
    ClassifiedEquipment,
    DataQualityIssue,
    EquipmentRecord,
    GenerationResult,
    SubsystemDescriptor,
    WBSNode,
)
from .arena import WbsArena
from .codes import ROOT_CODE
from .naming import default_subsystem, format_equipment_name, format_subsystem_name, parse_subsystem_label
from .validation import validate_wbs_tree

logger = logging.getLogger(__name__)

TbcItem = Union[EquipmentRecord, ClassifiedEquipment]


def subsystem_of(item: TbcItem) -> SubsystemDescriptor:
    """Resolved subsystem of classified equipment or a raw record."""
    if isinstance(item, ClassifiedEquipment):
        return item.subsystem
    return parse_subsystem_label(item.subsystem) or default_subsystem()


class WbsGenerator:
    """Builds a complete WBS tree from categorized equipment."""

    def __init__(self, categories: Optional[Dict[str, str]] = None):
        self.categories = dict(categories or EQUIPMENT_CATEGORIES)
        self.category_codes = sorted(c for c in self.categories if c != UNRECOGNISED_CATEGORY)
        if UNRECOGNISED_CATEGORY in self.categories:
            self.category_codes.append(UNRECOGNISED_CATEGORY)

    def generate(
        self,
        categorized: Union[Iterable[ClassifiedEquipment], Mapping[str, object]],
        tbc_equipment: Iterable[TbcItem] = (),
        project_name: Optional[str] = None,
    ) -> GenerationResult:
        """
        Generate the WBS tree.

        Args:
            categorized: Classified status-Y equipment, or the aggregator's
                category buckets
            tbc_equipment: TBC records, flattened under the TBC section in
                input order
            project_name: Root node name (defaults to settings.PROJECT_NAME)

        Returns:
            GenerationResult with nodes sorted by dotted code
        """
        project_name = project_name or settings.PROJECT_NAME
        items = self._flatten(categorized)
        tbc_items = list(tbc_equipment)
        warnings: List[DataQualityIssue] = []

        logger.info(
            f'Generating WBS for {project_name!r}: {len(items)} equipment, '
            f'{len(tbc_items)} TBC'
        )

        arena = WbsArena()
        arena.add(WBSNode(code=ROOT_CODE, parent_code=None, name=project_name, level=1))
        self.add_section(arena, ROOT_CODE, MILESTONES_NAME)
        self.add_section(arena, ROOT_CODE, PREREQUISITES_NAME)

        subsystems = self._subsystems_in_order(items)
        for number, subsystem in enumerate(subsystems, start=1):
            subsystem_node = self.add_subsystem(arena, ROOT_CODE, number, subsystem)
            for category in self.category_codes:
                category_node = arena.get(self._category_code(arena, subsystem_node.code, category))
                bucket = [
                    i for i in items
                    if i.subsystem.key == subsystem.key and i.category == category
                ]
                warnings.extend(self._place_bucket(arena, category_node, bucket, items))

        tbc_section = self.add_section(arena, ROOT_CODE, TBC_SECTION_NAME)
        for item in tbc_items:
            self.add_equipment(arena, tbc_section.code, item, commissioning_status='TBC')

        energisation = self.add_section(arena, ROOT_CODE, ENERGISATION_NAME)
        for phase in ENERGISATION_PHASES:
            self.add_section(arena, energisation.code, phase)

        nodes = arena.nodes()
        validation = validate_wbs_tree(nodes + arena.duplicates)
        result = GenerationResult(
            nodes=nodes,
            validation=validation,
            warnings=warnings,
            project_name=project_name,
        )
        logger.info(
            f'Generated {len(nodes)} WBS nodes '
            f'({len(result.equipment_nodes)} equipment, {len(warnings)} warnings)'
        )
        return result

    def _flatten(self, categorized) -> List[ClassifiedEquipment]:
        if isinstance(categorized, Mapping):
            items = [item for bucket in categorized.values() for item in bucket.items]
            return sorted(items, key=lambda i: i.record.source_index)
        return list(categorized)

    def _subsystems_in_order(self, items: List[ClassifiedEquipment]) -> List[SubsystemDescriptor]:
        seen: Dict[str, SubsystemDescriptor] = {}
        for item in items:
            seen.setdefault(item.subsystem.key, item.subsystem)
        if not seen:
            fallback = default_subsystem()
            seen[fallback.key] = fallback
        return list(seen.values())

    def _category_code(self, arena: WbsArena, subsystem_code: str, category: str) -> str:
        for child in arena.children_of(subsystem_code):
            if child.category == category:
                return child.code
        raise KeyError(f'No category {category} under {subsystem_code}')

    def _place_bucket(
        self,
        arena: WbsArena,
        category_node: WBSNode,
        bucket: List[ClassifiedEquipment],
        all_items: List[ClassifiedEquipment],
    ) -> List[DataQualityIssue]:
        """Parents with their children interleaved, then orphaned children."""
        warnings = []
        parent_ids = {i.identifier for i in all_items if i.is_parent}

        for parent in (i for i in bucket if i.is_parent):
            parent_node = self.add_equipment(arena, category_node.code, parent)
            for child in all_items:
                if child.is_child and child.resolved_parent == parent.identifier:
                    self.add_equipment(arena, parent_node.code, child)

        for child in bucket:
            if child.is_parent or child.resolved_parent in parent_ids:
                continue
            node = self.add_equipment(arena, category_node.code, child, is_orphaned=True)
            warnings.append(DataQualityIssue(
                code='orphaned_child',
                message=(
                    f'{child.identifier}: parent {child.parent_identifier} not found, '
                    f'placed at {node.code} under {category_node.name}'
                ),
                identifier=child.identifier,
            ))
            logger.warning(warnings[-1].message)
        return warnings

    # ------------------------------------------------------------------
    # Node factories, shared with the reconciler
    # ------------------------------------------------------------------

    @staticmethod
    def add_section(
        arena: WbsArena,
        parent_code: str,
        name: str,
        category: Optional[str] = None,
        subsystem: Optional[str] = None,
        is_new: bool = False,
    ) -> WBSNode:
        """Append a structural node under parent_code."""
        return arena.add(WBSNode(
            code=arena.allocate_code(parent_code),
            parent_code=parent_code,
            name=name,
            level=arena.level_below(parent_code),
            category=category,
            subsystem=subsystem,
            is_new=is_new,
        ))

    def add_subsystem(
        self,
        arena: WbsArena,
        parent_code: str,
        number: int,
        subsystem: SubsystemDescriptor,
        is_new: bool = False,
    ) -> WBSNode:
        """Append a subsystem section with one node per declared category."""
        node = self.add_section(
            arena, parent_code, format_subsystem_name(number, subsystem),
            subsystem=subsystem.key, is_new=is_new,
        )
        for category in self.category_codes:
            self.add_section(
                arena, node.code, f'{category} | {self.categories[category]}',
                category=category, subsystem=subsystem.key, is_new=is_new,
            )
        return node

    @staticmethod
    def add_equipment(
        arena: WbsArena,
        parent_code: str,
        item: TbcItem,
        commissioning_status: Optional[str] = None,
        is_orphaned: bool = False,
        is_fallback: bool = False,
        is_new: bool = False,
    ) -> WBSNode:
        """Append an equipment node under parent_code."""
        classified = isinstance(item, ClassifiedEquipment)
        return arena.add(WBSNode(
            code=arena.allocate_code(parent_code),
            parent_code=parent_code,
            name=format_equipment_name(item.identifier, item.description),
            level=arena.level_below(parent_code),
            is_equipment=True,
            is_structural=False,
            category=item.category if classified and commissioning_status != 'TBC' else None,
            subsystem=subsystem_of(item).key,
            is_new=is_new,
            identifier=item.identifier,
            description=item.description,
            commissioning_status=commissioning_status or item.commissioning_status,
            is_orphaned=is_orphaned,
            is_fallback=is_fallback,
        ))
