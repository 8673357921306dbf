"""
Reconciliation of a new equipment list against an issued WBS tree.

Existing codes are never recomputed: new equipment is appended under the best
available anchor, highest tier first.

    Tier 1: the item's parent equipment is already in the tree (or was placed
            earlier in this run) -> next child of the parent
    Tier 2: the item's subsystem and category nodes exist -> next child of the
            category node (TBC items go to the TBC section)
    Tier 3: the subsystem is new -> synthesize the subsystem section at the
            next free root slot with all category nodes, then use tier 2

A child whose parent cannot be found is placed by tiers 2 and 3 and marked
orphaned. Items no tier can place (a known subsystem that lacks the category
node) land in the 'U | Unplaced Equipment' section.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from wbs_builder.analysis.relationships import find_parent_match
from wbs_builder.config.field_mappings import FALLBACK_SECTION_NAME, TBC_SECTION_NAME
from wbs_builder.exceptions import InputShapeError
from wbs_builder.models import (
    ClassifiedEquipment,
    ComparisonResult,
    DataQualityIssue,
    FieldChange,
    ModifiedEquipment,
    ReconciliationResult,
    SubsystemDescriptor,
    SubsystemDiff,
    WBSNode,
)
from wbs_builder.transformers.wbs_tree_normalizer import WbsTreeNormalizer
from .arena import WbsArena
from .codes import ROOT_CODE, sort_nodes
from .generator import WbsGenerator
from .naming import category_code_from_name, parse_equipment_name, parse_subsystem_name, split_name
from .validation import validate_wbs_tree

logger = logging.getLogger(__name__)

COMPARED_FIELDS = ('description', 'commissioning_status', 'subsystem')


@dataclass
class NodeContext:
    """What an existing node says about the equipment under it."""

    subsystem: Optional[str] = None   # subsystem key
    category: Optional[str] = None
    in_tbc: bool = False


@dataclass
class TreeIndex:
    """
    Lookup tables over the arena, kept current as nodes are placed.

    Built once from the existing tree; every node allocated during the run is
    registered too, so later items can anchor on earlier ones.
    """

    arena: WbsArena
    root_code: str = ROOT_CODE
    equipment: Dict[str, WBSNode] = field(default_factory=dict)
    subsystems: Dict[str, Tuple[int, SubsystemDescriptor, str]] = field(default_factory=dict)
    categories: Dict[Tuple[str, str], str] = field(default_factory=dict)
    contexts: Dict[str, NodeContext] = field(default_factory=dict)
    tbc_code: Optional[str] = None
    fallback_code: Optional[str] = None

    @classmethod
    def build(cls, nodes: List[WBSNode]) -> 'TreeIndex':
        arena = WbsArena(node.with_new_flag(False) for node in nodes)
        index = cls(arena=arena)
        roots = sort_nodes(arena.roots())
        if roots:
            index.root_code = roots[0].code
        # Sorted order visits every parent before its children
        for node in arena.nodes():
            index.register(node)
        return index

    def register(self, node: WBSNode) -> None:
        parent_context = self.contexts.get(node.parent_code, NodeContext())
        context = NodeContext(
            subsystem=node.subsystem or parent_context.subsystem,
            category=node.category or parent_context.category,
            in_tbc=parent_context.in_tbc,
        )

        if node.is_equipment:
            identifier = node.identifier or (parse_equipment_name(node.name, allow_structural=True) or (None,))[0]
            if identifier:
                self.equipment.setdefault(identifier, node)
            self.contexts[node.code] = context
            return

        token, _ = split_name(node.name)
        token = token.upper()
        parsed_subsystem = parse_subsystem_name(node.name)

        if parsed_subsystem is not None and node.parent_code == self.root_code:
            number, descriptor = parsed_subsystem
            key = node.subsystem or descriptor.key
            self.subsystems.setdefault(key, (number, descriptor, node.code))
            context = NodeContext(subsystem=key)
        elif token == 'TBC' and node.parent_code == self.root_code:
            self.tbc_code = self.tbc_code or node.code
            context = NodeContext(in_tbc=True)
        elif token == 'U' and node.parent_code == self.root_code:
            self.fallback_code = self.fallback_code or node.code
        else:
            category = node.category or category_code_from_name(node.name)
            if category and parent_context.subsystem and node.parent_code in self._subsystem_codes():
                self.categories.setdefault((parent_context.subsystem, category), node.code)
                context = NodeContext(subsystem=parent_context.subsystem, category=category)

        self.contexts[node.code] = context

    def _subsystem_codes(self) -> set:
        return {code for _, _, code in self.subsystems.values()}

    def add(self, node: WBSNode) -> WBSNode:
        self.register(node)
        return node

    def find_equipment(self, identifier: Optional[str]) -> Optional[WBSNode]:
        """Equipment node by identifier, with or without a leading marker."""
        if not identifier:
            return None
        matched = find_parent_match(identifier, self.equipment)
        return self.equipment[matched] if matched else None

    def top_equipment(self, node: WBSNode) -> WBSNode:
        """Climb to the outermost equipment ancestor (children stay one level deep)."""
        parent = self.arena.get(node.parent_code)
        while parent is not None and parent.is_equipment:
            node = parent
            parent = self.arena.get(node.parent_code)
        return node

    def next_subsystem_number(self) -> int:
        return max((number for number, _, _ in self.subsystems.values()), default=0) + 1

    # Existing-side values used by the field comparison

    def description_of(self, node: WBSNode) -> Optional[str]:
        if node.description is not None:
            return node.description
        parsed = parse_equipment_name(node.name, allow_structural=True)
        return parsed[1] if parsed else None

    def status_of(self, node: WBSNode) -> str:
        if node.commissioning_status:
            return node.commissioning_status
        return 'TBC' if self.contexts.get(node.code, NodeContext()).in_tbc else 'Y'

    def subsystem_of(self, node: WBSNode) -> Optional[str]:
        return self.contexts.get(node.code, NodeContext()).subsystem


class WbsReconciler:
    """Diffs new equipment against an existing tree and places the additions."""

    def __init__(
        self,
        generator: Optional[WbsGenerator] = None,
        tree_normalizer: Optional[WbsTreeNormalizer] = None,
        classifier=None,
    ):
        self.generator = generator or WbsGenerator()
        self.tree_normalizer = tree_normalizer or WbsTreeNormalizer()
        self.classifier = classifier

    def reconcile(self, existing_tree: List[Any], new_equipment: Any) -> ReconciliationResult:
        """
        Reconcile a new equipment list against an existing WBS tree.

        Args:
            existing_tree: Existing WBS rows (dicts with either field-name
                spelling) or WBSNodes
            new_equipment: Raw equipment rows or a ProcessedEquipment

        Returns:
            ReconciliationResult; the integrated tree holds every existing node
            unchanged (is_new False) plus the new nodes (is_new True)

        Raises:
            InputShapeError: If the existing tree or the equipment list is
                missing or empty
        """
        if existing_tree is None:
            raise InputShapeError('Existing WBS tree is required for reconciliation')

        from wbs_builder.pipeline import ProcessedEquipment, process_equipment

        tree = self.tree_normalizer.normalize(existing_tree)
        if isinstance(new_equipment, ProcessedEquipment):
            processed = new_equipment
        else:
            processed = process_equipment(new_equipment, self.classifier)

        index = TreeIndex.build(tree.nodes)
        existing_count = len(index.arena)
        warnings: List[DataQualityIssue] = list(tree.issues) + list(processed.warnings)

        logger.info(
            f'Reconciling {len(processed.classified) + len(processed.tbc)} equipment items '
            f'against {existing_count} existing WBS nodes'
        )

        comparison = self.compare(index, processed.classified + processed.tbc, warnings)
        subsystems = self.diff_subsystems(index, processed.classified)
        new_nodes = self.place(index, comparison.added, warnings)

        integrated = index.arena.nodes()
        validation = validate_wbs_tree(integrated + index.arena.duplicates)

        result = ReconciliationResult(
            comparison=comparison,
            subsystems=subsystems,
            new_wbs_items=sort_nodes(new_nodes),
            integrated_tree=integrated,
            validation=validation,
            warnings=warnings,
        )
        summary = result.get_summary()
        logger.info(
            f"Reconciliation: {summary['added']} added, {summary['removed']} removed, "
            f"{summary['modified']} modified, {summary['unchanged']} unchanged, "
            f"{summary['new_wbs_items']} new WBS nodes"
        )
        return result

    # ------------------------------------------------------------------
    # Step 1: identity diff
    # ------------------------------------------------------------------

    def compare(
        self,
        index: TreeIndex,
        equipment: List[ClassifiedEquipment],
        warnings: List[DataQualityIssue],
    ) -> ComparisonResult:
        """Partition equipment into added / modified / unchanged, tree leftovers into removed."""
        comparison = ComparisonResult()
        seen = set()

        for item in equipment:
            if item.identifier in seen:
                warnings.append(DataQualityIssue(
                    code='duplicate_identifier',
                    message=(
                        f'{item.identifier} listed with more than one commissioning status; '
                        f'status {item.commissioning_status} ignored'
                    ),
                    identifier=item.identifier,
                ))
                logger.warning(warnings[-1].message)
                continue
            seen.add(item.identifier)

            node = index.equipment.get(item.identifier)
            if node is None:
                comparison.added.append(item)
                continue

            changes = self._field_changes(index, node, item)
            if changes:
                comparison.modified.append(ModifiedEquipment(item, node, tuple(changes)))
            else:
                comparison.unchanged.append(item)

        comparison.removed = [
            node for identifier, node in index.equipment.items() if identifier not in seen
        ]
        comparison.removed = sort_nodes(comparison.removed)
        return comparison

    @staticmethod
    def _field_changes(index: TreeIndex, node: WBSNode, item: ClassifiedEquipment) -> List[FieldChange]:
        existing = {
            'description': index.description_of(node),
            'commissioning_status': index.status_of(node),
            'subsystem': index.subsystem_of(node),
        }
        current = {
            'description': item.description,
            'commissioning_status': item.commissioning_status,
            'subsystem': item.subsystem.key,
        }
        return [
            FieldChange(name, existing[name], current[name])
            for name in COMPARED_FIELDS
            # Fields the existing tree does not carry are not compared
            if existing[name] is not None and existing[name] != current[name]
        ]

    # ------------------------------------------------------------------
    # Step 2: subsystem diff
    # ------------------------------------------------------------------

    @staticmethod
    def diff_subsystems(index: TreeIndex, equipment: List[ClassifiedEquipment]) -> SubsystemDiff:
        existing = [descriptor for _, descriptor, _ in index.subsystems.values()]
        new: Dict[str, SubsystemDescriptor] = {}
        for item in equipment:
            if item.subsystem.key not in index.subsystems:
                new.setdefault(item.subsystem.key, item.subsystem)
        return SubsystemDiff(existing=existing, new=list(new.values()))

    # ------------------------------------------------------------------
    # Step 3: placement
    # ------------------------------------------------------------------

    def place(
        self,
        index: TreeIndex,
        added: List[ClassifiedEquipment],
        warnings: List[DataQualityIssue],
    ) -> List[WBSNode]:
        """Allocate codes for added equipment; returns every node created."""
        created: List[WBSNode] = []
        ordered = [i for i in added if not i.is_child] + [i for i in added if i.is_child]

        for item in ordered:
            if item.commissioning_status == 'TBC':
                section = self._tbc_section(index, created)
                created.append(index.add(self.generator.add_equipment(
                    index.arena, section, item, commissioning_status='TBC', is_new=True,
                )))
                continue

            if item.is_child:
                parent = index.find_equipment(item.resolved_parent) or index.find_equipment(item.parent_identifier)
                if parent is not None:
                    anchor = index.top_equipment(parent)
                    created.append(index.add(self.generator.add_equipment(
                        index.arena, anchor.code, item, is_new=True,
                    )))
                    logger.debug(f'{item.identifier}: placed under parent {anchor.identifier}')
                    continue

            key = (item.subsystem.key, item.category)
            if item.subsystem.key not in index.subsystems:
                created.extend(self._new_subsystem(index, item.subsystem))
            category_code = index.categories.get(key)
            if category_code is not None:
                node = index.add(self.generator.add_equipment(
                    index.arena, category_code, item, is_orphaned=item.is_child, is_new=True,
                ))
                created.append(node)
                if item.is_child:
                    warnings.append(DataQualityIssue(
                        code='orphaned_child',
                        message=(
                            f'{item.identifier}: parent {item.parent_identifier} not found, '
                            f'placed at {node.code}'
                        ),
                        identifier=item.identifier,
                    ))
                    logger.warning(warnings[-1].message)
                continue

            reason = f'no category {item.category} node under subsystem {item.subsystem.label}'
            if item.is_child:
                reason = f'parent {item.parent_identifier} not found and {reason}'
            section = self._fallback_section(index, created)
            node = index.add(self.generator.add_equipment(
                index.arena, section, item, is_orphaned=item.is_child, is_fallback=True, is_new=True,
            ))
            created.append(node)
            warnings.append(DataQualityIssue(
                code='fallback_placement',
                message=f'{item.identifier}: {reason}; placed at {node.code}',
                identifier=item.identifier,
            ))
            logger.warning(warnings[-1].message)

        return created

    def _new_subsystem(self, index: TreeIndex, subsystem: SubsystemDescriptor) -> List[WBSNode]:
        number = index.next_subsystem_number()
        before = {node.code for node in index.arena}
        self.generator.add_subsystem(index.arena, index.root_code, number, subsystem, is_new=True)
        created = sort_nodes(node for node in index.arena if node.code not in before)
        for node in created:
            index.register(node)
        logger.info(f'Created subsystem section {created[0].name} at {created[0].code}')
        return created

    def _tbc_section(self, index: TreeIndex, created: List[WBSNode]) -> str:
        if index.tbc_code is None:
            node = index.add(self.generator.add_section(
                index.arena, index.root_code, TBC_SECTION_NAME, is_new=True,
            ))
            created.append(node)
        return index.tbc_code

    def _fallback_section(self, index: TreeIndex, created: List[WBSNode]) -> str:
        if index.fallback_code is None:
            node = index.add(self.generator.add_section(
                index.arena, index.root_code, FALLBACK_SECTION_NAME, is_new=True,
            ))
            created.append(node)
        return index.fallback_code
