"""Transformer from existing WBS rows (e.g. a P6 export) to WBSNodes."""
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Mapping, Optional
import logging

from wbs_builder.config.field_mappings import FALLBACK_SECTION_NAME, TBC_SECTION_NAME, WBS_FIELD_SYNONYMS
from wbs_builder.models import DataQualityIssue, WBSNode
from wbs_builder.transformers.base_transformer import BaseTransformer
from wbs_builder.utils.helpers import first_present, parse_bool, safe_str
from wbs_builder.utils.validators import validate_no_duplicates, validate_references
from wbs_builder.wbs.codes import code_depth, code_sort_key
from wbs_builder.wbs.naming import category_code_from_name, parse_equipment_name, parse_subsystem_name, split_name

logger = logging.getLogger(__name__)

# Top-level sections that hold equipment directly
HOLDING_SECTION_TOKENS = {split_name(TBC_SECTION_NAME)[0], split_name(FALLBACK_SECTION_NAME)[0]}


@dataclass
class NormalizedTree:
    """Existing tree nodes plus rows that could not be used."""

    nodes: List[WBSNode] = field(default_factory=list)
    issues: List[DataQualityIssue] = field(default_factory=list)


class WbsTreeNormalizer(BaseTransformer):
    """Normalize existing WBS rows, accepting both field-name spellings."""

    input_label = 'Existing WBS tree'

    def __init__(self, field_synonyms: Optional[Mapping[str, tuple]] = None):
        super().__init__('wbs_tree')
        self.field_synonyms = dict(field_synonyms or WBS_FIELD_SYNONYMS)

    def transform(self, data: List[Dict[str, Any]]) -> List[WBSNode]:
        return self.normalize(data).nodes

    def normalize(self, data: List[Any]) -> NormalizedTree:
        """
        Convert existing WBS rows to immutable WBSNodes (is_new = False).

        Equipment nodes are recognised by the is_equipment column when it is
        present, otherwise by their position in the tree (see
        _resolve_by_position).

        Raises:
            InputShapeError: If the tree is missing, not a list, or empty
        """
        self.require_rows(data)

        result = NormalizedTree()
        # Row position -> is_equipment column value; WBSNodes keep their own
        flags: Dict[int, Optional[bool]] = {}
        for index, raw in enumerate(data):
            if isinstance(raw, WBSNode):
                result.nodes.append(raw.with_new_flag(False))
                continue
            self.require_mapping(index, raw)
            node = self._normalize_row(raw)
            if node is None:
                result.issues.append(DataQualityIssue(
                    code='missing_wbs_code',
                    message=f'WBS row {index} skipped: no WBS code',
                ))
                continue
            flags[len(result.nodes)] = parse_bool(first_present(raw, self.field_synonyms['is_equipment']))
            result.nodes.append(node)

        result.nodes = self._resolve_by_position(result.nodes, flags)

        _, dangling = validate_references(
            [{'code': n.code, 'parent_code': n.parent_code} for n in result.nodes],
            'code',
            'parent_code',
        )
        for message in dangling:
            result.issues.append(DataQualityIssue(code='missing_parent_code', message=message))

        self.log_issues(result.issues)
        self.logger.info(f'Loaded {len(result.nodes)} existing WBS nodes')
        return result

    def _normalize_row(self, raw: Mapping[str, Any]) -> Optional[WBSNode]:
        """Structural node carrying the row's columns; _resolve_by_position decides the rest."""
        code = safe_str(first_present(raw, self.field_synonyms['code']))
        if not code:
            return None

        level_value = safe_str(first_present(raw, self.field_synonyms['level']))
        return WBSNode(
            code=code,
            parent_code=safe_str(first_present(raw, self.field_synonyms['parent_code'])) or None,
            name=safe_str(first_present(raw, self.field_synonyms['name'])),
            level=int(float(level_value)) if level_value else code_depth(code),
            category=safe_str(first_present(raw, self.field_synonyms['category'])) or None,
            subsystem=safe_str(first_present(raw, self.field_synonyms['subsystem'])) or None,
            is_new=False,
        )

    def _resolve_by_position(self, nodes: List[WBSNode], flags: Dict[int, Optional[bool]]) -> List[WBSNode]:
        """
        Decide which row nodes are equipment.

        An is_equipment column wins. Without one, a node under a category
        node, the TBC or unplaced section, or another equipment node is
        equipment whatever its name, so identifiers such as 'S1', 'E' or '12'
        survive a round trip through the three-column export. The root, the
        top-level sections and the category nodes are structure. Anywhere
        else the name decides.
        """
        resolved = list(nodes)
        kinds: Dict[str, str] = {}
        # Parents sort before their children
        for position in sorted(range(len(nodes)), key=lambda i: code_sort_key(nodes[i].code)):
            node = nodes[position]
            kind = self._position_kind(node, kinds.get(node.parent_code))
            if position in flags:
                node = self._apply_kind(node, flags[position], kind)
                resolved[position] = node
            if node.is_equipment:
                kind = 'equipment'
            elif kind == 'equipment':
                kind = 'section'
            kinds.setdefault(node.code, kind or 'section')
        return resolved

    @staticmethod
    def _position_kind(node: WBSNode, parent_kind: Optional[str]) -> Optional[str]:
        """Kind implied by the parent's kind; None when position says nothing."""
        if node.parent_code is None:
            return 'root'
        if parent_kind == 'root':
            if parse_subsystem_name(node.name) is not None:
                return 'subsystem'
            if split_name(node.name)[0].upper() in HOLDING_SECTION_TOKENS:
                return 'holding'
            return 'section'
        if parent_kind == 'subsystem':
            return 'category'
        if parent_kind in ('category', 'holding', 'equipment'):
            return 'equipment'
        return None

    @staticmethod
    def _apply_kind(node: WBSNode, flag: Optional[bool], kind: Optional[str]) -> WBSNode:
        if flag is not None:
            is_equipment = flag
        elif kind is not None:
            is_equipment = kind == 'equipment'
        else:
            is_equipment = parse_equipment_name(node.name) is not None

        identifier = description = None
        category = node.category
        if is_equipment:
            parsed = parse_equipment_name(node.name, allow_structural=True)
            if parsed is not None:
                identifier, description = parsed
        elif category is None:
            category = category_code_from_name(node.name)

        return replace(
            node,
            is_equipment=is_equipment,
            is_structural=not is_equipment,
            category=category,
            identifier=identifier,
            description=description,
        )

    def validate_transformation(self, data: List[WBSNode]) -> bool:
        """Check that codes are unique."""
        unique, duplicates = validate_no_duplicates([{'code': n.code} for n in data], 'code')
        for code in duplicates:
            self.logger.error(f'Duplicate WBS code in existing tree: {code}')
        return unique
