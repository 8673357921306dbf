"""
Data models for equipment categorization and WBS generation.

Defines dataclasses for equipment records, relationships, WBS nodes and the
result objects returned by each pipeline stage.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Optional


@dataclass(frozen=True)
class SubsystemDescriptor:
    """A plant area grouping, parsed from labels like '33kV Switchroom 1 - +Z01'."""

    code: str                       # +Z01 (may be '' when the label has no code)
    name: str                       # 33kV Switchroom 1

    @property
    def key(self) -> str:
        """Matching key: the code when present, otherwise the name."""
        return (self.code or self.name).strip().upper()

    @property
    def label(self) -> str:
        """Source-style label '<name> - <code>'."""
        if self.code and self.name:
            return f'{self.name} - {self.code}'
        return self.code or self.name


@dataclass(frozen=True)
class EquipmentRecord:
    """Canonical equipment row after field-synonym normalization."""

    identifier: str
    description: str
    commissioning_status: str       # Y, N, TBC
    parent_identifier: Optional[str] = None
    subsystem: Optional[str] = None  # raw subsystem label
    source_index: int = 0            # row position in the input list

    def has_parent_reference(self) -> bool:
        """Check if the record references a parent other than itself."""
        return bool(self.parent_identifier) and self.parent_identifier != self.identifier


@dataclass(frozen=True)
class ClassifiedEquipment:
    """Equipment with category, parent/child role and resolved subsystem."""

    record: EquipmentRecord
    category: str                   # '01'..'10', '99'
    category_name: str
    equipment_type: Optional[str]   # matched rule name, e.g. 'Protection Panels'
    is_parent: bool
    is_child: bool
    resolved_parent: Optional[str]
    subsystem: SubsystemDescriptor

    @property
    def identifier(self) -> str:
        return self.record.identifier

    @property
    def description(self) -> str:
        return self.record.description

    @property
    def commissioning_status(self) -> str:
        return self.record.commissioning_status

    @property
    def parent_identifier(self) -> Optional[str]:
        return self.record.parent_identifier


@dataclass(frozen=True)
class Relationship:
    """A declared child -> parent reference."""

    child: str
    parent: str                     # parent identifier as declared
    parent_exists: bool
    matched_parent: Optional[str] = None  # lookup key the parent resolved to


@dataclass(frozen=True)
class DataQualityIssue:
    """A non-fatal problem recorded while processing a record."""

    code: str                       # e.g. 'empty_identifier', 'orphaned_child'
    message: str
    identifier: Optional[str] = None


@dataclass(frozen=True)
class WBSNode:
    """A single node of the dotted-code WBS tree."""

    code: str
    parent_code: Optional[str]
    name: str
    level: int
    is_equipment: bool = False
    is_structural: bool = True
    category: Optional[str] = None
    subsystem: Optional[str] = None  # subsystem key (code or name)
    is_new: bool = False
    identifier: Optional[str] = None
    description: Optional[str] = None
    commissioning_status: Optional[str] = None
    is_orphaned: bool = False
    is_fallback: bool = False

    def with_new_flag(self, is_new: bool) -> 'WBSNode':
        """Return a copy with the is_new flag set."""
        return replace(self, is_new=is_new)

    def to_dict(self) -> dict[str, Any]:
        """Flat dictionary using P6 export column names."""
        return {
            'wbs_code': self.code,
            'parent_wbs_code': self.parent_code or '',
            'wbs_name': self.name,
            'level': self.level,
            'is_equipment': self.is_equipment,
            'is_structural': self.is_structural,
            'category': self.category or '',
            'subsystem': self.subsystem or '',
            'equipment_number': self.identifier or '',
            'description': self.description or '',
            'commissioning_status': self.commissioning_status or '',
            'is_new': self.is_new,
            'is_orphaned': self.is_orphaned,
            'is_fallback': self.is_fallback,
        }


@dataclass
class ValidationReport:
    """Result of the post-generation structural validation pass."""

    is_valid: bool = True
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    statistics: dict[str, int] = field(default_factory=dict)

    def add_error(self, message: str) -> None:
        self.errors.append(message)
        self.is_valid = False

    def add_warning(self, message: str) -> None:
        self.warnings.append(message)


@dataclass(frozen=True)
class FieldChange:
    """One differing field between the existing tree and the new list."""

    field: str
    old: Optional[str]
    new: Optional[str]


@dataclass(frozen=True)
class ModifiedEquipment:
    """Equipment present on both sides whose compared fields differ."""

    equipment: ClassifiedEquipment
    existing_node: WBSNode
    changes: tuple[FieldChange, ...]


@dataclass
class ComparisonResult:
    """Identity diff between an existing WBS tree and a new equipment list."""

    added: list[ClassifiedEquipment] = field(default_factory=list)
    removed: list[WBSNode] = field(default_factory=list)
    modified: list[ModifiedEquipment] = field(default_factory=list)
    unchanged: list[ClassifiedEquipment] = field(default_factory=list)

    def counts(self) -> dict[str, int]:
        return {
            'added': len(self.added),
            'removed': len(self.removed),
            'modified': len(self.modified),
            'unchanged': len(self.unchanged),
        }


@dataclass
class SubsystemDiff:
    """Subsystems already in the tree vs. introduced by the new list."""

    existing: list[SubsystemDescriptor] = field(default_factory=list)
    new: list[SubsystemDescriptor] = field(default_factory=list)


@dataclass
class GenerationResult:
    """Output of a first-time WBS generation."""

    nodes: list[WBSNode]
    validation: ValidationReport
    warnings: list[DataQualityIssue] = field(default_factory=list)
    project_name: str = ''

    @property
    def equipment_nodes(self) -> list[WBSNode]:
        return [n for n in self.nodes if n.is_equipment]

    @property
    def structural_nodes(self) -> list[WBSNode]:
        return [n for n in self.nodes if n.is_structural]

    def get_statistics(self) -> dict[str, Any]:
        """Counts by node kind and by level."""
        level_counts: dict[int, int] = {}
        for node in self.nodes:
            level_counts[node.level] = level_counts.get(node.level, 0) + 1
        return {
            'total_nodes': len(self.nodes),
            'equipment_nodes': len(self.equipment_nodes),
            'structural_nodes': len(self.structural_nodes),
            'orphaned_children': sum(1 for n in self.nodes if n.is_orphaned),
            'level_distribution': level_counts,
        }


@dataclass
class ReconciliationResult:
    """Output of reconciling a new equipment list against an existing tree."""

    comparison: ComparisonResult
    subsystems: SubsystemDiff
    new_wbs_items: list[WBSNode]
    integrated_tree: list[WBSNode]
    validation: ValidationReport
    warnings: list[DataQualityIssue] = field(default_factory=list)

    @property
    def added(self) -> list[ClassifiedEquipment]:
        return self.comparison.added

    @property
    def removed(self) -> list[WBSNode]:
        return self.comparison.removed

    @property
    def modified(self) -> list[ModifiedEquipment]:
        return self.comparison.modified

    @property
    def unchanged(self) -> list[ClassifiedEquipment]:
        return self.comparison.unchanged

    def get_summary(self) -> dict[str, int]:
        """Comparison counts plus the number of newly allocated nodes."""
        summary = self.comparison.counts()
        summary['new_wbs_items'] = len(self.new_wbs_items)
        summary['new_subsystems'] = len(self.subsystems.new)
        summary['fallback_items'] = sum(1 for n in self.new_wbs_items if n.is_fallback)
        return summary
