"""
Equipment processing pipeline.

Stages run in a fixed, explicit order; each takes the previous stage's result
and returns a new object:

    normalize_stage -> analyze_stage -> classify_stage -> aggregate_stage

process_equipment() composes them. generate_wbs() and reconcile_wbs() feed
the processed equipment to the generator or the reconciler.

Usage:
    from wbs_builder.pipeline import generate_wbs, reconcile_wbs

    result = generate_wbs(rows, project_name='Substation A')
    delta = reconcile_wbs(result.nodes, updated_rows)
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

from wbs_builder.analysis.aggregator import CategoryBucket, aggregate_categories
from wbs_builder.analysis.relationships import RelationshipAnalysis, analyze_relationships
from wbs_builder.classifiers.categories import UNRECOGNISED_CATEGORY
from wbs_builder.classifiers.equipment_classifier import EquipmentClassifier
from wbs_builder.models import (
    ClassifiedEquipment,
    DataQualityIssue,
    EquipmentRecord,
    GenerationResult,
    ReconciliationResult,
)
from wbs_builder.transformers.equipment_normalizer import EquipmentNormalizer, NormalizedEquipment
from wbs_builder.wbs.generator import WbsGenerator
from wbs_builder.wbs.naming import default_subsystem, parse_subsystem_label
from wbs_builder.wbs.reconciler import WbsReconciler

logger = logging.getLogger(__name__)


@dataclass
class ProcessedEquipment:
    """Output of the equipment processing stages."""

    normalized: NormalizedEquipment
    analysis: RelationshipAnalysis
    classified: List[ClassifiedEquipment]       # status Y, categorized
    tbc: List[ClassifiedEquipment]              # status TBC, not placed by category
    buckets: Dict[str, CategoryBucket]
    warnings: List[DataQualityIssue] = field(default_factory=list)

    def get_statistics(self) -> Dict[str, int]:
        return {
            'input_rows': self.normalized.original_count,
            'regular': len(self.normalized.regular),
            'tbc': len(self.normalized.tbc),
            'excluded': len(self.normalized.excluded),
            'parents': len(self.analysis.parent_set),
            'children': len(self.analysis.child_set),
            'parent_matches': self.analysis.successful_matches,
            'unrecognised': sum(1 for i in self.classified if i.category == UNRECOGNISED_CATEGORY),
            'warnings': len(self.warnings),
        }


# =============================================================================
# Stages
# =============================================================================

def normalize_stage(raw: List[Any], normalizer: Optional[EquipmentNormalizer] = None) -> NormalizedEquipment:
    """Canonical records split by commissioning status."""
    return (normalizer or EquipmentNormalizer()).normalize(raw)


def analyze_stage(normalized: NormalizedEquipment) -> RelationshipAnalysis:
    """Parent/child analysis over the status-Y records."""
    return analyze_relationships(normalized.regular)


def _resolve_subsystem(record: EquipmentRecord):
    return parse_subsystem_label(record.subsystem) or default_subsystem()


def classify_stage(
    normalized: NormalizedEquipment,
    analysis: RelationshipAnalysis,
    classifier: Optional[EquipmentClassifier] = None,
) -> Tuple[List[ClassifiedEquipment], List[ClassifiedEquipment], List[DataQualityIssue]]:
    """
    Classify status-Y records; children inherit their top parent's category
    and subsystem.

    Returns:
        (classified, tbc, issues)
    """
    classifier = classifier or EquipmentClassifier()
    classified: List[ClassifiedEquipment] = []
    issues: List[DataQualityIssue] = []

    for record in normalized.regular:
        is_child = record.identifier in analysis.child_set
        source = record
        resolved_parent = None

        if is_child:
            resolved_parent = analysis.resolve_top_parent(record.identifier)
            if resolved_parent is None:
                issues.append(DataQualityIssue(
                    code='unresolved_parent',
                    message=f'{record.identifier}: parent {record.parent_identifier} not found in equipment list',
                    identifier=record.identifier,
                ))
            else:
                parent = analysis.lookup[resolved_parent]
                if isinstance(parent, EquipmentRecord):
                    source = parent

        match = classifier.match(source.identifier)
        if not match.is_recognised and not is_child:
            issues.append(DataQualityIssue(
                code='unrecognised_category',
                message=f'{record.identifier}: no category pattern matched',
                identifier=record.identifier,
            ))

        classified.append(ClassifiedEquipment(
            record=record,
            category=match.category,
            category_name=match.category_name,
            equipment_type=match.equipment_type,
            is_parent=not is_child,
            is_child=is_child,
            resolved_parent=resolved_parent,
            subsystem=_resolve_subsystem(source),
        ))

    tbc = []
    for record in normalized.tbc:
        match = classifier.match(record.identifier)
        tbc.append(ClassifiedEquipment(
            record=record,
            category=match.category,
            category_name=match.category_name,
            equipment_type=match.equipment_type,
            is_parent=not record.has_parent_reference(),
            is_child=record.has_parent_reference(),
            resolved_parent=None,
            subsystem=_resolve_subsystem(record),
        ))

    for issue in issues:
        logger.warning(issue.message)
    logger.info(f'Classified {len(classified)} equipment items ({len(tbc)} TBC)')
    return classified, tbc, issues


def aggregate_stage(classified: List[ClassifiedEquipment]) -> Dict[str, CategoryBucket]:
    """Per-category buckets for every declared category."""
    return aggregate_categories(classified)


PROCESSING_STAGES = ('normalize', 'analyze', 'classify', 'aggregate')


# =============================================================================
# Composition
# =============================================================================

def process_equipment(
    raw: List[Any],
    classifier: Optional[EquipmentClassifier] = None,
) -> ProcessedEquipment:
    """
    Run the processing stages in order.

    Args:
        raw: Equipment rows (synonym field names) or EquipmentRecords
        classifier: Optional classifier with a custom category table

    Raises:
        InputShapeError: If the equipment list is missing or empty
    """
    normalized = normalize_stage(raw)
    analysis = analyze_stage(normalized)
    classified, tbc, issues = classify_stage(normalized, analysis, classifier)
    buckets = aggregate_stage(classified)

    return ProcessedEquipment(
        normalized=normalized,
        analysis=analysis,
        classified=classified,
        tbc=tbc,
        buckets=buckets,
        warnings=list(normalized.issues) + issues,
    )


def generate_wbs(
    equipment: Union[List[Any], ProcessedEquipment],
    project_name: Optional[str] = None,
    generator: Optional[WbsGenerator] = None,
) -> GenerationResult:
    """
    Process equipment (unless already processed) and generate a new WBS.

    An empty or missing list is an input error at this layer, raised by
    process_equipment(). A list with nothing left to place after processing
    (every record status N, say) still yields the skeleton, which
    WbsGenerator.generate() always builds: root, standard sections and every
    category node.

    Raises:
        InputShapeError: If the equipment list is missing or empty
    """
    processed = equipment if isinstance(equipment, ProcessedEquipment) else process_equipment(equipment)
    result = (generator or WbsGenerator()).generate(processed.classified, processed.tbc, project_name)
    result.warnings = processed.warnings + result.warnings
    return result


def reconcile_wbs(
    existing_tree: List[Any],
    equipment: Union[List[Any], ProcessedEquipment],
    reconciler: Optional[WbsReconciler] = None,
) -> ReconciliationResult:
    """Reconcile equipment against a previously issued WBS tree."""
    return (reconciler or WbsReconciler()).reconcile(existing_tree, equipment)
