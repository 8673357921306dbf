"""Transformer from raw equipment list rows to canonical EquipmentRecords."""
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Mapping, Optional
import logging

from wbs_builder.config.field_mappings import (
    COMMISSIONING_STATUS_VALUES,
    EQUIPMENT_FIELD_SYNONYMS,
)
from wbs_builder.models import DataQualityIssue, EquipmentRecord
from wbs_builder.transformers.base_transformer import BaseTransformer
from wbs_builder.utils.helpers import first_present, normalize_identifier, safe_str
from wbs_builder.utils.validators import validate_no_duplicates, validate_required_fields

logger = logging.getLogger(__name__)


@dataclass
class NormalizedEquipment:
    """Canonical records split by commissioning status."""

    regular: List[EquipmentRecord] = field(default_factory=list)   # status Y
    tbc: List[EquipmentRecord] = field(default_factory=list)
    excluded: List[EquipmentRecord] = field(default_factory=list)  # status N
    issues: List[DataQualityIssue] = field(default_factory=list)
    original_count: int = 0

    @property
    def records(self) -> List[EquipmentRecord]:
        """Every kept record in input order."""
        return sorted(self.regular + self.tbc + self.excluded, key=lambda r: r.source_index)


class EquipmentNormalizer(BaseTransformer):
    """
    Normalize equipment list rows.

    Tasks:
    - Resolve field-name synonyms to one canonical field each
    - Clean identifiers (trim, upper-case, collapse whitespace)
    - Map commissioning values to Y / N / TBC
    - Drop duplicate identifiers within a commissioning status bucket
    """

    input_label = 'Equipment list'

    def __init__(self, field_synonyms: Optional[Mapping[str, tuple]] = None):
        """Initialize the equipment normalizer."""
        super().__init__('equipment')
        self.field_synonyms = dict(field_synonyms or EQUIPMENT_FIELD_SYNONYMS)

    def transform(self, data: List[Dict[str, Any]]) -> List[EquipmentRecord]:
        """
        Transform raw rows to canonical records (all statuses, input order).

        Args:
            data: Raw equipment rows

        Returns:
            Canonical EquipmentRecords
        """
        return self.normalize(data).records

    def normalize(self, data: List[Any]) -> NormalizedEquipment:
        """
        Normalize raw rows and split them by commissioning status.

        Args:
            data: Raw equipment rows (dicts with any synonym field names) or
                EquipmentRecords, which are passed through unchanged

        Returns:
            NormalizedEquipment with per-status buckets and data-quality issues

        Raises:
            InputShapeError: If data is missing, not a list, or empty
        """
        self.require_rows(data)

        self.logger.info(f'Normalizing {len(data)} equipment rows...')
        result = NormalizedEquipment(original_count=len(data))
        kept: Dict[tuple, EquipmentRecord] = {}

        for index, raw in enumerate(data):
            record = self._normalize_record(index, raw, result.issues)
            if record is None:
                continue

            key = (record.commissioning_status, record.identifier)
            existing = kept.get(key)
            if existing is None:
                kept[key] = record
                continue

            # Keep whichever duplicate carries the richer description
            if len(record.description) > len(existing.description):
                kept[key] = EquipmentRecord(**{**asdict(record), 'source_index': existing.source_index})
            result.issues.append(DataQualityIssue(
                code='duplicate_identifier',
                message=(
                    f'Duplicate identifier {record.identifier} '
                    f'(status {record.commissioning_status}) at row {index}; one copy kept'
                ),
                identifier=record.identifier,
            ))

        for record in sorted(kept.values(), key=lambda r: r.source_index):
            if record.commissioning_status == 'Y':
                result.regular.append(record)
            elif record.commissioning_status == 'TBC':
                result.tbc.append(record)
            else:
                result.excluded.append(record)

        self.log_issues(result.issues)

        self.logger.info(
            f'Normalized equipment: {len(result.regular)} regular, '
            f'{len(result.tbc)} TBC, {len(result.excluded)} excluded, '
            f'{len(result.issues)} issues'
        )
        return result

    def _normalize_record(
        self,
        index: int,
        raw: Any,
        issues: List[DataQualityIssue],
    ) -> Optional[EquipmentRecord]:
        """Normalize a single row; None when it has no usable identifier."""
        if isinstance(raw, EquipmentRecord):
            return raw
        self.require_mapping(index, raw)

        raw_identifier = first_present(raw, self.field_synonyms['identifier'])
        identifier = normalize_identifier(raw_identifier)
        if not identifier:
            code = 'placeholder_identifier' if safe_str(raw_identifier) == '-' else 'empty_identifier'
            issues.append(DataQualityIssue(
                code=code,
                message=f'Row {index} skipped: {code.replace("_", " ")}',
            ))
            return None

        raw_status = safe_str(first_present(raw, self.field_synonyms['commissioning_status'])).upper()
        status = COMMISSIONING_STATUS_VALUES.get(raw_status)
        if status is None:
            issues.append(DataQualityIssue(
                code='unknown_commissioning_status',
                message=f'{identifier}: commissioning status {raw_status!r} treated as N',
                identifier=identifier,
            ))
            status = 'N'

        parent = normalize_identifier(first_present(raw, self.field_synonyms['parent_identifier']))
        subsystem = safe_str(first_present(raw, self.field_synonyms['subsystem']))

        return EquipmentRecord(
            identifier=identifier,
            description=safe_str(first_present(raw, self.field_synonyms['description'])),
            commissioning_status=status,
            parent_identifier=parent or None,
            subsystem=subsystem or None,
            source_index=index,
        )

    def validate_transformation(self, data: List[EquipmentRecord]) -> bool:
        """
        Validate normalized records.

        Args:
            data: Normalized records

        Returns:
            True if every record has an identifier and status, and identifiers
            are unique within each status bucket
        """
        rows = [asdict(record) for record in data]
        is_valid, invalid = validate_required_fields(rows, {'identifier', 'commissioning_status'})
        for message in invalid:
            self.logger.error(message)

        keyed = [{'key': (r['commissioning_status'], r['identifier'])} for r in rows]
        unique, duplicates = validate_no_duplicates(keyed, 'key')
        for status, identifier in duplicates:
            self.logger.error(f'Duplicate identifier {identifier} in status {status}')

        self.logger.info(f'Validated {len(data)} normalized records')
        return is_valid and unique
