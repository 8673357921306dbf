"""Data validation utilities."""
from typing import Any, List, Dict
import logging

logger = logging.getLogger(__name__)


def validate_required_fields(
    data: List[Dict[str, Any]],
    required_fields: set[str],
) -> tuple[bool, List[str]]:
    """
    Validate that all records contain non-empty required fields.

    Args:
        data: List of dictionaries to validate
        required_fields: Set of required field names

    Returns:
        Tuple of (is_valid, list_of_invalid_records)
    """
    invalid_records = []

    for idx, record in enumerate(data):
        missing_fields = {
            field for field in required_fields
            if record.get(field) in (None, '')
        }
        if missing_fields:
            invalid_records.append(
                f'Record {idx}: Missing fields {sorted(missing_fields)}'
            )

    return len(invalid_records) == 0, invalid_records


def validate_no_duplicates(
    data: List[Dict[str, Any]],
    key_field: str,
) -> tuple[bool, List[Any]]:
    """
    Validate that there are no duplicate key values.

    Args:
        data: List of dictionaries to validate
        key_field: Field to check for duplicates

    Returns:
        Tuple of (is_valid, list_of_duplicate_values) in first-seen order
    """
    seen = set()
    duplicates = []

    for record in data:
        key = record.get(key_field)
        if key in seen and key not in duplicates:
            duplicates.append(key)
        seen.add(key)

    return len(duplicates) == 0, duplicates


def validate_references(
    data: List[Dict[str, Any]],
    key_field: str,
    reference_field: str,
) -> tuple[bool, List[str]]:
    """
    Validate that every non-empty reference points at an existing key.

    Args:
        data: List of dictionaries to validate
        key_field: Field holding each record's key
        reference_field: Field holding a reference to another record's key

    Returns:
        Tuple of (is_valid, list_of_dangling_reference_messages)
    """
    keys = {record.get(key_field) for record in data}
    dangling = []

    for record in data:
        reference = record.get(reference_field)
        if reference and reference not in keys:
            dangling.append(
                f'{record.get(key_field)} references missing {reference_field} {reference}'
            )

    return len(dangling) == 0, dangling
