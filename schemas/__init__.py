"""
Export package schemas.

Pydantic models for every CSV the WBS builder writes, so the P6 import
format and the structure file stay stable between runs.

Usage:
    from schemas import validated_df_to_csv, get_schema_for_file

    validated_df_to_csv(df, out_dir / 'wbs_export.csv', index=False)
    schema = get_schema_for_file('wbs_structure.csv')
"""

from .validator import (
    validate_output_file,
    validate_dataframe,
    validated_df_to_csv,
    validate_schema_compatibility,
    SchemaValidationError,
    schema_columns,
)
from .registry import SCHEMA_REGISTRY, get_schema_for_file, list_registered_files
from .wbs import WbsExportRow, WbsStructureRow, EquipmentChangeRow, CategorySummaryRow

__all__ = [
    'validate_output_file',
    'validate_dataframe',
    'validated_df_to_csv',
    'validate_schema_compatibility',
    'SchemaValidationError',
    'schema_columns',
    'SCHEMA_REGISTRY',
    'get_schema_for_file',
    'list_registered_files',
    'WbsExportRow',
    'WbsStructureRow',
    'EquipmentChangeRow',
    'CategorySummaryRow',
]
