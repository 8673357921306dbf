"""
File name -> schema lookup for the export package.

validated_df_to_csv() finds the schema for a CSV here, so every file the
builder writes with a fixed layout must be listed.
"""

from pathlib import Path
from typing import Dict, List, Optional, Type, Union

from pydantic import BaseModel

from .wbs import CategorySummaryRow, EquipmentChangeRow, WbsExportRow, WbsStructureRow


SCHEMA_REGISTRY: Dict[str, Type[BaseModel]] = {
    # Written by both commands
    'wbs_export.csv': WbsExportRow,
    'wbs_structure.csv': WbsStructureRow,
    'category_summary.csv': CategorySummaryRow,
    # Reconciliation only
    'equipment_changes.csv': EquipmentChangeRow,
}


def get_schema_for_file(file_path: Union[str, Path]) -> Optional[Type[BaseModel]]:
    """Schema registered for a file's base name, or None."""
    return SCHEMA_REGISTRY.get(Path(file_path).name)


def list_registered_files() -> List[str]:
    return sorted(SCHEMA_REGISTRY)
