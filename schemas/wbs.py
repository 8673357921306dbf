"""
WBS export package schemas.

These schemas define the CSV files written for a generation or
reconciliation run. wbs_export.csv is the P6 import file and its three
columns must not change.

Output Location: {WBS_OUTPUT_DIR}/{WBS_EXPORT_PREFIX}{date}/
"""

from typing import Optional
from pydantic import BaseModel, Field


class WbsExportRow(BaseModel):
    """
    P6 WBS import file.

    File: wbs_export.csv
    Purpose: Three-column WBS import for Primavera P6 (full tree, or only the
    nodes allocated by a reconciliation with --new-only).
    """

    wbs_code: str = Field(description="Dotted WBS code (1.3.2.1)")
    parent_wbs_code: Optional[str] = Field(default=None, description="Parent WBS code (empty for the project root)")
    wbs_name: str = Field(description="Display name (UH101 | Protection Panel 101)")


class WbsStructureRow(BaseModel):
    """
    Full WBS structure file.

    File: wbs_structure.csv
    Purpose: Every node with its flags, used to reload the tree for the next
    reconciliation and for review.
    """

    wbs_code: str = Field(description="Dotted WBS code")
    parent_wbs_code: Optional[str] = Field(default=None, description="Parent WBS code")
    wbs_name: str = Field(description="Display name")
    level: int = Field(description="Depth (root = 1)")
    is_equipment: bool = Field(description="Node is an equipment item")
    is_structural: bool = Field(description="Node is a section, subsystem or category")
    category: Optional[str] = Field(default=None, description="Category code (01-10, 99)")
    subsystem: Optional[str] = Field(default=None, description="Subsystem key (+Z01)")
    equipment_number: Optional[str] = Field(default=None, description="Equipment identifier")
    description: Optional[str] = Field(default=None, description="Equipment description")
    commissioning_status: Optional[str] = Field(default=None, description="Y, N or TBC")
    is_new: bool = Field(description="Allocated by the latest reconciliation")
    is_orphaned: bool = Field(description="Child placed without its parent")
    is_fallback: bool = Field(description="Placed in the unplaced equipment section")


class EquipmentChangeRow(BaseModel):
    """
    Reconciliation change list.

    File: equipment_changes.csv
    Purpose: Added, modified and removed equipment between the issued WBS and
    the new equipment list.
    """

    change_type: str = Field(description="added, modified or removed")
    equipment_number: str = Field(description="Equipment identifier")
    description: Optional[str] = Field(default=None, description="Equipment description")
    commissioning_status: Optional[str] = Field(default=None, description="Y, N or TBC")
    subsystem: Optional[str] = Field(default=None, description="Subsystem label")
    category: Optional[str] = Field(default=None, description="Category code")
    wbs_code: Optional[str] = Field(default=None, description="Allocated (added) or existing WBS code")
    changes: Optional[str] = Field(default=None, description="Changed fields, 'field: old -> new' joined by '; '")


class CategorySummaryRow(BaseModel):
    """
    Equipment count per category.

    File: category_summary.csv
    Records: one per declared category (11)
    """

    category: str = Field(description="Category code")
    category_name: str = Field(description="Category name")
    equipment_count: int = Field(description="Equipment in the category")
    parent_count: int = Field(description="Parent equipment")
    child_count: int = Field(description="Child equipment (inherited category)")
