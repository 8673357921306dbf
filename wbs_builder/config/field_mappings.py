"""
Field-name synonyms and fixed WBS naming tables.

Equipment lists and P6 WBS exports have been produced by several generations
of spreadsheets, so each canonical attribute is accepted under more than one
column name. The first synonym present (and non-empty) in a record wins.
"""

# =============================================================================
# Equipment list field synonyms
# =============================================================================

EQUIPMENT_FIELD_SYNONYMS = {
    'identifier': ('equipment_number', 'equipment_code', 'identifier'),
    'description': ('description', 'equipment_name'),
    'commissioning_status': (
        'commissioning_yn', 'commissioning_status', 'commissioningStatus', 'Commissioning (Y/N)',
    ),
    'parent_identifier': ('parent_equipment_number', 'parent_equipment_code', 'parentIdentifier'),
    'subsystem': ('subsystem', 'Subsystem'),
}

# Raw commissioning values mapped to the canonical Y / N / TBC codes
COMMISSIONING_STATUS_VALUES = {
    'Y': 'Y', 'YES': 'Y',
    'N': 'N', 'NO': 'N',
    'TBC': 'TBC', 'TO BE CONFIRMED': 'TBC',
}

# Identifiers that mean "no value" in equipment spreadsheets
PLACEHOLDER_VALUES = {'', '-'}

# =============================================================================
# Existing WBS tree field synonyms
# =============================================================================

WBS_FIELD_SYNONYMS = {
    'code': ('code', 'wbs_code'),
    'parent_code': ('parent_code', 'parent_wbs_code', 'parentCode'),
    'name': ('name', 'wbs_name', 'display_name', 'displayName'),
    'level': ('level',),
    'category': ('category',),
    'subsystem': ('subsystem',),
    'is_equipment': ('is_equipment', 'isEquipment'),
}

# =============================================================================
# WBS section names
# =============================================================================

MILESTONES_NAME = 'M | Milestones'
PREREQUISITES_NAME = 'P | Pre-requisites'
TBC_SECTION_NAME = 'TBC | To Be Confirmed'
ENERGISATION_NAME = 'E | Energisation'
FALLBACK_SECTION_NAME = 'U | Unplaced Equipment'

ENERGISATION_PHASES = (
    'EP1 | Pre-energisation Inspections',
    'EP2 | HV Energisation',
    'EP3 | LV Energisation',
    'EP4 | Post-energisation Testing',
)

# Leading name tokens that mark a structural (non-equipment) node,
# e.g. "M | Milestones", "S2 | +Z02 - ...", "05 | Transformers"
STRUCTURAL_NAME_TOKEN = r'^(?:M|P|E|U|TBC|S\d+|EP\d+|\d{2})$'
