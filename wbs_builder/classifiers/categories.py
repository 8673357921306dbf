"""
Equipment Category Table

Closed set of WBS equipment categories and the identifier patterns that
select them. Categories and their rules are matched in declaration order and
the first match wins, so moving a rule changes classification results.

Rule kinds:
    prefix   - literal prefix ('MEB' matches 'MEB1', 'MEB-A')
    template - 'X' runs expand to one or more digits ('TX' matches 'T1', 'T12')
    regex    - a regular expression, anchored at the start of the identifier
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class PatternRule:
    """One identifier pattern belonging to a category."""

    kind: str       # prefix, template, regex
    value: str
    name: str       # equipment type name reported for matches


def prefix(value: str, name: str) -> PatternRule:
    return PatternRule('prefix', value, name)


def template(value: str, name: str) -> PatternRule:
    return PatternRule('template', value, name)


def regex(value: str, name: str) -> PatternRule:
    return PatternRule('regex', value, name)


UNRECOGNISED_CATEGORY = '99'

# =============================================================================
# Category names
# =============================================================================

EQUIPMENT_CATEGORIES = {
    '01': 'Preparations and set-up',
    '02': 'Protection Panels',
    '03': 'HV Switchboards',
    '04': 'LV Switchboards',
    '05': 'Transformers',
    '06': 'Battery Systems',
    '07': 'Earthing',
    '08': 'Building Services',
    '09': 'Interface Testing',
    '10': 'Ancillary Systems',
    UNRECOGNISED_CATEGORY: 'Unrecognised Equipment',
}

# =============================================================================
# Category patterns
# =============================================================================

CATEGORY_PATTERNS = {
    # Preparations and set-up
    '01': [
        prefix('TEST BAY', 'Test Bay'),
        prefix('PANEL SHOP', 'Panel Shop'),
        prefix('PAD', 'Pad'),
    ],

    # Protection Panels
    '02': [
        regex(r'\+?UH\d+', 'Protection Panels'),
    ],

    # HV Switchboards
    '03': [
        regex(r'\+?WA\d*', 'HV Switchgear Assembly'),
    ],

    # LV Switchboards
    '04': [
        regex(r'\+?WC\d+', 'Distribution Board'),
    ],

    # Transformers
    '05': [
        template('TX', 'Transformer'),
        prefix('NET', 'Neutral Earthing Transformer'),
        prefix('TA', 'AC/DC Converter'),
        prefix('NER', 'Neutral Earth Resistor'),
    ],

    # Battery Systems
    '06': [
        regex(r'\+?GB\d+', 'Battery System'),
        prefix('BAN', 'Battery Bank'),
        prefix('BCR', 'Battery Charger'),
    ],

    # Earthing
    '07': [
        template('EX', 'HV Earth Switch'),
        template('EBX', 'Earth Bar'),
        template('EEPX', 'Earthing Pit'),
        prefix('MEB', 'Main Earth Bar'),
        prefix('EG01-', 'Earthing Pit'),
    ],

    # Building Services
    '08': [
        regex(r'-?FM\d+', 'Fire Indication Panel'),
        regex(r'-?A\d*', 'SDU Switchroom Security Panel'),
        prefix('LT', 'Lighting'),
        prefix('HTP', 'Heat Tracing Panel'),
        prefix('DDC', 'Computer'),
        prefix('ESS-', 'Aspirating Smoke Detection'),
        prefix('ISS-', 'Detection Equipment'),
        prefix('MCP-', 'Manual Call Point'),
        prefix('POSD-', 'Fire System Equipment'),
        prefix('LS1-', 'Detection Equipment'),
        prefix('-BE', 'Beacon/Strobe'),
    ],

    # Interface Testing
    '09': [
        prefix('PHASE 1', 'Interface Testing Phase 1'),
        prefix('PHASE 2', 'Interface Testing Phase 2'),
    ],

    # Ancillary Systems
    '10': [
        prefix('PSU', 'Power Supply Units'),
        prefix('UPS', 'Uninterruptible Power Supply'),
        prefix('BCR', 'Battery Charger'),
        prefix('-Y', 'Computer Network'),
        prefix('KP-', 'Security Equipment'),
        prefix('MPIR-', 'Security Equipment'),
        prefix('REED-', 'Security Equipment'),
        prefix('SCR-', 'Security Equipment'),
        prefix('WBC-', 'Security Equipment'),
    ],
}


def category_order() -> list[str]:
    """Declared category codes in canonical order, unrecognised last."""
    codes = sorted(c for c in EQUIPMENT_CATEGORIES if c != UNRECOGNISED_CATEGORY)
    return codes + [UNRECOGNISED_CATEGORY]


def category_label(code: str) -> str:
    """WBS display name for a category node, e.g. '05 | Transformers'."""
    return f'{code} | {EQUIPMENT_CATEGORIES.get(code, EQUIPMENT_CATEGORIES[UNRECOGNISED_CATEGORY])}'
