"""
WBS display-name conventions.

Equipment nodes are named '<identifier> | <description>', subsystem sections
'S<n> | <code> - <name>', category nodes '<category> | <category name>'. The
reconciler reads these names back from P6 exports, so formatting and parsing
live side by side here.
"""

import re
from typing import Optional, Tuple

from wbs_builder.config.field_mappings import STRUCTURAL_NAME_TOKEN
from wbs_builder.config.settings import settings
from wbs_builder.models import SubsystemDescriptor
from wbs_builder.utils.helpers import normalize_identifier, safe_str

_STRUCTURAL_TOKEN = re.compile(STRUCTURAL_NAME_TOKEN, re.IGNORECASE)
_SUBSYSTEM_NAME = re.compile(r'^S(\d+)\s*\|\s*(.+)$', re.IGNORECASE)


def parse_subsystem_label(label: Optional[str]) -> Optional[SubsystemDescriptor]:
    """
    Parse an equipment list subsystem label.

    Examples:
        '33kV Switchroom 1 - +Z01' -> SubsystemDescriptor('+Z01', '33kV Switchroom 1')
        'Switchroom'               -> SubsystemDescriptor('', 'Switchroom')
        '' / None                  -> None
    """
    text = safe_str(label)
    if not text:
        return None
    if ' - ' in text:
        name, code = text.rsplit(' - ', 1)
        return SubsystemDescriptor(code=code.strip(), name=name.strip())
    return SubsystemDescriptor(code='', name=text)


def default_subsystem() -> SubsystemDescriptor:
    """Subsystem applied to equipment without a subsystem label."""
    return parse_subsystem_label(settings.DEFAULT_SUBSYSTEM) or SubsystemDescriptor('+Z01', 'Main Subsystem')


def format_subsystem_name(number: int, subsystem: SubsystemDescriptor) -> str:
    """Section name for a subsystem, e.g. 'S1 | +Z01 - Main Subsystem'."""
    if subsystem.code and subsystem.name:
        return f'S{number} | {subsystem.code} - {subsystem.name}'
    return f'S{number} | {subsystem.code or subsystem.name}'


def parse_subsystem_name(name: Optional[str]) -> Optional[Tuple[int, SubsystemDescriptor]]:
    """
    Parse a subsystem section name read from an existing WBS.

    Accepts 'S1 | +Z01 - 33kV Switchroom 1' and the older 'S1 | Z01 | Main Subsystem'.

    Returns:
        (subsystem number, descriptor) or None if the name is not a subsystem
    """
    match = _SUBSYSTEM_NAME.match(safe_str(name))
    if not match:
        return None
    number = int(match.group(1))
    remainder = match.group(2).strip()
    if '|' in remainder:
        code, rest = remainder.split('|', 1)
    elif ' - ' in remainder:
        code, rest = remainder.split(' - ', 1)
    else:
        code, rest = remainder, ''
    return number, SubsystemDescriptor(code=code.strip(), name=rest.strip())


def format_equipment_name(identifier: str, description: Optional[str]) -> str:
    """Node name for an equipment item, e.g. 'UH101 | Protection Panel 101'."""
    return f'{identifier} | {safe_str(description)}'.rstrip()


def split_name(name: Optional[str]) -> Tuple[str, str]:
    """Split 'token | rest' into (token, rest); rest is '' when there is no bar."""
    text = safe_str(name)
    if '|' not in text:
        return text, ''
    token, rest = text.split('|', 1)
    return token.strip(), rest.strip()


def is_structural_name(name: Optional[str]) -> bool:
    """Check if a node name belongs to a structural section rather than equipment."""
    token, _ = split_name(name)
    return bool(_STRUCTURAL_TOKEN.match(token))


def parse_equipment_name(name: Optional[str], allow_structural: bool = False) -> Optional[Tuple[str, str]]:
    """
    Read (identifier, description) from an equipment node name.

    Args:
        name: Node name, '<identifier> | <description>'
        allow_structural: Accept identifiers that look like section tokens
            ('S1', 'E', '05'); set when the node is known to be equipment

    Returns:
        Normalized identifier and description, or None for structural names
        and names without a '|' separator
    """
    text = safe_str(name)
    if '|' not in text or (is_structural_name(text) and not allow_structural):
        return None
    token, description = split_name(text)
    identifier = normalize_identifier(token)
    if not identifier:
        return None
    return identifier, description


def category_code_from_name(name: Optional[str]) -> Optional[str]:
    """Category code of a category node name ('05 | Transformers' -> '05')."""
    token, _ = split_name(name)
    if re.fullmatch(r'\d{2}', token):
        return token
    return None
