"""Pytest configuration and fixtures."""
import pytest
from typing import List, Dict, Any

from wbs_builder.classifiers import EquipmentClassifier
from wbs_builder.pipeline import generate_wbs


@pytest.fixture
def equipment_rows() -> List[Dict[str, Any]]:
    """
    Small equipment list covering every placement path.

    Generated layout (default subsystem +Z01 at 1.3):
        1.3.2.1    UH101      parent, Protection Panels
        1.3.2.1.1  UH101-F    child of UH101
        1.3.5.1    T01        Transformers
        1.3.11.1   ZZZ-9      unrecognised
        1.4.1      BAN1       TBC section
        (WC1 has status N and is excluded)
    """
    return [
        {
            'equipment_number': 'UH101',
            'description': 'Protection Panel 101',
            'commissioning_yn': 'Y',
            'parent_equipment_number': '-',
        },
        {
            'equipment_number': 'UH101-F',
            'description': 'Feeder Relay',
            'commissioning_yn': 'Y',
            'parent_equipment_number': 'UH101',
        },
        {
            'equipment_number': 'T01',
            'description': 'Transformer 1',
            'commissioning_yn': 'Y',
        },
        {
            'equipment_number': 'ZZZ-9',
            'description': 'Mystery item',
            'commissioning_yn': 'Y',
        },
        {
            'equipment_number': 'BAN1',
            'description': 'Battery Bank',
            'commissioning_yn': 'TBC',
        },
        {
            'equipment_number': 'WC1',
            'description': 'LV Board',
            'commissioning_yn': 'N',
        },
    ]


@pytest.fixture
def classifier() -> EquipmentClassifier:
    """Classifier with the default category table."""
    return EquipmentClassifier()


@pytest.fixture
def generated(equipment_rows):
    """GenerationResult for equipment_rows."""
    return generate_wbs(equipment_rows, project_name='Test Substation')


@pytest.fixture
def transformer_tree() -> List[Dict[str, Any]]:
    """Minimal existing P6 export: T01 at 1.3.4.1 under a Transformers node."""
    return [
        {'wbs_code': '1', 'parent_wbs_code': '', 'wbs_name': 'Test Substation'},
        {'wbs_code': '1.3', 'parent_wbs_code': '1', 'wbs_name': 'S1 | +Z01 - Main Subsystem'},
        {'wbs_code': '1.3.4', 'parent_wbs_code': '1.3', 'wbs_name': '05 | Transformers'},
        {'wbs_code': '1.3.4.1', 'parent_wbs_code': '1.3.4', 'wbs_name': 'T01 | Transformer 1'},
    ]

