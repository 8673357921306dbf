"""Equipment identifier classification."""

from .equipment_classifier import EquipmentClassifier, CategoryMatch, compile_rule
from .categories import (
    EQUIPMENT_CATEGORIES,
    CATEGORY_PATTERNS,
    UNRECOGNISED_CATEGORY,
    PatternRule,
    category_order,
    category_label,
)

__all__ = [
    'EquipmentClassifier',
    'CategoryMatch',
    'compile_rule',
    'EQUIPMENT_CATEGORIES',
    'CATEGORY_PATTERNS',
    'UNRECOGNISED_CATEGORY',
    'PatternRule',
    'category_order',
    'category_label',
]
