"""
Equipment Classifier for WBS Categories

Maps an equipment identifier to one of the closed WBS category codes using the
ordered pattern table in categories.py.

Usage:
    from wbs_builder.classifiers import EquipmentClassifier

    classifier = EquipmentClassifier()
    classifier.classify('+UH101')      # '02'
    classifier.classify('T12')         # '05'
    classifier.classify('ZZZ')         # '99'
    classifier.describe('BCR1')        # 'Battery Charger'
"""

import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .categories import (
    CATEGORY_PATTERNS,
    EQUIPMENT_CATEGORIES,
    UNRECOGNISED_CATEGORY,
    PatternRule,
)
from wbs_builder.utils.helpers import normalize_identifier


@dataclass(frozen=True)
class CategoryMatch:
    """Classification outcome for one identifier."""

    category: str
    category_name: str
    equipment_type: Optional[str]
    rule: Optional[PatternRule]

    @property
    def is_recognised(self) -> bool:
        return self.category != UNRECOGNISED_CATEGORY


def compile_rule(rule: PatternRule) -> re.Pattern:
    """
    Normalize a prefix, template or regex rule to one anchored regex.

    Args:
        rule: Pattern rule from the category table

    Returns:
        Compiled case-insensitive pattern matched with .match()

    Raises:
        ValueError: If the rule kind is unknown
    """
    if rule.kind == 'prefix':
        source = re.escape(rule.value.upper())
    elif rule.kind == 'template':
        # Placeholder runs ('X', 'XX') stand for one or more digits
        parts = re.split(r'X+', rule.value.upper())
        source = r'\d+'.join(re.escape(part) for part in parts)
    elif rule.kind == 'regex':
        source = rule.value
    else:
        raise ValueError(f"Unknown pattern rule kind '{rule.kind}' for {rule.value!r}")

    if not source.startswith('^'):
        source = '^' + source
    return re.compile(source, re.IGNORECASE)


class EquipmentClassifier:
    """Classifier for equipment identifiers based on the WBS category table."""

    def __init__(
        self,
        patterns: Optional[Dict[str, List[PatternRule]]] = None,
        categories: Optional[Dict[str, str]] = None,
    ):
        """
        Initialize the classifier.

        Args:
            patterns: Category code -> ordered rules (defaults to CATEGORY_PATTERNS)
            categories: Category code -> name (defaults to EQUIPMENT_CATEGORIES)
        """
        self.categories = dict(categories or EQUIPMENT_CATEGORIES)
        patterns = patterns or CATEGORY_PATTERNS

        # Flattened in declaration order; the first match wins
        self._compiled: List[Tuple[str, PatternRule, re.Pattern]] = [
            (code, rule, compile_rule(rule))
            for code, rules in patterns.items()
            for rule in rules
        ]

    def match(self, identifier: Optional[str]) -> CategoryMatch:
        """
        Classify an identifier and report which rule matched.

        Args:
            identifier: Raw equipment identifier (normalized before matching)

        Returns:
            CategoryMatch; the unrecognised category when nothing matches
        """
        cleaned = normalize_identifier(identifier)

        if cleaned:
            for code, rule, pattern in self._compiled:
                if pattern.match(cleaned):
                    return CategoryMatch(
                        category=code,
                        category_name=self.categories.get(code, code),
                        equipment_type=rule.name,
                        rule=rule,
                    )

        return CategoryMatch(
            category=UNRECOGNISED_CATEGORY,
            category_name=self.categories.get(UNRECOGNISED_CATEGORY, 'Unrecognised Equipment'),
            equipment_type=None,
            rule=None,
        )

    def classify(self, identifier: Optional[str]) -> str:
        """
        Classify an identifier into a category code.

        Never raises for bad input: None or empty identifiers are unrecognised.

        Args:
            identifier: Raw equipment identifier

        Returns:
            Category code ('01'..'10' or '99')
        """
        return self.match(identifier).category

    def describe(self, identifier: Optional[str]) -> Optional[str]:
        """Get the equipment type name of the matching rule, if any."""
        return self.match(identifier).equipment_type

    def get_category_name(self, code: str) -> str:
        """Get the display name for a category code."""
        return self.categories.get(code, self.categories.get(UNRECOGNISED_CATEGORY, ''))
