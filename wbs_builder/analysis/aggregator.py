"""Group classified equipment into per-category buckets."""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

import pandas as pd

from wbs_builder.classifiers.categories import (
    EQUIPMENT_CATEGORIES,
    UNRECOGNISED_CATEGORY,
)
from wbs_builder.models import ClassifiedEquipment

logger = logging.getLogger(__name__)


@dataclass
class CategoryBucket:
    """Equipment assigned to one category."""

    code: str
    name: str
    parents: List[ClassifiedEquipment] = field(default_factory=list)
    children: List[ClassifiedEquipment] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.parents) + len(self.children)

    @property
    def items(self) -> List[ClassifiedEquipment]:
        return self.parents + self.children


def aggregate_categories(
    classified: Iterable[ClassifiedEquipment],
    categories: Optional[Dict[str, str]] = None,
) -> Dict[str, CategoryBucket]:
    """
    Bucket equipment by category.

    Every declared category gets a bucket, including empty ones. Buckets are
    ordered by category code with the unrecognised category last; equipment
    keeps input order inside each bucket.

    Args:
        classified: Classified equipment
        categories: Category code -> name (defaults to EQUIPMENT_CATEGORIES)

    Returns:
        Ordered mapping category code -> CategoryBucket
    """
    categories = categories or EQUIPMENT_CATEGORIES
    ordered = sorted(c for c in categories if c != UNRECOGNISED_CATEGORY)
    if UNRECOGNISED_CATEGORY in categories:
        ordered.append(UNRECOGNISED_CATEGORY)

    buckets = {code: CategoryBucket(code=code, name=categories[code]) for code in ordered}

    for item in classified:
        bucket = buckets.get(item.category)
        if bucket is None:
            logger.warning(f'{item.identifier}: undeclared category {item.category}, counted as unrecognised')
            bucket = buckets.setdefault(
                UNRECOGNISED_CATEGORY,
                CategoryBucket(UNRECOGNISED_CATEGORY, EQUIPMENT_CATEGORIES[UNRECOGNISED_CATEGORY]),
            )
        if item.is_parent:
            bucket.parents.append(item)
        else:
            bucket.children.append(item)

    populated = sum(1 for b in buckets.values() if b.count)
    logger.info(f'Aggregated equipment into {populated}/{len(buckets)} categories')
    return buckets


def to_dataframe(buckets: Dict[str, CategoryBucket]) -> pd.DataFrame:
    """Per-category count report (one row per declared category)."""
    return pd.DataFrame(
        [
            {
                'category': bucket.code,
                'category_name': bucket.name,
                'equipment_count': bucket.count,
                'parent_count': len(bucket.parents),
                'child_count': len(bucket.children),
            }
            for bucket in buckets.values()
        ],
        columns=['category', 'category_name', 'equipment_count', 'parent_count', 'child_count'],
    )
