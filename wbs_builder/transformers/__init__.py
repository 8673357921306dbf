"""Input normalization: raw rows to canonical records."""

from .base_transformer import BaseTransformer
from .equipment_normalizer import EquipmentNormalizer, NormalizedEquipment
from .wbs_tree_normalizer import NormalizedTree, WbsTreeNormalizer

__all__ = [
    'BaseTransformer',
    'EquipmentNormalizer',
    'NormalizedEquipment',
    'NormalizedTree',
    'WbsTreeNormalizer',
]
