"""File extractors for equipment lists and WBS exports."""

from .base_extractor import BaseExtractor
from .file_extractor import FileExtractor, equipment_extractor, wbs_tree_extractor

__all__ = ['BaseExtractor', 'FileExtractor', 'equipment_extractor', 'wbs_tree_extractor']
