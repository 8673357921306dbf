"""
Extractors for equipment lists and existing WBS exports stored as files.

Supported formats: .csv, .xlsx (openpyxl engine), .json (list of objects).
Every cell is read as text so identifiers like '01' or 'T01' survive
unchanged; blank cells become ''.
"""
import json
import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple

import pandas as pd

from wbs_builder.config.field_mappings import EQUIPMENT_FIELD_SYNONYMS, WBS_FIELD_SYNONYMS
from wbs_builder.exceptions import UnsupportedFormatError
from wbs_builder.extractors.base_extractor import BaseExtractor

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS = ('.csv', '.xlsx', '.json')


class FileExtractor(BaseExtractor):
    """Read a tabular file into row dictionaries."""

    def __init__(
        self,
        name: str = 'file',
        required_fields: Optional[Mapping[str, Tuple[str, ...]]] = None,
    ):
        """
        Initialize the file extractor.

        Args:
            name: Name of the extractor (for logging)
            required_fields: Canonical field -> accepted column names; every
                canonical field needs at least one of its columns
        """
        super().__init__(name)
        self.required_fields = dict(required_fields or {})

    def extract(self, file_path: str = None, sheet_name: Any = 0, **kwargs) -> List[Dict[str, Any]]:
        """
        Read all rows of a file.

        Args:
            file_path: Path to the file (relative paths resolve against
                settings.DATA_DIR when not found as given)
            sheet_name: Worksheet for .xlsx files

        Returns:
            Row dictionaries keyed by column header

        Raises:
            FileNotFoundError: If the file does not exist
            UnsupportedFormatError: If the extension is not supported
        """
        path = self.resolve_path(file_path)
        suffix = path.suffix.lower()
        self.logger.info(f'Reading {path}')

        if suffix == '.csv':
            df = pd.read_csv(path, dtype=str, keep_default_na=False)
            rows = df.to_dict(orient='records')
        elif suffix == '.xlsx':
            df = pd.read_excel(path, sheet_name=sheet_name, dtype=str, engine='openpyxl')
            rows = df.fillna('').to_dict(orient='records')
        elif suffix == '.json':
            with open(path, encoding='utf-8') as f:
                rows = json.load(f)
            if not isinstance(rows, list):
                raise ValueError(f'{path}: expected a JSON list of objects')
        else:
            raise UnsupportedFormatError(suffix or '(none)', SUPPORTED_FORMATS)

        rows = [{str(k).strip(): v for k, v in row.items()} for row in rows]
        self.log_extraction(len(rows))
        return rows

    def validate_extraction(self, data: List[Dict[str, Any]]) -> bool:
        """
        Check the rows carry a column for every required field.

        Args:
            data: Extracted rows

        Returns:
            True if data is non-empty and every required field has a column
        """
        if not data:
            self.logger.error(f'No rows read from {self.source}')
            return False

        columns = set().union(*(row.keys() for row in data))
        valid = True
        for canonical, synonyms in self.required_fields.items():
            if not columns.intersection(synonyms):
                self.logger.error(
                    f'{self.source}: no column for {canonical} (expected one of {list(synonyms)})'
                )
                valid = False
        return valid


def equipment_extractor() -> FileExtractor:
    """Extractor for equipment lists."""
    return FileExtractor(
        'equipment',
        {
            'identifier': EQUIPMENT_FIELD_SYNONYMS['identifier'],
            'commissioning_status': EQUIPMENT_FIELD_SYNONYMS['commissioning_status'],
        },
    )


def wbs_tree_extractor() -> FileExtractor:
    """Extractor for existing WBS exports."""
    return FileExtractor(
        'wbs_tree',
        {
            'code': WBS_FIELD_SYNONYMS['code'],
            'name': WBS_FIELD_SYNONYMS['name'],
        },
    )
