"""Loader for export package files (CSV, JSON)."""
from typing import Any, List, Dict, Optional, Sequence
import logging
import json
from pathlib import Path
import pandas as pd

from schemas.validator import validated_df_to_csv
from wbs_builder.exceptions import UnsupportedFormatError
from wbs_builder.loaders.base_loader import BaseLoader

logger = logging.getLogger(__name__)


class FileLoader(BaseLoader):
    """
    Write report rows to files.

    CSV files go through validated_df_to_csv(), so a file registered in
    schemas/registry.py is checked against its schema before it is written.
    """

    FORMATS = ('csv', 'json')

    def __init__(self):
        """Initialize file loader."""
        super().__init__('file')

    def load(
        self,
        data: List[Dict[str, Any]],
        file_path: Optional[str] = None,
        format: str = 'csv',
        columns: Optional[Sequence[str]] = None,
        **kwargs,
    ) -> bool:
        """
        Write rows to a file.

        Args:
            data: Rows to write
            file_path: Output file path (relative to settings.OUTPUT_DATA_DIR
                if not absolute)
            format: 'csv' or 'json'
            columns: Column order; lets an empty row list still produce a
                CSV with its header

        Returns:
            True if a file was written, False when there was nothing to write

        Raises:
            UnsupportedFormatError: If the format is not supported
            SchemaValidationError: If a registered CSV fails its schema
        """
        if format not in self.FORMATS:
            raise UnsupportedFormatError(format, self.FORMATS)
        if not data and not columns:
            self.logger.warning(f'No data to write to {file_path}')
            return False

        path = self.prepare_path(file_path)

        if format == 'csv':
            self._load_csv(data, path, columns, **kwargs)
        else:
            self._load_json(data, path)

        self.record_load(path, len(data))
        return True

    def _load_csv(
        self,
        data: List[Dict[str, Any]],
        file_path: Path,
        columns: Optional[Sequence[str]] = None,
        **kwargs,
    ) -> None:
        """Write rows as CSV after schema validation."""
        df = pd.DataFrame(data, columns=list(columns) if columns else None)
        validated_df_to_csv(df, file_path, index=False, **kwargs)

    def _load_json(self, data: List[Dict[str, Any]], file_path: Path) -> None:
        """Write rows as JSON."""
        with open(file_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, default=str)

