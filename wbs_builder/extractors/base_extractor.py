"""Base extractor class for equipment list and WBS tree sources."""
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Union
import logging

from wbs_builder.config.settings import settings

logger = logging.getLogger(__name__)


class BaseExtractor(ABC):
    """
    Abstract base class for all extractors.

    Extractors read a source into plain row dictionaries; they never
    interpret the rows. Interpretation belongs to the transformers.
    """

    def __init__(self, name: str):
        self.name = name
        self.logger = logging.getLogger(f'{__name__}.{name}')
        self.extracted_at = None
        self.record_count = 0
        self.source = None

    def resolve_path(self, file_path: Union[str, Path]) -> Path:
        """
        Locate an input file.

        A relative path that does not exist as given is looked up under
        settings.DATA_DIR.

        Raises:
            ValueError: If no path was given
            FileNotFoundError: If the file exists in neither place
        """
        if not file_path:
            raise ValueError('file_path is required')

        path = Path(file_path)
        if not path.exists() and not path.is_absolute():
            path = settings.DATA_DIR / path
        if not path.exists():
            raise FileNotFoundError(f'File not found: {file_path}')

        self.source = path
        return path

    @abstractmethod
    def extract(self, **kwargs) -> List[Dict[str, Any]]:
        """Read rows from the source, one dictionary per row."""
        pass

    @abstractmethod
    def validate_extraction(self, data: List[Dict[str, Any]]) -> bool:
        """Return True if the extracted rows are usable."""
        pass

    def log_extraction(self, record_count: int) -> None:
        self.extracted_at = datetime.now()
        self.record_count = record_count
        self.logger.info(f'Read {record_count} rows from {self.source}')

    def get_metadata(self) -> Dict[str, Any]:
        """Source, time and row count of the last extraction."""
        return {
            'extractor': self.name,
            'source': str(self.source) if self.source else None,
            'extracted_at': self.extracted_at.isoformat() if self.extracted_at else None,
            'record_count': self.record_count,
        }
