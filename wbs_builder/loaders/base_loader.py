"""Base loader class for writing export files."""
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Union
import logging

from wbs_builder.config.settings import settings

logger = logging.getLogger(__name__)


class BaseLoader(ABC):
    """
    Abstract base class for all loaders.

    Subclasses write rows to a target path and call record_load() once the
    file exists, so get_load_stats() and validate_load() work for any format.
    """

    def __init__(self, name: str):
        self.name = name
        self.logger = logging.getLogger(f'{__name__}.{name}')
        self.file_path = None
        self.loaded_count = 0

    def prepare_path(self, file_path: Union[str, Path]) -> Path:
        """
        Resolve an output path and create its directory.

        Relative paths are placed under settings.OUTPUT_DATA_DIR.
        """
        if not file_path:
            raise ValueError('file_path is required')
        path = Path(file_path)
        if not path.is_absolute():
            path = settings.OUTPUT_DATA_DIR / path
        path.parent.mkdir(parents=True, exist_ok=True)
        return path

    def record_load(self, path: Path, record_count: int) -> None:
        self.file_path = str(path)
        self.loaded_count = record_count
        self.logger.info(f'Wrote {record_count} rows to {path}')

    @abstractmethod
    def load(self, data: List[Dict[str, Any]], **kwargs) -> bool:
        """
        Write rows to the destination.

        Returns:
            True if something was written
        """
        pass

    def validate_load(self, record_count: int) -> bool:
        """True if the last load wrote exactly record_count rows."""
        return self.loaded_count == record_count

    def get_load_stats(self) -> Dict[str, Any]:
        return {
            'loader': self.name,
            'file_path': self.file_path,
            'loaded_count': self.loaded_count,
        }
