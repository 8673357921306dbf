"""Base transformer class for input normalization."""
from abc import ABC, abstractmethod
from typing import Any, Iterable, List, Dict, Mapping
import logging

from wbs_builder.exceptions import InputShapeError
from wbs_builder.models import DataQualityIssue

logger = logging.getLogger(__name__)


class BaseTransformer(ABC):
    """
    Abstract base class for input transformers.

    Subclasses turn raw rows into immutable domain records. Shape problems
    with the input as a whole are fatal (InputShapeError); problems with
    single rows are collected as DataQualityIssues and logged.
    """

    # Shown in error messages, e.g. 'Equipment list'
    input_label = 'Input'

    def __init__(self, name: str):
        """
        Initialize the transformer.

        Args:
            name: Name of the transformer (for logging)
        """
        self.name = name
        self.logger = logging.getLogger(f'{__name__}.{name}')

    def require_rows(self, data: Any) -> None:
        """
        Reject input that is missing, not a list, or empty.

        Raises:
            InputShapeError: If data cannot be normalized at all
        """
        if data is None:
            raise InputShapeError(f'{self.input_label} is required')
        if not isinstance(data, (list, tuple)):
            raise InputShapeError(
                f'{self.input_label} must be a list of rows, got {type(data).__name__}'
            )
        if len(data) == 0:
            raise InputShapeError(f'{self.input_label} is empty')

    def require_mapping(self, index: int, row: Any) -> None:
        """Reject a row that is not a dictionary."""
        if not isinstance(row, Mapping):
            raise InputShapeError(
                f'{self.input_label} row {index} must be a mapping, got {type(row).__name__}'
            )

    def log_issues(self, issues: Iterable[DataQualityIssue]) -> None:
        """Log every data-quality issue at WARNING."""
        for issue in issues:
            self.logger.warning(issue.message)

    @abstractmethod
    def transform(self, data: List[Dict[str, Any]]) -> List[Any]:
        """
        Transform raw rows.

        Args:
            data: List of raw dictionaries

        Returns:
            Domain records
        """
        pass

    @abstractmethod
    def validate_transformation(self, data: List[Any]) -> bool:
        """
        Validate transformed records.

        Args:
            data: Output of transform()

        Returns:
            True if validation passes, False otherwise
        """
        pass
