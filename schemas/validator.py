"""
Column checks for export package CSV files.

wbs_export.csv is imported into P6 and wbs_structure.csv is read back by the
next reconciliation, so file layouts only ever grow:

  - FORBIDDEN: dropping or renaming a column
  - FORBIDDEN: changing a column's type (e.g. code text -> int)
  - ALLOWED: new columns, new rows
"""

from pathlib import Path
from typing import Dict, List, Optional, Tuple, Type
import warnings

import pandas as pd
from pydantic import BaseModel

# pandas dtype kinds accepted for each schema type. CSV inference is loose:
# empty frames come back as object, all-blank columns as float.
COMPATIBLE_DTYPES = {
    'str': {'str', 'float'},
    'int': {'int', 'float', 'str'},
    'float': {'int', 'float', 'str'},
    'bool': {'bool', 'str'},
}


class SchemaValidationError(Exception):
    """A DataFrame does not match the schema registered for its file."""

    def __init__(
        self,
        message: str,
        missing_columns: Optional[List[str]] = None,
        type_mismatches: Optional[Dict[str, Tuple[str, str]]] = None,
        extra_columns: Optional[List[str]] = None,
    ):
        super().__init__(message)
        self.missing_columns = missing_columns or []
        self.type_mismatches = type_mismatches or {}
        self.extra_columns = extra_columns or []


def pandas_dtype_to_python_type(dtype) -> str:
    """Reduce a pandas dtype to 'int', 'float', 'str' or 'bool'."""
    name = str(dtype)
    if name.startswith(('int', 'Int')):
        return 'int'
    if name.startswith(('float', 'Float')):
        return 'float'
    if name in ('bool', 'boolean'):
        return 'bool'
    if name in ('object', 'string', 'str'):
        return 'str'
    return name


def pydantic_type_to_string(field_type) -> str:
    """Reduce a field annotation (Optional included) to its base type name."""
    text = str(field_type)
    for name in ('bool', 'int', 'float', 'str'):
        if f"'{name}'" in text or f'[{name}' in text or f'{name} |' in text:
            return name
    return text


def types_compatible(pandas_type: str, pydantic_type: str) -> bool:
    """Check a DataFrame column type against the schema type."""
    if pandas_type == pydantic_type:
        return True
    return pandas_type in COMPATIBLE_DTYPES.get(pydantic_type, set())


def get_column_name(field_name: str, field_info) -> str:
    """CSV column for a schema field (its alias when it has one)."""
    return getattr(field_info, 'alias', None) or field_name


def schema_columns(schema: Type[BaseModel]) -> Dict[str, str]:
    """Column name -> simplified type for every field of a schema."""
    return {
        get_column_name(name, info): pydantic_type_to_string(info.annotation)
        for name, info in schema.model_fields.items()
    }


def column_type_mismatches(df: pd.DataFrame, schema: Type[BaseModel]) -> Dict[str, Tuple[str, str]]:
    """Columns present in both whose types disagree, as column -> (got, expected)."""
    mismatches = {}
    for column, expected in sorted(schema_columns(schema).items()):
        if column not in df.columns:
            continue
        got = pandas_dtype_to_python_type(df[column].dtype)
        if not types_compatible(got, expected):
            mismatches[column] = (got, expected)
    return mismatches


def validate_dataframe(
    df: pd.DataFrame,
    schema: Type[BaseModel],
    strict: bool = False,
) -> List[str]:
    """
    Check a DataFrame's columns and column types against a schema.

    Row values are not validated.

    Args:
        df: DataFrame about to be written
        schema: Pydantic model for the file
        strict: Also reject columns the schema does not declare

    Returns:
        Error messages; empty when the frame matches
    """
    expected = schema_columns(schema)
    errors = []

    missing = sorted(set(expected) - set(df.columns))
    if missing:
        errors.append(f"Missing required columns: {missing}")

    extra = sorted(set(df.columns) - set(expected))
    if strict and extra:
        errors.append(f"Unexpected columns (strict mode): {extra}")

    mismatches = column_type_mismatches(df, schema)
    if mismatches:
        details = '; '.join(
            f"{column}: got {got}, expected {want}" for column, (got, want) in mismatches.items()
        )
        errors.append(f"Type mismatches: {details}")

    return errors


def validate_output_file(
    file_path: Path,
    schema: Type[BaseModel],
    strict: bool = False,
    sample_rows: int = 100,
) -> List[str]:
    """
    Check a written CSV against its schema using its first rows.

    Raises:
        FileNotFoundError: If the file does not exist
    """
    file_path = Path(file_path)
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")
    return validate_dataframe(pd.read_csv(file_path, nrows=sample_rows), schema, strict=strict)


def validated_df_to_csv(
    df: pd.DataFrame,
    file_path: Path,
    strict: bool = False,
    skip_validation: bool = False,
    **to_csv_kwargs,
) -> None:
    """
    Write a DataFrame to CSV after checking it against its registered schema.

    The schema is looked up by file name in schemas/registry.py; files with
    no registered schema are written with a warning.

    Args:
        df: DataFrame to write
        file_path: Output path
        strict: Reject columns the schema does not declare
        skip_validation: Write without checking
        **to_csv_kwargs: Passed through to DataFrame.to_csv()

    Raises:
        SchemaValidationError: If the frame does not match; nothing is written

    Example:
        validated_df_to_csv(pd.DataFrame(rows), out_dir / 'wbs_export.csv', index=False)
    """
    from .registry import get_schema_for_file

    file_path = Path(file_path)
    schema = None if skip_validation else get_schema_for_file(file_path.name)

    if schema is None and not skip_validation:
        warnings.warn(
            f"No schema registered for '{file_path.name}'; written without validation",
            UserWarning,
        )

    if schema is not None:
        errors = validate_dataframe(df, schema, strict=strict)
        if errors:
            expected = set(schema_columns(schema))
            raise SchemaValidationError(
                f"Schema validation failed for '{file_path.name}':\n"
                + "\n".join(f"  - {e}" for e in errors),
                missing_columns=sorted(expected - set(df.columns)),
                type_mismatches=column_type_mismatches(df, schema),
                extra_columns=sorted(set(df.columns) - expected) if strict else [],
            )

    df.to_csv(file_path, **to_csv_kwargs)


def validate_schema_compatibility(
    old_schema: Type[BaseModel],
    new_schema: Type[BaseModel],
) -> List[str]:
    """
    List the changes from old_schema to new_schema that break existing files.

    Returns:
        Violations (removed columns, changed types); empty when compatible
    """
    old_columns = schema_columns(old_schema)
    new_columns = schema_columns(new_schema)
    errors = []

    removed = sorted(set(old_columns) - set(new_columns))
    if removed:
        errors.append(f"FORBIDDEN: Removed columns: {removed}")

    for column in sorted(set(old_columns) & set(new_columns)):
        if old_columns[column] != new_columns[column]:
            errors.append(
                f"FORBIDDEN: Type change for '{column}': "
                f"{old_columns[column]} -> {new_columns[column]}"
            )

    return errors
