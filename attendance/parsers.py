"""Spreadsheet parsing: turn an uploaded CSV or Excel file into raw subject entries."""

import logging
import re
from io import BytesIO
from typing import Dict, List

import numpy as np
import pandas as pd

from attendance.models import RawSubjectEntry

logger = logging.getLogger(__name__)

# Standard column -> accepted header variations (already normalized)
COLUMN_VARIATIONS: Dict[str, List[str]] = {
    "name": [
        "name", "subject", "subject name", "subjectname", "course",
        "course name", "coursename", "subject code",
    ],
    "held": [
        "held", "classes held", "classesheld", "total", "total classes",
        "conducted", "classes conducted", "delivered", "total lectures",
    ],
    "attended": [
        "attended", "classes attended", "classesattended", "present",
        "attended classes", "lectures attended",
    ],
}

# openpyxl reads Office Open XML only, not legacy .xls
EXCEL_EXTENSIONS = (".xlsx", ".xlsm")
CSV_EXTENSIONS = (".csv",)


def normalize_col_name(col_name) -> str:
    """Normalize a column name for matching."""
    if pd.isna(col_name):
        return ""
    normalized = str(col_name).strip().lower()
    normalized = re.sub(r'[.,%#_]', ' ', normalized)
    normalized = re.sub(r'\s+', ' ', normalized)
    return normalized.strip()


def normalize_and_rename_columns(df: pd.DataFrame) -> pd.DataFrame:
    """
    Rename subject, held and attended columns to their standard names.

    Handles minor naming variations and formatting differences. The first
    matching column wins; later duplicates are left untouched.

    Args:
        df: DataFrame as read from the file

    Returns:
        DataFrame with 'name', 'held' and 'attended' columns

    Raises:
        ValueError: if any of the three columns cannot be found
    """
    df = df.copy()

    actual_rename = {}
    for orig_col in df.columns:
        normalized = normalize_col_name(orig_col)
        for target_name, variations in COLUMN_VARIATIONS.items():
            if normalized in variations and target_name not in actual_rename.values():
                actual_rename[orig_col] = target_name
                logger.debug("Will rename %r -> %r (normalized: %r)", orig_col, target_name, normalized)
                break

    missing = [col for col in COLUMN_VARIATIONS if col not in actual_rename.values()]
    if missing:
        raise ValueError(
            f"Missing required columns: {', '.join(missing)}. Found: {list(df.columns)}"
        )

    df = df.rename(columns=actual_rename)
    return df[list(COLUMN_VARIATIONS)]


def read_table(file_bytes: bytes, filename: str) -> pd.DataFrame:
    """Read the first sheet of an Excel file, or a CSV file, into a DataFrame."""
    lowered = (filename or "").lower()

    if lowered.endswith(EXCEL_EXTENSIONS):
        try:
            return pd.read_excel(
                BytesIO(file_bytes), sheet_name=0, engine='openpyxl', dtype=object,
                keep_default_na=False, na_values=[""],
            )
        except Exception as e:
            raise ValueError(f"Could not read Excel file: {e}") from e

    if lowered.endswith(CSV_EXTENSIONS):
        try:
            # Only empty cells are missing; "NA", "None" and the like are subject names
            return pd.read_csv(
                BytesIO(file_bytes), dtype=str, skip_blank_lines=True,
                keep_default_na=False, na_values=[""],
            )
        except pd.errors.EmptyDataError:
            return pd.DataFrame(columns=list(COLUMN_VARIATIONS))
        except Exception as e:
            raise ValueError(f"Could not read CSV file: {e}") from e

    raise ValueError("Invalid file type. Please upload a CSV or Excel file (.csv or .xlsx)")


def rows_to_entries(df: pd.DataFrame) -> List[RawSubjectEntry]:
    """Convert a normalized DataFrame into raw entries, keeping row order."""
    # Empty cells become None so blank rows are recognised downstream
    df = df.astype(object)
    df = df.where(pd.notna(df), None)

    entries = []
    for row in df.itertuples(index=False):
        entries.append(RawSubjectEntry(
            name=None if row.name is None else str(row.name),
            held=_cell_value(row.held),
            attended=_cell_value(row.attended),
        ))
    return entries


def _cell_value(value):
    if isinstance(value, np.generic):
        value = value.item()
    if value is None or isinstance(value, (int, float, str)):
        return value
    # datetimes and anything else openpyxl hands back
    return str(value)


def load_subjects_file(file_bytes: bytes, filename: str) -> List[RawSubjectEntry]:
    """
    Load subject rows from an uploaded spreadsheet.

    Expected structure (header names are matched loosely):
    - Subject Name: text
    - Classes Held: integer
    - Attended: integer

    Args:
        file_bytes: Raw bytes of the uploaded file
        filename: Original filename, used to pick the reader

    Returns:
        Ordered list of RawSubjectEntry
    """
    raw_df = read_table(file_bytes, filename)
    logger.debug("Raw columns in %s: %s", filename, list(raw_df.columns))

    df = normalize_and_rename_columns(raw_df)
    entries = rows_to_entries(df)

    logger.info("Loaded %d subject rows from %s", len(entries), filename)
    return entries
