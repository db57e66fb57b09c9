"""Spreadsheet -> ordered row sequence.

Rows are plain dicts keyed by the sheet's header cells, in sheet order. Empty
cells come back as None so the column resolver treats them as absent. CSV
cells are kept as text; workbook cells keep the type the workbook stores.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import pandas as pd

logger = logging.getLogger(__name__)

EXCEL_SUFFIXES = (".xlsx", ".xls")
CSV_SUFFIXES = (".csv",)
SUPPORTED_SUFFIXES = EXCEL_SUFFIXES + CSV_SUFFIXES

_CSV_ENCODINGS = ("utf-8", "utf-8-sig", "latin-1")


def _frame_to_rows(df: pd.DataFrame) -> list[dict[str, Any]]:
    df = df.astype(object).where(pd.notna(df), None)
    rows: list[dict[str, Any]] = []
    for record in df.to_dict(orient="records"):
        rows.append({str(k): _unwrap(v) for k, v in record.items()})
    return rows


def _unwrap(value: Any) -> Any:
    # numpy scalars -> builtin scalars
    if hasattr(value, "item") and not isinstance(value, (str, bytes)):
        try:
            return value.item()
        except (TypeError, ValueError):
            return value
    return value


def _read_csv(path: Path) -> pd.DataFrame:
    for enc in _CSV_ENCODINGS:
        try:
            # identifiers stay as written: no "00123" -> 123, no "NA" -> missing
            df = pd.read_csv(path, encoding=enc, dtype=str, keep_default_na=False, na_values=[""])
            logger.debug("%s loaded with encoding %s", path.name, enc)
            return df
        except UnicodeDecodeError:
            continue
    raise ValueError(f"Could not decode {path.name} with any supported encoding")


def read_rows(path: Path, *, sheet: str | int = 0) -> list[dict[str, Any]]:
    """Read the first (or named) sheet of a workbook, or a CSV file, into rows.

    Raises:
        ValueError: unsupported file type or undecodable content.
    """
    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise ValueError(f"Please provide a spreadsheet ({', '.join(SUPPORTED_SUFFIXES)}), got {path.name}")

    if suffix in CSV_SUFFIXES:
        df = _read_csv(path)
    else:
        df = pd.read_excel(path, sheet_name=sheet, dtype=object)

    df = df.dropna(how="all")
    rows = _frame_to_rows(df)
    logger.info("Read %d rows from %s", len(rows), path.name)
    return rows
