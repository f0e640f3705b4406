"""
Loading raw grids from tabular sources.

This module turns spreadsheet-style cell values and local grid files into
raw rows that validate_grid() accepts.
"""

import csv
import json
import logging
from pathlib import Path
from typing import Any, List, Sequence, Union

from src.drainage.errors import InvalidGridError
from src.drainage.grid import coerce_cell

logger = logging.getLogger(__name__)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def grid_from_sheet_values(values: Sequence[Sequence[Any]]) -> List[List[float]]:
    """
    Convert spreadsheet cell values into a rectangular numeric grid.

    Empty cells are skipped, rows without any numeric data are dropped, and
    the remaining rows are right-padded with elevation 0 to the widest row.

    Args:
        values: Rows of cell values (strings, numbers, or empty)

    Returns:
        Rectangular list of float rows

    Raises:
        InvalidGridError: If there is no sheet data or no numeric data at all
        NonNumericCellError: If a non-empty cell is not numeric (reported at
            its position in the sheet)
    """
    if not values or isinstance(values, (str, bytes)):
        raise InvalidGridError("Sheet data is empty or invalid")

    grid = []
    for i, row in enumerate(values):
        if isinstance(row, (str, bytes)) or not isinstance(row, Sequence):
            raise InvalidGridError(f"Row {i} is not an array", row=i)

        grid_row = [coerce_cell(cell, i, j) for j, cell in enumerate(row) if not _is_blank(cell)]
        if grid_row:
            grid.append(grid_row)

    if not grid:
        raise InvalidGridError("No valid numeric data found in sheet")

    width = max(len(row) for row in grid)
    padded = 0
    for row in grid:
        if len(row) < width:
            padded += 1
            row.extend([0.0] * (width - len(row)))

    if padded:
        logger.debug(f"Padded {padded} short rows with elevation 0 to width {width}")

    return grid


def load_grid_file(path: Union[str, Path]) -> List[List[Any]]:
    """
    Load raw grid rows from a local file.

    Supports:
        - ``.json``: a 2D array, or an object with a ``grid`` key
        - ``.csv`` / ``.tsv``: one grid row per line

    Cell values are returned as read; pass the rows to validate_grid() or
    grid_from_sheet_values().

    Args:
        path: Path to the grid file

    Returns:
        List of rows

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file type is unsupported
        InvalidGridError: If a JSON object has no ``grid`` key
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Grid file not found: {path}")

    suffix = path.suffix.lower()
    logger.info(f"Loading grid from {path}")

    if suffix == ".json":
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        if isinstance(data, dict):
            if "grid" not in data:
                raise InvalidGridError(f"JSON object in {path} has no 'grid' key")
            data = data["grid"]
        return data

    if suffix in (".csv", ".tsv"):
        delimiter = "\t" if suffix == ".tsv" else ","
        with open(path, newline="", encoding="utf-8") as f:
            rows = [row for row in csv.reader(f, delimiter=delimiter) if row]
        logger.debug(f"Read {len(rows)} rows from {path.name}")
        return rows

    raise ValueError(f"Unsupported grid file type '{suffix}': {path}")

