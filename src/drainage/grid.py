"""
Elevation grid model and input validation.

Normalizes caller-supplied tabular data (nested lists of numbers or
numeric-looking strings, or a numeric numpy array) into an immutable
ElevationGrid, and defines the boundary edges/groups that seed the
reachability traversals.
"""

import logging
import math
import numbers
from decimal import Decimal
from dataclasses import dataclass
from enum import Enum
from typing import Any, FrozenSet, Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np

from src import config
from src.drainage.errors import (
    GridSizeExceededError,
    InvalidBoundaryError,
    InvalidGridError,
    NonNumericCellError,
)

logger = logging.getLogger(__name__)


class BoundaryEdge(Enum):
    """One side of the rectangular grid."""

    TOP = "top"
    LEFT = "left"
    BOTTOM = "bottom"
    RIGHT = "right"

    @classmethod
    def parse(cls, value: Union["BoundaryEdge", str]) -> "BoundaryEdge":
        """
        Parse an edge name case-insensitively.

        Raises:
            InvalidBoundaryError: If the value names none of the four edges
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise InvalidBoundaryError(
            f"Unknown boundary edge {value!r}. "
            f"Available: {[edge.value for edge in cls]}",
            value=value,
        )


# Enum declaration order, used wherever edges must be listed deterministically
EDGE_ORDER = tuple(BoundaryEdge)


@dataclass(frozen=True)
class BoundaryGroup:
    """
    A named, non-empty set of boundary edges acting as one drainage target.

    Two groups may share edges; that is accepted input.
    """

    name: str
    edges: FrozenSet[BoundaryEdge]

    def __post_init__(self):
        if not self.edges:
            raise InvalidBoundaryError(
                f"Boundary group '{self.name}' must contain at least one edge",
                value=[],
            )

    @classmethod
    def from_edges(
        cls, name: str, edges: Union[str, BoundaryEdge, Iterable[Union[str, BoundaryEdge]]]
    ) -> "BoundaryGroup":
        """Build a group from edge names or BoundaryEdge members."""
        if isinstance(edges, (str, BoundaryEdge)):
            edges = [edges]
        if edges is None:
            raise InvalidBoundaryError(
                f"Boundary group '{name}' must contain at least one edge", value=None
            )
        return cls(name=name, edges=frozenset(BoundaryEdge.parse(e) for e in edges))

    @property
    def ordered_edges(self) -> Tuple[BoundaryEdge, ...]:
        return tuple(edge for edge in EDGE_ORDER if edge in self.edges)

    def edge_names(self) -> List[str]:
        return [edge.value for edge in self.ordered_edges]


@dataclass(frozen=True, eq=False)
class ElevationGrid:
    """
    Validated, rectangular, read-only elevation matrix.

    Attributes:
        values: float64 array of shape (rows, cols); write-protected
        advisory: Non-fatal notice about the grid (e.g. very large grids)
    """

    values: np.ndarray
    advisory: Optional[str] = None

    def __post_init__(self):
        self.values.flags.writeable = False

    @property
    def rows(self) -> int:
        return int(self.values.shape[0])

    @property
    def cols(self) -> int:
        return int(self.values.shape[1])

    @property
    def shape(self) -> Tuple[int, int]:
        return self.rows, self.cols

    @property
    def cell_count(self) -> int:
        return self.rows * self.cols

    def contains(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols

    def elevation(self, row: int, col: int) -> float:
        return float(self.values[row, col])

    def to_list(self) -> List[List[float]]:
        return self.values.tolist()


def coerce_cell(value: Any, row: int, col: int) -> float:
    """
    Coerce a single cell value to float.

    Numbers (including numpy scalars and Decimals) are taken as-is, with
    integers beyond float range mapped to +/-inf; strings are parsed
    after stripping whitespace. Booleans, blanks, None and NaN are rejected.

    Raises:
        NonNumericCellError: If the value is not numeric
    """
    if isinstance(value, (bool, np.bool_)):
        raise NonNumericCellError(row, col, value)

    if isinstance(value, (numbers.Real, Decimal)):
        try:
            number = float(value)
        except OverflowError:
            # ints beyond float range behave like "1e400" does as a string
            number = math.inf if value > 0 else -math.inf
        except ValueError:
            # signaling NaN Decimals refuse conversion
            raise NonNumericCellError(row, col, value) from None
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            raise NonNumericCellError(row, col, value)
        try:
            number = float(text)
        except ValueError:
            raise NonNumericCellError(row, col, value) from None
    else:
        raise NonNumericCellError(row, col, value)

    if math.isnan(number):
        raise NonNumericCellError(row, col, value)
    return number


def validate_grid(
    raw: Any,
    max_rows: int = config.MAX_GRID_ROWS,
    max_cols: int = config.MAX_GRID_COLS,
    large_grid_threshold: int = config.LARGE_GRID_CELL_THRESHOLD,
) -> ElevationGrid:
    """
    Validate and normalize raw tabular input into an ElevationGrid.

    Rows are checked in order: each row must be a sequence with the same
    length as the first row, and each of its cells must coerce to a number.
    The size ceiling is enforced after coercion. Grids above
    ``large_grid_threshold`` cells are accepted with an advisory.

    Args:
        raw: Nested sequences of numeric-coercible values, or a 2D numpy array
        max_rows: Hard row ceiling
        max_cols: Hard column ceiling
        large_grid_threshold: Cell count above which an advisory is attached

    Returns:
        ElevationGrid with float64 values

    Raises:
        InvalidGridError: Missing, empty, or non-rectangular input
        NonNumericCellError: A cell cannot be coerced to a number
        GridSizeExceededError: Rows or columns beyond the ceiling
    """
    if isinstance(raw, np.ndarray) and raw.dtype.kind in "iuf":
        values = _validate_numeric_array(raw)
    else:
        if isinstance(raw, np.ndarray):
            if raw.ndim != 2:
                raise InvalidGridError(f"Grid must be 2D, got shape {raw.shape}")
            raw = raw.tolist()
        values = _coerce_rows(raw)

    rows, cols = values.shape
    if rows > max_rows or cols > max_cols:
        raise GridSizeExceededError(rows, cols, max_rows, max_cols)

    advisory = None
    if rows * cols > large_grid_threshold:
        advisory = (
            f"Large grid detected: {rows}×{cols} = {rows * cols} cells. "
            "Consider chunked processing."
        )
        logger.warning(advisory)

    return ElevationGrid(values=values, advisory=advisory)


def _validate_numeric_array(raw: np.ndarray) -> np.ndarray:
    if raw.ndim != 2:
        raise InvalidGridError(f"Grid must be 2D, got shape {raw.shape}")
    if raw.shape[0] == 0:
        raise InvalidGridError("Grid cannot be empty")
    if raw.shape[1] == 0:
        raise InvalidGridError("Grid rows cannot be empty")

    values = np.array(raw, dtype=np.float64)
    nan_cells = np.argwhere(np.isnan(values))
    if len(nan_cells):
        i, j = (int(v) for v in nan_cells[0])
        raise NonNumericCellError(i, j, raw[i, j].item())
    return values


def _is_row(value: Any) -> bool:
    return isinstance(value, (Sequence, np.ndarray)) and not isinstance(
        value, (str, bytes)
    )


def _coerce_rows(raw: Any) -> np.ndarray:
    if raw is None or not _is_row(raw):
        raise InvalidGridError("Grid must be a non-empty 2D array")
    if len(raw) == 0:
        raise InvalidGridError("Grid cannot be empty")

    first = raw[0]
    if not _is_row(first):
        raise InvalidGridError("Row 0 must be an array", row=0)
    cols = len(first)
    if cols == 0:
        raise InvalidGridError("Grid rows cannot be empty")

    values = np.empty((len(raw), cols), dtype=np.float64)
    for i, row in enumerate(raw):
        if not _is_row(row):
            raise InvalidGridError(f"Row {i} must be an array", row=i)
        if len(row) != cols:
            raise InvalidGridError(
                f"All rows must have the same length. "
                f"Row {i} has {len(row)} columns, expected {cols}",
                row=i,
                actual_length=len(row),
                expected_length=cols,
            )
        for j, cell in enumerate(row):
            values[i, j] = coerce_cell(cell, i, j)

    return values
