"""
Error taxonomy for drainage analysis.

Every error raised by the engine derives from FlowAnalysisError and carries a
stable ``code`` so that callers (an HTTP layer, a CLI) can map it to a status
without parsing messages.
"""

from typing import Any, Dict, Optional


class FlowAnalysisError(ValueError):
    """Base class for all drainage analysis failures."""

    code = "FLOW_ANALYSIS_ERROR"

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to an error payload."""
        return {
            "error": self.message,
            "code": self.code,
            "details": {k: _plain(v) for k, v in self.details.items()},
        }


class InvalidGridError(FlowAnalysisError):
    """Raised when the grid is missing, empty, or not rectangular."""

    code = "INVALID_GRID"

    def __init__(
        self,
        message: str,
        row: Optional[int] = None,
        actual_length: Optional[int] = None,
        expected_length: Optional[int] = None,
    ):
        details = {}
        if row is not None:
            details = {
                "row": row,
                "actual_length": actual_length,
                "expected_length": expected_length,
            }
        super().__init__(message, **details)
        self.row = row
        self.actual_length = actual_length
        self.expected_length = expected_length


class NonNumericCellError(FlowAnalysisError):
    """Raised when a cell value cannot be coerced to a number."""

    code = "NON_NUMERIC_CELL"

    def __init__(self, row: int, col: int, value: Any):
        super().__init__(
            f"Invalid numeric value at position ({row},{col}): {value!r}",
            row=row,
            col=col,
            value=value,
        )
        self.row = row
        self.col = col
        self.value = value


class GridSizeExceededError(FlowAnalysisError):
    """Raised when the grid exceeds the hard row/column ceiling."""

    code = "GRID_SIZE_EXCEEDED"

    def __init__(self, rows: int, cols: int, max_rows: int, max_cols: int):
        super().__init__(
            f"Grid too large: {rows}×{cols}. "
            f"Maximum supported size is {max_rows}×{max_cols}",
            rows=rows,
            cols=cols,
            max_rows=max_rows,
            max_cols=max_cols,
        )
        self.rows = rows
        self.cols = cols
        self.max_rows = max_rows
        self.max_cols = max_cols


class InvalidBoundaryError(FlowAnalysisError):
    """Raised for an unknown boundary edge name or an empty boundary group."""

    code = "INVALID_BOUNDARY"

    def __init__(self, message: str, value: Any = None):
        super().__init__(message, value=value)
        self.value = value


class BatchSizeExceededError(FlowAnalysisError):
    """Raised when a batch is empty or holds more items than allowed."""

    code = "BATCH_SIZE_EXCEEDED"

    def __init__(self, count: int, limit: int):
        if count == 0:
            message = "Batch must contain at least one item"
        else:
            message = f"Batch size limited to {limit} items per request, got {count}"
        super().__init__(message, count=count, limit=limit)
        self.count = count
        self.limit = limit


class ItemAnalysisError(FlowAnalysisError):
    """
    Failure of a single batch item.

    Wraps the underlying error together with the item index. Only ever
    recorded inside a BatchResult; run_batch never raises it.
    """

    code = "ITEM_ANALYSIS_FAILED"

    def __init__(self, index: int, cause: BaseException):
        super().__init__(
            f"Item {index} failed: {cause}",
            index=index,
            cause_code=error_code(cause),
        )
        self.index = index
        self.cause = cause

    @property
    def cause_message(self) -> str:
        """Message of the wrapped error."""
        return str(self.cause)


def error_code(error: BaseException) -> str:
    """Return the machine-readable code for any exception."""
    if isinstance(error, FlowAnalysisError):
        return error.code
    return "INTERNAL_ERROR"


def _plain(value: Any) -> Any:
    # details may hold arbitrary user input (e.g. the offending cell value)
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    return repr(value)
