"""
Coverage, efficiency, and per-boundary reachability statistics.
"""

from dataclasses import dataclass
from typing import Any, Dict, Sized

from src import config
from src.drainage.grid import ElevationGrid
from src.drainage.traversal import ReachabilitySet


@dataclass(frozen=True)
class FlowStatistics:
    """Summary metrics for one analysis."""

    total_cells: int
    flow_cells: int
    coverage: float
    processing_time_ms: float
    cells_per_ms: int
    complexity_label: str
    group_a_reachable: int
    group_b_reachable: int
    intersection: int
    a_only_percent: float
    b_only_percent: float
    both_percent: float

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "totalCells": self.total_cells,
            "flowCells": self.flow_cells,
            "coverage": self.coverage,
            "processingTimeMs": self.processing_time_ms,
            "efficiency": {
                "cellsPerMs": self.cells_per_ms,
                "complexityLabel": self.complexity_label,
            },
            "oceanReachability": {
                "groupA": self.group_a_reachable,
                "groupB": self.group_b_reachable,
                "intersection": self.intersection,
                "aOnlyPercent": self.a_only_percent,
                "bOnlyPercent": self.b_only_percent,
                "bothPercent": self.both_percent,
            },
        }


def compute_statistics(
    grid: ElevationGrid,
    reach_a: ReachabilitySet,
    reach_b: ReachabilitySet,
    flow_cells: Sized,
    elapsed_ms: float,
    precision: int = config.STATS_PRECISION,
) -> FlowStatistics:
    """
    Derive statistics from traversal outputs.

    Ratios are fractions of the total cell count, rounded to ``precision``
    decimals. When the elapsed time rounds to zero the analysis is treated
    as instantaneous and ``cells_per_ms`` reports the total cell count.

    Args:
        grid: The analyzed grid
        reach_a: Reachability set of the first group
        reach_b: Reachability set of the second group
        flow_cells: Cells reachable from both groups
        elapsed_ms: Processing time in milliseconds

    Returns:
        FlowStatistics
    """
    rows, cols = grid.shape
    total_cells = rows * cols
    n_flow = len(flow_cells)
    elapsed_ms = round(float(elapsed_ms), 3)

    if elapsed_ms > 0:
        cells_per_ms = int(round(total_cells / elapsed_ms))
    else:
        cells_per_ms = total_cells

    coverage = round(n_flow / total_cells, precision)

    return FlowStatistics(
        total_cells=total_cells,
        flow_cells=n_flow,
        coverage=coverage,
        processing_time_ms=elapsed_ms,
        cells_per_ms=cells_per_ms,
        complexity_label=f"O({rows} × {cols}) = O({total_cells})",
        group_a_reachable=reach_a.size,
        group_b_reachable=reach_b.size,
        intersection=n_flow,
        a_only_percent=round((reach_a.size - n_flow) / total_cells, precision),
        b_only_percent=round((reach_b.size - n_flow) / total_cells, precision),
        both_percent=coverage,
    )
