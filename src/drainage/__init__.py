"""
Dual-boundary drainage analysis package.

Core functionality:
- validate_grid for normalizing tabular input into an ElevationGrid
- traverse_boundary for border-seeded reachability (numba BFS kernel)
- analyze_water_flow for the full single-grid pipeline
- run_batch for ordered, failure-isolated batch analysis
"""

from .grid import BoundaryEdge, BoundaryGroup, ElevationGrid, validate_grid
from .traversal import ReachabilitySet, traverse_boundary
from .dual_boundary import FlowCell, analyze_dual_boundary
from .statistics import FlowStatistics, compute_statistics
from .paths import FlowPath, trace_flow_paths
from .analysis import (
    AnalysisOptions,
    AnalysisRequest,
    AnalysisResult,
    analyze_request,
    analyze_water_flow,
)
from .batch import BatchItemResult, BatchResult, run_batch
from .errors import (
    FlowAnalysisError,
    InvalidGridError,
    NonNumericCellError,
    GridSizeExceededError,
    InvalidBoundaryError,
    BatchSizeExceededError,
    ItemAnalysisError,
)

__all__ = [
    "BoundaryEdge",
    "BoundaryGroup",
    "ElevationGrid",
    "validate_grid",
    "ReachabilitySet",
    "traverse_boundary",
    "FlowCell",
    "analyze_dual_boundary",
    "FlowStatistics",
    "compute_statistics",
    "FlowPath",
    "trace_flow_paths",
    "AnalysisOptions",
    "AnalysisRequest",
    "AnalysisResult",
    "analyze_request",
    "analyze_water_flow",
    "BatchItemResult",
    "BatchResult",
    "run_batch",
    "FlowAnalysisError",
    "InvalidGridError",
    "NonNumericCellError",
    "GridSizeExceededError",
    "InvalidBoundaryError",
    "BatchSizeExceededError",
    "ItemAnalysisError",
]
