"""
Drainage analysis entry point.

Runs the full single-grid pipeline:

    raw grid + options
        -> validate_grid            (ElevationGrid)
        -> analyze_dual_boundary    (two traversals + intersection)
        -> compute_statistics       (optional)
        -> trace_flow_paths         (optional)
        -> AnalysisResult

Example:
    from src.drainage.analysis import analyze_water_flow

    result = analyze_water_flow([[1, 2], [2, 1]])
    result.coordinates()          # [(0, 1), (1, 0)]
    payload = result.to_dict()    # JSON-ready dict
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from src import config
from src.drainage.dual_boundary import FlowCell, analyze_dual_boundary
from src.drainage.errors import FlowAnalysisError, InvalidBoundaryError, InvalidGridError
from src.drainage.grid import BoundaryEdge, BoundaryGroup, validate_grid
from src.drainage.paths import FlowPath, trace_flow_paths
from src.drainage.statistics import FlowStatistics, compute_statistics

logger = logging.getLogger(__name__)

GROUP_A_NAME = "groupA"
GROUP_B_NAME = "groupB"

# Wire-format option keys (and the original ocean names) -> field names
_OPTION_ALIASES = {
    "groupAEdges": "group_a_edges",
    "groupBEdges": "group_b_edges",
    "pacificEdges": "group_a_edges",
    "atlanticEdges": "group_b_edges",
    "includeStats": "include_stats",
    "includePaths": "include_paths",
    "maxPaths": "max_paths",
    "parallelTraversal": "parallel_traversal",
}

_OPTION_FIELDS = {
    "group_a_edges",
    "group_b_edges",
    "include_stats",
    "include_paths",
    "max_paths",
    "parallel_traversal",
}


def _normalize_edges(name: str, edges: Any) -> Tuple[BoundaryEdge, ...]:
    if isinstance(edges, (str, BoundaryEdge)):
        edges = [edges]
    if edges is None:
        edges = []
    # dedupe, keep caller order
    parsed = tuple(dict.fromkeys(BoundaryEdge.parse(e) for e in edges))
    if not parsed:
        raise InvalidBoundaryError(
            f"Boundary group '{name}' must contain at least one edge", value=[]
        )
    return parsed


@dataclass
class AnalysisOptions:
    """Per-request analysis configuration."""

    group_a_edges: Tuple[BoundaryEdge, ...] = config.DEFAULT_GROUP_A_EDGES
    """Edges forming the first drainage target (default: top, left)."""

    group_b_edges: Tuple[BoundaryEdge, ...] = config.DEFAULT_GROUP_B_EDGES
    """Edges forming the second drainage target (default: bottom, right)."""

    include_stats: bool = True
    """Attach a FlowStatistics record to the result."""

    include_paths: bool = False
    """Reconstruct drainage routes for each flow cell."""

    max_paths: Optional[int] = config.DEFAULT_MAX_PATHS
    """Maximum number of flow cells to trace routes for (None = all)."""

    parallel_traversal: bool = False
    """Run the two boundary traversals on separate threads."""

    def __post_init__(self):
        self.group_a_edges = _normalize_edges(GROUP_A_NAME, self.group_a_edges)
        self.group_b_edges = _normalize_edges(GROUP_B_NAME, self.group_b_edges)
        self.include_stats = bool(self.include_stats)
        self.include_paths = bool(self.include_paths)
        self.parallel_traversal = bool(self.parallel_traversal)

        if self.max_paths is not None:
            if isinstance(self.max_paths, bool) or not isinstance(self.max_paths, int):
                raise FlowAnalysisError(
                    f"max_paths must be a positive integer or None, got {self.max_paths!r}",
                    value=self.max_paths,
                )
            if self.max_paths < 1:
                raise FlowAnalysisError(
                    f"max_paths must be a positive integer or None, got {self.max_paths}",
                    value=self.max_paths,
                )

    @property
    def group_a(self) -> BoundaryGroup:
        return BoundaryGroup(GROUP_A_NAME, frozenset(self.group_a_edges))

    @property
    def group_b(self) -> BoundaryGroup:
        return BoundaryGroup(GROUP_B_NAME, frozenset(self.group_b_edges))

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the effective-configuration record."""
        return {
            "groupAEdges": [edge.value for edge in self.group_a_edges],
            "groupBEdges": [edge.value for edge in self.group_b_edges],
            "includeStats": self.include_stats,
            "includePaths": self.include_paths,
            "maxPaths": self.max_paths,
            "parallelTraversal": self.parallel_traversal,
        }

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "AnalysisOptions":
        """
        Deserialize from a dictionary.

        Accepts camelCase wire keys, the ``pacificEdges``/``atlanticEdges``
        aliases, and snake_case field names. Unknown keys are ignored.
        """
        kwargs = {}
        for key, value in (data or {}).items():
            name = _OPTION_ALIASES.get(key, key)
            if name in _OPTION_FIELDS:
                kwargs[name] = value
        return cls(**kwargs)


@dataclass
class AnalysisRequest:
    """A grid plus the options to analyze it with."""

    grid: Any
    options: AnalysisOptions = field(default_factory=AnalysisOptions)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AnalysisRequest":
        """
        Deserialize from ``{"grid": ..., "options": {...}}``.

        Option keys may also sit at the top level next to ``grid``.
        """
        option_data = {k: v for k, v in data.items() if k not in ("grid", "options")}
        option_data.update(data.get("options") or {})
        return cls(grid=data.get("grid"), options=AnalysisOptions.from_dict(option_data))


@dataclass(frozen=True)
class AnalysisMetadata:
    """Provenance of one analysis."""

    rows: int
    cols: int
    algorithm: str
    timestamp: str
    processing_time_ms: float
    reach_a_size: int
    reach_b_size: int
    intersection_size: int
    effective_config: Dict[str, Any]
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "gridDimensions": {"rows": self.rows, "cols": self.cols},
            "algorithm": self.algorithm,
            "timestamp": self.timestamp,
            "processingTimeMs": self.processing_time_ms,
            "reachA_size": self.reach_a_size,
            "reachB_size": self.reach_b_size,
            "intersectionSize": self.intersection_size,
            "effectiveConfig": self.effective_config,
            "warnings": list(self.warnings),
        }


@dataclass(frozen=True)
class AnalysisResult:
    """Flow cells plus optional statistics/paths and metadata."""

    cells: List[FlowCell]
    metadata: AnalysisMetadata
    stats: Optional[FlowStatistics] = None
    paths: Optional[List[FlowPath]] = None

    def coordinates(self) -> List[Tuple[int, int]]:
        """(row, col) of every flow cell, sorted."""
        return [(cell.row, cell.col) for cell in self.cells]

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        result: Dict[str, Any] = {"cells": [cell.to_dict() for cell in self.cells]}
        if self.stats is not None:
            result["stats"] = self.stats.to_dict()
        if self.paths is not None:
            result["paths"] = [path.to_dict() for path in self.paths]
        result["metadata"] = self.metadata.to_dict()
        return result


def _resolve_options(
    options: Union[AnalysisOptions, Mapping[str, Any], None]
) -> AnalysisOptions:
    if options is None:
        return AnalysisOptions()
    if isinstance(options, AnalysisOptions):
        return options
    return AnalysisOptions.from_dict(options)


def analyze_water_flow(
    grid: Any,
    options: Union[AnalysisOptions, Mapping[str, Any], None] = None,
) -> AnalysisResult:
    """
    Find the cells that drain to both boundary groups.

    Validation runs before any traversal, so a bad grid fails atomically with
    a typed FlowAnalysisError and no partial result.

    Args:
        grid: Raw grid (nested sequences or 2D numpy array)
        options: AnalysisOptions, or a dict accepted by AnalysisOptions.from_dict

    Returns:
        AnalysisResult with flow cells sorted by (row, col)

    Raises:
        FlowAnalysisError: Invalid grid or options
    """
    options = _resolve_options(options)
    if grid is None:
        raise InvalidGridError("Grid data is required")

    start = time.perf_counter()
    elevation_grid = validate_grid(grid)
    rows, cols = elevation_grid.shape
    logger.info("Starting drainage analysis for %dx%d grid", rows, cols)

    dual = analyze_dual_boundary(
        elevation_grid,
        options.group_a,
        options.group_b,
        parallel=options.parallel_traversal,
    )
    elapsed_ms = round((time.perf_counter() - start) * 1000.0, 3)

    stats = None
    if options.include_stats:
        stats = compute_statistics(
            elevation_grid, dual.reach_a, dual.reach_b, dual.flow_cells, elapsed_ms
        )

    paths = None
    if options.include_paths:
        paths = trace_flow_paths(
            dual.reach_a, dual.reach_b, dual.flow_cells, max_paths=options.max_paths
        )

    warnings = [elevation_grid.advisory] if elevation_grid.advisory else []
    metadata = AnalysisMetadata(
        rows=rows,
        cols=cols,
        algorithm=config.ALGORITHM_ID,
        timestamp=datetime.now(timezone.utc).isoformat(),
        processing_time_ms=elapsed_ms,
        reach_a_size=dual.reach_a.size,
        reach_b_size=dual.reach_b.size,
        intersection_size=dual.intersection_size,
        effective_config=options.to_dict(),
        warnings=warnings,
    )

    logger.info(
        "Completed drainage analysis in %.3f ms: %d/%d flow cells",
        elapsed_ms,
        dual.intersection_size,
        rows * cols,
    )

    return AnalysisResult(cells=dual.flow_cells, metadata=metadata, stats=stats, paths=paths)


def analyze_request(request: Union[AnalysisRequest, Mapping[str, Any]]) -> AnalysisResult:
    """Run analyze_water_flow on an AnalysisRequest (or its dict form)."""
    if not isinstance(request, AnalysisRequest):
        request = AnalysisRequest.from_dict(request)
    return analyze_water_flow(request.grid, request.options)
