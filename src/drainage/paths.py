"""
Flow-path reconstruction.

Each traversal records which cell discovered every reachable cell. Because
the traversal only ever steps onto cells at the same or higher elevation,
following those parent links from any reachable cell walks downhill (never
uphill) until it reaches a seed on the group's boundary. That chain is a
concrete route water can take from the cell to that boundary.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from src import config
from src.drainage.dual_boundary import FlowCell
from src.drainage.traversal import NO_PARENT, ReachabilitySet


@dataclass(frozen=True)
class FlowPath:
    """Drainage routes from one flow cell to each boundary group."""

    cell: FlowCell
    to_group_a: List[Tuple[int, int]]
    to_group_b: List[Tuple[int, int]]

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "coordinate": self.cell.coordinate,
            "toGroupA": [list(rc) for rc in self.to_group_a],
            "toGroupB": [list(rc) for rc in self.to_group_b],
        }


def trace_to_boundary(
    reach: ReachabilitySet, row: int, col: int
) -> List[Tuple[int, int]]:
    """
    Follow parent links from (row, col) to the boundary seed.

    Returns:
        Coordinates from the starting cell to a boundary cell, inclusive

    Raises:
        ValueError: If the cell is not in the reachability set
    """
    if (row, col) not in reach:
        raise ValueError(f"Cell ({row},{col}) is not reachable from {reach.group.name}")

    cols = reach.mask.shape[1]
    path = [(row, col)]
    flat_idx = reach.parent[row * cols + col]
    while flat_idx != NO_PARENT:
        r, c = divmod(int(flat_idx), cols)
        path.append((r, c))
        flat_idx = reach.parent[flat_idx]
    return path


def trace_flow_paths(
    reach_a: ReachabilitySet,
    reach_b: ReachabilitySet,
    flow_cells: List[FlowCell],
    max_paths: Optional[int] = config.DEFAULT_MAX_PATHS,
) -> List[FlowPath]:
    """
    Trace routes to both boundary groups for each flow cell.

    Args:
        reach_a: Reachability set of the first group
        reach_b: Reachability set of the second group
        flow_cells: Cells reachable from both groups
        max_paths: Trace at most this many cells (None = all), in flow-cell order

    Returns:
        List of FlowPath, one per traced flow cell
    """
    selected = flow_cells if max_paths is None else flow_cells[:max_paths]
    return [
        FlowPath(
            cell=cell,
            to_group_a=trace_to_boundary(reach_a, cell.row, cell.col),
            to_group_b=trace_to_boundary(reach_b, cell.row, cell.col),
        )
        for cell in selected
    ]
