"""
Border-seeded reachability traversal.

Instead of asking, for every cell, whether water can run downhill from it to a
boundary (one search per cell), the search is reversed: start from every cell
on the boundary and walk *uphill* into the grid. A neighbor is reachable when
its elevation is greater than or equal to the current cell's, i.e. water
standing on it could flow down into the current cell. Each cell is enqueued at
most once, so one traversal costs O(rows × cols).

Cells are keyed by their flat index ``row * cols + col`` throughout; the queue
is a preallocated integer array rather than a container of tuples.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Tuple

import numpy as np
from numba import jit

from src.drainage.grid import BoundaryEdge, BoundaryGroup, ElevationGrid

logger = logging.getLogger(__name__)

# 4-connected neighbors: up, down, left, right
ROW_OFFSETS = np.array([-1, 1, 0, 0], dtype=np.int64)
COL_OFFSETS = np.array([0, 0, -1, 1], dtype=np.int64)

NO_PARENT = -1


@dataclass(frozen=True, eq=False)
class ReachabilitySet:
    """
    Cells reachable from one boundary group.

    Attributes:
        group: The boundary group the traversal was seeded from
        mask: Boolean array (rows, cols); True = reachable
        parent: Flat index of the cell that discovered each cell
            (NO_PARENT for seeds and unreached cells)
        size: Number of reachable cells
    """

    group: BoundaryGroup
    mask: np.ndarray
    parent: np.ndarray
    size: int

    def __len__(self) -> int:
        return self.size

    def __contains__(self, cell: Tuple[int, int]) -> bool:
        row, col = cell
        rows, cols = self.mask.shape
        return 0 <= row < rows and 0 <= col < cols and bool(self.mask[row, col])

    def keys(self) -> np.ndarray:
        """Flat indices of reachable cells, ascending."""
        return np.flatnonzero(self.mask)

    def coordinates(self) -> List[Tuple[int, int]]:
        """Reachable (row, col) pairs in row-major order."""
        return [(int(r), int(c)) for r, c in np.argwhere(self.mask)]


def boundary_seed_indices(
    rows: int, cols: int, edges: Iterable[BoundaryEdge]
) -> np.ndarray:
    """
    Flat indices of every cell along the given edges.

    Corner cells shared by two edges appear once, at their first occurrence.

    Examples:
        >>> boundary_seed_indices(2, 3, [BoundaryEdge.TOP, BoundaryEdge.LEFT]).tolist()
        [0, 1, 2, 3]
    """
    parts = []
    for edge in edges:
        if edge is BoundaryEdge.TOP:
            parts.append(np.arange(cols, dtype=np.int64))
        elif edge is BoundaryEdge.BOTTOM:
            parts.append((rows - 1) * cols + np.arange(cols, dtype=np.int64))
        elif edge is BoundaryEdge.LEFT:
            parts.append(np.arange(rows, dtype=np.int64) * cols)
        elif edge is BoundaryEdge.RIGHT:
            parts.append(np.arange(rows, dtype=np.int64) * cols + (cols - 1))

    if not parts:
        return np.empty(0, dtype=np.int64)

    seeds = np.concatenate(parts)
    _, first = np.unique(seeds, return_index=True)
    return seeds[np.sort(first)]


@jit(nopython=True, nogil=True, cache=True)
def _reverse_flow_bfs_jit(
    elevation: np.ndarray,
    queue: np.ndarray,
    queue_end: int,
    reachable: np.ndarray,
    parent: np.ndarray,
    row_offsets: np.ndarray,
    col_offsets: np.ndarray,
) -> int:
    """
    JIT-compiled multi-source BFS walking uphill from the seeded queue.

    Parameters
    ----------
    elevation : np.ndarray (float64)
        Elevation grid
    queue : np.ndarray (int64)
        Preallocated queue of size rows*cols, seeds in queue[:queue_end]
    queue_end : int
        Number of seeds
    reachable : np.ndarray (bool)
        Reachability mask, seeds already marked (modified in-place)
    parent : np.ndarray (int64)
        Flat parent index per cell (modified in-place)

    Returns
    -------
    int
        Total number of cells enqueued (= reachable cells)
    """
    rows, cols = elevation.shape
    queue_start = 0

    while queue_start < queue_end:
        flat_idx = queue[queue_start]
        queue_start += 1

        i = flat_idx // cols
        j = flat_idx % cols
        current_elev = elevation[i, j]

        for k in range(4):
            ni = i + row_offsets[k]
            nj = j + col_offsets[k]

            if 0 <= ni < rows and 0 <= nj < cols:
                # Marked at enqueue time so no cell enters the queue twice
                if not reachable[ni, nj] and elevation[ni, nj] >= current_elev:
                    reachable[ni, nj] = True
                    parent[ni * cols + nj] = flat_idx
                    queue[queue_end] = ni * cols + nj
                    queue_end += 1

    return queue_end


def traverse_boundary(grid: ElevationGrid, group: BoundaryGroup) -> ReachabilitySet:
    """
    Compute every cell that can drain to the given boundary group.

    Seeds are all cells on the group's edges. Expansion is breadth-first over
    4-connected neighbors, admitting a neighbor iff its elevation is >= the
    current cell's. Equal elevations always propagate, so a flat grid is
    entirely reachable.

    Args:
        grid: Validated elevation grid
        group: Boundary group to seed from

    Returns:
        ReachabilitySet for this group. All arrays are freshly allocated, so
        concurrent traversals over the same grid do not interfere.
    """
    rows, cols = grid.shape
    n_cells = rows * cols

    seeds = boundary_seed_indices(rows, cols, group.ordered_edges)

    reachable = np.zeros((rows, cols), dtype=np.bool_)
    parent = np.full(n_cells, NO_PARENT, dtype=np.int64)
    queue = np.empty(n_cells, dtype=np.int64)

    queue[: len(seeds)] = seeds
    reachable.reshape(-1)[seeds] = True

    size = _reverse_flow_bfs_jit(
        grid.values, queue, len(seeds), reachable, parent, ROW_OFFSETS, COL_OFFSETS
    )

    logger.debug(
        "Group %s (%s): %d seeds, %d/%d cells reachable",
        group.name,
        ",".join(group.edge_names()),
        len(seeds),
        size,
        n_cells,
    )

    return ReachabilitySet(group=group, mask=reachable, parent=parent, size=int(size))
