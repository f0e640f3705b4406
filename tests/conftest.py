"""Pytest configuration and fixtures for drainage analysis tests."""
import sys
from pathlib import Path

# Add project root to Python path for imports
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from collections import deque

import numpy as np
import pytest


# Worked example: 7 cells drain to both the top/left and bottom/right edges
FIVE_BY_FIVE = [
    [1, 2, 2, 3, 5],
    [3, 2, 3, 4, 4],
    [2, 4, 5, 3, 1],
    [6, 7, 1, 4, 5],
    [5, 1, 1, 2, 4],
]

FIVE_BY_FIVE_FLOW_CELLS = [(0, 4), (1, 3), (1, 4), (2, 2), (3, 0), (3, 1), (4, 0)]

MONOTONIC = [[1, 2, 3], [4, 5, 6], [7, 8, 9]]


@pytest.fixture
def five_by_five():
    """The 5x5 worked example grid."""
    return [row[:] for row in FIVE_BY_FIVE]


@pytest.fixture
def monotonic_grid():
    """3x3 grid increasing left-to-right and top-to-bottom."""
    return [row[:] for row in MONOTONIC]


@pytest.fixture
def rng():
    """Seeded random generator for reproducible random grids."""
    return np.random.default_rng(12345)


def brute_force_drains_to(grid, row, col, edges):
    """
    Reference check: can water starting at (row, col) reach one of ``edges``?

    Walks downhill (neighbor elevation <= current) from a single cell with a
    plain BFS. Quadratic overall, only for small test grids.
    """
    values = np.asarray(grid, dtype=float)
    rows, cols = values.shape
    seen = {(row, col)}
    queue = deque([(row, col)])
    while queue:
        r, c = queue.popleft()
        if ("top" in edges and r == 0) or ("bottom" in edges and r == rows - 1) \
                or ("left" in edges and c == 0) or ("right" in edges and c == cols - 1):
            return True
        for dr, dc in ((-1, 0), (1, 0), (0, -1), (0, 1)):
            nr, nc = r + dr, c + dc
            if 0 <= nr < rows and 0 <= nc < cols and (nr, nc) not in seen:
                if values[nr, nc] <= values[r, c]:
                    seen.add((nr, nc))
                    queue.append((nr, nc))
    return False


@pytest.fixture
def brute_force():
    """Reference per-cell drainage search."""
    return brute_force_drains_to
