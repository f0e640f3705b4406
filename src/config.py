"""Configuration module for the drainage analysis engine.

Centralizes grid limits, batch limits and analysis defaults.
"""

# Grid size ceiling (hard rejection above these)
MAX_GRID_ROWS = 10_000
MAX_GRID_COLS = 10_000

# Above this many cells the grid is still analyzed, but an advisory is raised
LARGE_GRID_CELL_THRESHOLD = 1_000_000

# Batch processing
MAX_BATCH_ITEMS = 10

# Default boundary groups (the "Pacific" and "Atlantic" sides)
DEFAULT_GROUP_A_EDGES = ("top", "left")
DEFAULT_GROUP_B_EDGES = ("bottom", "right")

# Flow-path reconstruction cap
DEFAULT_MAX_PATHS = 1000

# Reporting
ALGORITHM_ID = "border-seeded-bfs"
STATS_PRECISION = 4

# Default settings
DEFAULT_LOG_LEVEL = "INFO"
