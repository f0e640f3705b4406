"""
Analyze one or more elevation grids from local files.

Prints the analysis (or batch) result as JSON.

Usage:
    python examples/analyze_grid.py grid.json
    python examples/analyze_grid.py heights.csv --group-a top right --group-b bottom left
    python examples/analyze_grid.py a.json b.csv c.json --paths
"""

import json
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from src.drainage.analysis import AnalysisOptions, analyze_water_flow
from src.drainage.batch import run_batch
from src.drainage.data_loading import grid_from_sheet_values, load_grid_file
from src.drainage.errors import FlowAnalysisError
from src.utils.helpers import setup_logging


def main():
    import argparse

    parser = argparse.ArgumentParser(
        description="Find cells that drain to two groups of grid boundaries"
    )
    parser.add_argument("files", nargs="+", help="Grid files (.json, .csv, .tsv)")
    parser.add_argument(
        "--group-a",
        nargs="+",
        default=["top", "left"],
        help="Edges of the first boundary group",
    )
    parser.add_argument(
        "--group-b",
        nargs="+",
        default=["bottom", "right"],
        help="Edges of the second boundary group",
    )
    parser.add_argument(
        "--sheet",
        action="store_true",
        help="Treat input as spreadsheet cells (skip blanks, pad short rows)",
    )
    parser.add_argument("--paths", action="store_true", help="Include drainage routes")
    parser.add_argument("--no-stats", action="store_true", help="Omit statistics")
    parser.add_argument("--parallel", action="store_true", help="Run traversals in parallel")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--log-file", type=Path, help="Also write debug logs to this file")

    args = parser.parse_args()

    # Setup logging
    setup_logging(
        "src",
        level=logging.DEBUG if args.verbose else logging.INFO,
        log_file=args.log_file,
    )

    try:
        options = AnalysisOptions(
            group_a_edges=args.group_a,
            group_b_edges=args.group_b,
            include_stats=not args.no_stats,
            include_paths=args.paths,
            parallel_traversal=args.parallel,
        )

        grids = []
        for file in args.files:
            rows = load_grid_file(file)
            grids.append(grid_from_sheet_values(rows) if args.sheet else rows)

        if len(grids) == 1:
            output = analyze_water_flow(grids[0], options).to_dict()
        else:
            output = run_batch(grids, options, show_progress=True).to_dict()
    except FlowAnalysisError as e:
        print(json.dumps(e.to_dict(), indent=2), file=sys.stderr)
        return 1
    except (OSError, ValueError) as e:
        # missing or malformed grid files
        print(f"error: {e}", file=sys.stderr)
        return 1

    try:
        text = json.dumps(output, indent=2, allow_nan=False)
    except ValueError:
        print(
            "error: result contains infinite elevations, which JSON cannot represent",
            file=sys.stderr,
        )
        return 1

    print(text)
    return 0


if __name__ == "__main__":
    sys.exit(main())
