"""Standalone command-line tool for charting memmark CSV files.

Re-renders the memory chart for a CSV written by memmark, for example after a
run that streamed to a file without ``--chart``, or to produce a different
output format. It also prints the peak of each memory column.

Usage examples:
  # Interactive chart next to the data
  python tools/plotter.py --csv memmark.csv --output memmark.html

  # Static image (requires kaleido: pip install memmark[export])
  python tools/plotter.py --csv memmark.csv --output memmark.png --title "nightly build"
"""

import argparse
import logging
import sys
from pathlib import Path

# Make the package importable when run from a source checkout.
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

import pandas as pd  # noqa: E402

from memmark.plotter import CHART_COLUMNS, generate_chart, load_samples, summarize_peaks  # noqa: E402

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    handlers=[logging.StreamHandler(sys.stderr)],
)
logger = logging.getLogger("PlotterTool")


def print_peak_summary(csv_path: Path) -> None:
    """Print a small table with the peak of every memory column."""
    peaks = summarize_peaks(load_samples(csv_path))
    summary = pd.DataFrame(
        [
            {"Metric": CHART_COLUMNS[name], "Peak (KiB)": value}
            for name, value in peaks.items()
            if value is not None
        ]
    )
    if summary.empty:
        logger.info("No memory values to summarize")
        return
    print(summary.to_string(index=False))


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Render a memory chart from a memmark CSV file.",
    )
    parser.add_argument("--csv", type=Path, required=True, help="CSV file written by memmark.")
    parser.add_argument(
        "--output",
        type=Path,
        help="Chart destination (.html, or .png/.svg/.pdf with kaleido). "
        "Defaults to the CSV path with an .html suffix.",
    )
    parser.add_argument("--title", type=str, default="memmark", help="Chart title.")
    parser.add_argument(
        "--no-summary", action="store_true", help="Do not print the peak summary table."
    )
    args = parser.parse_args()

    output_path = args.output or args.csv.with_suffix(".html")
    if not generate_chart(args.csv, output_path, title=args.title):
        return 1

    if not args.no_summary:
        print_peak_summary(args.csv)
    return 0


if __name__ == "__main__":
    sys.exit(main())
