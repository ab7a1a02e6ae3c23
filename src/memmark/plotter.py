"""
Memory chart rendering for memmark CSV files.

Reads a memmark CSV with Polars, keeps the KiB memory columns that carry at
least one value, and draws them as lines over time with Plotly Express. HTML
output is always available; static image formats go through Kaleido and fall
back to HTML next to the requested path when Kaleido is missing.

Chart failures never affect a run: every entry point logs a warning and
returns False instead of raising.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional

# Third-party library imports
import plotly.express as px
import plotly.graph_objects as go
import polars as pl

from .models.runtime import METRIC_FIELDS

logger = logging.getLogger(__name__)

# Memory columns charted, with their legend labels. mapped_regions is a
# count rather than a size and is left out.
CHART_COLUMNS: Dict[str, str] = {
    "rss_kib": "RSS",
    "vsz_kib": "VSZ",
    "swap_kib": "Swap",
    "pss_kib": "PSS",
    "phys_footprint_kib": "Physical footprint",
}

HTML_SUFFIXES = (".html", ".htm")


def load_samples(csv_path: Path) -> pl.DataFrame:
    """
    Read a memmark CSV, typing every metric column as nullable Int64.

    Empty fields (metrics that were not measured) become nulls.
    """
    return pl.read_csv(
        csv_path,
        schema_overrides={
            "unix_ms": pl.Int64,
            "root_pid": pl.Int64,
            "pid_count": pl.Int64,
            **{name: pl.Int64 for name in METRIC_FIELDS},
        },
    )


def charted_columns(df: pl.DataFrame) -> List[str]:
    """Return the chart columns that are present and hold at least one value."""
    return [
        name
        for name in CHART_COLUMNS
        if name in df.columns and df[name].null_count() < df.height
    ]


def summarize_peaks(df: pl.DataFrame) -> Dict[str, Optional[int]]:
    """Peak value of each chart column; None for columns with no values."""
    peaks: Dict[str, Optional[int]] = {}
    for name in CHART_COLUMNS:
        if name in df.columns:
            peaks[name] = df[name].max()
        else:
            peaks[name] = None
    return peaks


def build_figure(df: pl.DataFrame, title: str = "memmark") -> Optional[go.Figure]:
    """
    Build a line chart of the memory columns against wall-clock time.

    Returns:
        The figure, or None when there is nothing to plot.
    """
    columns = charted_columns(df)
    if df.is_empty() or not columns:
        return None

    long_df = (
        df.sort("unix_ms")
        .with_columns(pl.from_epoch("unix_ms", time_unit="ms").alias("Time"))
        .select(["Time", *columns])
        .unpivot(index="Time", on=columns, variable_name="Metric", value_name="KiB")
        .drop_nulls("KiB")
        .with_columns(pl.col("Metric").replace(CHART_COLUMNS))
    )

    fig = px.line(
        long_df.to_pandas(),  # Plotly Express works on pandas frames.
        x="Time",
        y="KiB",
        color="Metric",
        title=title,
        labels={"Time": "Time (UTC)", "KiB": "Memory (KiB)"},
    )

    if "rss_kib" in columns:
        peak_rss = df["rss_kib"].max()
        fig.add_hline(
            y=peak_rss,
            line={"color": "gray", "dash": "dot"},
            annotation_text=f"peak RSS {peak_rss} KiB",
            annotation_position="top left",
        )

    fig.update_layout(
        legend_title_text="Metric",
        xaxis_title="Time (UTC)",
        yaxis_title="Memory (KiB)",
    )
    return fig


def save_figure(fig: go.Figure, output_path: Path) -> Path:
    """
    Write the figure to ``output_path``.

    HTML paths are written directly. Any other suffix is exported as a static
    image through Kaleido; if that fails, an HTML file with the same stem is
    written instead.

    Returns:
        The path actually written.
    """
    if output_path.suffix.lower() in HTML_SUFFIXES:
        fig.write_html(output_path)
        return output_path

    try:
        fig.write_image(output_path, width=1200, height=600)
        return output_path
    except Exception as e_kaleido:
        fallback_path = output_path.with_suffix(".html")
        logger.warning(
            f"Failed to save static chart to {output_path} (Kaleido might be missing or "
            f"misconfigured): {e_kaleido}. Writing {fallback_path} instead. "
            f"To enable image export, install Kaleido: `pip install memmark[export]`"
        )
        fig.write_html(fallback_path)
        return fallback_path


def generate_chart(csv_path: Path, output_path: Path, title: str = "memmark") -> bool:
    """
    Render a chart for a memmark CSV file.

    Args:
        csv_path: CSV written by memmark.
        output_path: Destination; ``.html`` for interactive output, any
            image suffix Kaleido supports otherwise.
        title: Chart title.

    Returns:
        True when the requested file was written, False otherwise.
    """
    csv_path = Path(csv_path)
    output_path = Path(output_path)

    if not csv_path.is_file() or csv_path.stat().st_size == 0:
        logger.warning(f"No chart: {csv_path} is missing or empty")
        return False

    try:
        df = load_samples(csv_path)
        fig = build_figure(df, title=title)
        if fig is None:
            logger.warning(f"No chart: {csv_path} has no memory samples")
            return False
        written = save_figure(fig, output_path)
    except Exception as e:
        logger.warning(f"Failed to render chart from {csv_path}: {type(e).__name__}: {e}")
        return False

    logger.info(f"Chart saved to: {written}")
    return written == output_path
