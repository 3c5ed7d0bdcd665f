"""Output exporters for viewer artefacts.

Provides helpers for writing per-cell statistics tables and static PNG
renderings of the current viewport.
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Optional

from .core.domain import format_tick
from .core.statistics import CellSummary

if TYPE_CHECKING:
    from .engine import ViewerEngine

STATISTICS_FIELDS = ["lineage", "cell", "tau", "phi", "lambda", "initial_size", "final_size"]
AXIS_COLOR = "#587370"
LINE_COLOR = "#1f6f6a"


def _number(value: float) -> str:
    return repr(float(value))


def export_cell_statistics_csv(summaries: Iterable[CellSummary], output_path: Path) -> None:
    """
    Write one row per cell summary. Invalid growth rates are written as ``nan``.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.DictWriter(handle, fieldnames=STATISTICS_FIELDS)
        writer.writeheader()
        for summary in summaries:
            writer.writerow(
                {
                    "lineage": summary.lineage,
                    "cell": summary.cell,
                    "tau": _number(summary.tau),
                    "phi": _number(summary.phi),
                    "lambda": _number(summary.lambda_),
                    "initial_size": _number(summary.initial_size),
                    "final_size": _number(summary.final_size),
                }
            )


def export_viewport_png(
    engine: "ViewerEngine",
    output_path: Path,
    dpi: int = 100,
    time_units: str = "units",
    size_units: str = "units",
) -> Path:
    """
    Render the engine's visible series to a PNG of the configured plot size.

    Drawing happens in pixel space using the engine's coordinate mapping, so
    the image matches what an interactive renderer would show.
    """
    import matplotlib

    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    visible = engine.get_visible_series()
    if visible is None:
        raise ValueError("No series selected; load a dataset first")

    area = engine.area
    fig = plt.figure(figsize=(area.width / dpi, area.height / dpi), dpi=dpi)
    ax = fig.add_axes((0.0, 0.0, 1.0, 1.0))
    ax.set_xlim(0, area.width)
    ax.set_ylim(area.height, 0)  # pixel space: y grows downward
    ax.axis("off")

    left, right = area.x_range
    bottom, top = area.y_range
    ax.plot([left, right], [bottom, bottom], color=AXIS_COLOR, linewidth=1)
    ax.plot([left, left], [top, bottom], color=AXIS_COLOR, linewidth=1)

    for tick in engine.get_ticks("x"):
        px = engine.to_pixel(tick, "x")
        ax.plot([px, px], [bottom, bottom + 6], color=AXIS_COLOR, linewidth=1)
        ax.text(px, bottom + 20, format_tick(tick), ha="center", va="bottom", fontsize=8)
    for tick in engine.get_ticks("y"):
        py = engine.to_pixel(tick, "y")
        ax.plot([left - 6, left], [py, py], color=AXIS_COLOR, linewidth=1)
        ax.text(left - 10, py + 4, format_tick(tick), ha="right", va="bottom", fontsize=8)

    ax.text(left + area.inner_width / 2, area.height - 10, f"Time ({time_units})", ha="center", fontsize=9)
    ax.text(
        18,
        area.margin_top + area.inner_height / 2,
        f"Size ({size_units})",
        ha="center",
        va="center",
        rotation=90,
        fontsize=9,
    )

    for trace in visible.cells:
        ax.plot(trace.pixels[:, 0], trace.pixels[:, 1], color=LINE_COLOR, linewidth=1.5, clip_on=True)

    ax.text(
        left,
        area.margin_top - 6,
        f"{visible.key.experiment} | lineage {visible.key.lineage} | {visible.point_count} points",
        fontsize=8,
    )

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    try:
        fig.savefig(output_path, dpi=dpi)
    finally:
        plt.close(fig)
    return output_path


def default_statistics_path(source: str, output_dir: Optional[Path] = None) -> Path:
    stem = Path(str(source).rsplit("/", 1)[-1]).stem or "dataset"
    safe = "".join(ch if ch.isalnum() or ch in ("-", "_") else "_" for ch in stem.strip().lower())
    base = Path(output_dir) if output_dir is not None else Path.cwd()
    return base / f"{safe or 'dataset'}_cell_statistics.csv"
