"""
Command-line interface for the single-cell size trajectory viewer.

Usage:
    cellsize-viewer datasets [--organism NAME] [--catalog datasets.yaml]
    cellsize-viewer inspect path/or/url.csv
    cellsize-viewer stats path/or/url.csv [--experiment NAME] [--output stats.csv]
    cellsize-viewer preview path/or/url.csv --output preview.png [--series 0] [--zoom 0.5] [--pan 120]
    cellsize-viewer gui [path/or/url.csv]
"""

from __future__ import annotations

import argparse
import logging
import math
import sys
from pathlib import Path
from typing import Optional, Sequence

from pydantic import ValidationError

from .catalog import find_dataset, list_datasets, load_default_catalog
from .config import PlotConfig, ViewerConfig, load_viewer_config
from .engine import ViewerEngine
from .exporters import export_cell_statistics_csv, export_viewport_png
from .fetch import is_remote, resolve_dataset_location

Logger = logging.getLogger(__name__)


def configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(message)s")


def add_shared_source_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "source",
        type=str,
        help="CSV file path, http(s) URL, or a dataset id from the catalog.",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cellsize-viewer",
        description="Browse single-cell size trajectory datasets.",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging.")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML file with plot settings and a datasets list.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    datasets_parser = subparsers.add_parser("datasets", help="List datasets in the catalog.")
    datasets_parser.add_argument("--organism", type=str, default=None, help="Only list this organism.")
    datasets_parser.add_argument(
        "--catalog",
        type=Path,
        default=None,
        help="Catalog YAML (defaults to CELLSIZE_CATALOG or metadata/datasets.yaml).",
    )

    inspect_parser = subparsers.add_parser(
        "inspect",
        help="Load a dataset and print its series without rendering.",
    )
    add_shared_source_argument(inspect_parser)

    stats_parser = subparsers.add_parser(
        "stats",
        help="Derive per-cell generation time, log-size change and growth rate.",
    )
    add_shared_source_argument(stats_parser)
    stats_parser.add_argument("--experiment", type=str, default=None, help="Experiment to summarize.")
    stats_parser.add_argument("--output", type=Path, default=None, help="Write summaries to this CSV file.")

    preview_parser = subparsers.add_parser(
        "preview",
        help="Render one series at a given zoom/pan to a PNG image.",
    )
    add_shared_source_argument(preview_parser)
    preview_parser.add_argument("--output", type=Path, required=True, help="Path of the PNG to write.")
    preview_parser.add_argument("--series", type=int, default=0, help="Series index (default 0).")
    preview_parser.add_argument("--zoom", type=float, default=None, help="Zoom factor applied after reset.")
    preview_parser.add_argument("--pan", type=float, default=None, help="Pan by this many pixels.")
    preview_parser.add_argument("--dpi", type=int, default=100, help="Image resolution (default 100).")

    gui_parser = subparsers.add_parser("gui", help="Launch the interactive viewer.")
    gui_parser.add_argument(
        "source",
        type=str,
        nargs="?",
        help="Optional CSV path, URL or dataset id to open on startup.",
    )

    return parser


def _load_config(args: argparse.Namespace) -> ViewerConfig:
    if args.config is not None:
        return load_viewer_config(args.config)
    return ViewerConfig()


def _resolve_source(source: str, config: ViewerConfig) -> str:
    """Map a catalog id to its file; otherwise prefer a local copy of the file."""
    if not is_remote(source) and not Path(source).exists():
        try:
            source = find_dataset(config.catalog, source).primary_file
        except KeyError:
            try:
                source = find_dataset(load_default_catalog(), source).primary_file
            except KeyError:
                pass
    return resolve_dataset_location(source)


def _load_engine(args: argparse.Namespace, plot: Optional[PlotConfig] = None) -> Optional[ViewerEngine]:
    config = _load_config(args)
    engine = ViewerEngine(plot or config.plot)
    source = _resolve_source(args.source, config)
    if not engine.load_series(source):
        Logger.error("%s", engine.get_status_message())
        return None
    Logger.info("%s", engine.get_status_message())
    return engine


def summarize_dataset(engine: ViewerEngine) -> str:
    dataset = engine.dataset
    if dataset is None:
        return "No dataset loaded"
    lines = [
        f"Dataset: {dataset.source}",
        f"  Points: {len(dataset.points)} | rejected rows: {dataset.rejected}",
        f"  Series ({len(dataset.series)}):",
    ]
    for idx, entry in enumerate(dataset.series):
        lines.append(f"    {idx}. {entry.label} ({entry.point_count} points)")
    return "\n".join(lines)


def datasets_command(args: argparse.Namespace) -> int:
    try:
        if args.catalog is not None:
            catalog = load_default_catalog(args.catalog)
        elif args.config is not None:
            catalog = load_viewer_config(args.config).catalog
        else:
            catalog = load_default_catalog()
    except Exception as exc:  # noqa: BLE001
        Logger.error("Failed to load catalog: %s", exc)
        return 1

    entries = list_datasets(catalog, args.organism)
    if not entries:
        Logger.warning("No datasets found.")
        return 0
    for entry in entries:
        details = " | ".join(part for part in (entry.organism, entry.method) if part)
        print(f"{entry.id}: {entry.display_name}" + (f" [{details}]" if details else ""))
    return 0


def inspect_command(args: argparse.Namespace) -> int:
    engine = _load_engine(args)
    if engine is None:
        return 1
    print(summarize_dataset(engine))
    return 0


def stats_command(args: argparse.Namespace) -> int:
    engine = _load_engine(args)
    if engine is None:
        return 1

    dataset = engine.dataset
    experiment = args.experiment
    if experiment is not None and all(entry.key.experiment != experiment for entry in dataset.series):
        Logger.error("Experiment not found: %s", experiment)
        return 2

    result = engine.cell_statistics(experiment)
    invalid = sum(1 for summary in result.summaries if not summary.is_valid)
    Logger.info(
        "Computed statistics for %d cells (%d skipped with < 2 points, %d without a valid growth rate)",
        len(result.summaries),
        result.skipped,
        invalid,
    )

    if args.output is not None:
        export_cell_statistics_csv(result.summaries, args.output)
        Logger.info("Statistics written to %s", args.output)
        return 0

    print("lineage,cell,tau,phi,lambda")
    for summary in result.summaries:
        lam = "NA" if not math.isfinite(summary.lambda_) else f"{summary.lambda_:.6g}"
        print(f"{summary.lineage},{summary.cell},{summary.tau:.6g},{summary.phi:.6g},{lam}")
    return 0


def preview_command(args: argparse.Namespace) -> int:
    engine = _load_engine(args)
    if engine is None:
        return 1

    try:
        if args.series != 0:
            engine.select_series(args.series)
        if args.zoom is not None:
            if not engine.zoom(args.zoom):
                Logger.warning("Zoom factor %s refused (window would collapse)", args.zoom)
        if args.pan is not None:
            engine.pan(args.pan)
        output = export_viewport_png(engine, args.output, dpi=args.dpi)
    except (IndexError, ValueError) as exc:
        Logger.error("Preview failed: %s", exc)
        return 1

    Logger.info("%s", engine.zoom_info())
    Logger.info("Preview image saved to %s", output)
    return 0


def run_gui_with_args(args: argparse.Namespace) -> int:
    config = _load_config(args)
    source = _resolve_source(args.source, config) if args.source else None
    from .gui import run as run_gui  # Local import to avoid Qt initialization unless needed

    run_gui(config, initial_source=source)
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    try:
        if args.command == "datasets":
            return datasets_command(args)
        if args.command == "inspect":
            return inspect_command(args)
        if args.command == "stats":
            return stats_command(args)
        if args.command == "preview":
            return preview_command(args)
        if args.command == "gui":
            return run_gui_with_args(args)
    except FileNotFoundError as exc:
        Logger.error("%s", exc)
        return 2
    except ValidationError as exc:
        Logger.error("Invalid configuration: %s", exc)
        return 1

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
