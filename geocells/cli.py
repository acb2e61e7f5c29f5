#!/usr/bin/env python3
"""
Command line interface for the geocells toolkit.

Handy geographic operations on S2 and H3 cells, polygons and random points.

Usage:
    geocells s2 cover -l 14 "POLYGON((...))"
    geocells h3 cover -l 9 -m centroid -f oneline < area.wkt
    geocells h3 compact 89283082803ffff,89283082807ffff
    geocells h3 uncompact -l 10 8828308281fffff
    geocells geom triangulate "POLYGON((...))"
    geocells rand --seed 7 point -n 100 -w "POLYGON((...))"
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from shapely.geometry import Point

from .common import get_logger, configure_logging, load_config, AppConfig, GeoCellsError
from .cover import ContainmentMode, Coverer, compact, cut, uncompact
from .geometry import parse_wkt, partition_region, triangulate
from .grid import CoverSet, GridAdapter, H3Grid, S2Grid
from .output import OutputFormat, format_cells, format_geometries
from .sampling import create_rng, sample_points

logger = get_logger("cli")

COVER_STYLES = ("uniform", "coarse")


def _add_format(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-f",
        "--format",
        type=OutputFormat,
        choices=list(OutputFormat),
        default=OutputFormat.CSV,
        help="csv prints one item per line; oneline merges them into a single line",
    )


def _add_wkt(parser: argparse.ArgumentParser, help_text: str) -> None:
    parser.add_argument(
        "wkt", nargs="?", default=None, help=f"{help_text} Reads stdin when omitted or '-'."
    )


def _add_cover_arguments(parser: argparse.ArgumentParser, grid_cls) -> None:
    _add_wkt(parser, "WKT geometry to cover.")
    parser.add_argument(
        "-l",
        "--level",
        type=int,
        help=f"Cell level [0, {grid_cls.max_level}] (default from configuration)",
    )
    parser.add_argument(
        "-m",
        "--mode",
        type=ContainmentMode.parse,
        default=ContainmentMode.FULL_COVER,
        help=(
            "full: every cell touching the geometry; centroid: cells whose centroid "
            "is inside; contains: cells lying entirely inside"
        ),
    )
    parser.add_argument(
        "-s",
        "--style",
        choices=COVER_STYLES,
        default="uniform",
        help="uniform: all cells at the requested level; coarse: stop at cells fully inside the geometry",
    )
    parser.add_argument(
        "--cell-format",
        choices=grid_cls.cell_styles,
        default=grid_cls.cell_styles[0],
        help="Encoding of the cell ids",
    )
    parser.add_argument(
        "-x", "--max-num-cells", type=int, help="Max number of cells to return"
    )
    parser.add_argument("--output", type=str, help="Also save the cells to a CSV file")
    _add_format(parser)


def _add_cut_arguments(parser: argparse.ArgumentParser, grid_cls) -> None:
    _add_wkt(parser, "WKT geometry to cut.")
    parser.add_argument(
        "-l",
        "--level",
        type=int,
        help=f"Cell level [0, {grid_cls.max_level}] (default from configuration)",
    )
    _add_format(parser)


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="geocells",
        description="Commandline tool for some handy geographic operations.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging")
    parser.add_argument("--config", type=str, help="Path to .env configuration file")

    commands = parser.add_subparsers(dest="command", required=True)

    # S2
    s2 = commands.add_parser("s2", help="Commands related to S2 cells.")
    s2_commands = s2.add_subparsers(dest="subcommand", required=True)
    _add_cover_arguments(s2_commands.add_parser("cover", help="Cover a geometry"), S2Grid)
    _add_cut_arguments(s2_commands.add_parser("cut", help="Cut a geometry by cells"), S2Grid)
    s2_poly = s2_commands.add_parser("cell-to-poly", help="Cell boundary as WKT")
    s2_poly.add_argument("cell", help="S2 cell id, token or face/quad path")

    # H3
    h3 = commands.add_parser("h3", help="Commands related to H3 cells.")
    h3_commands = h3.add_subparsers(dest="subcommand", required=True)
    _add_cover_arguments(h3_commands.add_parser("cover", help="Cover a geometry"), H3Grid)
    _add_cut_arguments(h3_commands.add_parser("cut", help="Cut a geometry by cells"), H3Grid)
    h3_poly = h3_commands.add_parser("cell-to-poly", help="Cell boundary as WKT")
    h3_poly.add_argument("cell", help="H3 cell index")

    for name, help_text in (
        ("compact", "Merge complete sibling sets into parents"),
        ("uncompact", "Expand cells down to a level"),
    ):
        sub = h3_commands.add_parser(name, help=help_text)
        sub.add_argument(
            "cells",
            nargs="*",
            help="Comma-separated H3 cell indices. Reads stdin when omitted.",
        )
        sub.add_argument(
            "--cell-format",
            choices=H3Grid.cell_styles,
            default=H3Grid.cell_styles[0],
            help="Encoding of the cell ids",
        )
        _add_format(sub)
        if name == "uncompact":
            sub.add_argument(
                "-l", "--level", type=int, required=True, help="Target resolution"
            )
            sub.add_argument(
                "--clamp",
                action="store_true",
                help="Pass cells finer than the target through instead of failing",
            )

    # Geometry
    geom = commands.add_parser("geom", help="General geometry commands.")
    geom_commands = geom.add_subparsers(dest="subcommand", required=True)
    split = geom_commands.add_parser("split", help="Split a geometry's bounding box")
    _add_wkt(split, "WKT geometry to subdivide.")
    split.add_argument(
        "-e",
        "--edge-proportion",
        type=float,
        required=True,
        help="Subdivision edge length relative to the bounding box; 0.5 gives 4 quadrants",
    )
    split.add_argument(
        "-t",
        "--threshold",
        type=float,
        help="Minimum fraction of each subdivision that must overlap the geometry",
    )
    _add_format(split)
    triangulate_parser = geom_commands.add_parser(
        "triangulate", help="Ear-clipping triangulation"
    )
    _add_wkt(triangulate_parser, "WKT polygon to triangulate.")
    _add_format(triangulate_parser)

    # Random
    rand = commands.add_parser("rand", help="Commands involving RNG.")
    rand.add_argument("--seed", type=int, default=None, help="Random seed to use")
    rand_commands = rand.add_subparsers(dest="subcommand", required=True)
    point = rand_commands.add_parser("point", help="Uniform random points")
    point.add_argument(
        "-w", "--wkt", type=str, help="Restrict samples to this WKT polygon"
    )
    point.add_argument(
        "-n", "--num-samples", type=int, default=None, help="Number of samples"
    )
    point.add_argument(
        "--seed", type=int, default=argparse.SUPPRESS, help="Random seed to use"
    )
    _add_format(point)

    return parser.parse_args(argv)


def _read_wkt(value: Optional[str]):
    if value is None or value == "-":
        value = sys.stdin.read()
    return parse_wkt(value)


def _read_cells(values: List[str], grid: GridAdapter):
    if not values:
        values = sys.stdin.read().split()
    tokens = [t for value in values for t in value.split(",") if t.strip()]
    return [grid.parse_cell(t) for t in tokens]


def _make_grid(name: str, settings: AppConfig) -> GridAdapter:
    if name == "s2":
        return S2Grid(
            descent_margin=settings.grid.s2_descent_margin,
            densify_step_deg=settings.grid.densify_step_deg,
        )
    return H3Grid(
        descent_margin=settings.grid.h3_descent_margin,
        densify_step_deg=settings.grid.densify_step_deg,
    )


def _default_level(name: str, settings: AppConfig) -> int:
    if name == "s2":
        return settings.grid.s2_default_level
    return settings.grid.h3_default_level


def save_cover_to_csv(cells: CoverSet, grid: GridAdapter, output_file: str) -> None:
    """Save a covering as a CSV table."""
    output_path = Path(output_file)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    cells.to_frame(grid).to_csv(output_path, index=False)
    logger.info(f"Cells saved to {output_path}")


def handle_grid_command(args: argparse.Namespace, settings: AppConfig) -> List[str]:
    """Commands shared by the s2 and h3 groups."""
    grid = _make_grid(args.command, settings)

    if args.subcommand == "cell-to-poly":
        cell = grid.parse_cell(args.cell)
        return format_geometries([grid.boundary(cell)], OutputFormat.CSV)

    if args.subcommand == "cover":
        level = args.level if args.level is not None else _default_level(args.command, settings)
        coverer = Coverer(
            grid,
            mode=args.mode,
            short_circuit=args.style == "coarse",
            relative_tolerance=settings.grid.relative_tolerance,
            max_workers=settings.grid.max_workers,
        )
        cells = coverer.cover(_read_wkt(args.wkt), level, max_cells=args.max_num_cells)
        if args.output:
            save_cover_to_csv(cells, grid, args.output)
        return format_cells((grid.format_cell(c, args.cell_format) for c in cells), args.format)

    if args.subcommand == "cut":
        level = args.level if args.level is not None else _default_level(args.command, settings)
        pieces = cut(
            _read_wkt(args.wkt),
            level,
            grid,
            relative_tolerance=settings.grid.relative_tolerance,
            max_workers=settings.grid.max_workers,
        )
        return format_geometries(pieces, args.format)

    if args.subcommand == "compact":
        cells = compact(_read_cells(args.cells, grid), grid)
        return format_cells((grid.format_cell(c, args.cell_format) for c in cells), args.format)

    if args.subcommand == "uncompact":
        cells = uncompact(_read_cells(args.cells, grid), args.level, grid, clamp=args.clamp)
        return format_cells((grid.format_cell(c, args.cell_format) for c in cells), args.format)

    raise ValueError(f"Unknown {args.command} command: {args.subcommand}")


def handle_geom_command(args: argparse.Namespace) -> List[str]:
    """Commands that operate primarily on geometries."""
    geometry = _read_wkt(args.wkt)

    if args.subcommand == "split":
        partitions = partition_region(geometry, args.edge_proportion, args.threshold)
        return format_geometries(partitions, args.format)

    triangles = [t.to_polygon() for t in triangulate(geometry)]
    return format_geometries(triangles, args.format)


def handle_rand_command(args: argparse.Namespace, settings: AppConfig) -> List[str]:
    """Commands involving RNG."""
    rng = create_rng(args.seed if args.seed is not None else settings.sampling.seed)
    num_samples = (
        args.num_samples if args.num_samples is not None else settings.sampling.num_samples
    )
    restrict = parse_wkt(args.wkt) if args.wkt else None
    points = sample_points(num_samples, rng, restrict)
    return format_geometries([Point(p) for p in points], args.format)


def main(argv: Optional[List[str]] = None) -> int:
    """Main execution function."""

    try:
        args = parse_arguments(argv)

        if args.config:
            load_dotenv(args.config, override=True)
        settings = load_config()

        configure_logging(
            settings.logging,
            level="DEBUG" if args.verbose else None,
            environment=settings.environment,
        )

        logger.debug(f"Running {args.command} {args.subcommand}")

        if args.command in ("s2", "h3"):
            lines = handle_grid_command(args, settings)
        elif args.command == "geom":
            lines = handle_geom_command(args)
        else:
            lines = handle_rand_command(args, settings)

        for line in lines:
            print(line)
        return 0

    except KeyboardInterrupt:
        print("Operation cancelled by user", file=sys.stderr)
        return 1
    except (GeoCellsError, ValueError, OSError) as e:
        logger.debug(f"{type(e).__name__}: {e}")
        print(f"ERROR: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
