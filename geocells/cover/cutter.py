"""
Geometry cutting for the geocells toolkit.

Splits a geometry along the boundaries of the grid cells at a target level
that cover it, producing one piece per intersecting cell.
"""

from dataclasses import dataclass
from typing import List, Optional

import shapely
from shapely.geometry import GeometryCollection
from shapely.geometry.base import BaseGeometry, BaseMultipartGeometry
from shapely.ops import unary_union

from ..common import get_logger, TimedLogger, EmptyGeometry, log_cell_operation
from ..grid.base import Cell, GridAdapter, cell_region
from .coverer import ContainmentMode, Coverer

logger = get_logger("cover.cutter")


@dataclass(frozen=True)
class CellCut:
    """Single-part piece of a geometry lying inside one cell."""

    cell: Cell
    geometry: BaseGeometry


def _clip(geometry: BaseGeometry, region: BaseGeometry) -> List[BaseGeometry]:
    """Intersect a geometry with a cell region, member by member for collections."""
    if isinstance(geometry, GeometryCollection):
        pieces = []
        for member in geometry.geoms:
            pieces.extend(_clip(member, region))
        return pieces
    piece = geometry.intersection(region)
    dimension = shapely.get_dimensions(geometry)
    # Cells that only touch the geometry leave lower-dimensional slivers.
    if piece.is_empty or shapely.get_dimensions(piece) < dimension:
        return []
    if isinstance(piece, GeometryCollection):
        piece = unary_union(
            [p for p in piece.geoms if shapely.get_dimensions(p) == dimension]
        )
    # One piece per connected part.
    if isinstance(piece, BaseMultipartGeometry):
        return [p for p in piece.geoms if not p.is_empty]
    return [piece]


def cut_by_cell(
    geometry: BaseGeometry,
    level: int,
    grid: GridAdapter,
    relative_tolerance: Optional[float] = None,
    max_workers: Optional[int] = None,
) -> List[CellCut]:
    """
    Cut a geometry by the cells of a grid at the given level.

    Returns:
        One CellCut per connected part of each non-empty intersection, in
        cell order. A collection member yields its own pieces.
    """
    if geometry.is_empty:
        raise EmptyGeometry("cutting", geometry.geom_type)

    coverer = Coverer(
        grid,
        mode=ContainmentMode.FULL_COVER,
        short_circuit=False,
        relative_tolerance=relative_tolerance,
        max_workers=max_workers,
    )
    cells = coverer.cover(geometry, level)

    with TimedLogger(logger, f"{grid.name} cut", cell_level=level) as timer:
        cuts: List[CellCut] = []
        for cell in cells:
            region = cell_region(grid, cell)
            cuts.extend(CellCut(cell, piece) for piece in _clip(geometry, region))

        logger.info(
            f"Cut {geometry.geom_type} into {len(cuts)} pieces",
            extra=log_cell_operation(
                "cut",
                grid.name,
                cells_in=len(cells),
                cells_out=len(cuts),
                duration_ms=timer.elapsed_ms,
                cell_level=level,
            ),
        )
    return cuts


def cut(
    geometry: BaseGeometry,
    level: int,
    grid: GridAdapter,
    relative_tolerance: Optional[float] = None,
    max_workers: Optional[int] = None,
) -> List[BaseGeometry]:
    """Cut a geometry by grid cells, returning only the pieces."""
    cuts = cut_by_cell(geometry, level, grid, relative_tolerance, max_workers)
    return [c.geometry for c in cuts]
