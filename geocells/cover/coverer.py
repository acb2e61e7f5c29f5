"""
Grid covering for the geocells toolkit.

Computes the set of grid cells at a target level that cover a geometry by
descending from the root cells with an explicit work stack. Works with any
GridAdapter.
"""

from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from typing import List, Optional

from shapely.geometry import GeometryCollection, Polygon
from shapely.geometry.base import BaseGeometry
from shapely.ops import unary_union
from shapely.prepared import prep

from ..common import (
    config,
    get_logger,
    TimedLogger,
    EmptyGeometry,
    log_cell_operation,
)
from ..geometry.model import BoundingBox, iter_polygons
from ..grid.base import Cell, CoverSet, GridAdapter, cell_region

logger = get_logger("cover.coverer")


class ContainmentMode(Enum):
    """Which level-L cells make it into a covering."""

    FULL_COVER = "full"
    CENTROID_CONTAINED = "centroid"
    CONTAINS_BOUNDARY = "contains"

    @classmethod
    def parse(cls, value: str) -> "ContainmentMode":
        """Parse a mode name; aliases follow the usual polyfill naming."""
        key = value.strip().lower().replace("_", "").replace("-", "")
        if key in ("full", "fullcover", "intersects", "intersectsboundary"):
            return cls.FULL_COVER
        if key in ("centroid", "containscentroid", "centroidcontained"):
            return cls.CENTROID_CONTAINED
        if key in ("contains", "containsboundary"):
            return cls.CONTAINS_BOUNDARY
        raise ValueError(
            f"Unknown containment mode '{value}', "
            "expected 'full', 'centroid' or 'contains'"
        )


class Coverer:
    """Covers geometries with the cells of one grid system."""

    def __init__(
        self,
        grid: GridAdapter,
        mode: ContainmentMode = ContainmentMode.FULL_COVER,
        short_circuit: bool = False,
        relative_tolerance: Optional[float] = None,
        max_workers: Optional[int] = None,
    ):
        """
        Initialize a coverer.

        Args:
            grid: Grid system to cover with
            mode: Containment policy for cells at the target level
            short_circuit: Accept cells fully inside the geometry without
                descending to the target level (FULL_COVER only); output is
                then no longer level-uniform
            relative_tolerance: Boundary tolerance as a fraction of the
                geometry extent (floored at one degree)
            max_workers: Thread fan-out across root cells
        """
        if short_circuit and mode is not ContainmentMode.FULL_COVER:
            raise ValueError("short_circuit is only defined for FULL_COVER")

        self.grid = grid
        self.mode = mode
        self.short_circuit = short_circuit
        self.relative_tolerance = (
            config.grid.relative_tolerance
            if relative_tolerance is None
            else relative_tolerance
        )
        self.max_workers = (
            config.grid.max_workers if max_workers is None else max_workers
        )
        self.logger = logger

    def cover(
        self, geometry: BaseGeometry, level: int, max_cells: Optional[int] = None
    ) -> CoverSet:
        """
        Cover a geometry at the given level.

        Args:
            geometry: Geometry in (lng, lat) degrees
            level: Target level / resolution
            max_cells: Keep at most this many cells (in sorted order)

        Returns:
            CoverSet of the accepted cells
        """
        self.grid.validate_level(level)
        if geometry.is_empty:
            raise EmptyGeometry("covering", geometry.geom_type)

        tolerance = self.relative_tolerance * max(
            BoundingBox.from_geometry(geometry).extent, 1.0
        )
        grown, target = _search_geometries(geometry, tolerance)
        search = prep(grown)
        exact = prep(target)

        with TimedLogger(
            self.logger,
            f"{self.grid.name} cover",
            cell_level=level,
            mode=self.mode.value,
        ) as timer:
            roots = self.grid.roots()
            if self.max_workers and self.max_workers > 1:
                with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                    results = list(
                        executor.map(
                            lambda root: self._descend(root, level, search, exact),
                            roots,
                        )
                    )
            else:
                results = [self._descend(root, level, search, exact) for root in roots]

            cells = sorted(cell for found in results for cell in found)
            if max_cells is not None and len(cells) > max_cells:
                self.logger.warning(
                    f"Covering truncated to {max_cells} of {len(cells)} cells",
                    extra={"max_cells": max_cells, "cell_count": len(cells)},
                )
                cells = cells[:max_cells]

            self.logger.info(
                f"Covered {geometry.geom_type} with {len(cells)} cells",
                extra=log_cell_operation(
                    "cover",
                    self.grid.name,
                    cells_in=len(roots),
                    cells_out=len(cells),
                    duration_ms=timer.elapsed_ms,
                    cell_level=level,
                ),
            )

        return CoverSet.from_cells(cells)

    def _descend(self, root: Cell, level: int, search, exact) -> List[Cell]:
        """Depth-first descent below one root cell."""
        accepted: List[Cell] = []
        stack = [root]

        while stack:
            cell = stack.pop()

            if cell.level >= level:
                if self._accept(cell, search, exact):
                    accepted.append(cell)
                continue

            region = cell_region(self.grid, cell, scale=self.grid.descent_margin)
            if not search.intersects(region):
                continue

            if self.short_circuit and exact.contains(cell_region(self.grid, cell)):
                accepted.append(cell)
                continue

            stack.extend(self.grid.children(cell))

        return accepted

    def _accept(self, cell: Cell, search, exact) -> bool:
        if self.mode is ContainmentMode.CENTROID_CONTAINED:
            return exact.contains(self.grid.centroid(cell))
        if self.mode is ContainmentMode.CONTAINS_BOUNDARY:
            return exact.contains(cell_region(self.grid, cell))
        return search.intersects(cell_region(self.grid, cell))


def _search_geometries(geometry: BaseGeometry, tolerance: float):
    """
    Geometry used for intersection tests (grown by the tolerance) and the
    one used for containment tests.

    Collections are flattened: relate predicates on mixed collections are
    not supported by every GEOS release.
    """
    if not isinstance(geometry, GeometryCollection):
        grown = geometry.buffer(tolerance) if tolerance > 0 else geometry
        return grown, geometry

    members = [m for m in geometry.geoms if not m.is_empty]
    if tolerance > 0:
        grown = unary_union([m.buffer(tolerance) for m in members])
    else:
        grown = unary_union(members)
    polygons = list(iter_polygons(geometry))
    target = unary_union(polygons) if polygons else Polygon()
    return grown, target


def cover(
    geometry: BaseGeometry,
    level: int,
    grid: GridAdapter,
    mode: ContainmentMode = ContainmentMode.FULL_COVER,
    short_circuit: bool = False,
    max_cells: Optional[int] = None,
    max_workers: Optional[int] = None,
) -> CoverSet:
    """Cover a geometry with the cells of a grid at the given level."""
    coverer = Coverer(
        grid, mode=mode, short_circuit=short_circuit, max_workers=max_workers
    )
    return coverer.cover(geometry, level, max_cells=max_cells)
