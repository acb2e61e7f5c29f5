"""
Grid system capability interface.

A GridAdapter exposes the hierarchy of one grid system (roots, children,
parent, level) and the geometry of its cells (boundary, centroid). Covering,
cutting and compaction are written against this interface only.
"""

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Iterator, List, Optional, Sequence, Set, Tuple, Union

import pandas as pd
from shapely import affinity
from shapely.geometry import Point, Polygon
from shapely.geometry.base import BaseGeometry
from shapely.ops import unary_union

from ..common import config, InvalidLevel
from ..geometry.model import WORLD, Coord, ring_coords
from ..geometry.nvec import densify_edge


@dataclass(frozen=True, order=True)
class Cell:
    """Opaque grid cell identifier plus its level."""

    grid: str
    token: Union[int, str]
    level: int

    def __str__(self) -> str:
        return str(self.token)


@dataclass(frozen=True)
class CoverSet:
    """
    Set of cells in which no cell is an ancestor of another.

    Iteration is in sorted cell order; callers must not rely on anything
    beyond membership.
    """

    cells: FrozenSet[Cell] = field(default_factory=frozenset)

    @classmethod
    def from_cells(cls, cells: Iterable[Cell]) -> "CoverSet":
        return cls(frozenset(cells))

    def __iter__(self) -> Iterator[Cell]:
        return iter(sorted(self.cells))

    def __len__(self) -> int:
        return len(self.cells)

    def __contains__(self, cell: object) -> bool:
        return cell in self.cells

    def sorted(self) -> List[Cell]:
        return sorted(self.cells)

    def levels(self) -> Set[int]:
        return {cell.level for cell in self.cells}

    def to_frame(self, grid: "GridAdapter") -> pd.DataFrame:
        """
        Tabulate the cells.

        Returns:
            DataFrame with columns: cell, level, centroid_lat, centroid_lng, area_km2
        """
        rows = []
        for cell in self:
            centroid = grid.centroid(cell)
            rows.append(
                {
                    "cell": grid.format_cell(cell),
                    "level": cell.level,
                    "centroid_lat": centroid.y,
                    "centroid_lng": centroid.x,
                    "area_km2": grid.cell_area_km2(cell),
                }
            )
        return pd.DataFrame(
            rows,
            columns=["cell", "level", "centroid_lat", "centroid_lng", "area_km2"],
        )


class GridAdapter(ABC):
    """Capabilities of one hierarchical grid system."""

    name: str = ""
    max_level: int = 0
    cell_styles: Tuple[str, ...] = ()
    descent_margin: float = 1.0
    densify_step_deg: Optional[float] = None

    # Hierarchy

    @abstractmethod
    def roots(self) -> List[Cell]:
        """Level-0 cells."""

    @abstractmethod
    def children(self, cell: Cell) -> List[Cell]:
        """Direct children; raises InvalidLevel at the maximum level."""

    @abstractmethod
    def parent(self, cell: Cell) -> Cell:
        """Direct parent; raises NoParent for a root."""

    def level(self, cell: Cell) -> int:
        self._check(cell)
        return cell.level

    # Geometry

    @abstractmethod
    def boundary(self, cell: Cell) -> Polygon:
        """Polygon through the cell vertices in (lng, lat) order."""

    @abstractmethod
    def centroid(self, cell: Cell) -> Point:
        """Cell center as a (lng, lat) point."""

    @abstractmethod
    def cell_at(self, lng: float, lat: float, level: int) -> Cell:
        """Cell at the given level containing a position."""

    @abstractmethod
    def cell_area_km2(self, cell: Cell) -> float:
        """Area of the cell on the Earth's surface."""

    # Text encoding

    @abstractmethod
    def parse_cell(self, text: str) -> Cell:
        """Decode a textual cell identifier; raises ValueError when invalid."""

    @abstractmethod
    def format_cell(self, cell: Cell, style: Optional[str] = None) -> str:
        """Encode a cell in one of `cell_styles` (first one by default)."""

    # Helpers

    def validate_level(self, level: int) -> int:
        if not (0 <= level <= self.max_level):
            raise InvalidLevel(level, self.max_level, self.name)
        return level

    def _check(self, cell: Cell) -> None:
        if cell.grid != self.name:
            raise ValueError(f"{cell} belongs to grid {cell.grid}, not {self.name}")

    def _check_style(self, style: Optional[str]) -> str:
        style = style or self.cell_styles[0]
        if style not in self.cell_styles:
            raise ValueError(
                f"Unknown {self.name} cell format '{style}', "
                f"expected one of {list(self.cell_styles)}"
            )
        return style

    def __repr__(self) -> str:
        return f"{type(self).__name__}(descent_margin={self.descent_margin})"


def _unwrap(points: Sequence[Coord]) -> List[Coord]:
    """Shift longitudes so consecutive points never jump by more than 180."""
    out = [points[0]]
    for lng, lat in points[1:]:
        prev = out[-1][0]
        while lng - prev > 180.0:
            lng -= 360.0
        while lng - prev < -180.0:
            lng += 360.0
        out.append((lng, lat))
    return out


def planar_region(
    vertices: Sequence[Coord],
    step_deg: Optional[float] = None,
    scale: float = 1.0,
) -> BaseGeometry:
    """
    Planar (lng, lat) region of a spherical polygon given by its vertices.

    Edges are densified along great circles, longitudes are unwrapped across
    the antimeridian and a ring winding around a pole is closed through it.
    The result is optionally scaled about its centroid and folded back into
    the [-180, 180] x [-90, 90] window.
    """
    step_deg = step_deg or config.grid.densify_step_deg
    ring = ring_coords(vertices)
    points: List[Coord] = []
    for i, start in enumerate(ring):
        points.extend(densify_edge(start, ring[(i + 1) % len(ring)], step_deg))

    unwrapped = _unwrap(points)
    first_lng = unwrapped[0][0]
    closing = _unwrap([unwrapped[-1], points[0]])[1][0]
    winding = closing - first_lng

    coords = list(unwrapped)
    if abs(winding) > 180.0:
        mean_lat = sum(lat for _, lat in points) / len(points)
        pole = 90.0 if mean_lat > 0 else -90.0
        coords += [
            (closing, points[0][1]),
            (closing, pole),
            (first_lng, pole),
        ]

    polygon = Polygon(coords)
    if not polygon.is_valid:
        polygon = polygon.buffer(0)
    if scale != 1.0:
        polygon = affinity.scale(polygon, xfact=scale, yfact=scale, origin="centroid")

    min_lng, min_lat, max_lng, max_lat = polygon.bounds
    if min_lng >= -180.0 and max_lng <= 180.0 and min_lat >= -90.0 and max_lat <= 90.0:
        return polygon

    shifts = range(
        -360 * math.ceil((max_lng - 180.0) / 360.0),
        360 * math.ceil((-180.0 - min_lng) / 360.0) + 1,
        360,
    )
    pieces = [affinity.translate(polygon, xoff=dx) for dx in shifts]
    return unary_union(pieces).intersection(WORLD)


def cell_region(
    grid: GridAdapter, cell: Cell, scale: float = 1.0
) -> BaseGeometry:
    """Planar search region of a grid cell."""
    return planar_region(
        list(grid.boundary(cell).exterior.coords),
        step_deg=grid.densify_step_deg,
        scale=scale,
    )
