"""
H3 hexagonal grid for the geocells toolkit.

Wraps H3 cell indexes as Cell values. Cells have 7 children (6 under
pentagons) that do not exactly partition the parent, so descent uses a
wider pruning margin than the S2 grid.
"""

import h3
from typing import List, Optional
from shapely.geometry import Polygon, Point

from ..common import config, get_logger, InvalidLevel, NoParent
from .base import Cell, GridAdapter

logger = get_logger("grid.h3")

MAX_RESOLUTION = 15


class H3Grid(GridAdapter):
    """H3 cells as a GridAdapter."""

    name = "h3"
    max_level = MAX_RESOLUTION
    cell_styles = ("hex", "octal", "binary")

    def __init__(
        self,
        descent_margin: Optional[float] = None,
        densify_step_deg: Optional[float] = None,
    ):
        """
        Initialize the H3 grid.

        Args:
            descent_margin: Region scale used when pruning descent
            densify_step_deg: Max great-circle step when tracing cell edges
        """
        self.descent_margin = descent_margin or config.grid.h3_descent_margin
        self.densify_step_deg = densify_step_deg or config.grid.densify_step_deg
        self.logger = logger

    def _wrap(self, index: str) -> Cell:
        return Cell(self.name, index, h3.get_resolution(index))

    def _index(self, cell: Cell) -> str:
        self._check(cell)
        return cell.token

    def roots(self) -> List[Cell]:
        return [self._wrap(index) for index in sorted(h3.get_res0_cells())]

    def children(self, cell: Cell) -> List[Cell]:
        index = self._index(cell)
        if cell.level >= self.max_level:
            raise InvalidLevel(cell.level + 1, self.max_level, self.name)
        return [
            self._wrap(child)
            for child in sorted(h3.cell_to_children(index, cell.level + 1))
        ]

    def parent(self, cell: Cell) -> Cell:
        index = self._index(cell)
        if cell.level == 0:
            raise NoParent(cell)
        return self._wrap(h3.cell_to_parent(index, cell.level - 1))

    def boundary(self, cell: Cell) -> Polygon:
        """
        Polygon from the vertices of an H3 cell.

        This will be a hexagon in most cases, except for the pentagons on
        icosahedron vertices and cells with distortion vertices.
        """
        return Polygon([(lng, lat) for lat, lng in h3.cell_to_boundary(self._index(cell))])

    def centroid(self, cell: Cell) -> Point:
        lat, lng = h3.cell_to_latlng(self._index(cell))
        return Point(lng, lat)

    def cell_at(self, lng: float, lat: float, level: int) -> Cell:
        self.validate_level(level)
        return self._wrap(h3.latlng_to_cell(lat, lng, level))

    def cell_area_km2(self, cell: Cell) -> float:
        return h3.cell_area(self._index(cell), unit="km^2")

    def is_pentagon(self, cell: Cell) -> bool:
        return h3.is_pentagon(self._index(cell))

    def parse_cell(self, text: str) -> Cell:
        """
        Decode an H3 cell.

        Accepts the usual 15-character hex string or a decimal integer index.
        """
        text = text.strip().lower()
        index = text
        try:
            if text.isdigit():
                index = h3.int_to_str(int(text))
            valid = h3.is_valid_cell(index)
        except (ValueError, OverflowError) as e:
            raise ValueError(f"Invalid H3 cell: {text}") from e
        if not valid:
            raise ValueError(f"Invalid H3 cell: {text}")
        return self._wrap(index)

    def format_cell(self, cell: Cell, style: Optional[str] = None) -> str:
        style = self._check_style(style)
        index = self._index(cell)
        if style == "hex":
            return index
        value = h3.str_to_int(index)
        if style == "octal":
            return format(value, "o")
        return format(value, "b")
