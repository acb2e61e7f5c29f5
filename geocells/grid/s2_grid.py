"""
S2 quad-tree grid for the geocells toolkit.

Wraps s2sphere cell ids as Cell values. Every cell has exactly four
children that partition it; levels run from 0 (cube faces) to 30.
"""

from typing import List, Optional

import s2sphere
from shapely.geometry import Point, Polygon

from ..common import config, get_logger, InvalidLevel, NoParent
from .base import Cell, GridAdapter

logger = get_logger("grid.s2")

EARTH_RADIUS_KM = 6371.0088
MAX_LEVEL = 30
NUM_FACES = 6


class S2Grid(GridAdapter):
    """S2 cells as a GridAdapter."""

    name = "s2"
    max_level = MAX_LEVEL
    cell_styles = ("long", "token", "quad")

    def __init__(
        self,
        descent_margin: Optional[float] = None,
        densify_step_deg: Optional[float] = None,
    ):
        """
        Initialize the S2 grid.

        Args:
            descent_margin: Region scale used when pruning descent
            densify_step_deg: Max great-circle step when tracing cell edges
        """
        self.descent_margin = descent_margin or config.grid.s2_descent_margin
        self.densify_step_deg = densify_step_deg or config.grid.densify_step_deg
        self.logger = logger

    def _cell_id(self, cell: Cell) -> s2sphere.CellId:
        self._check(cell)
        return s2sphere.CellId(cell.token)

    def _wrap(self, cell_id: s2sphere.CellId) -> Cell:
        return Cell(self.name, cell_id.id(), cell_id.level())

    def roots(self) -> List[Cell]:
        return [
            self._wrap(s2sphere.CellId.from_face_pos_level(face, 0, 0))
            for face in range(NUM_FACES)
        ]

    def children(self, cell: Cell) -> List[Cell]:
        cell_id = self._cell_id(cell)
        if cell_id.is_leaf():
            raise InvalidLevel(cell.level + 1, self.max_level, self.name)

        children = []
        child = cell_id.child_begin()
        end = cell_id.child_end()
        while child.id() != end.id():
            children.append(self._wrap(child))
            child = child.next()
        return children

    def parent(self, cell: Cell) -> Cell:
        cell_id = self._cell_id(cell)
        if cell_id.is_face():
            raise NoParent(cell)
        return self._wrap(cell_id.parent())

    def boundary(self, cell: Cell) -> Polygon:
        s2_cell = s2sphere.Cell(self._cell_id(cell))
        vertices = [
            s2sphere.LatLng.from_point(s2_cell.get_vertex(k)) for k in range(4)
        ]
        return Polygon([(v.lng().degrees, v.lat().degrees) for v in vertices])

    def centroid(self, cell: Cell) -> Point:
        center = self._cell_id(cell).to_lat_lng()
        return Point(center.lng().degrees, center.lat().degrees)

    def cell_at(self, lng: float, lat: float, level: int) -> Cell:
        self.validate_level(level)
        leaf = s2sphere.CellId.from_lat_lng(s2sphere.LatLng.from_degrees(lat, lng))
        return self._wrap(leaf.parent(level))

    def cell_area_km2(self, cell: Cell) -> float:
        s2_cell = s2sphere.Cell(self._cell_id(cell))
        return s2_cell.exact_area() * EARTH_RADIUS_KM**2

    def parse_cell(self, text: str) -> Cell:
        """
        Decode an S2 cell.

        Accepts a decimal 64-bit id (more than 16 digits), a hex token
        ("89c25") or a quad path ("4/00101323333202": face, then one child
        position per level).
        """
        text = text.strip()
        if "/" in text:
            return self._parse_quad(text)
        if text.isdigit() and len(text) > 16:
            cell_id = s2sphere.CellId(int(text))
        else:
            try:
                cell_id = s2sphere.CellId.from_token(text)
            except ValueError as e:
                raise ValueError(f"Invalid S2 cell token: {text}") from e
        if not cell_id.is_valid():
            raise ValueError(f"Invalid S2 cell: {text}")
        return self._wrap(cell_id)

    def _parse_quad(self, text: str) -> Cell:
        face_str, _, path = text.partition("/")
        if not face_str.isdigit() or int(face_str) >= NUM_FACES:
            raise ValueError(f"Invalid S2 face in quad path: {text}")
        if len(path) > self.max_level or any(ch not in "0123" for ch in path):
            raise ValueError(f"Invalid S2 quad path: {text}")

        cell_id = s2sphere.CellId.from_face_pos_level(int(face_str), 0, 0)
        for ch in path:
            child = cell_id.child_begin()
            for _ in range(int(ch)):
                child = child.next()
            cell_id = child
        return self._wrap(cell_id)

    def format_cell(self, cell: Cell, style: Optional[str] = None) -> str:
        style = self._check_style(style)
        cell_id = self._cell_id(cell)
        if style == "long":
            return str(cell_id.id())
        if style == "token":
            return cell_id.to_token()
        return self._format_quad(cell_id)

    @staticmethod
    def _format_quad(cell_id: s2sphere.CellId) -> str:
        raw = cell_id.id()
        face = raw >> 61
        positions = "".join(
            str((raw >> (2 * (MAX_LEVEL - k) + 1)) & 3)
            for k in range(1, cell_id.level() + 1)
        )
        return f"{face}/{positions}"
