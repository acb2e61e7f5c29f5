"""
Geometry model for the geocells toolkit.

Geometries are shapely objects in (longitude, latitude) order. This module
adds WKT parsing/serialization, bounding boxes, ring winding helpers and
polygon iteration over composite geometries.
"""

from dataclasses import dataclass
from typing import Iterator, List, Sequence, Tuple

import shapely.wkt
from shapely.errors import ShapelyError
from shapely.geometry import (
    GeometryCollection,
    MultiPolygon,
    Polygon,
    box,
)
from shapely.geometry.base import BaseGeometry

Coord = Tuple[float, float]


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned bounding box in degrees."""

    min_lng: float
    min_lat: float
    max_lng: float
    max_lat: float

    @classmethod
    def from_bbox(cls, bbox: Sequence[float]) -> "BoundingBox":
        """Create BoundingBox from a [min_lng, min_lat, max_lng, max_lat] list."""
        if len(bbox) != 4:
            raise ValueError(
                "Bounding box must have 4 values: [min_lng, min_lat, max_lng, max_lat]"
            )
        if bbox[0] > bbox[2] or bbox[1] > bbox[3]:
            raise ValueError(
                "Invalid bounding box: min values must not exceed max values"
            )
        return cls(
            min_lng=bbox[0], min_lat=bbox[1], max_lng=bbox[2], max_lat=bbox[3]
        )

    @classmethod
    def from_geometry(cls, geometry: BaseGeometry) -> "BoundingBox":
        """Bounding box of a non-empty shapely geometry."""
        if geometry.is_empty:
            raise ValueError("Empty geometry has no bounding box")
        return cls.from_bbox(geometry.bounds)

    def to_polygon(self) -> Polygon:
        """Convert bounds to Shapely polygon."""
        return Polygon(
            [
                (self.min_lng, self.min_lat),
                (self.max_lng, self.min_lat),
                (self.max_lng, self.max_lat),
                (self.min_lng, self.max_lat),
                (self.min_lng, self.min_lat),
            ]
        )

    def center(self) -> Coord:
        """Get center point of the bounds as (lng, lat)."""
        center_lng = (self.min_lng + self.max_lng) / 2
        center_lat = (self.min_lat + self.max_lat) / 2
        return center_lng, center_lat

    @property
    def width(self) -> float:
        return self.max_lng - self.min_lng

    @property
    def height(self) -> float:
        return self.max_lat - self.min_lat

    @property
    def extent(self) -> float:
        """Largest side of the box."""
        return max(self.width, self.height)

    def corners(self) -> Tuple[Coord, Coord, Coord, Coord]:
        """Corners counter-clockwise from the lower left."""
        return (
            (self.min_lng, self.min_lat),
            (self.max_lng, self.min_lat),
            (self.max_lng, self.max_lat),
            (self.min_lng, self.max_lat),
        )


WORLD = box(-180.0, -90.0, 180.0, 90.0)


def parse_wkt(text: str) -> BaseGeometry:
    """
    Parse a WKT string into a shapely geometry.

    Raises:
        ValueError: if the text is not valid WKT
    """
    text = text.strip()
    if not text:
        raise ValueError("Empty WKT input")
    try:
        return shapely.wkt.loads(text)
    except ShapelyError as e:
        raise ValueError(f"Invalid WKT: {e}") from e


def to_wkt(geometry: BaseGeometry) -> str:
    """Serialize a geometry to WKT at full precision."""
    return geometry.wkt


def iter_polygons(geometry: BaseGeometry) -> Iterator[Polygon]:
    """Yield every polygon in a Polygon, MultiPolygon or nested collection."""
    if isinstance(geometry, Polygon):
        if not geometry.is_empty:
            yield geometry
    elif isinstance(geometry, (MultiPolygon, GeometryCollection)):
        for part in geometry.geoms:
            yield from iter_polygons(part)


def as_polygon(geometry: BaseGeometry) -> Polygon:
    """
    Narrow a geometry to a single polygon.

    A collection holding exactly one polygon is unwrapped.
    """
    polygons = list(iter_polygons(geometry))
    if len(polygons) != 1:
        raise ValueError(
            f"Expected a single polygon, got {geometry.geom_type} "
            f"with {len(polygons)} polygon(s)"
        )
    return polygons[0]


def ring_coords(ring) -> List[Coord]:
    """
    Ring vertices without the closing point and without repeated neighbours.

    Accepts a shapely LinearRing or any sequence of coordinate pairs.
    """
    coords = [(float(c[0]), float(c[1])) for c in getattr(ring, "coords", ring)]
    out: List[Coord] = []
    for c in coords:
        if not out or out[-1] != c:
            out.append(c)
    while len(out) > 1 and out[0] == out[-1]:
        out.pop()
    return out


def signed_area(coords: Sequence[Coord]) -> float:
    """Shoelace area; positive for counter-clockwise rings."""
    n = len(coords)
    total = 0.0
    for i in range(n):
        x1, y1 = coords[i]
        x2, y2 = coords[(i + 1) % n]
        total += x1 * y2 - x2 * y1
    return total / 2.0


def is_ccw(coords: Sequence[Coord]) -> bool:
    return signed_area(coords) > 0


def oriented(coords: Sequence[Coord], ccw: bool = True) -> List[Coord]:
    """Return the ring vertices wound in the requested direction."""
    coords = list(coords)
    if is_ccw(coords) != ccw:
        coords.reverse()
    return coords


def vertex_count(polygon: Polygon) -> int:
    """Number of distinct ring vertices across the outer ring and holes."""
    return len(ring_coords(polygon.exterior)) + sum(
        len(ring_coords(hole)) for hole in polygon.interiors
    )
