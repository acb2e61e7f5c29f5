"""
Geometry utilities for the geocells toolkit.

This package provides the geometry model (WKT, bounding boxes, ring winding),
great-circle interpolation, ear-clipping triangulation and bounding-box splits.
"""

from .model import (
    BoundingBox,
    parse_wkt,
    to_wkt,
    iter_polygons,
    as_polygon,
    ring_coords,
    signed_area,
    is_ccw,
    oriented,
    vertex_count,
)
from .nvec import lerp
from .triangulate import Triangle, triangulate, triangulate_polygon
from .split import partition_region

__all__ = [
    "BoundingBox",
    "parse_wkt",
    "to_wkt",
    "iter_polygons",
    "as_polygon",
    "ring_coords",
    "signed_area",
    "is_ccw",
    "oriented",
    "vertex_count",
    "lerp",
    "Triangle",
    "triangulate",
    "triangulate_polygon",
    "partition_region",
]
