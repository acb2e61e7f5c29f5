"""
Bounding-box partitioning of polygons.

The geometry is approximated by its bounding box, which is divided into a
grid of rectangles whose corners are interpolated along great circles. Only
rectangles overlapping the geometry are kept.
"""

import math
from typing import List, Optional

from shapely.geometry import Polygon, box
from shapely.geometry.base import BaseGeometry
from shapely.prepared import prep

from ..common import get_logger, EmptyGeometry
from .model import BoundingBox
from .nvec import lerp

logger = get_logger("geometry.split")


def partition_region(
    geometry: BaseGeometry,
    edge_proportion: float,
    area_threshold: Optional[float] = None,
) -> List[Polygon]:
    """
    Approximately partition a geometry into uniform rectangles.

    Args:
        geometry: Geometry to partition
        edge_proportion: Rectangle edge length relative to the bounding box
            edge; 0.5 gives 4 rectangles, 0.3 gives 16 (the last row and
            column are truncated at the box). Values >= 1.0 give the box.
        area_threshold: Keep a rectangle only when at least this fraction of
            its area overlaps the geometry. 1.0 keeps interior rectangles only.
            Without it any intersection is enough.

    Returns:
        Rectangles ordered south to north, then west to east
    """
    if geometry.is_empty:
        raise EmptyGeometry("splitting", geometry.geom_type)
    if not edge_proportion > 0:
        raise ValueError(f"Edge proportion must be positive, got {edge_proportion}")
    if area_threshold is not None and not (0.0 <= area_threshold <= 1.0):
        raise ValueError(f"Area threshold must be in [0, 1], got {area_threshold}")

    bbox = BoundingBox.from_geometry(geometry)
    # c3 -- c2
    # |     |
    # c0 -- c1
    c0, c1, c2, c3 = bbox.corners()
    steps = max(1, math.ceil(1.0 / edge_proportion - 1e-9))
    bounds = [min(1.0, i * edge_proportion) for i in range(steps + 1)]

    prepared = prep(geometry)
    partitions: List[Polygon] = []

    for fx_lo, fx_hi in zip(bounds, bounds[1:]):
        # Lines across the box at the lower and upper sweep positions.
        lower = (lerp(fx_lo, c0, c3), lerp(fx_lo, c1, c2))
        upper = (lerp(fx_hi, c0, c3), lerp(fx_hi, c1, c2))

        for fy_lo, fy_hi in zip(bounds, bounds[1:]):
            p_lo = lerp(fy_lo, *lower)
            p_hi = lerp(fy_hi, *upper)
            partition = box(
                min(p_lo[0], p_hi[0]),
                min(p_lo[1], p_hi[1]),
                max(p_lo[0], p_hi[0]),
                max(p_lo[1], p_hi[1]),
            )

            if area_threshold is None:
                if prepared.intersects(partition):
                    partitions.append(partition)
            elif partition.area > 0:
                overlap = geometry.intersection(partition).area / partition.area
                if overlap >= area_threshold:
                    partitions.append(partition)

    logger.debug(
        f"Split into {len(partitions)} of {(len(bounds) - 1) ** 2} rectangles",
        extra={"edge_proportion": edge_proportion, "area_threshold": area_threshold},
    )
    return partitions
