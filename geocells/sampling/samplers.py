"""
Random point sampling for the geocells toolkit.

PolygonalSampler draws points uniformly over the area of a polygon without
rejection:

1. Triangulate the polygon and accumulate triangle areas once.
2. Draw a uniform value in [0, total area) and locate its triangle by binary
   search over the cumulative areas.
3. Draw two uniforms, fold them into the triangle when they sum past 1, and
   map them through the triangle's edge vectors.

SphereSampler draws points uniformly by solid angle over the whole sphere.
All randomness comes from a caller-supplied numpy Generator, so a given seed
and call sequence always reproduce the same points.
"""

from typing import List, Optional, Tuple

import numpy as np
from shapely.geometry.base import BaseGeometry

from ..common import config, get_logger, TimedLogger, EmptyGeometry
from ..geometry.triangulate import Triangle, triangulate

logger = get_logger("sampling.samplers")

MIN_LNG = -180.0
MAX_LNG = 180.0


def create_rng(seed: Optional[int] = None) -> np.random.Generator:
    """Seeded random source (the configured default seed when None)."""
    return np.random.default_rng(config.sampling.seed if seed is None else seed)


class SphereSampler:
    """Uniform points on the sphere."""

    def sample(self, rng: np.random.Generator, n: int) -> np.ndarray:
        """
        Draw n (lng, lat) points.

        Longitude is uniform; latitude uses the inverse transform
        lat = asin(2v - 1), which makes the density uniform per unit area.

        Returns:
            Array of shape (n, 2)
        """
        u = rng.random((n, 2))
        lng = MIN_LNG + (MAX_LNG - MIN_LNG) * u[:, 0]
        lat = np.degrees(np.arcsin(2.0 * u[:, 1] - 1.0))
        return np.column_stack([lng, lat])


class PolygonalSampler:
    """Uniform points inside a polygonal geometry."""

    def __init__(self, geometry: BaseGeometry):
        """
        Prepare a sampler for a geometry.

        Args:
            geometry: Polygon, MultiPolygon or collection of polygons

        Raises:
            EmptyGeometry: when the geometry has no area
        """
        if geometry.is_empty:
            raise EmptyGeometry("sampling", geometry.geom_type)

        with TimedLogger(logger, "prepare polygonal sampler"):
            self.triangles: List[Triangle] = triangulate(geometry)
            vertices = np.array(
                [t.vertices for t in self.triangles], dtype=float
            )  # (k, 3, 2)
            self._origin = vertices[:, 0, :]
            self._edge_ab = vertices[:, 1, :] - vertices[:, 0, :]
            self._edge_ac = vertices[:, 2, :] - vertices[:, 0, :]

            self.cumulative_area = np.cumsum([abs(t.area) for t in self.triangles])
            self.total_area = float(self.cumulative_area[-1])

        if self.total_area <= 0:
            raise EmptyGeometry("sampling", geometry.geom_type)

        logger.debug(
            "Prepared polygonal sampler",
            extra={"triangles": len(self.triangles), "total_area": self.total_area},
        )

    def sample(self, rng: np.random.Generator, n: int) -> np.ndarray:
        """
        Draw n (lng, lat) points.

        Returns:
            Array of shape (n, 2)
        """
        targets = rng.random(n) * self.total_area
        index = np.searchsorted(self.cumulative_area, targets, side="right")
        index = np.minimum(index, len(self.triangles) - 1)

        r = rng.random((n, 2))
        folded = r.sum(axis=1) > 1.0
        r[folded] = 1.0 - r[folded]

        return (
            self._origin[index]
            + r[:, 0:1] * self._edge_ab[index]
            + r[:, 1:2] * self._edge_ac[index]
        )


def sample_points(
    n: int,
    rng: np.random.Generator,
    geometry: Optional[BaseGeometry] = None,
) -> List[Tuple[float, float]]:
    """
    Sample n points, inside `geometry` when given, else over the whole sphere.

    Returns:
        List of (lng, lat) tuples
    """
    if n < 0:
        raise ValueError(f"Number of samples must be non-negative, got {n}")
    sampler = SphereSampler() if geometry is None else PolygonalSampler(geometry)
    points = sampler.sample(rng, n)
    return [(float(lng), float(lat)) for lng, lat in points]
