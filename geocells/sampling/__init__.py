"""
Random sampling utilities for the geocells toolkit.
"""

from .samplers import (
    PolygonalSampler,
    SphereSampler,
    create_rng,
    sample_points,
)

__all__ = [
    "PolygonalSampler",
    "SphereSampler",
    "create_rng",
    "sample_points",
]
