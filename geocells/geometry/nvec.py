"""
n-vector helpers.

An n-vector is the unit surface normal of a (lng, lat) position. Interpolating
between n-vectors and renormalising walks along the great circle joining the
two positions, which is what cell edges and split lines need.
"""

import math
from typing import List, Tuple

import numpy as np

Coord = Tuple[float, float]


def to_nvec(coord: Coord) -> np.ndarray:
    """(lng, lat) in degrees to a unit 3-vector."""
    lng, lat = math.radians(coord[0]), math.radians(coord[1])
    cos_lat = math.cos(lat)
    return np.array([math.cos(lng) * cos_lat, math.sin(lng) * cos_lat, math.sin(lat)])


def from_nvec(nvec: np.ndarray) -> Coord:
    """Unit (or any non-zero) 3-vector to (lng, lat) in degrees."""
    x, y, z = float(nvec[0]), float(nvec[1]), float(nvec[2])
    lat = math.atan2(z, math.hypot(x, y))
    lng = math.atan2(y, x)
    return math.degrees(lng), math.degrees(lat)


def lerp(t: float, c1: Coord, c2: Coord) -> Coord:
    """
    Interpolate between two coordinates along the great circle joining them.

    t = 0 gives c1 and t = 1 gives c2. Antipodal inputs are undefined.
    """
    if t == 0.0:
        return c1
    if t == 1.0:
        return c2
    nv = (1.0 - t) * to_nvec(c1) + t * to_nvec(c2)
    nv = nv / (np.linalg.norm(nv) + 1e-12)
    return from_nvec(nv)


def slerp(t: float, c1: Coord, c2: Coord) -> Coord:
    """
    Interpolate between two coordinates at uniform arc length.

    Unlike lerp, the returned point lies at fraction t of the great-circle
    angle from c1 to c2. Antipodal inputs are undefined.
    """
    if t == 0.0:
        return c1
    if t == 1.0:
        return c2
    a, b = to_nvec(c1), to_nvec(c2)
    omega = math.atan2(float(np.linalg.norm(np.cross(a, b))), float(np.dot(a, b)))
    if omega < 1e-9:
        return lerp(t, c1, c2)
    nv = (math.sin((1.0 - t) * omega) * a + math.sin(t * omega) * b) / math.sin(omega)
    return from_nvec(nv)


def angular_distance_deg(c1: Coord, c2: Coord) -> float:
    """Great-circle angle between two coordinates in degrees."""
    a, b = to_nvec(c1), to_nvec(c2)
    return math.degrees(
        math.atan2(float(np.linalg.norm(np.cross(a, b))), float(np.dot(a, b)))
    )


def densify_edge(c1: Coord, c2: Coord, max_step_deg: float) -> List[Coord]:
    """
    Points along the edge from c1 towards c2, c1 included and c2 excluded.

    Points are evenly spaced in arc, at most max_step_deg apart; short edges
    return just [c1].
    """
    steps = max(1, int(math.ceil(angular_distance_deg(c1, c2) / max_step_deg)))
    return [c1] + [slerp(i / steps, c1, c2) for i in range(1, steps)]
