"""
Ear-clipping triangulation for the geocells toolkit.

Holes are merged into the outer ring through bridge edges to the nearest
mutually visible vertex, then convex vertices whose triangle holds no other
vertex are clipped until three remain. Coordinates are treated as planar
(lng, lat) pairs.
"""

from dataclasses import dataclass, field
from typing import List, Sequence

from shapely.geometry import Polygon
from shapely.geometry.base import BaseGeometry

from ..common import get_logger, DegeneratePolygon, EmptyGeometry
from .model import Coord, iter_polygons, oriented, ring_coords

logger = get_logger("geometry.triangulate")


@dataclass(frozen=True)
class Triangle:
    """Triangle with a precomputed signed area (positive when counter-clockwise)."""

    a: Coord
    b: Coord
    c: Coord
    area: float = field(init=False)

    def __post_init__(self):
        object.__setattr__(self, "area", _cross(self.a, self.b, self.c) / 2.0)

    @property
    def vertices(self) -> List[Coord]:
        return [self.a, self.b, self.c]

    def to_polygon(self) -> Polygon:
        return Polygon([self.a, self.b, self.c])


def _cross(o: Coord, a: Coord, b: Coord) -> float:
    """Twice the signed area of o, a, b; positive when b is left of o->a."""
    return (a[0] - o[0]) * (b[1] - o[1]) - (a[1] - o[1]) * (b[0] - o[0])


def _point_in_triangle(p: Coord, a: Coord, b: Coord, c: Coord) -> bool:
    """Inclusive test for a counter-clockwise (or flat) triangle."""
    return _cross(a, b, p) >= 0 and _cross(b, c, p) >= 0 and _cross(c, a, p) >= 0


def _on_segment(p: Coord, q: Coord, r: Coord) -> bool:
    """r lies within the bounding box of p-q (collinearity checked by caller)."""
    within_x = min(p[0], q[0]) <= r[0] <= max(p[0], q[0])
    within_y = min(p[1], q[1]) <= r[1] <= max(p[1], q[1])
    return within_x and within_y


def _segments_intersect(p1: Coord, p2: Coord, q1: Coord, q2: Coord) -> bool:
    d1 = _cross(q1, q2, p1)
    d2 = _cross(q1, q2, p2)
    d3 = _cross(p1, p2, q1)
    d4 = _cross(p1, p2, q2)
    if ((d1 > 0 and d2 < 0) or (d1 < 0 and d2 > 0)) and (
        (d3 > 0 and d4 < 0) or (d3 < 0 and d4 > 0)
    ):
        return True
    if d1 == 0 and _on_segment(q1, q2, p1):
        return True
    if d2 == 0 and _on_segment(q1, q2, p2):
        return True
    if d3 == 0 and _on_segment(p1, p2, q1):
        return True
    if d4 == 0 and _on_segment(p1, p2, q2):
        return True
    return False


def _in_cone(prev: Coord, vertex: Coord, nxt: Coord, target: Coord) -> bool:
    """
    Whether the direction vertex->target points into the polygon interior.

    The interior lies to the left of prev->vertex->nxt, which holds for a
    counter-clockwise outer ring and for clockwise holes alike.
    """
    left_of_incoming = _cross(prev, vertex, target) > 0
    left_of_outgoing = _cross(vertex, nxt, target) > 0
    if _cross(prev, vertex, nxt) > 0:
        return left_of_incoming and left_of_outgoing
    return left_of_incoming or left_of_outgoing


def _ring_edges(ring: Sequence[Coord]):
    n = len(ring)
    for i in range(n):
        yield ring[i], ring[(i + 1) % n]


def _bridge_is_clear(p: Coord, m: Coord, rings: Sequence[Sequence[Coord]]) -> bool:
    for ring in rings:
        for e1, e2 in _ring_edges(ring):
            if e1 in (p, m) or e2 in (p, m):
                continue
            if _segments_intersect(p, m, e1, e2):
                return False
    return True


def _bridge_hole(
    ring: List[Coord], hole: List[Coord], others: Sequence[List[Coord]]
) -> List[Coord]:
    """Splice a clockwise hole into the ring through its max-x vertex."""
    j = max(range(len(hole)), key=lambda k: hole[k])
    m = hole[j]
    m_prev, m_next = hole[j - 1], hole[(j + 1) % len(hole)]
    n = len(ring)

    def dist2(i: int) -> float:
        return (ring[i][0] - m[0]) ** 2 + (ring[i][1] - m[1]) ** 2

    obstacles = [ring, hole, *others]
    for i in sorted(range(n), key=dist2):
        p = ring[i]
        if p == m:
            continue
        if not _in_cone(ring[i - 1], p, ring[(i + 1) % n], m):
            continue
        if not _in_cone(m_prev, m, m_next, p):
            continue
        if not _bridge_is_clear(p, m, obstacles):
            continue
        return ring[: i + 1] + hole[j:] + hole[: j + 1] + ring[i:]

    raise DegeneratePolygon(
        f"No visible bridge from hole vertex {m} to the outer ring",
        remaining_vertices=n,
    )


def merge_holes(outer: List[Coord], holes: Sequence[List[Coord]]) -> List[Coord]:
    """
    Merge clockwise holes into a counter-clockwise outer ring.

    Holes are processed right to left so every bridge can reach a vertex
    already on the merged ring. Each hole adds two duplicated bridge vertices.
    """
    ring = list(outer)
    pending = sorted(holes, key=lambda h: max(x for x, _ in h), reverse=True)
    for k, hole in enumerate(pending):
        ring = _bridge_hole(ring, list(hole), pending[k + 1 :])
    return ring


def _flat_tolerance(ring: Sequence[Coord]) -> float:
    xs = [c[0] for c in ring]
    ys = [c[1] for c in ring]
    extent = max(max(xs) - min(xs), max(ys) - min(ys))
    return 1e-12 * extent * extent


def _is_ear(
    ring: Sequence[Coord], idx: List[int], k: int, allow_flat: bool, flat_tol: float
) -> bool:
    n = len(idx)
    a, b, c = ring[idx[k - 1]], ring[idx[k]], ring[idx[(k + 1) % n]]
    turn = _cross(a, b, c)
    if allow_flat:
        if abs(turn) > flat_tol:
            return False
    elif turn <= 0:
        return False

    for pos in range(n):
        if pos in (k, (k - 1) % n, (k + 1) % n):
            continue
        p = ring[idx[pos]]
        if p == a or p == b or p == c:
            continue
        if _point_in_triangle(p, a, b, c):
            return False
    return True


def clip_ears(ring: Sequence[Coord]) -> List[Triangle]:
    """
    Triangulate a simple counter-clockwise ring.

    Proper ears are preferred; a collinear vertex is clipped as a zero-area
    triangle only when a full pass finds no proper ear.
    """
    if len(ring) < 3:
        raise DegeneratePolygon(
            f"Need at least 3 vertices, got {len(ring)}", remaining_vertices=len(ring)
        )

    flat_tol = _flat_tolerance(ring)
    idx = list(range(len(ring)))
    triangles: List[Triangle] = []
    start = 0

    while len(idx) > 3:
        n = len(idx)
        clipped = None
        for allow_flat in (False, True):
            for step in range(n):
                k = (start + step) % n
                if _is_ear(ring, idx, k, allow_flat, flat_tol):
                    clipped = k
                    break
            if clipped is not None:
                break

        if clipped is None:
            raise DegeneratePolygon(
                f"No ear found with {n} vertices remaining; polygon is "
                "self-intersecting or degenerate",
                remaining_vertices=n,
            )

        k = clipped
        triangles.append(
            Triangle(ring[idx[k - 1]], ring[idx[k]], ring[idx[(k + 1) % n]])
        )
        del idx[k]
        start = (k - 1) % len(idx)

    triangles.append(Triangle(*(ring[i] for i in idx)))
    return triangles


def triangulate_polygon(polygon: Polygon) -> List[Triangle]:
    """Triangulate one polygon with optional holes."""
    if polygon.is_empty or polygon.area == 0:
        raise EmptyGeometry("triangulation", polygon.geom_type)

    outer = oriented(ring_coords(polygon.exterior), ccw=True)
    holes = [oriented(ring_coords(h), ccw=False) for h in polygon.interiors]
    for ring in [outer, *holes]:
        if len(ring) < 3:
            raise DegeneratePolygon(
                f"Ring with {len(ring)} distinct vertices", remaining_vertices=len(ring)
            )

    merged = merge_holes(outer, holes) if holes else outer
    triangles = clip_ears(merged)

    logger.debug(
        "Triangulated polygon",
        extra={
            "vertices": len(merged),
            "holes": len(holes),
            "triangles": len(triangles),
        },
    )
    return triangles


def triangulate(geometry: BaseGeometry) -> List[Triangle]:
    """
    Triangulate every polygon of a Polygon, MultiPolygon or collection.

    For n ring vertices and h holes a polygon yields n - 2 + 2h triangles.

    Raises:
        EmptyGeometry: no polygon with area in the input
        DegeneratePolygon: ear clipping cannot make progress
    """
    polygons = list(iter_polygons(geometry))
    if not polygons:
        raise EmptyGeometry("triangulation", geometry.geom_type)

    triangles: List[Triangle] = []
    for polygon in polygons:
        triangles.extend(triangulate_polygon(polygon))
    return triangles
