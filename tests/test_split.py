from __future__ import annotations

import pytest
from shapely.geometry import Polygon
from shapely.ops import unary_union

from geocells.common import EmptyGeometry
from geocells.geometry import partition_region


@pytest.mark.parametrize("edge_proportion, expected", [(0.5, 4), (0.3, 16), (0.25, 16)])
def test_partition_counts(unit_square: Polygon, edge_proportion: float, expected: int) -> None:
    assert len(partition_region(unit_square, edge_proportion)) == expected


def test_partitions_cover_the_bounding_box(unit_square: Polygon) -> None:
    partitions = partition_region(unit_square, 0.3)

    assert unary_union(partitions).area == pytest.approx(1.0, rel=1e-3)
    assert sum(p.area for p in partitions) == pytest.approx(1.0, rel=1e-3)


def test_large_edge_proportion_returns_the_box(l_shape: Polygon) -> None:
    partitions = partition_region(l_shape, 1.5)

    assert len(partitions) == 1
    assert partitions[0].bounds == pytest.approx((0.0, 0.0, 2.0, 2.0))


def test_area_threshold() -> None:
    triangle = Polygon([(0, 0), (1, 0), (0, 1)])

    assert len(partition_region(triangle, 0.5, area_threshold=0.99)) == 1
    assert len(partition_region(triangle, 0.5, area_threshold=0.4)) == 3


def test_partitions_skip_holes() -> None:
    ring = Polygon(
        [(0, 0), (3, 0), (3, 3), (0, 3)],
        [[(1, 1), (2, 1), (2, 2), (1, 2)]],
    )
    partitions = partition_region(ring, 1 / 3, area_threshold=0.5)

    assert len(partitions) == 8
    assert not any(p.contains(ring.interiors[0].centroid) for p in partitions)


def test_invalid_arguments(unit_square: Polygon) -> None:
    with pytest.raises(ValueError, match="Edge proportion"):
        partition_region(unit_square, 0.0)
    with pytest.raises(ValueError, match="Area threshold"):
        partition_region(unit_square, 0.5, area_threshold=1.5)
    with pytest.raises(EmptyGeometry):
        partition_region(Polygon(), 0.5)
