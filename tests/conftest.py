from __future__ import annotations

import pytest
from shapely.geometry import Polygon

from geocells.grid import H3Grid, S2Grid

# Small block in San Francisco's Mission Bay.
SF_BLOCK = Polygon(
    [
        (-122.389181, 37.769693),
        (-122.388672, 37.769718),
        (-122.388602, 37.768972),
        (-122.389112, 37.768942),
        (-122.389181, 37.769693),
    ]
)


@pytest.fixture
def s2_grid() -> S2Grid:
    return S2Grid()


@pytest.fixture
def h3_grid() -> H3Grid:
    return H3Grid()


@pytest.fixture
def sf_block() -> Polygon:
    return SF_BLOCK


@pytest.fixture
def unit_square() -> Polygon:
    return Polygon([(0, 0), (1, 0), (1, 1), (0, 1)])


@pytest.fixture
def l_shape() -> Polygon:
    return Polygon([(0, 0), (2, 0), (2, 1), (1, 1), (1, 2), (0, 2)])


@pytest.fixture
def square_with_hole() -> Polygon:
    return Polygon(
        [(0, 0), (10, 0), (10, 10), (0, 10)],
        [[(4, 4), (6, 4), (6, 6), (4, 6)]],
    )
