from __future__ import annotations

import math

import pytest
from shapely.geometry import Point

from geocells.common import InvalidLevel, NoParent
from geocells.grid import S2Grid, cell_region

MISSION_BAY_CELL = "9263763445025603584"


def test_cell_boundary_matches_known_coordinates(s2_grid: S2Grid) -> None:
    cell = s2_grid.parse_cell(MISSION_BAY_CELL)
    coords = list(s2_grid.boundary(cell).exterior.coords)

    expected = [
        (-122.39009006966613, 37.769200437923466),
        (-122.39009006966613, 37.76800891143169),
        (-122.38867383494343, 37.76844387567673),
        (-122.38867383494343, 37.76963540683453),
        (-122.39009006966613, 37.769200437923466),
    ]
    assert len(coords) == 5
    for actual, wanted in zip(coords, expected):
        assert actual == pytest.approx(wanted, abs=1e-9)


def test_hierarchy(s2_grid: S2Grid) -> None:
    roots = s2_grid.roots()
    assert len(roots) == 6
    assert all(root.level == 0 for root in roots)

    children = s2_grid.children(roots[2])
    assert len(children) == 4
    assert all(s2_grid.parent(child) == roots[2] for child in children)
    assert all(s2_grid.level(child) == 1 for child in children)


def test_hierarchy_bounds(s2_grid: S2Grid) -> None:
    with pytest.raises(NoParent):
        s2_grid.parent(s2_grid.roots()[0])

    leaf = s2_grid.cell_at(-122.4, 37.7, 30)
    with pytest.raises(InvalidLevel):
        s2_grid.children(leaf)

    with pytest.raises(InvalidLevel):
        s2_grid.cell_at(0.0, 0.0, 31)
    with pytest.raises(InvalidLevel):
        s2_grid.validate_level(-1)


def test_cell_at_contains_position(s2_grid: S2Grid) -> None:
    cell = s2_grid.cell_at(-122.389, 37.7693, 18)

    assert cell.level == 18
    assert s2_grid.boundary(cell).buffer(1e-12).contains(Point(-122.389, 37.7693))
    assert s2_grid.boundary(cell).contains(s2_grid.centroid(cell))


@pytest.mark.parametrize("style", ["long", "token", "quad"])
def test_cell_format_round_trip(s2_grid: S2Grid, style: str) -> None:
    for level in (0, 1, 12, 30):
        cell = s2_grid.cell_at(151.2093, -33.8688, level)
        assert s2_grid.parse_cell(s2_grid.format_cell(cell, style)) == cell


def test_quad_path_follows_children(s2_grid: S2Grid) -> None:
    face = s2_grid.roots()[4]
    third_child = s2_grid.children(face)[3]
    grandchild = s2_grid.children(third_child)[1]

    assert s2_grid.format_cell(face, "quad") == "4/"
    assert s2_grid.format_cell(grandchild, "quad") == "4/31"
    assert s2_grid.parse_cell("4/31") == grandchild


def test_token_and_decimal_forms(s2_grid: S2Grid) -> None:
    cell = s2_grid.parse_cell(MISSION_BAY_CELL)

    assert s2_grid.format_cell(cell) == MISSION_BAY_CELL
    assert s2_grid.parse_cell(s2_grid.format_cell(cell, "token")) == cell


@pytest.mark.parametrize("text", ["zz", "0", "7/0", "4/0124", "x/1"])
def test_invalid_cells_rejected(s2_grid: S2Grid, text: str) -> None:
    with pytest.raises(ValueError):
        s2_grid.parse_cell(text)


def test_unknown_format_rejected(s2_grid: S2Grid) -> None:
    with pytest.raises(ValueError, match="cell format"):
        s2_grid.format_cell(s2_grid.roots()[0], "hex")


def test_face_area(s2_grid: S2Grid) -> None:
    earth_km2 = 4 * math.pi * 6371.0088**2
    assert s2_grid.cell_area_km2(s2_grid.roots()[0]) == pytest.approx(
        earth_km2 / 6, rel=1e-6
    )


def test_polar_face_region_reaches_the_pole(s2_grid: S2Grid) -> None:
    # Face 2 is centred on the north pole.
    region = cell_region(s2_grid, s2_grid.roots()[2])

    assert region.contains(Point(0.0, 89.0))
    assert region.contains(Point(170.0, 60.0))
    assert not region.contains(Point(0.0, 0.0))
    assert region.bounds[2] <= 180.0 and region.bounds[3] <= 90.0


def test_antimeridian_cell_region(s2_grid: S2Grid) -> None:
    cell = s2_grid.cell_at(179.9, 0.5, 6)
    region = cell_region(s2_grid, cell)

    assert region.buffer(1e-9).contains(Point(179.9, 0.5))
    assert region.area < 10.0
