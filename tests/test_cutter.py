from __future__ import annotations

import pytest
from shapely.geometry import LineString, Polygon, box
from shapely.ops import unary_union

from geocells.common import EmptyGeometry
from geocells.cover import cover, cut, cut_by_cell
from geocells.grid import H3Grid, S2Grid, cell_region


@pytest.mark.parametrize("grid_cls, level", [(S2Grid, 9), (H3Grid, 6)])
def test_pieces_partition_the_polygon(grid_cls, level: int) -> None:
    grid = grid_cls()
    area = box(10.0, 10.0, 11.0, 11.0)
    pieces = cut(area, level, grid)

    assert len(pieces) > 1
    assert all(p.geom_type == "Polygon" for p in pieces)
    assert sum(p.area for p in pieces) == pytest.approx(area.area, rel=1e-6)


def test_each_piece_lies_in_its_cell(s2_grid: S2Grid, sf_block: Polygon) -> None:
    cuts = cut_by_cell(sf_block, 19, s2_grid)

    assert [c.cell for c in cuts] == sorted(c.cell for c in cuts)
    for piece in cuts:
        region = cell_region(s2_grid, piece.cell).buffer(1e-12)
        assert region.contains(piece.geometry)


def test_cells_that_only_touch_leave_no_pieces(s2_grid: S2Grid) -> None:
    cell = s2_grid.cell_at(5.0, 5.0, 8)
    shape = s2_grid.boundary(cell)

    cuts = cut_by_cell(shape, 8, s2_grid)

    assert len(cover(shape, 8, s2_grid)) > 1
    assert [c.cell for c in cuts] == [cell]
    assert cuts[0].geometry.area == pytest.approx(shape.area)


def test_line_cut(s2_grid: S2Grid) -> None:
    line = LineString([(0.1, 0.1), (1.9, 1.3)])
    pieces = cut(line, 8, s2_grid)

    assert len(pieces) > 1
    assert all(p.geom_type == "LineString" for p in pieces)
    assert sum(p.length for p in pieces) == pytest.approx(line.length, rel=1e-9)


def test_concave_polygon_yields_one_piece_per_part(s2_grid: S2Grid) -> None:
    cell = s2_grid.cell_at(5.0, 5.0, 6)
    minx, miny, maxx, _ = s2_grid.boundary(cell).bounds
    mid = s2_grid.centroid(cell).y
    width = maxx - minx
    # U shape: both arms reach into the cell, the base stays below it.
    shape = unary_union(
        [
            box(minx + 0.2 * width, miny - 0.2, minx + 0.3 * width, mid),
            box(minx + 0.7 * width, miny - 0.2, minx + 0.8 * width, mid),
            box(minx + 0.2 * width, miny - 0.3, minx + 0.8 * width, miny - 0.2),
        ]
    )
    assert shape.geom_type == "Polygon"

    cuts = cut_by_cell(shape, 6, s2_grid)

    arms = [c.geometry for c in cuts if c.cell == cell]
    assert len(arms) == 2
    assert all(c.geometry.geom_type == "Polygon" for c in cuts)
    assert sum(c.geometry.area for c in cuts) == pytest.approx(shape.area, rel=1e-6)


def test_cut_settings_do_not_change_pieces(h3_grid: H3Grid) -> None:
    area = box(10.0, 10.0, 10.5, 10.5)
    sequential = cut(area, 6, h3_grid, max_workers=1)
    threaded = cut(area, 6, h3_grid, relative_tolerance=1e-6, max_workers=4)

    assert len(threaded) == len(sequential)
    assert sum(p.area for p in threaded) == pytest.approx(area.area, rel=1e-6)


def test_empty_geometry_rejected(h3_grid: H3Grid) -> None:
    with pytest.raises(EmptyGeometry):
        cut(Polygon(), 5, h3_grid)
