from __future__ import annotations

import pytest
from shapely.geometry import Polygon, box
from shapely.ops import unary_union

from geocells.common import InvalidLevel, LevelMismatch
from geocells.cover import compact, cover, uncompact
from geocells.grid import CoverSet, H3Grid, S2Grid


def test_s2_compact_uncompact_round_trip(s2_grid: S2Grid) -> None:
    cells = cover(box(10.0, 10.0, 11.0, 11.0), 10, s2_grid)
    compacted = compact(cells, s2_grid)

    assert len(compacted) < len(cells)
    assert uncompact(compacted, 10, s2_grid) == cells


def test_s2_complete_siblings_merge_recursively(s2_grid: S2Grid) -> None:
    parent = s2_grid.cell_at(-0.1278, 51.5074, 8)
    descendants = uncompact([parent], 10, s2_grid)

    assert len(descendants) == 16
    assert compact(descendants, s2_grid) == CoverSet.from_cells([parent])


def test_incomplete_siblings_stay(s2_grid: S2Grid) -> None:
    parent = s2_grid.cell_at(-0.1278, 51.5074, 8)
    partial = s2_grid.children(parent)[:3]

    assert compact(partial, s2_grid) == CoverSet.from_cells(partial)


def test_compact_empty(h3_grid: H3Grid) -> None:
    assert len(compact([], h3_grid)) == 0


def test_h3_seven_children_merge(h3_grid: H3Grid) -> None:
    parent = h3_grid.cell_at(-122.4194, 37.7749, 7)
    grandchildren = uncompact([parent], 9, h3_grid)

    assert len(grandchildren) == 49
    assert compact(grandchildren, h3_grid) == CoverSet.from_cells([parent])


def test_h3_compaction_is_lossy_but_bounded(h3_grid: H3Grid) -> None:
    area = box(-122.45, 37.74, -122.40, 37.78)
    cells = cover(area, 9, h3_grid)
    compacted = compact(cells, h3_grid)

    assert len(compacted) < len(cells)
    # Parents do not coincide with their children, so the compacted cells
    # cover a different region from the original covering.
    original = unary_union([h3_grid.boundary(c) for c in cells])
    merged = unary_union([h3_grid.boundary(c) for c in compacted])
    assert original.symmetric_difference(merged).area > 0
    # ...yet the shrinkage is bounded: most of the polygon remains covered.
    assert area.intersection(merged).area > 0.9 * area.area


def test_uncompact_levels(h3_grid: H3Grid) -> None:
    coarse = h3_grid.cell_at(139.6917, 35.6895, 5)
    same_level = h3_grid.children(coarse)[0]

    expanded = uncompact([coarse, same_level], 6, h3_grid)

    assert expanded.levels() == {6}
    assert len(expanded) == 7
    assert same_level in expanded


def test_uncompact_rejects_finer_cells(h3_grid: H3Grid) -> None:
    fine = h3_grid.cell_at(139.6917, 35.6895, 8)

    with pytest.raises(LevelMismatch) as excinfo:
        uncompact([fine], 6, h3_grid)
    assert excinfo.value.cell_level == 8
    assert excinfo.value.target_level == 6


def test_uncompact_clamp_passes_finer_cells_through(h3_grid: H3Grid) -> None:
    fine = h3_grid.cell_at(139.6917, 35.6895, 8)
    coarse = h3_grid.cell_at(-0.1278, 51.5074, 5)

    expanded = uncompact([fine, coarse], 6, h3_grid, clamp=True)

    assert fine in expanded
    assert len(expanded) == 8


def test_uncompact_invalid_level(s2_grid: S2Grid) -> None:
    with pytest.raises(InvalidLevel):
        uncompact(s2_grid.roots(), 31, s2_grid)
