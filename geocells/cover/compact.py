"""
Compaction and uncompaction of cell sets.

Compaction replaces every complete set of siblings by their parent, bottom-up
from the deepest level. On the S2 grid siblings partition their parent, so the
covered area never changes. On the H3 grid the seven children do not exactly
tile the parent hexagon: compacting a covering is a structural operation and
the parent may cover less of the original geometry than its children did.
"""

from collections import defaultdict
from typing import Dict, Iterable, List, Set

from ..common import get_logger, TimedLogger, LevelMismatch, log_cell_operation
from ..grid.base import Cell, CoverSet, GridAdapter

logger = get_logger("cover.compact")


def compact(cells: Iterable[Cell], grid: GridAdapter) -> CoverSet:
    """
    Merge complete sibling groups into their parents until none remain.

    Args:
        cells: Cells to compact (duplicates are ignored)
        grid: Grid system the cells belong to

    Returns:
        Compacted CoverSet
    """
    current: Set[Cell] = set(cells)
    cells_in = len(current)
    if not current:
        return CoverSet()

    with TimedLogger(logger, f"{grid.name} compact") as timer:
        deepest = max(grid.level(cell) for cell in current)
        merges = 0

        for level in range(deepest, 0, -1):
            groups: Dict[Cell, Set[Cell]] = defaultdict(set)
            for cell in current:
                if cell.level == level:
                    groups[grid.parent(cell)].add(cell)

            for parent, present in groups.items():
                if present == set(grid.children(parent)):
                    current -= present
                    current.add(parent)
                    merges += 1

        logger.info(
            f"Compacted {cells_in} cells into {len(current)}",
            extra=log_cell_operation(
                "compact",
                grid.name,
                cells_in=cells_in,
                cells_out=len(current),
                duration_ms=timer.elapsed_ms,
                merges=merges,
            ),
        )

    return CoverSet.from_cells(current)


def uncompact(
    cells: Iterable[Cell], level: int, grid: GridAdapter, clamp: bool = False
) -> CoverSet:
    """
    Expand every cell coarser than `level` into its descendants at `level`.

    Args:
        cells: Cells to expand
        level: Target level
        grid: Grid system the cells belong to
        clamp: Pass cells finer than `level` through unchanged instead of failing

    Raises:
        InvalidLevel: target level outside the grid range
        LevelMismatch: a cell is finer than `level` and clamp is off
    """
    grid.validate_level(level)
    cells = list(cells)

    with TimedLogger(logger, f"{grid.name} uncompact", cell_level=level) as timer:
        expanded: Set[Cell] = set()
        for cell in cells:
            cell_level = grid.level(cell)
            if cell_level > level:
                if not clamp:
                    raise LevelMismatch(grid.format_cell(cell), cell_level, level)
                expanded.add(cell)
                continue

            stack: List[Cell] = [cell]
            while stack:
                current = stack.pop()
                if current.level == level:
                    expanded.add(current)
                else:
                    stack.extend(grid.children(current))

        logger.info(
            f"Uncompacted {len(cells)} cells into {len(expanded)}",
            extra=log_cell_operation(
                "uncompact",
                grid.name,
                cells_in=len(cells),
                cells_out=len(expanded),
                duration_ms=timer.elapsed_ms,
                cell_level=level,
            ),
        )

    return CoverSet.from_cells(expanded)
