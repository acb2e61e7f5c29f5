"""
Error kinds raised by the geocells core.

All of them are deterministic input-validation failures. They derive from
ValueError so callers that only care about "bad input" can catch that.
"""

from typing import Any, Optional


class GeoCellsError(ValueError):
    """Base class for geocells failures."""


class InvalidLevel(GeoCellsError):
    """Requested level is negative or beyond the grid system maximum."""

    def __init__(self, level: int, max_level: int, grid: Optional[str] = None):
        self.level = level
        self.max_level = max_level
        self.grid = grid
        prefix = f"{grid} " if grid else ""
        super().__init__(
            f"{prefix}level must be between 0 and {max_level}, got {level}"
        )


class NoParent(GeoCellsError):
    """Parent requested of a root cell."""

    def __init__(self, cell: Any):
        self.cell = cell
        super().__init__(f"Cell {cell} is a root cell and has no parent")


class LevelMismatch(GeoCellsError):
    """A cell is finer than the uncompact target level."""

    def __init__(self, cell: Any, cell_level: int, target_level: int):
        self.cell = cell
        self.cell_level = cell_level
        self.target_level = target_level
        super().__init__(
            f"Cell {cell} is at level {cell_level}, finer than target level "
            f"{target_level}"
        )


class DegeneratePolygon(GeoCellsError):
    """Ear clipping could not make progress on the polygon."""

    def __init__(self, message: str, remaining_vertices: Optional[int] = None):
        self.remaining_vertices = remaining_vertices
        super().__init__(message)


class EmptyGeometry(GeoCellsError):
    """Operation needs a geometry with area (or at least one coordinate)."""

    def __init__(self, operation: str, geometry_type: Optional[str] = None):
        self.operation = operation
        self.geometry_type = geometry_type
        detail = f" ({geometry_type})" if geometry_type else ""
        super().__init__(f"{operation} requires a non-empty geometry{detail}")
