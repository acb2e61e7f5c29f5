"""
Grid systems for the geocells toolkit.

This package provides the GridAdapter capability interface and its S2
(quad-tree) and H3 (hexagonal) implementations.
"""

from .base import Cell, CoverSet, GridAdapter, cell_region, planar_region
from .s2_grid import S2Grid
from .h3_grid import H3Grid

GRIDS = {"s2": S2Grid, "h3": H3Grid}


def get_grid(name: str, **kwargs) -> GridAdapter:
    """Get a grid adapter by name ("s2" or "h3")."""
    try:
        grid_cls = GRIDS[name.lower()]
    except KeyError:
        raise ValueError(f"Unknown grid system: {name}, expected one of {list(GRIDS)}")
    return grid_cls(**kwargs)


__all__ = [
    "Cell",
    "CoverSet",
    "GridAdapter",
    "cell_region",
    "planar_region",
    "S2Grid",
    "H3Grid",
    "GRIDS",
    "get_grid",
]
