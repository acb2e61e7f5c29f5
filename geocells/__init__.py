"""
geocells: hierarchical grid cells (S2 and H3) and polygon utilities.

Covering, cutting and compaction of geometries over grid systems, plus
ear-clipping triangulation, bounding-box splits and uniform random sampling.
"""

__version__ = "0.1.0"

from .common import config, get_logger, GeoCellsError
from .grid import Cell, CoverSet, GridAdapter, S2Grid, H3Grid, get_grid
from .cover import ContainmentMode, Coverer, cover, cut, cut_by_cell, compact, uncompact
from .geometry import parse_wkt, to_wkt, triangulate, partition_region
from .sampling import create_rng, sample_points

__all__ = [
    "__version__",
    "config",
    "get_logger",
    "GeoCellsError",
    "Cell",
    "CoverSet",
    "GridAdapter",
    "S2Grid",
    "H3Grid",
    "get_grid",
    "ContainmentMode",
    "Coverer",
    "cover",
    "cut",
    "cut_by_cell",
    "compact",
    "uncompact",
    "parse_wkt",
    "to_wkt",
    "triangulate",
    "partition_region",
    "create_rng",
    "sample_points",
]
