"""
Covering, cutting and compaction over grid systems.
"""

from .coverer import ContainmentMode, Coverer, cover
from .cutter import CellCut, cut, cut_by_cell
from .compact import compact, uncompact

__all__ = [
    "ContainmentMode",
    "Coverer",
    "cover",
    "CellCut",
    "cut",
    "cut_by_cell",
    "compact",
    "uncompact",
]
