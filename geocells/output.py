"""
Output formatting for the geocells command line.

Turns results into lines of text. `csv` emits one item per line; `oneline`
merges geometries into a single GEOMETRYCOLLECTION and joins cells with commas.
"""

from enum import Enum
from typing import Iterable, List, Sequence

from shapely.geometry import GeometryCollection
from shapely.geometry.base import BaseGeometry

from .geometry.model import to_wkt


class OutputFormat(Enum):
    """Output layouts."""

    CSV = "csv"
    ONELINE = "oneline"

    def __str__(self) -> str:
        return self.value


def format_geometries(
    geometries: Sequence[BaseGeometry], fmt: OutputFormat
) -> List[str]:
    """Geometries as WKT lines."""
    if fmt is OutputFormat.ONELINE:
        return [to_wkt(GeometryCollection(list(geometries)))]
    return [to_wkt(g) for g in geometries]


def format_cells(cells: Iterable[str], fmt: OutputFormat) -> List[str]:
    """Encoded cell ids as lines."""
    cells = list(cells)
    if fmt is OutputFormat.ONELINE:
        return [",".join(cells)]
    return cells
