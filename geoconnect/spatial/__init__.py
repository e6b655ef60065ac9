"""Spatial subpackage — viewport rectangles and the region catalog."""

from geoconnect.spatial.bounds import ViewportBounds
from geoconnect.spatial.regions import DEFAULT_REGIONS, RegionCatalog

__all__ = [
    "DEFAULT_REGIONS",
    "RegionCatalog",
    "ViewportBounds",
]
