"""
Region Catalog
==============
Static lookup from a region key (US state / district code) to the
rectangle the map should jump to.  The table is read-only once built;
an optional JSON file can add or override entries at startup::

    {"NY": {"north": 45.02, "south": 40.48, "east": -71.78, "west": -79.76}}
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType

from pydantic import BaseModel, TypeAdapter

from geoconnect.spatial.bounds import ViewportBounds

logger = logging.getLogger(__name__)


class RegionBoundsIn(BaseModel):
    """One entry of a region JSON file."""

    north: float
    south: float
    east: float
    west: float

    def to_bounds(self) -> ViewportBounds:
        return ViewportBounds(
            north=self.north, south=self.south, east=self.east, west=self.west,
        )


_REGION_FILE = TypeAdapter(dict[str, RegionBoundsIn])


# (north, south, east, west)
_US_STATES: dict[str, tuple[float, float, float, float]] = {
    "CA": (42.01, 32.53, -114.13, -124.41),
    "CO": (41.00, 36.99, -102.04, -109.06),
    "CT": (42.05, 40.95, -71.79, -73.73),
    "DC": (38.996, 38.79, -76.91, -77.12),
    "FL": (31.00, 24.52, -80.03, -87.63),
    "IL": (42.51, 36.97, -87.02, -91.51),
    "MA": (42.89, 41.19, -69.86, -73.51),
    "ME": (47.46, 42.98, -66.95, -71.08),
    "NH": (45.31, 42.70, -70.61, -72.56),
    "NJ": (41.36, 38.93, -73.89, -75.56),
    "NY": (45.02, 40.48, -71.78, -79.76),
    "OH": (41.98, 38.40, -80.52, -84.82),
    "OR": (46.29, 41.99, -116.46, -124.57),
    "PA": (42.27, 39.72, -74.69, -80.52),
    "RI": (42.02, 41.15, -71.12, -71.91),
    "TX": (36.50, 25.84, -93.51, -106.65),
    "VT": (45.02, 42.73, -71.46, -73.44),
    "WA": (49.00, 45.54, -116.92, -124.85),
}

DEFAULT_REGIONS: Mapping[str, ViewportBounds] = MappingProxyType({
    code: ViewportBounds(north=n, south=s, east=e, west=w)
    for code, (n, s, e, w) in _US_STATES.items()
})


def _normalize_key(key: str) -> str:
    return key.strip().upper()


class RegionCatalog:
    """
    Immutable mapping of region keys to bounds.

    Keys are matched case-insensitively after trimming whitespace.
    """

    def __init__(self, regions: Mapping[str, ViewportBounds] | None = None) -> None:
        source = DEFAULT_REGIONS if regions is None else regions
        self._regions: Mapping[str, ViewportBounds] = MappingProxyType(
            {_normalize_key(k): v for k, v in source.items()}
        )

    # ── Construction ──────────────────────────────────────────

    @classmethod
    def from_json(
        cls,
        path: str | Path,
        base: Mapping[str, ViewportBounds] | None = DEFAULT_REGIONS,
    ) -> RegionCatalog:
        """
        Build a catalog from a JSON file, merged over *base*.

        Raises ``pydantic.ValidationError`` for malformed entries and
        ``ValueError`` for rectangles that violate the bounds invariants.
        """
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
        parsed = _REGION_FILE.validate_python(raw)
        merged = dict(base or {})
        merged.update({key: entry.to_bounds() for key, entry in parsed.items()})
        logger.info("Loaded %d region(s) from %s", len(parsed), path)
        return cls(merged)

    # ── Lookup ────────────────────────────────────────────────

    def lookup(self, key: str) -> ViewportBounds | None:
        """Return the bounds for *key*, or ``None`` when unknown."""
        if not isinstance(key, str):
            return None
        return self._regions.get(_normalize_key(key))

    def keys(self) -> list[str]:
        return sorted(self._regions)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and _normalize_key(key) in self._regions

    def __len__(self) -> int:
        return len(self._regions)
