"""
Geographic Viewport Bounds
==========================
A rectangular extent in WGS84 degrees, as reported by the map widget or
looked up from the region catalog.

    south < north     (latitude,  -90 … 90)
    west  < east      (longitude, -180 … 180)

Rectangles never cross the antimeridian.  Shapely geometries use the
usual (x, y) = (lon, lat) axis order.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass

from shapely.geometry import MultiPoint, Point, Polygon, box

# Mean length of one degree of latitude (km).
KM_PER_DEGREE = 111.32


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


# ── Bounding Box (viewport rectangle) ────────────────────────────
@dataclass(frozen=True, slots=True)
class ViewportBounds:
    """A rectangle in latitude/longitude degrees."""

    north: float
    south: float
    east: float
    west: float

    def __post_init__(self) -> None:
        for name in ("north", "south", "east", "west"):
            if not math.isfinite(getattr(self, name)):
                raise ValueError(f"{name} must be a finite number")
        if not (-90.0 <= self.south < self.north <= 90.0):
            raise ValueError(
                f"Invalid latitude span: south={self.south}, north={self.north}"
            )
        if not (-180.0 <= self.west < self.east <= 180.0):
            raise ValueError(
                f"Invalid longitude span: west={self.west}, east={self.east}"
            )

    @property
    def height_deg(self) -> float:
        return self.north - self.south

    @property
    def width_deg(self) -> float:
        return self.east - self.west

    @property
    def center(self) -> tuple[float, float]:
        """(lat, lon) of the rectangle's midpoint."""
        return (self.south + self.north) / 2, (self.west + self.east) / 2

    def to_shapely(self) -> Polygon:
        """Return a Shapely box (x = lon, y = lat)."""
        return box(self.west, self.south, self.east, self.north)

    def to_dict(self) -> dict[str, float]:
        return {
            "north": self.north,
            "south": self.south,
            "east": self.east,
            "west": self.west,
        }

    def contains_point(self, lat: float, lon: float) -> bool:
        """True if the point lies inside or on the edge of the rectangle."""
        return self.to_shapely().covers(Point(lon, lat))

    # ── Construction helpers ──────────────────────────────────

    @classmethod
    def around(cls, lat: float, lon: float, range_km: float) -> ViewportBounds:
        """
        Approximate box covering a circle of *range_km* around a center.

        Longitude degrees shrink with cos(lat); the result is clamped to
        the valid coordinate ranges.
        """
        if range_km <= 0:
            raise ValueError("range_km must be positive")
        dlat = range_km / KM_PER_DEGREE
        cos_lat = max(math.cos(math.radians(lat)), 1e-6)
        dlon = min(range_km / (KM_PER_DEGREE * cos_lat), 180.0)
        return cls(
            north=_clamp(lat + dlat, -90.0, 90.0),
            south=_clamp(lat - dlat, -90.0, 90.0),
            east=_clamp(lon + dlon, -180.0, 180.0),
            west=_clamp(lon - dlon, -180.0, 180.0),
        )

    @classmethod
    def from_points(
        cls,
        points: Iterable[tuple[float, float]],
        min_span_deg: float = 0.01,
    ) -> ViewportBounds:
        """
        Combined bounds of ``(lat, lon)`` points.

        Spans narrower than *min_span_deg* are widened symmetrically so a
        single point (or a vertical/horizontal line of points) still gives
        a valid rectangle.
        """
        coords = [(lon, lat) for lat, lon in points]
        if not coords:
            raise ValueError("Cannot compute bounds of an empty point set")

        west, south, east, north = MultiPoint(coords).bounds

        if north - south < min_span_deg:
            mid = (north + south) / 2
            south, north = mid - min_span_deg / 2, mid + min_span_deg / 2
        if east - west < min_span_deg:
            mid = (east + west) / 2
            west, east = mid - min_span_deg / 2, mid + min_span_deg / 2

        return cls(
            north=_clamp(north, -90.0, 90.0),
            south=_clamp(south, -90.0, 90.0),
            east=_clamp(east, -180.0, 180.0),
            west=_clamp(west, -180.0, 180.0),
        )
