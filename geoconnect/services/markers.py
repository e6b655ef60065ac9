"""
Map Marker Layer
================
Turns accepted posts into markers on the map view and, when asked, fits
the camera to them.  Posts whose coordinates are missing or non-numeric
are left off the map without complaint.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from geoconnect.schemas.post import Post
from geoconnect.services.collaborators import MapView
from geoconnect.spatial.bounds import ViewportBounds

logger = logging.getLogger(__name__)


def fmt_coord(value: float | None) -> str:
    """Five-decimal coordinate text, or "" when unusable."""
    if value is None:
        return ""
    return f"{value:.5f}"


@dataclass(frozen=True, slots=True)
class Marker:
    """A single post pinned to the map."""

    lat: float
    lon: float
    user: str
    message: str
    image_url: str | None = None

    @property
    def label(self) -> str:
        return f"({fmt_coord(self.lat)}, {fmt_coord(self.lon)})"

    @classmethod
    def from_post(cls, post: Post) -> Marker | None:
        coords = post.coordinates
        if coords is None:
            return None
        lat, lon = coords
        if not (-90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0):
            return None
        return cls(
            lat=lat,
            lon=lon,
            user=post.user,
            message=post.message,
            image_url=post.url,
        )


def markers_from_posts(posts: Sequence[Post]) -> list[Marker]:
    markers = []
    for post in posts:
        marker = Marker.from_post(post)
        if marker is not None:
            markers.append(marker)
    return markers


class MarkerLayer:
    """``MapRenderer`` that draws onto a ``MapView``."""

    def __init__(
        self,
        map_view: MapView,
        padding: int = 30,
        min_span_deg: float = 0.01,
    ) -> None:
        self.map_view = map_view
        self.padding = padding
        self.min_span_deg = min_span_deg

    def render_on_map(self, posts: Sequence[Post], fit_to_bounds: bool) -> bool:
        """Draw *posts*; return True if the camera was moved to fit them."""
        self.map_view.clear_markers()
        markers = markers_from_posts(posts)
        for marker in markers:
            self.map_view.add_marker(marker)

        skipped = len(posts) - len(markers)
        if skipped:
            logger.debug("Skipped %d post(s) without usable coordinates", skipped)

        if not (fit_to_bounds and markers):
            return False
        bounds = ViewportBounds.from_points(
            ((m.lat, m.lon) for m in markers),
            min_span_deg=self.min_span_deg,
        )
        logger.debug(
            "Fitting map to %.4f x %.4f deg around %s",
            bounds.height_deg, bounds.width_deg, bounds.center,
        )
        self.map_view.fit_bounds(bounds, padding=self.padding)
        return True
