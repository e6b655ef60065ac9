"""
Pydantic schemas for the search endpoint's query parameters and
post records.
"""

from __future__ import annotations

import logging
import math
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator

from geoconnect.spatial.bounds import ViewportBounds

logger = logging.getLogger(__name__)


def _finite_or_none(value: Any) -> float | None:
    """Coerce *value* to a finite float, or ``None`` if it is not one."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


# ═══════════════════════════════════════════════════════════════════
# Post records
# ═══════════════════════════════════════════════════════════════════
class Location(BaseModel):
    """
    Coordinate pair attached to a post.

    Missing or non-numeric values are kept as ``None`` instead of
    failing validation; such posts are listed but not drawn.
    """

    lat: float | None = None
    lon: float | None = None

    @field_validator("lat", "lon", mode="before")
    @classmethod
    def permissive_coordinate(cls, v: Any) -> float | None:
        return _finite_or_none(v)


class Post(BaseModel):
    """A location-tagged post as returned by ``/search``."""

    model_config = {"extra": "ignore"}

    user: str = ""
    message: str = ""
    location: Location = Field(default_factory=Location)
    url: str | None = Field(default=None, description="Public image URL")

    @field_validator("user", "message", mode="before")
    @classmethod
    def text_or_empty(cls, v: Any) -> str:
        if v is None:
            return ""
        if isinstance(v, (str, int, float)):
            return str(v)
        raise ValueError("expected a string")

    @field_validator("url", mode="before")
    @classmethod
    def blank_url_is_none(cls, v: Any) -> Any:
        if v == "":
            return None
        return v

    @field_validator("location", mode="before")
    @classmethod
    def location_or_empty(cls, v: Any) -> Any:
        if not isinstance(v, (dict, Location)):
            return {}
        return v

    @property
    def coordinates(self) -> tuple[float, float] | None:
        """``(lat, lon)`` when both are usable, else ``None``."""
        if self.location.lat is None or self.location.lon is None:
            return None
        return self.location.lat, self.location.lon


def parse_posts(payload: Any) -> list[Post]:
    """
    Normalize a decoded ``/search`` body into posts.

    Anything other than a JSON array (including ``null``) yields an empty
    list; entries that are not valid post objects are skipped.
    """
    if not isinstance(payload, list):
        if payload is not None:
            logger.debug("Ignoring non-list search payload (%s)", type(payload).__name__)
        return []

    posts: list[Post] = []
    for item in payload:
        if not isinstance(item, dict):
            continue
        try:
            posts.append(Post.model_validate(item))
        except ValidationError:
            logger.debug("Skipping malformed post entry: %r", item)
    return posts


# ═══════════════════════════════════════════════════════════════════
# Query parameters
# ═══════════════════════════════════════════════════════════════════
class RangeQuery(BaseModel):
    """Rectangular range query: every post inside the bounds, capped."""

    north: float = Field(ge=-90, le=90)
    south: float = Field(ge=-90, le=90)
    east: float = Field(ge=-180, le=180)
    west: float = Field(ge=-180, le=180)
    limit: int = Field(gt=0, description="Maximum number of posts returned")

    @classmethod
    def from_bounds(cls, bounds: ViewportBounds, limit: int) -> RangeQuery:
        return cls(**bounds.to_dict(), limit=limit)

    def to_params(self) -> dict[str, str]:
        return {
            "north": repr(self.north),
            "south": repr(self.south),
            "east": repr(self.east),
            "west": repr(self.west),
            "limit": str(self.limit),
        }


class NearbyQuery(BaseModel):
    """Explicit center + radius query."""

    lat: float = Field(ge=-90, le=90)
    lon: float = Field(ge=-180, le=180)
    range_km: float = Field(gt=0, description="Search radius in kilometres")

    def to_params(self) -> dict[str, str]:
        # The endpoint appends the "km" unit itself.
        return {
            "lat": repr(self.lat),
            "lon": repr(self.lon),
            "range": f"{self.range_km:g}",
        }
