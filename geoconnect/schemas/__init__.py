"""Schemas subpackage — Pydantic models for search requests and posts."""

from geoconnect.schemas.post import (
    Location,
    NearbyQuery,
    Post,
    RangeQuery,
    parse_posts,
)

__all__ = [
    "Location",
    "NearbyQuery",
    "Post",
    "RangeQuery",
    "parse_posts",
]
