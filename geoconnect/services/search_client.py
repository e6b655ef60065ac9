"""
Post Search Client
==================
Async HTTP client for the GeoConnect ``/search`` endpoint.

Two query shapes share the endpoint:

- **Range**  ``GET /search?north=&south=&east=&west=&limit=``  (viewport
  follow and region jumps).
- **Nearby** ``GET /search?lat=&lon=&range=``  (explicit searches; range
  in kilometres).

Error Handling
--------------
- Transport failures (DNS, refused connection, reset, timeout) raise
  ``SearchTransportError``.
- Non-2xx responses raise ``SearchResponseError`` carrying the status
  code and the server's body text.
- A 2xx body that is not a JSON array of posts is treated as an empty
  result; it never raises.
"""

from __future__ import annotations

import json
import logging

import httpx

from geoconnect.config import Settings, get_settings
from geoconnect.schemas.post import NearbyQuery, Post, RangeQuery, parse_posts
from geoconnect.spatial.bounds import ViewportBounds

logger = logging.getLogger(__name__)

SEARCH_PATH = "/search"


# ── Errors ────────────────────────────────────────────────────────
class SearchError(Exception):
    """Base class for failed searches."""

    def user_message(self) -> str:
        return f"Search failed: {self}"


class SearchTransportError(SearchError):
    """The request could not be completed."""

    def user_message(self) -> str:
        return f"Network error: {self}"


class SearchResponseError(SearchError):
    """The endpoint answered with a non-success status."""

    def __init__(self, status_code: int, detail: str = "") -> None:
        self.status_code = status_code
        self.detail = detail.strip()
        super().__init__(self.detail or f"HTTP {status_code}")


# ── Client ────────────────────────────────────────────────────────
class PostSearchClient:
    """
    Issues range and nearby queries and decodes the posts.

    The underlying ``httpx.AsyncClient`` may be injected (tests pass one
    bound to an ``ASGITransport``); otherwise one is built from settings
    and owned by this instance.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(
            base_url=self.settings.api_base_url,
            timeout=self.settings.request_timeout,
        )

    @property
    def authenticated(self) -> bool:
        return bool(self.settings.api_token)

    async def fetch_range(self, bounds: ViewportBounds, limit: int) -> list[Post]:
        """Fetch at most *limit* posts located inside *bounds*."""
        query = RangeQuery.from_bounds(bounds, limit)
        return await self._get(query.to_params())

    async def fetch_nearby(
        self, lat: float, lon: float, range_km: float,
    ) -> list[Post]:
        """Fetch posts within *range_km* of ``(lat, lon)``."""
        query = NearbyQuery(lat=lat, lon=lon, range_km=range_km)
        return await self._get(query.to_params())

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    # ── Internals ─────────────────────────────────────────────

    async def _get(self, params: dict[str, str]) -> list[Post]:
        try:
            resp = await self._http.get(
                SEARCH_PATH,
                params=params,
                headers=self.settings.auth_headers,
            )
        except httpx.TransportError as exc:
            logger.warning("Search transport failure: %s", exc)
            raise SearchTransportError(str(exc) or type(exc).__name__) from exc

        if not resp.is_success:
            logger.warning(
                "Search returned HTTP %d: %s", resp.status_code, resp.text[:200],
            )
            raise SearchResponseError(resp.status_code, resp.text)

        try:
            payload = resp.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            logger.warning("Search returned a non-JSON body; treating as empty")
            return []

        posts = parse_posts(payload)
        logger.debug("Search %s returned %d post(s)", params, len(posts))
        return posts
