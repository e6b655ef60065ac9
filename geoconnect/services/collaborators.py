"""
Interfaces the coordinator drives.

The map widget, the result list, and the search backend are supplied by the
host application; these protocols describe only what the coordinator and
``MarkerLayer`` call on them.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from geoconnect.schemas.post import Post
    from geoconnect.services.markers import Marker
    from geoconnect.spatial.bounds import ViewportBounds


class MapView(Protocol):
    """The interactive map widget."""

    def get_bounds(self) -> ViewportBounds: ...

    def fit_bounds(self, bounds: ViewportBounds, padding: int = 0) -> None:
        """Move the camera to show *bounds*; raises a view-changed notification."""
        ...

    def on_view_changed(self, callback: Callable[[], None]) -> None:
        """Register *callback*, invoked once per discrete view change."""
        ...

    def clear_markers(self) -> None: ...

    def add_marker(self, marker: Marker) -> None: ...


class ResultsView(Protocol):
    """Result list plus the inline status line next to the search form."""

    def render_results(self, posts: Sequence[Post]) -> None: ...

    def show_message(self, text: str, ok: bool = True) -> None: ...


class MapRenderer(Protocol):
    def render_on_map(self, posts: Sequence[Post], fit_to_bounds: bool) -> bool:
        """Draw *posts*; return True if the camera was moved to fit them."""
        ...


class SearchClient(Protocol):
    """Remote post search (see ``PostSearchClient``)."""

    @property
    def authenticated(self) -> bool: ...

    async def fetch_range(self, bounds: ViewportBounds, limit: int) -> list[Post]: ...

    async def fetch_nearby(
        self, lat: float, lon: float, range_km: float,
    ) -> list[Post]: ...
