"""
Viewport Search Coordinator
===========================
Keeps the result list and map markers in step with the visible map region.

Triggers
--------
a. ``search_nearby``   — explicit center + radius search.  Issued at once,
   rendered unconditionally, always fits the map to the results.
b. ``on_view_changed`` — map pan/zoom.  Debounced; the latest attempt wins
   and auto-fit happens only on the first successful render.
c. ``jump_to_region``  — move the camera to a catalog region and search it.
   The camera move's own notification is swallowed by the latch.
d. ``on_map_ready``    — one immediate viewport search on first load.

Ordering Model
--------------
Every attempt takes a number from the ``SequenceGuard``.  A viewport or
region response is applied only while its number is still the latest one
issued; anything older is dropped without touching the UI.  When
``cancel_superseded`` is on, superseded tasks are also cancelled so their
requests stop early.  Explicit searches skip the staleness check.
Fitting the map to results arms the latch as well, so that camera move is
never searched.

All methods must be called from the event loop thread.  Shared state is
never locked.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from pydantic import ValidationError

from geoconnect.config import Settings, get_settings
from geoconnect.schemas.post import NearbyQuery, Post
from geoconnect.services.collaborators import (
    MapRenderer,
    MapView,
    ResultsView,
    SearchClient,
)
from geoconnect.services.debounce import Debouncer
from geoconnect.services.guards import FitPolicy, SequenceGuard, SuppressionLatch
from geoconnect.services.markers import MarkerLayer
from geoconnect.services.search_client import SearchError
from geoconnect.spatial.bounds import ViewportBounds
from geoconnect.spatial.regions import RegionCatalog

logger = logging.getLogger(__name__)


class CoordinatorState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"


class SearchTrigger(str, Enum):
    EXPLICIT = "explicit"
    VIEWPORT = "viewport"
    REGION = "region"
    INITIAL = "initial"


@dataclass(frozen=True, slots=True)
class SearchAttempt:
    """One issued search; never mutated after creation."""

    sequence_id: int
    bounds: ViewportBounds
    trigger: SearchTrigger
    issued_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc),
    )


class ViewportSearchCoordinator:
    """
    Decides when to search, which response is authoritative, and keeps
    programmatic camera moves from triggering searches of their own.

    Parameters
    ----------
    map_view : MapView
        Map widget: bounds, camera moves, view-changed subscription.
    results_view : ResultsView
        Result list and inline status message.
    client : SearchClient
        Remote post search.
    regions : RegionCatalog, optional
        Region lookup for ``jump_to_region`` (built-in table by default).
    map_renderer : MapRenderer, optional
        Draws accepted posts; defaults to a ``MarkerLayer`` on *map_view*.
    settings : Settings, optional
    debouncer : Debouncer, optional
        Defaults to one with ``settings.debounce_seconds``.
    """

    def __init__(
        self,
        map_view: MapView,
        results_view: ResultsView,
        client: SearchClient,
        *,
        regions: RegionCatalog | None = None,
        map_renderer: MapRenderer | None = None,
        settings: Settings | None = None,
        debouncer: Debouncer | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.map_view = map_view
        self.results_view = results_view
        self.client = client
        self.regions = regions if regions is not None else RegionCatalog()
        self.map_renderer = map_renderer or MarkerLayer(
            map_view,
            padding=self.settings.fit_padding_px,
            min_span_deg=self.settings.fit_min_span_deg,
        )
        self.debouncer = debouncer or Debouncer(self.settings.debounce_seconds)

        self.sequence = SequenceGuard()
        self.latch = SuppressionLatch()
        self.fit_policy = FitPolicy()

        # Viewport/region attempts still running, keyed by sequence id.
        self._in_flight: dict[int, asyncio.Task[None]] = {}
        self._explicit: set[asyncio.Task[None]] = set()
        # Id of the latest viewport/region attempt not yet answered.
        self._pending_id: int | None = None
        self._attached = False

    # ── State ─────────────────────────────────────────────────

    @property
    def state(self) -> CoordinatorState:
        if self._pending_id is not None or self._explicit:
            return CoordinatorState.PENDING
        return CoordinatorState.IDLE

    def attach(self) -> None:
        """Subscribe to the map's view-changed notifications (once)."""
        if self._attached:
            return
        self.map_view.on_view_changed(self.on_view_changed)
        self._attached = True

    # ── Triggers ──────────────────────────────────────────────

    def on_view_changed(self) -> None:
        """Map notification: the visible bounds changed."""
        if self.latch.consume_if_armed():
            logger.debug("View change suppressed (programmatic move)")
            return
        self.debouncer.schedule(self.search_viewport)

    def on_map_ready(self) -> asyncio.Task[None]:
        """First load: search the initial bounds without waiting for a move."""
        return self._start_range_search(
            self.map_view.get_bounds(), SearchTrigger.INITIAL,
        )

    def search_viewport(self) -> asyncio.Task[None]:
        """Search whatever the map currently shows."""
        return self._start_range_search(
            self.map_view.get_bounds(), SearchTrigger.VIEWPORT,
        )

    def jump_to_region(self, key: str) -> asyncio.Task[None] | None:
        """
        Move the map to a catalog region and search it.

        Unknown keys are ignored entirely: no camera move, no request, no
        message.
        """
        bounds = self.regions.lookup(key)
        if bounds is None:
            logger.debug(
                "Unknown region %r; ignoring jump (known: %s)",
                key, ", ".join(self.regions.keys()),
            )
            return None

        self.latch.arm_for_next_move()
        self.map_view.fit_bounds(bounds)
        return self._start_range_search(bounds, SearchTrigger.REGION)

    def search_nearby(
        self,
        lat: float,
        lon: float,
        range_km: float | None = None,
    ) -> asyncio.Task[None] | None:
        """
        Explicit search around ``(lat, lon)``.

        Returns ``None`` when nothing was issued (not logged in, or invalid
        parameters); the reason is shown as a message.
        """
        self.results_view.render_results([])
        if self.settings.require_login and not self.client.authenticated:
            self.results_view.show_message("Please log in first.", ok=False)
            return None

        if range_km is None:
            range_km = self.settings.default_range_km
        try:
            query = NearbyQuery(lat=lat, lon=lon, range_km=range_km)
        except ValidationError:
            self.results_view.show_message("Invalid search parameters.", ok=False)
            return None

        attempt = SearchAttempt(
            sequence_id=self.sequence.next(),
            bounds=ViewportBounds.around(query.lat, query.lon, query.range_km),
            trigger=SearchTrigger.EXPLICIT,
        )
        # Older viewport/region attempts are stale from here on.
        self._supersede(attempt.sequence_id)
        self._pending_id = None

        self.results_view.show_message("Searching...", ok=True)
        task = asyncio.get_running_loop().create_task(
            self._run_nearby(attempt, query),
        )
        self._explicit.add(task)
        task.add_done_callback(self._explicit.discard)
        logger.debug(
            "Issued explicit search #%d (%.5f, %.5f, %gkm)",
            attempt.sequence_id, query.lat, query.lon, query.range_km,
        )
        return task

    # ── Shutdown ──────────────────────────────────────────────

    async def aclose(self) -> None:
        """Cancel the debounce timer and every outstanding attempt."""
        self.debouncer.cancel()
        tasks = [*self._in_flight.values(), *self._explicit]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._pending_id = None

    # ── Range attempts (viewport, initial, region) ────────────

    def _start_range_search(
        self, bounds: ViewportBounds, trigger: SearchTrigger,
    ) -> asyncio.Task[None]:
        attempt = SearchAttempt(
            sequence_id=self.sequence.next(),
            bounds=bounds,
            trigger=trigger,
        )
        self._supersede(attempt.sequence_id)
        self._pending_id = attempt.sequence_id

        task = asyncio.get_running_loop().create_task(self._run_range(attempt))
        self._in_flight[attempt.sequence_id] = task
        task.add_done_callback(
            lambda _t, sid=attempt.sequence_id: self._in_flight.pop(sid, None)
        )
        logger.debug(
            "Issued %s search #%d for %s",
            trigger.value, attempt.sequence_id, bounds.to_dict(),
        )
        return task

    def _supersede(self, newest_id: int) -> None:
        if not self.settings.cancel_superseded:
            return
        for sequence_id, task in list(self._in_flight.items()):
            if sequence_id != newest_id and not task.done():
                task.cancel()
                logger.debug("Cancelled superseded search #%d", sequence_id)

    async def _run_range(self, attempt: SearchAttempt) -> None:
        try:
            posts = await self.client.fetch_range(
                attempt.bounds, self.settings.search_limit,
            )
        except SearchError as exc:
            self._fail(attempt, exc.user_message())
            return
        except Exception as exc:
            logger.exception("Search #%d failed unexpectedly", attempt.sequence_id)
            self._fail(attempt, f"Search failed: {exc}")
            return

        if not self.sequence.is_current(attempt.sequence_id):
            logger.debug(
                "Discarding stale search #%d (current #%d)",
                attempt.sequence_id, self.sequence.current,
            )
            return

        self._finish(attempt)
        if logger.isEnabledFor(logging.DEBUG):
            self._log_outside(attempt, posts)
        if attempt.trigger is SearchTrigger.REGION:
            # The jump already positioned the camera.
            self.fit_policy.consume()
            fit = False
        else:
            fit = self.fit_policy.consume()
        self._render(posts, fit)

    def _fail(self, attempt: SearchAttempt, text: str) -> None:
        if not self.sequence.is_current(attempt.sequence_id):
            logger.debug("Ignoring failure of stale search #%d", attempt.sequence_id)
            return
        self._finish(attempt)
        self.results_view.show_message(text, ok=False)

    def _finish(self, attempt: SearchAttempt) -> None:
        if self._pending_id == attempt.sequence_id:
            self._pending_id = None

    # ── Explicit attempts ─────────────────────────────────────

    async def _run_nearby(self, attempt: SearchAttempt, query: NearbyQuery) -> None:
        try:
            posts = await self.client.fetch_nearby(
                query.lat, query.lon, query.range_km,
            )
        except SearchError as exc:
            self.results_view.show_message(exc.user_message(), ok=False)
            return
        except Exception as exc:
            logger.exception("Search #%d failed unexpectedly", attempt.sequence_id)
            self.results_view.show_message(f"Search failed: {exc}", ok=False)
            return

        self._render(posts, fit=True)

    # ── Rendering ─────────────────────────────────────────────

    def _render(self, posts: Sequence[Post], fit: bool) -> None:
        # A fit moves the camera; its notification must not start a search.
        if fit:
            self.latch.arm_for_next_move()
        try:
            self.results_view.render_results(posts)
            moved = self.map_renderer.render_on_map(posts, fit)
        except Exception:
            if fit:
                self.latch.disarm()
            logger.exception("Rendering %d result(s) failed", len(posts))
            return
        if fit and not moved:
            self.latch.disarm()
        self.results_view.show_message(f"Found {len(posts)} result(s).", ok=True)

    def _log_outside(self, attempt: SearchAttempt, posts: Sequence[Post]) -> None:
        outside = sum(
            1 for post in posts
            if post.coordinates is not None
            and not attempt.bounds.contains_point(*post.coordinates)
        )
        if outside:
            logger.debug(
                "Search #%d returned %d post(s) outside the requested bounds",
                attempt.sequence_id, outside,
            )
