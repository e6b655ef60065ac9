"""
GeoConnect — Coordinator wiring
===============================
Builds the viewport search object graph for a host application and
manages its lifetime (HTTP client, timers, in-flight searches).
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from geoconnect.config import Settings, get_settings
from geoconnect.services.collaborators import (
    MapRenderer,
    MapView,
    ResultsView,
    SearchClient,
)
from geoconnect.services.coordinator import ViewportSearchCoordinator
from geoconnect.services.search_client import PostSearchClient
from geoconnect.spatial.regions import RegionCatalog

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(settings: Settings | None = None) -> None:
    """Set the root log level from settings (DEBUG when ``debug`` is on)."""
    settings = settings or get_settings()
    if settings.debug:
        level = logging.DEBUG
    else:
        level = logging.getLevelNamesMapping().get(
            settings.log_level.upper(), logging.INFO,
        )
    logging.basicConfig(level=level, format=LOG_FORMAT)
    # httpx logs every request at INFO.
    logging.getLogger("httpx").setLevel(
        logging.DEBUG if settings.debug else logging.WARNING
    )


def load_regions(settings: Settings) -> RegionCatalog:
    if settings.regions_file is None:
        return RegionCatalog()
    return RegionCatalog.from_json(settings.regions_file)


# ── Factory ───────────────────────────────────────────────────────
def create_coordinator(
    map_view: MapView,
    results_view: ResultsView,
    *,
    settings: Settings | None = None,
    client: SearchClient | None = None,
    regions: RegionCatalog | None = None,
    map_renderer: MapRenderer | None = None,
) -> ViewportSearchCoordinator:
    settings = settings or get_settings()
    return ViewportSearchCoordinator(
        map_view,
        results_view,
        client or PostSearchClient(settings),
        regions=regions if regions is not None else load_regions(settings),
        map_renderer=map_renderer,
        settings=settings,
    )


# ── Session (startup / shutdown) ──────────────────────────────────
@asynccontextmanager
async def coordinator_session(
    map_view: MapView,
    results_view: ResultsView,
    *,
    settings: Settings | None = None,
    client: SearchClient | None = None,
    regions: RegionCatalog | None = None,
) -> AsyncIterator[ViewportSearchCoordinator]:
    """
    Attach a coordinator to *map_view* for the duration of the block.

    Startup:
        - Build the search client (unless one is supplied).
        - Subscribe to view-changed notifications.
    Shutdown:
        - Cancel the debounce timer and outstanding searches.
        - Close the HTTP client if this session created it.
    """
    settings = settings or get_settings()
    owned_client = PostSearchClient(settings) if client is None else None
    coordinator = create_coordinator(
        map_view,
        results_view,
        settings=settings,
        client=client or owned_client,
        regions=regions,
    )
    coordinator.attach()
    logger.info(
        "%s viewport search started (api=%s, debounce=%dms)",
        settings.app_name, settings.api_base_url, settings.debounce_ms,
    )
    try:
        yield coordinator
    finally:
        await coordinator.aclose()
        if owned_client is not None:
            await owned_client.aclose()
        logger.info("%s viewport search stopped.", settings.app_name)
