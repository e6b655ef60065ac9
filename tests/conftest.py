"""
Shared fixtures for the GeoConnect test suite.

This conftest provides:
- Settings factory isolated from the host environment / .env
- Fake map view, results view and search client collaborators
- Reusable post factories
"""
from __future__ import annotations

import asyncio
import os
from dataclasses import dataclass, field
from typing import Any
from unittest.mock import patch

import pytest

from geoconnect.config import Settings
from geoconnect.schemas.post import Post
from geoconnect.spatial.bounds import ViewportBounds

# ---------------------------------------------------------------------------
# Sample data factories
# ---------------------------------------------------------------------------
SYRACUSE_BOUNDS = ViewportBounds(north=43.10, south=42.99, east=-76.05, west=-76.25)
NY_JUMP_BOUNDS = ViewportBounds(north=45.0, south=40.0, east=-70.0, west=-80.0)


def make_settings(**overrides: Any) -> Settings:
    """Fresh Settings ignoring GEOCONNECT_* env vars and the .env file."""
    defaults: dict[str, Any] = {
        "debounce_ms": 20,
        "require_login": False,
    }
    defaults.update(overrides)
    clean_env = {k: v for k, v in os.environ.items() if not k.startswith("GEOCONNECT_")}
    with patch.dict(os.environ, clean_env, clear=True):
        return Settings(_env_file=None, **defaults)


def make_post(
    user: str = "alice",
    message: str = "hello",
    lat: Any = 43.0481,
    lon: Any = -76.1474,
    url: str | None = None,
) -> Post:
    return Post.model_validate(
        {"user": user, "message": message, "location": {"lat": lat, "lon": lon}, "url": url}
    )


async def settle(rounds: int = 5) -> None:
    """Let scheduled tasks and callbacks run."""
    for _ in range(rounds):
        await asyncio.sleep(0)


# ---------------------------------------------------------------------------
# Fake collaborators
# ---------------------------------------------------------------------------
class FakeMapView:
    """Records camera moves and markers; can echo moves as notifications."""

    def __init__(
        self,
        bounds: ViewportBounds = SYRACUSE_BOUNDS,
        notify_on_fit: bool = True,
    ) -> None:
        self.bounds = bounds
        self.notify_on_fit = notify_on_fit
        self.callbacks: list = []
        self.fits: list[tuple[ViewportBounds, int]] = []
        self.markers: list = []
        self.clear_count = 0

    def get_bounds(self) -> ViewportBounds:
        return self.bounds

    def fit_bounds(self, bounds: ViewportBounds, padding: int = 0) -> None:
        self.fits.append((bounds, padding))
        self.bounds = bounds
        if self.notify_on_fit:
            self.emit_view_changed()

    def on_view_changed(self, callback) -> None:
        self.callbacks.append(callback)

    def clear_markers(self) -> None:
        self.clear_count += 1
        self.markers = []

    def add_marker(self, marker) -> None:
        self.markers.append(marker)

    # Test helpers
    def pan_to(self, bounds: ViewportBounds) -> None:
        self.bounds = bounds
        self.emit_view_changed()

    def emit_view_changed(self) -> None:
        for cb in list(self.callbacks):
            cb()


class FakeResultsView:
    def __init__(self) -> None:
        self.renders: list[list[Post]] = []
        self.messages: list[tuple[str, bool]] = []

    def render_results(self, posts) -> None:
        self.renders.append(list(posts))

    def show_message(self, text: str, ok: bool = True) -> None:
        self.messages.append((text, ok))

    @property
    def last_message(self) -> tuple[str, bool] | None:
        return self.messages[-1] if self.messages else None


class RecordingRenderer:
    """MapRenderer that only records what it was asked to draw."""

    def __init__(self) -> None:
        self.calls: list[tuple[list[Post], bool]] = []

    def render_on_map(self, posts, fit_to_bounds: bool) -> bool:
        self.calls.append((list(posts), fit_to_bounds))
        return False


@dataclass
class PendingCall:
    args: tuple
    future: asyncio.Future = field(repr=False)

    def resolve(self, posts: list[Post]) -> None:
        self.future.set_result(posts)

    def fail(self, exc: BaseException) -> None:
        self.future.set_exception(exc)


class FakeSearchClient:
    """Search client whose responses are released by the test, in any order."""

    def __init__(self, authenticated: bool = True) -> None:
        self.authenticated = authenticated
        self.range_calls: list[PendingCall] = []
        self.nearby_calls: list[PendingCall] = []

    async def fetch_range(self, bounds: ViewportBounds, limit: int) -> list[Post]:
        call = PendingCall((bounds, limit), asyncio.get_running_loop().create_future())
        self.range_calls.append(call)
        return await call.future

    async def fetch_nearby(self, lat: float, lon: float, range_km: float) -> list[Post]:
        call = PendingCall((lat, lon, range_km), asyncio.get_running_loop().create_future())
        self.nearby_calls.append(call)
        return await call.future


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def settings() -> Settings:
    return make_settings()


@pytest.fixture()
def map_view() -> FakeMapView:
    return FakeMapView()


@pytest.fixture()
def results_view() -> FakeResultsView:
    return FakeResultsView()


@pytest.fixture()
def renderer() -> RecordingRenderer:
    return RecordingRenderer()


@pytest.fixture()
def search_client() -> FakeSearchClient:
    return FakeSearchClient()
