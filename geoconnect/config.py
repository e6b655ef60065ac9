"""
GeoConnect — Configuration via pydantic-settings.

Environment variables override defaults.  The debounce quiet period and the
result cap are the two knobs that shape how often the map view talks to the
search endpoint.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import ClassVar

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    env_path: ClassVar[str] = str(Path(__file__).resolve().parents[1] / ".env")
    model_config = SettingsConfigDict(
        env_file=env_path,
        env_file_encoding="utf-8",
        env_prefix="GEOCONNECT_",
        # Ignore unrelated environment variables so a shared .env does
        # not cause validation errors for unknown keys.
        extra="ignore",
    )

    # ── Application ────────────────────────────────────────────────
    app_name: str = "GeoConnect"
    debug: bool = False
    log_level: str = "INFO"

    # ── Search endpoint ────────────────────────────────────────────
    api_base_url: str = "http://localhost:8080"
    # Bearer token sent with every search.  Storage and refresh of the
    # credential live outside this package.
    api_token: str = ""
    # None disables the client-side timeout.
    request_timeout: float | None = None

    # Upper bound on posts returned by one range query.
    search_limit: int = 100
    # Radius used by explicit searches when none is given (km).
    default_range_km: float = 200.0
    # Explicit searches are refused without a credential.
    require_login: bool = True

    # ── Viewport synchronization ───────────────────────────────────
    debounce_ms: int = 400
    # Cancel in-flight attempts as soon as a newer one is issued.
    cancel_superseded: bool = True

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000.0

    @property
    def auth_headers(self) -> dict[str, str]:
        """Authorization header for the search endpoint, if a token is set."""
        if not self.api_token:
            return {}
        return {"Authorization": f"Bearer {self.api_token}"}

    # ── Map fitting ────────────────────────────────────────────────
    fit_padding_px: int = 30
    # Minimum extent (degrees) of a fit box, so a single marker still
    # produces a usable rectangle.
    fit_min_span_deg: float = 0.01

    # ── Regions ────────────────────────────────────────────────────
    # Optional JSON file of extra/overriding region bounds.
    regions_file: Path | None = None


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
