from __future__ import annotations

from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=None, extra="ignore")

    # ──────────────────────────────────────────────────────────────
    # Upstream: NWS active alerts (api.weather.gov)
    # GeoJSON FeatureCollection, filtered by ?zone=<CSV of zone codes>.
    # No auth, but a contact User-Agent is required.
    # ──────────────────────────────────────────────────────────────

    nws_alerts_url: str = Field(
        default="https://api.weather.gov/alerts/active",
        alias="NWS_ALERTS_URL",
    )
    nws_timeout_s: float = Field(default=20.0, alias="NWS_TIMEOUT_S")
    nws_user_agent: str = Field(
        default="nws-alerts/1.0 (you@example.com)",
        alias="NWS_USER_AGENT",
    )

    # ──────────────────────────────────────────────────────────────
    # Poller defaults (replaced at runtime via PUT /config)
    # ──────────────────────────────────────────────────────────────

    # Zone (SDZ013) or county (SDC099) codes, comma separated
    alert_zones: str = Field(default="", alias="ALERT_ZONES")
    poll_interval_ms: int = Field(default=5 * 60 * 1000, alias="POLL_INTERVAL_MS")
    min_severity: str = Field(default="Minor", alias="MIN_SEVERITY")
    sort_mode: str = Field(default="severity", alias="SORT_MODE")

    # Per-subscriber backlog before old snapshots are dropped
    feed_queue_size: int = Field(default=8, alias="FEED_QUEUE_SIZE")

    def zone_list(self) -> List[str]:
        return [z for z in self.alert_zones.split(",") if z.strip()]


settings = Settings()
