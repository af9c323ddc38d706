from __future__ import annotations

from typing import Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


# ──────────────────────────────────────────────────────────────
# Shared vocab
# ──────────────────────────────────────────────────────────────

# CAP severity, lowest → highest
Severity = Literal["Unknown", "Minor", "Moderate", "Severe", "Extreme"]

SEVERITY_RANK: Dict[str, int] = {
    "Unknown": 0,
    "Minor": 1,
    "Moderate": 2,
    "Severe": 3,
    "Extreme": 4,
}

SortMode = Literal["severity", "expires"]


# ──────────────────────────────────────────────────────────────
# Poller configuration
# ──────────────────────────────────────────────────────────────

class AlertConfig(BaseModel):
    """Canonical poller settings. Build via services.config.normalize_config."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    zones: Tuple[str, ...] = ()
    poll_interval_ms: int = Field(default=300_000, alias="pollIntervalMs")
    identification: str
    min_severity: Severity = Field(default="Minor", alias="minSeverity")
    sort_mode: SortMode = Field(default="severity", alias="sortMode")


# ──────────────────────────────────────────────────────────────
# Alerts
# ──────────────────────────────────────────────────────────────

class NormalizedAlert(BaseModel):
    # camelCase on the wire, same as the upstream feature properties
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: Optional[str] = None
    event: str = ""
    headline: str = ""
    severity: Severity = "Unknown"
    urgency: str = ""
    certainty: str = ""
    area_desc: str = Field(default="", alias="areaDesc")
    effective: Optional[str] = None   # ISO8601, unparsed
    expires: Optional[str] = None     # ISO8601, unparsed
    sender_name: str = Field(default="", alias="senderName")
    description: str = ""


class AlertFeedSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    items: List[NormalizedAlert] = Field(default_factory=list)
    published_at: Optional[str] = None
    feed_key: str
    count: int = 0
