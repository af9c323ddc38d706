"""
Shared fixtures: upstream features, canonical configs, fake fetcher/publisher.
"""
from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import pytest

from nws_alerts.core.contracts import AlertConfig, NormalizedAlert
from nws_alerts.services.fetcher import FetchOutcome


NOW = datetime(2025, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


def iso(dt: datetime) -> str:
    return dt.isoformat()


# ============================================================================
# Upstream features
# ============================================================================

def make_feature(
    *,
    fid: Optional[str] = "https://api.weather.gov/alerts/urn:oid:1",
    event: str = "Winter Storm Warning",
    severity: Optional[str] = "Severe",
    expires: Optional[str] = None,
    **props: Any,
) -> Dict[str, Any]:
    p: Dict[str, Any] = {
        "event": event,
        "headline": f"{event} issued by NWS Sioux Falls SD",
        "severity": severity,
        "urgency": "Expected",
        "certainty": "Likely",
        "areaDesc": "Minnehaha",
        "effective": "2025-06-01T10:00:00-05:00",
        "expires": expires,
        "senderName": "NWS Sioux Falls SD",
        "description": "Heavy snow expected.",
        "instruction": "Travel could be very difficult.",
    }
    p.update(props)
    return {"id": fid, "type": "Feature", "properties": p}


@pytest.fixture
def feature_factory():
    return make_feature


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def future_expires() -> str:
    return iso(NOW + timedelta(minutes=10))


@pytest.fixture
def past_expires() -> str:
    return iso(NOW - timedelta(minutes=10))


# ============================================================================
# Configs
# ============================================================================

@pytest.fixture
def config() -> AlertConfig:
    return AlertConfig(
        zones=("SDZ013",),
        poll_interval_ms=300_000,
        identification="nws-alerts-tests (ops@example.com)",
        min_severity="Minor",
        sort_mode="severity",
    )


@pytest.fixture
def empty_config(config) -> AlertConfig:
    return config.model_copy(update={"zones": ()})


# ============================================================================
# Fakes
# ============================================================================

class FakeFetcher:
    """Replays queued outcomes; records every (config, token) it was called with."""

    def __init__(self, outcomes: Optional[List[FetchOutcome]] = None) -> None:
        self.outcomes: List[FetchOutcome] = list(outcomes or [])
        self.calls: List[tuple] = []
        self.gate: Optional[asyncio.Event] = None

    async def fetch(self, config: AlertConfig, freshness_token: Optional[str] = None) -> FetchOutcome:
        self.calls.append((config, freshness_token))
        if self.gate is not None:
            await self.gate.wait()
        return self.outcomes.pop(0)


class RecordingPublisher:
    def __init__(self) -> None:
        self.published: List[List[NormalizedAlert]] = []

    def publish(self, alerts) -> None:
        self.published.append(list(alerts))


@pytest.fixture
def fake_fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture
def publisher() -> RecordingPublisher:
    return RecordingPublisher()
