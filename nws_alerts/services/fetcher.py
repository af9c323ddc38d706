"""
Conditional fetch of NWS active alerts.

Docs: https://www.weather.gov/documentation/services-web-api

One GET per call, never retried here (the poller's next tick is the retry).
The ETag from the last good response is threaded through explicitly as the
freshness token so callers own it, not the HTTP client.

    200  → Success(features, etag or previous token)
    304  → Unchanged
    4xx/5xx → UpstreamError(status)
    timeout / connect error / bad JSON → TransportError
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union
from urllib.parse import quote

import httpx
import orjson

from nws_alerts.core.contracts import AlertConfig
from nws_alerts.core.settings import settings

logger = logging.getLogger(__name__)

GEOJSON_ACCEPT = "application/geo+json"


# ──────────────────────────────────────────────────────────────
# Outcomes
# ──────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Unchanged:
    pass


@dataclass(frozen=True)
class Success:
    features: List[Dict[str, Any]] = field(default_factory=list)
    freshness_token: Optional[str] = None


@dataclass(frozen=True)
class UpstreamError:
    status_code: int
    reason: str = ""


@dataclass(frozen=True)
class TransportError:
    message: str


FetchOutcome = Union[Unchanged, Success, UpstreamError, TransportError]


# ──────────────────────────────────────────────────────────────
# Request building
# ──────────────────────────────────────────────────────────────

def build_url(base_url: str, zones: Sequence[str]) -> str:
    # The API takes the zone filter as CSV; commas stay literal
    csv = ",".join(quote(z, safe="") for z in zones)
    if not csv:
        return base_url
    sep = "&" if "?" in base_url else "?"
    return f"{base_url}{sep}zone={csv}"


def build_headers(identification: str, freshness_token: Optional[str]) -> Dict[str, str]:
    headers = {
        "User-Agent": identification,
        "Accept": GEOJSON_ACCEPT,
    }
    if freshness_token:
        headers["If-None-Match"] = freshness_token
    return headers


def _parse_features(body: bytes) -> List[Dict[str, Any]]:
    data = orjson.loads(body)
    if not isinstance(data, dict):
        raise ValueError(f"expected a JSON object, got {type(data).__name__}")
    features = data.get("features")
    return features if isinstance(features, list) else []


class AlertFetcher:
    """Thin async wrapper around GET /alerts/active?zone=..."""

    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        timeout_s: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url: str = base_url or settings.nws_alerts_url
        self.timeout_s: float = float(timeout_s if timeout_s is not None else settings.nws_timeout_s)
        self.transport = transport

    async def _get(self, url: str, headers: Dict[str, str]) -> Tuple[httpx.Response, bytes]:
        async with httpx.AsyncClient(
            timeout=self.timeout_s,
            follow_redirects=True,
            transport=self.transport,
        ) as client:
            resp = await client.get(url, headers=headers)
            # Read inside the client so a dropped connection is a transport error
            body = await resp.aread()
        return resp, body

    async def fetch(self, config: AlertConfig, freshness_token: Optional[str] = None) -> FetchOutcome:
        if not config.zones:
            raise ValueError("fetch requires at least one zone")

        url = build_url(self.base_url, config.zones)
        headers = build_headers(config.identification, freshness_token)
        logger.debug("nws_fetch url=%s conditional=%s", url, bool(freshness_token))

        try:
            # httpx timeouts are per phase; a trickling body could outlive them
            resp, body = await asyncio.wait_for(self._get(url, headers), timeout=self.timeout_s)
        except (httpx.TimeoutException, asyncio.TimeoutError) as exc:
            logger.error("nws_fetch_timeout url=%s timeout_s=%.1f", url, self.timeout_s)
            return TransportError(message=f"timeout after {self.timeout_s:.0f}s: {exc!r}")
        except httpx.HTTPError as exc:
            logger.error("nws_fetch_transport_error url=%s error=%r", url, exc)
            return TransportError(message=str(exc) or exc.__class__.__name__)

        logger.info("nws_fetch status=%d %s", resp.status_code, resp.reason_phrase)

        if resp.status_code == 304:
            return Unchanged()

        if not resp.is_success:
            logger.warning(
                "nws_fetch_http_error status=%d body=%s",
                resp.status_code,
                body[:500].decode("utf-8", errors="replace"),
            )
            return UpstreamError(status_code=resp.status_code, reason=resp.reason_phrase)

        try:
            features = _parse_features(body)
        except (orjson.JSONDecodeError, ValueError) as exc:
            logger.error("nws_fetch_bad_body url=%s error=%s", url, exc)
            return TransportError(message=f"malformed response body: {exc}")

        token = resp.headers.get("etag") or freshness_token
        logger.info("nws_fetch features=%d etag=%s", len(features), token)
        return Success(features=features, freshness_token=token)
