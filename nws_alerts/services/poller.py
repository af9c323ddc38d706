"""
Poll scheduler: fetch → normalize → filter/sort → publish, on a timer.

States:

    IDLE ──configure──▶ CONFIGURED ──▶ POLLING ⇄ WAITING
      any ──configure──▶ CONFIGURED (timer cancelled, cycle restarts now)
      any ──stop──▶ STOPPED

Every pipeline execution publishes exactly one list: the fresh one on
Success, otherwise last_known_good. last_known_good and the freshness token
are written only on Success under the active config, so consumers never see
a half-built or error-emptied list after real data has arrived.

All mutable state lives on the event loop that calls configure(); no locks.
A pipeline execution runs as its own task and is shielded from the cycle, so
reconfiguring mid-fetch lets that fetch finish (and publish) against the
config it was issued with. Its result is not cached.
"""
from __future__ import annotations

import asyncio
import enum
import logging
from datetime import datetime
from typing import Awaitable, Callable, List, Optional, Set

from nws_alerts.core.contracts import AlertConfig, NormalizedAlert
from nws_alerts.core.time import utc_now
from nws_alerts.services.feed import AlertPublisher
from nws_alerts.services.fetcher import (
    AlertFetcher,
    Success,
    TransportError,
    Unchanged,
    UpstreamError,
)
from nws_alerts.services.filtering import process
from nws_alerts.services.normalizer import normalize

logger = logging.getLogger(__name__)


class PollerState(str, enum.Enum):
    IDLE = "idle"
    CONFIGURED = "configured"
    POLLING = "polling"
    WAITING = "waiting"
    STOPPED = "stopped"


class AlertPoller:
    def __init__(
        self,
        *,
        fetcher: AlertFetcher,
        publisher: AlertPublisher,
        clock: Callable[[], datetime] = utc_now,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.fetcher = fetcher
        self.publisher = publisher
        self.clock = clock
        self.sleep = sleep

        self.state: PollerState = PollerState.IDLE
        self.config: Optional[AlertConfig] = None
        self.freshness_token: Optional[str] = None
        self.last_known_good: List[NormalizedAlert] = []

        self._cycle: Optional[asyncio.Task] = None
        self._inflight: Set[asyncio.Task] = set()

    # ──────────────────────────────────────────────────────────────
    # Lifecycle
    # ──────────────────────────────────────────────────────────────

    def configure(self, config: AlertConfig) -> None:
        if self.state is PollerState.STOPPED:
            raise RuntimeError("poller is stopped")

        self._cancel_cycle()

        # A 304 for the new cycle would replay a list built under the old
        # filters, so the first fetch after any reconfiguration is unconditional
        self.freshness_token = None

        self.config = config
        self.state = PollerState.CONFIGURED
        logger.info(
            "[poller] configured zones=%s interval_ms=%d min_severity=%s sort=%s",
            ",".join(config.zones) or "-",
            config.poll_interval_ms,
            config.min_severity,
            config.sort_mode,
        )
        self._cycle = asyncio.get_running_loop().create_task(self._run_cycle(config))

    async def stop(self) -> None:
        self.state = PollerState.STOPPED
        tasks = list(self._inflight)
        if self._cycle is not None:
            tasks.append(self._cycle)
        self._cancel_cycle()
        for t in list(self._inflight):
            t.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        logger.info("[poller] stopped")

    def _cancel_cycle(self) -> None:
        if self._cycle is not None and not self._cycle.done():
            self._cycle.cancel()
        self._cycle = None

    async def _run_cycle(self, config: AlertConfig) -> None:
        interval_s = config.poll_interval_ms / 1000.0
        while True:
            self.state = PollerState.POLLING
            task = asyncio.get_running_loop().create_task(self.run_once(config))
            self._inflight.add(task)
            task.add_done_callback(self._inflight.discard)
            await asyncio.shield(task)

            self.state = PollerState.WAITING
            await self.sleep(interval_s)

    # ──────────────────────────────────────────────────────────────
    # Pipeline
    # ──────────────────────────────────────────────────────────────

    def _is_current(self, config: AlertConfig) -> bool:
        # run_once may be driven directly, without configure()
        return self.config is None or self.config == config

    def _publish(self, alerts: List[NormalizedAlert]) -> None:
        if self.state is PollerState.STOPPED:
            return
        self.publisher.publish(alerts)

    async def run_once(self, config: AlertConfig) -> List[NormalizedAlert]:
        """Execute one fetch→normalize→process cycle and publish the result."""
        if not config.zones:
            logger.warning("[poller] no zones configured")
            self._publish([])
            return []

        try:
            outcome = await self.fetcher.fetch(config, self.freshness_token)

            if isinstance(outcome, Success):
                raw = normalize(outcome.features)
                alerts = process(raw, config, self.clock())
                logger.info(
                    "[poller] features=%d kept=%d min_severity=%s sort=%s",
                    len(raw),
                    len(alerts),
                    config.min_severity,
                    config.sort_mode,
                )
                if self._is_current(config):
                    self.freshness_token = outcome.freshness_token
                    self.last_known_good = alerts
                self._publish(alerts)
                return alerts

            if isinstance(outcome, Unchanged):
                logger.info("[poller] not modified; reusing %d alerts", len(self.last_known_good))
            elif isinstance(outcome, UpstreamError):
                logger.warning(
                    "[poller] upstream error status=%d %s; reusing %d alerts",
                    outcome.status_code,
                    outcome.reason,
                    len(self.last_known_good),
                )
            elif isinstance(outcome, TransportError):
                logger.error(
                    "[poller] transport error: %s; reusing %d alerts",
                    outcome.message,
                    len(self.last_known_good),
                )
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("[poller] pipeline failed; reusing %d alerts", len(self.last_known_good))

        self._publish(self.last_known_good)
        return self.last_known_good
