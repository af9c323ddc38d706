from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from nws_alerts.core.contracts import SEVERITY_RANK, AlertConfig, NormalizedAlert
from nws_alerts.core.time import ensure_aware, parse_iso, utc_now

# Alerts that expired less than this long ago are still shown
EXPIRY_GRACE = timedelta(minutes=1)

DEFAULT_FLOOR_RANK = SEVERITY_RANK["Minor"]


def severity_rank(level: Optional[str]) -> int:
    return SEVERITY_RANK.get(level or "", 0)


def floor_rank(min_severity: Optional[str]) -> int:
    return SEVERITY_RANK.get(min_severity or "", DEFAULT_FLOOR_RANK)


def filter_by_severity(alerts: Iterable[NormalizedAlert], min_severity: Optional[str]) -> List[NormalizedAlert]:
    floor = floor_rank(min_severity)
    return [a for a in alerts if severity_rank(a.severity) >= floor]


def is_live(alert: NormalizedAlert, now: datetime) -> bool:
    # No or unparseable expiry → keep
    exp = parse_iso(alert.expires)
    if exp is None:
        return True
    return exp > ensure_aware(now) - EXPIRY_GRACE


def filter_live(alerts: Iterable[NormalizedAlert], now: datetime) -> List[NormalizedAlert]:
    return [a for a in alerts if is_live(a, now)]


def sort_alerts(alerts: Iterable[NormalizedAlert], sort_mode: str) -> List[NormalizedAlert]:
    # sorted() is stable: equal keys keep input order
    if sort_mode == "expires":
        return sorted(alerts, key=lambda a: a.expires or "")
    return sorted(alerts, key=lambda a: -severity_rank(a.severity))


def process(
    alerts: Iterable[NormalizedAlert],
    config: AlertConfig,
    now: Optional[datetime] = None,
) -> List[NormalizedAlert]:
    """
    Severity floor → liveness → ordering.

    Pure for a fixed `now`; `now` defaults to the current UTC time.
    """
    when = now if now is not None else utc_now()
    out = filter_by_severity(alerts, config.min_severity)
    out = filter_live(out, when)
    return sort_alerts(out, config.sort_mode)
