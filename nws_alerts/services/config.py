"""
Config normalizer for the alert poller.

Accepts the loosely-typed settings a caller (env, PUT /config, CLI) hands us
and produces a canonical, immutable AlertConfig:

  - zones: str() → strip → upper, empties and duplicates dropped
  - poll interval: never faster than once a minute (api.weather.gov etiquette)
  - identification: never empty, printable ASCII (it is the User-Agent header)
  - min severity: case-insensitive; absent or unrecognized → "Minor"
  - sort mode: "expires", anything else → "severity"

Both the legacy camelCase keys (updateInterval, userAgent, sortBy) and the
snake_case field names are accepted.
"""
from __future__ import annotations

import math
from typing import Any, List, Mapping, Optional, Sequence

from nws_alerts.core.contracts import SEVERITY_RANK, AlertConfig
from nws_alerts.core.errors import InvalidConfig
from nws_alerts.core.settings import Settings, settings as default_settings

MIN_POLL_INTERVAL_MS = 60_000
DEFAULT_POLL_INTERVAL_MS = 5 * 60 * 1000
DEFAULT_MIN_SEVERITY = "Minor"

_SEVERITY_BY_LOWER = {k.lower(): k for k in SEVERITY_RANK}

# canonical field → accepted input keys, first match wins
_KEYS = {
    "poll_interval_ms": ("pollIntervalMs", "poll_interval_ms", "updateInterval"),
    "identification": ("identification", "userAgent", "user_agent"),
    "min_severity": ("minSeverity", "min_severity"),
    "sort_mode": ("sortMode", "sort_mode", "sortBy"),
}


def _pick(raw: Mapping[str, Any], field: str) -> Any:
    for k in _KEYS[field]:
        if k in raw and raw[k] is not None:
            return raw[k]
    return None


def normalize_zones(zones: Any) -> List[str]:
    if not isinstance(zones, (list, tuple, set, frozenset)):
        raise InvalidConfig(f"zones must be a list of zone codes, got {type(zones).__name__}")

    out: List[str] = []
    seen = set()
    for z in zones:
        code = str(z if z is not None else "").strip().upper()
        if not code or code in seen:
            continue
        seen.add(code)
        out.append(code)
    return out


def normalize_interval(value: Any, default: int = DEFAULT_POLL_INTERVAL_MS) -> int:
    try:
        f = float(value)
    except (TypeError, ValueError, OverflowError):
        f = 0.0
    # inf/nan are treated like any other non-numeric value
    ms = int(f) if math.isfinite(f) else 0
    if ms == 0:
        ms = int(default) or DEFAULT_POLL_INTERVAL_MS
    return max(MIN_POLL_INTERVAL_MS, ms)


def normalize_identification(value: Any, default: str) -> str:
    ident = str(value or "").strip() or default.strip() or "nws-alerts/1.0"
    # sent verbatim as the User-Agent header value
    if not all(" " <= ch <= "~" for ch in ident):
        raise InvalidConfig(f"identification must be printable ASCII, got {ident!r}")
    return ident


def normalize_severity(value: Any) -> str:
    key = str(value or "").strip().lower()
    return _SEVERITY_BY_LOWER.get(key, DEFAULT_MIN_SEVERITY)


def normalize_sort_mode(value: Any) -> str:
    return "expires" if str(value or "").strip().lower() == "expires" else "severity"


def normalize_config(
    raw: Optional[Mapping[str, Any]],
    defaults: Optional[Settings] = None,
) -> AlertConfig:
    """
    Canonicalize a user-supplied config mapping.

    Missing keys fall back to `defaults` (the process Settings). Raises
    InvalidConfig if `raw` is not a mapping, if `zones` is present but not
    list-like, or if the identification cannot be sent as a header.
    """
    s = defaults or default_settings
    if raw is None:
        raw = {}
    if not isinstance(raw, Mapping):
        raise InvalidConfig(f"config must be an object, got {type(raw).__name__}")

    if "zones" in raw and raw["zones"] is not None:
        zones: Sequence[Any] = normalize_zones(raw["zones"])
    else:
        zones = normalize_zones(s.zone_list())

    interval = _pick(raw, "poll_interval_ms")
    sev = _pick(raw, "min_severity")
    sort = _pick(raw, "sort_mode")

    return AlertConfig(
        zones=tuple(zones),
        poll_interval_ms=normalize_interval(
            interval if interval is not None else s.poll_interval_ms,
            default=s.poll_interval_ms,
        ),
        identification=normalize_identification(_pick(raw, "identification"), s.nws_user_agent),
        min_severity=normalize_severity(sev if sev is not None else s.min_severity),
        sort_mode=normalize_sort_mode(sort if sort is not None else s.sort_mode),
    )
