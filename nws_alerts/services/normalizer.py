"""
NWS GeoJSON feature → NormalizedAlert.

Total by design of the feed: a feature that is malformed or missing fields is
mapped onto defaults instead of being dropped. Timestamps are passed through
as the raw ISO strings; only the filter stage compares them.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from nws_alerts.core.contracts import SEVERITY_RANK, NormalizedAlert

_SEVERITY_BY_LOWER = {k.lower(): k for k in SEVERITY_RANK}


def _text(v: Any) -> str:
    if v is None or v == "" or v is False:
        return ""
    return v if isinstance(v, str) else str(v)


def _opt_text(*vals: Any) -> Optional[str]:
    for v in vals:
        t = _text(v)
        if t:
            return t
    return None


def _severity(v: Any) -> str:
    return _SEVERITY_BY_LOWER.get(_text(v).strip().lower(), "Unknown")


def _description(props: Dict[str, Any]) -> str:
    desc = _text(props.get("description"))
    instruction = _text(props.get("instruction"))
    if instruction:
        return f"{desc}\n{instruction}".strip()
    return desc.strip()


def normalize_feature(feature: Any) -> NormalizedAlert:
    f = feature if isinstance(feature, dict) else {}
    props = f.get("properties")
    if not isinstance(props, dict):
        props = {}

    return NormalizedAlert(
        id=_opt_text(f.get("id"), props.get("id"), props.get("@id")),
        event=_text(props.get("event")),
        headline=_text(props.get("headline")),
        severity=_severity(props.get("severity")),
        urgency=_text(props.get("urgency")),
        certainty=_text(props.get("certainty")),
        area_desc=_text(props.get("areaDesc")),
        effective=_opt_text(props.get("effective"), props.get("onset")),
        expires=_opt_text(props.get("expires"), props.get("ends")),
        sender_name=_text(props.get("senderName")),
        description=_description(props),
    )


def normalize(raw_features: Any) -> List[NormalizedAlert]:
    if not isinstance(raw_features, list):
        return []
    return [normalize_feature(f) for f in raw_features]


def to_feature(alert: NormalizedAlert) -> Dict[str, Any]:
    """Re-wrap a normalized alert as an upstream-shaped feature."""
    props = alert.model_dump(by_alias=True)
    return {"id": alert.id, "type": "Feature", "properties": props}
