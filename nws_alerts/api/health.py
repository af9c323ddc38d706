from __future__ import annotations

from fastapi import APIRouter, Depends

from nws_alerts.api.deps import get_poller
from nws_alerts.services.poller import AlertPoller

router = APIRouter()


@router.get("/health")
def health(poller: AlertPoller = Depends(get_poller)) -> dict:
    cfg = poller.config
    return {
        "ok": True,
        "state": poller.state.value,
        "zones": list(cfg.zones) if cfg else [],
    }
