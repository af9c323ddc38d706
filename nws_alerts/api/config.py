from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends

from nws_alerts.api.deps import get_poller
from nws_alerts.core.contracts import AlertConfig
from nws_alerts.core.errors import InvalidConfig, bad_request, not_found
from nws_alerts.services.config import normalize_config
from nws_alerts.services.poller import AlertPoller

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/config")


@router.get("", response_model=AlertConfig)
def config_get(poller: AlertPoller = Depends(get_poller)) -> AlertConfig:
    if poller.config is None:
        not_found("config_missing", "poller has not been configured yet")
    return poller.config


@router.put("", response_model=AlertConfig)
async def config_put(
    payload: Any = Body(default=None),
    poller: AlertPoller = Depends(get_poller),
) -> AlertConfig:
    try:
        cfg = normalize_config(payload)
    except InvalidConfig as e:
        logger.warning("config_rejected: %s", e)
        bad_request("invalid_config", str(e))

    try:
        poller.configure(cfg)
    except RuntimeError as e:
        bad_request("poller_stopped", str(e))
    return cfg
