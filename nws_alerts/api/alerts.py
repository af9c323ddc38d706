from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response

from nws_alerts.api.deps import get_feed
from nws_alerts.core.contracts import AlertFeedSnapshot
from nws_alerts.services.feed import AlertFeed

router = APIRouter()


@router.get("/alerts", response_model=AlertFeedSnapshot)
def alerts_get(
    request: Request,
    response: Response,
    feed: AlertFeed = Depends(get_feed),
):
    snap = feed.snapshot()
    etag = f'"{snap.feed_key}"'

    # Same list as last time → let the display skip a re-render
    if request.headers.get("if-none-match") == etag:
        return Response(status_code=304, headers={"ETag": etag})

    response.headers["ETag"] = etag
    response.headers["Cache-Control"] = "no-cache"
    return snap
