from __future__ import annotations

from nws_alerts.services.feed import AlertFeed
from nws_alerts.services.poller import AlertPoller


def get_feed() -> AlertFeed:
    raise RuntimeError("AlertFeed must be provided by app dependency override")


def get_poller() -> AlertPoller:
    raise RuntimeError("AlertPoller must be provided by app dependency override")
