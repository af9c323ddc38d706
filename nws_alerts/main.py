# nws_alerts/main.py
from __future__ import annotations

import logging
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.gzip import GZipMiddleware

# Load <repo>/.env (main.py is <repo>/nws_alerts/main.py)
BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv(BASE_DIR / ".env")

from nws_alerts.core.settings import settings
from nws_alerts.api import api_router
from nws_alerts.api import deps

from nws_alerts.services.config import normalize_config
from nws_alerts.services.feed import AlertFeed
from nws_alerts.services.fetcher import AlertFetcher
from nws_alerts.services.poller import AlertPoller

logger = logging.getLogger(__name__)

app = FastAPI(title="NWS Alerts", version="1.0.0")

# ── Compression (must be added before CORS) ──
app.add_middleware(GZipMiddleware, minimum_size=1000)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["GET", "PUT"],
    allow_headers=["*"],
    expose_headers=["ETag"],
)

# ──────────────────────────────────────────────────────────────
# Services (one poller per process)
# ──────────────────────────────────────────────────────────────

_feed = AlertFeed(queue_size=settings.feed_queue_size)
_fetcher = AlertFetcher(base_url=settings.nws_alerts_url, timeout_s=settings.nws_timeout_s)
_poller = AlertPoller(fetcher=_fetcher, publisher=_feed)

# ──────────────────────────────────────────────────────────────
# Dependency providers
# ──────────────────────────────────────────────────────────────

def provide_feed() -> AlertFeed:
    return _feed


def provide_poller() -> AlertPoller:
    return _poller


app.dependency_overrides[deps.get_feed] = provide_feed
app.dependency_overrides[deps.get_poller] = provide_poller

# Routes
app.include_router(api_router)

# ──────────────────────────────────────────────────────────────
# Startup / shutdown
# ──────────────────────────────────────────────────────────────

@app.on_event("startup")
async def startup():
    cfg = normalize_config({}, settings)
    logger.info("[app] Starting poller zones=%s", ",".join(cfg.zones) or "none")
    _poller.configure(cfg)


@app.on_event("shutdown")
async def shutdown():
    logger.info("[app] Shutting down, stopping poller")
    await _poller.stop()
