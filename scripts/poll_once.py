"""
Run one poll cycle against api.weather.gov and print what would be published.

    python scripts/poll_once.py --zone SDZ013 --zone SDC099 --min-severity Moderate

Omitted options fall back to the environment and then to --env-file (.env).
"""
import argparse
import asyncio
import logging
import sys
from typing import Optional

import httpx
import orjson

from nws_alerts.core.errors import InvalidConfig
from nws_alerts.core.settings import Settings
from nws_alerts.services.config import normalize_config
from nws_alerts.services.feed import AlertFeed
from nws_alerts.services.fetcher import AlertFetcher
from nws_alerts.services.poller import AlertPoller


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Fetch active NWS alerts once")
    p.add_argument("--zone", "-z", action="append", dest="zones", help="Zone/county code (repeatable)")
    p.add_argument("--min-severity", help="Unknown|Minor|Moderate|Severe|Extreme")
    p.add_argument("--sort", choices=["severity", "expires"])
    p.add_argument("--user-agent", help="User-Agent sent to api.weather.gov")
    p.add_argument("--env-file", default=".env", help="dotenv file with fallback settings")
    p.add_argument("--verbose", "-v", action="store_true")
    return p.parse_args(argv)


def load_settings(env_file: Optional[str]) -> Settings:
    # Built here, not at import, so the dotenv file is read after argv
    return Settings(_env_file=env_file)


def raw_config(args) -> dict:
    return {
        "zones": args.zones,
        "minSeverity": args.min_severity,
        "sortMode": args.sort,
        "identification": args.user_agent,
    }


async def poll_once(
    raw_cfg: dict,
    defaults: Settings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> bytes:
    cfg = normalize_config(raw_cfg, defaults)
    feed = AlertFeed()
    fetcher = AlertFetcher(
        base_url=defaults.nws_alerts_url,
        timeout_s=defaults.nws_timeout_s,
        transport=transport,
    )
    poller = AlertPoller(fetcher=fetcher, publisher=feed)
    await poller.run_once(cfg)
    return orjson.dumps(feed.snapshot().model_dump(by_alias=True), option=orjson.OPT_INDENT_2)


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        out = asyncio.run(poll_once(raw_config(args), load_settings(args.env_file)))
    except InvalidConfig as e:
        print(f"invalid config: {e}", file=sys.stderr)
        return 2

    sys.stdout.write(out.decode("utf-8") + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
