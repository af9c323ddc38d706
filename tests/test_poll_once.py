"""One-shot CLI: settings fallback from a dotenv file, output shape."""
import asyncio
from typing import List

import httpx
import orjson
import pytest

from nws_alerts.services.config import normalize_config
from scripts.poll_once import load_settings, parse_args, poll_once, raw_config

ENV_KEYS = ("ALERT_ZONES", "NWS_USER_AGENT", "MIN_SEVERITY", "SORT_MODE", "NWS_ALERTS_URL")


@pytest.fixture
def env_file(tmp_path, monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    path = tmp_path / ".env"
    path.write_text(
        "ALERT_ZONES=sdz013,SDC099\n"
        "NWS_USER_AGENT=dotenv-agent (ops@example.com)\n"
        "MIN_SEVERITY=Severe\n"
        "NWS_ALERTS_URL=https://alerts.test/alerts/active\n"
    )
    return str(path)


def test_dotenv_file_supplies_fallback_settings(env_file, feature_factory):
    seen: List[httpx.Request] = []

    def upstream(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        body = {"features": [
            feature_factory(fid="severe", severity="Severe"),
            feature_factory(fid="minor", severity="Minor"),
        ]}
        return httpx.Response(200, content=orjson.dumps(body))

    args = parse_args(["--env-file", env_file])
    out = asyncio.run(poll_once(raw_config(args), load_settings(args.env_file), httpx.MockTransport(upstream)))

    assert str(seen[0].url) == "https://alerts.test/alerts/active?zone=SDZ013,SDC099"
    assert seen[0].headers["User-Agent"] == "dotenv-agent (ops@example.com)"

    snapshot = orjson.loads(out)
    assert [a["id"] for a in snapshot["items"]] == ["severe"]
    assert "areaDesc" in snapshot["items"][0]


def test_command_line_overrides_dotenv(env_file):
    args = parse_args(["--env-file", env_file, "-z", "mnz060", "--min-severity", "minor"])

    cfg = normalize_config(raw_config(args), load_settings(args.env_file))

    assert cfg.zones == ("MNZ060",)
    assert cfg.min_severity == "Minor"
    assert cfg.identification == "dotenv-agent (ops@example.com)"
