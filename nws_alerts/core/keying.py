from __future__ import annotations

import base64
import hashlib
from typing import Any, Iterable, List

import orjson
from pydantic import BaseModel


def _orjson_dumps(obj: Any) -> bytes:
    return orjson.dumps(
        obj,
        option=orjson.OPT_SORT_KEYS | orjson.OPT_NON_STR_KEYS,
    )


def sha256_b32(data: bytes) -> str:
    h = hashlib.sha256(data).digest()
    # URL-safe base32-ish: we use base64 urlsafe with no padding for brevity
    return base64.urlsafe_b64encode(h).decode("ascii").rstrip("=")


def feed_key(items: Iterable[BaseModel], algo_version: str = "feed.v1") -> str:
    """
    Deterministic key for a published alert list.

    Order matters (it is the presentation order), so the list is hashed as-is.
    """
    payload: List[Any] = [it.model_dump(by_alias=True) for it in items]
    blob = _orjson_dumps({"algo_version": algo_version, "items": payload})
    return sha256_b32(blob)
