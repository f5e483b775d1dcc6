from __future__ import annotations

import base64
import json
from datetime import datetime, timezone
from typing import Any


def json_dumps(data: Any) -> str:
    # key order is observable in generated payloads, so it is never sorted here
    return json.dumps(data, ensure_ascii=False, separators=(",", ":"))


def json_loads(raw: str | bytes) -> Any:
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8")
    return json.loads(raw)


def b64encode_bytes(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def isoformat_z(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(raw: str) -> datetime:
    value = datetime.fromisoformat(raw.strip().replace("Z", "+00:00"))
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value
