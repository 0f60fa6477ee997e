from __future__ import annotations

import json
import uuid
from datetime import datetime, timezone
from typing import Any


def build_payload(prayer_id: uuid.UUID, created_at: datetime, people: int) -> dict[str, Any]:
    """Confirmation payload handed to the registrant and encoded as a QR code."""
    return {
        "pid": str(prayer_id),
        "date": created_at.astimezone(timezone.utc).date().isoformat(),
        "ppl": people,
    }


def dump_payload(payload: dict[str, Any]) -> str:
    return json.dumps(payload, separators=(",", ":"))


def load_payload(raw: str) -> dict[str, Any]:
    return json.loads(raw)
