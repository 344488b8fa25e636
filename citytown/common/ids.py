"""Identifier helpers."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone


def generate_session_id() -> str:
    now = datetime.now(tz=timezone.utc)
    return now.strftime("session-%Y%m%dT%H%M%S%fZ")


def generate_record_id() -> str:
    # 24 hex chars, same shape as the document ids older exports carry.
    return uuid.uuid4().hex[:24]
