from __future__ import annotations

from datetime import datetime


def now_local() -> datetime:
    return datetime.now().astimezone()


def timestamp_str() -> str:
    return now_local().isoformat(timespec="seconds")
