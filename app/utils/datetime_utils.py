# app/utils/datetime_utils.py
from datetime import datetime, timezone


def now_utc() -> datetime:
    # Naive UTC, the same shape pymongo hands back when reading dates.
    return datetime.now(timezone.utc).replace(tzinfo=None)
