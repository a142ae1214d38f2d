"""Clock and time-zone normalisation."""
from datetime import datetime, timezone

import pytz

from ewm.config import settings


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_utc(value: datetime) -> datetime:
    """Normalise a client datetime to aware UTC.

    Naive values are read as wall-clock time in ``APP_TIMEZONE``.
    """
    if value.tzinfo is None:
        value = pytz.timezone(settings.APP_TIMEZONE).localize(value)
    return value.astimezone(pytz.utc)
