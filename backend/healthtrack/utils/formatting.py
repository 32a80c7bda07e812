"""
Timestamp helpers shared by models and routes.

Readings are stored as naive UTC datetimes; everything that leaves the API is
either ISO-8601 with a trailing ``Z`` or one of the friendly labels below.
"""
from datetime import datetime, timedelta, timezone

from dateutil.relativedelta import relativedelta


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 string into naive UTC. Raises ValueError/AttributeError."""
    parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def to_iso(value: datetime):
    if value is None:
        return None
    return value.replace(tzinfo=timezone.utc).isoformat().replace('+00:00', 'Z')


def format_timestamp(value: datetime, now: datetime = None) -> str:
    """'Today, 09:34', 'Yesterday, 08:15' or 'Mar 4 at 17:02'."""
    now = now or datetime.utcnow()
    clock = value.strftime('%H:%M')
    if value.date() == now.date():
        return f'Today, {clock}'
    if value.date() == (now - timedelta(days=1)).date():
        return f'Yesterday, {clock}'
    return f'{value.strftime("%b")} {value.day} at {clock}'


# Calendar offsets: a month back from Mar 31 is Feb 28 (or 29), not 30 days.
PERIODS = {
    'week': relativedelta(days=7),
    'month': relativedelta(months=1),
    'year': relativedelta(years=1),
}


def period_cutoff(period: str, now: datetime = None):
    """Start of a chart period, or None when the period is unknown (no cutoff)."""
    offset = PERIODS.get(period)
    if offset is None:
        return None
    return (now or datetime.utcnow()) - offset
