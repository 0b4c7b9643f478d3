"""Clock helpers.

Timestamps are written to the database as naive wall-clock values in the
configured ``APP_TIMEZONE`` and handed back to callers as aware datetimes.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone, tzinfo
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from classroom.config import get_settings

DEFAULT_TIMEZONE_NAME = "Asia/Shanghai"
# Used when the host has no tz database; Shanghai has no DST.
CHINA_STANDARD_TIME = timezone(timedelta(hours=8), DEFAULT_TIMEZONE_NAME)


def parse_utc_offset(name: str) -> tzinfo | None:
    """Parse ``UTC+8``, ``GMT-03:30`` or ``UTC+0530`` into a fixed offset.

    Returns ``None`` when ``name`` is not an offset expression.
    """

    upper = name.strip().upper()
    prefix = next((p for p in ("UTC", "GMT") if upper.startswith(p)), None)
    if prefix is None:
        return None
    rest = upper[len(prefix):]
    if not rest or rest[0] not in "+-":
        return None

    digits = rest[1:].replace(":", "")
    if not digits.isdigit() or len(digits) > 4:
        return None
    if len(digits) <= 2:
        hours, minutes = int(digits), 0
    else:
        hours, minutes = int(digits[:-2]), int(digits[-2:])
    if hours > 14 or minutes >= 60:
        return None

    sign = -1 if rest[0] == "-" else 1
    return timezone(sign * timedelta(hours=hours, minutes=minutes))


def resolve_timezone(name: str | None) -> tzinfo:
    """Turn an IANA name or UTC offset into a ``tzinfo``.

    Blank or unknown names resolve to Shanghai time.
    """

    name = (name or "").strip()
    if name:
        offset = parse_utc_offset(name)
        if offset is not None:
            return offset
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError):
            pass
    try:
        return ZoneInfo(DEFAULT_TIMEZONE_NAME)
    except ZoneInfoNotFoundError:
        return CHINA_STANDARD_TIME


@lru_cache(maxsize=1)
def get_app_timezone() -> tzinfo:
    return resolve_timezone(get_settings().app_timezone)


def now_in_app_timezone() -> datetime:
    return datetime.now(get_app_timezone())


def now_in_app_naive_datetime() -> datetime:
    """Current local time as stored in the database."""

    return now_in_app_timezone().replace(tzinfo=None)


def ensure_app_timezone(value: datetime | None) -> datetime | None:
    """Attach or convert ``value`` to the app timezone.

    Naive values are read as local wall-clock time.
    """

    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=get_app_timezone())
    return value.astimezone(get_app_timezone())


def ensure_app_naive_datetime(value: datetime | None) -> datetime | None:
    """Convert ``value`` to local wall-clock time without ``tzinfo``."""

    if value is None:
        return None
    return ensure_app_timezone(value).replace(tzinfo=None)
