"""Module: datetime_bridge.py

Date: 2026-01-09

Date/time operations with the bridge calling convention.

libexempi only exposes its C ``XmpDateTime`` struct through the typed
property accessors (see :func:`date_to_native` and :func:`date_from_native`),
so the toolkit's date utilities (CurrentDateTime,
SetTimeZone, ConvertToLocalTime/UTCTime, ConvertFromDate/ToDate) are
implemented here over :class:`xmptk.domain.xmp_date_time.XmpDateTime`.
Values are plain data; nothing is allocated on the native side and the
engine does not have to be initialized.
"""

from __future__ import annotations

import datetime as _dt
import re

from xmptk.domain.xmp_date_time import XmpDate, XmpDateTime, XmpTime, XmpTimeZone
from xmptk.infra.bridge.boundary_error import BAD_PARAM, BAD_VALUE, BoundaryError
from xmptk.infra.bridge.strings import OwnedText, copy_out
from xmptk.infra.native.prototypes import NativeDateTime
from xmptk.utils.logging.logger_factory import get_cached_logger

logger = get_cached_logger(__name__)

_DATE_TIME_RE = re.compile(
    r"""
    ^
    (?:
        (?P<year>-?\d+)
        (?:-(?P<month>\d{2})(?:-(?P<day>\d{2}))?)?
    )?
    (?:
        T(?P<hour>\d{2}):(?P<minute>\d{2})
        (?::(?P<second>\d{2})(?:[.,](?P<fraction>\d+))?)?
        (?P<zone>Z|[+-]\d{2}:\d{2})?
    )?
    $
    """,
    re.VERBOSE,
)

_ZONE_SUFFIX_RE = re.compile(r"(?:Z|[+-]\d{2}:\d{2})$")

# Arithmetic on time-only values happens on this arbitrary day
_ANCHOR_DATE = XmpDate(2000, 1, 1)


def _local_offset_minutes(at: _dt.datetime) -> int:
    """Offset of the local zone at the given naive local time."""
    offset = at.astimezone().utcoffset() or _dt.timedelta(0)
    return int(offset.total_seconds() // 60)


def _as_naive(value: XmpDateTime) -> _dt.datetime:
    date = value.date if value.date is not None else _ANCHOR_DATE
    t = value.time or XmpTime()
    return _dt.datetime(
        date.year,
        date.month or 1,
        date.day or 1,
        t.hour,
        t.minute,
        t.second,
        t.nanosecond // 1000,
    )


def _store(value: XmpDateTime, moment: _dt.datetime, zone: XmpTimeZone) -> None:
    """Write ``moment`` back into ``value`` keeping sub-microsecond digits."""
    t = value.time
    sub_micro = t.nanosecond % 1000 if t is not None else 0
    if value.date is not None:
        value.date = XmpDate(moment.year, moment.month, moment.day)
    value.time = XmpTime(
        moment.hour,
        moment.minute,
        moment.second,
        moment.microsecond * 1000 + sub_micro,
        zone,
    )


def datetime_current(err: BoundaryError) -> XmpDateTime | None:
    """Current local date and time with the local zone attached."""
    err.clear()
    now = _dt.datetime.now().astimezone()
    offset = now.utcoffset() or _dt.timedelta(0)
    return XmpDateTime(
        date=XmpDate(now.year, now.month, now.day),
        time=XmpTime(
            now.hour,
            now.minute,
            now.second,
            now.microsecond * 1000,
            XmpTimeZone.from_minutes(int(offset.total_seconds() // 60)),
        ),
    )


def datetime_set_time_zone(err: BoundaryError, value: XmpDateTime) -> bool:
    """Attach the local zone to a zone-less time, in place."""
    err.clear()
    if value.time is None:
        err.set(BAD_PARAM, "SetTimeZone requires a time value")
        return False
    if value.time.time_zone is not None:
        err.set(BAD_PARAM, "SetTimeZone can only be used on zone-less times")
        return False
    try:
        minutes = _local_offset_minutes(_as_naive(value))
    except (ValueError, OverflowError, OSError) as e:
        err.set(BAD_VALUE, f"Date out of range: {e}")
        return False
    value.time.time_zone = XmpTimeZone.from_minutes(minutes)
    return True


def datetime_convert_to_utc(err: BoundaryError, value: XmpDateTime) -> bool:
    """Shift a zoned value to UTC, in place. Zone-less values are untouched."""
    err.clear()
    if value.time is None or value.time.time_zone is None:
        return True
    try:
        moment = _as_naive(value) - _dt.timedelta(minutes=value.time.time_zone.offset_minutes)
    except (ValueError, OverflowError) as e:
        err.set(BAD_VALUE, f"Date out of range: {e}")
        return False
    _store(value, moment, XmpTimeZone(0, 0))
    return True


def datetime_convert_to_local(err: BoundaryError, value: XmpDateTime) -> bool:
    """Shift a zoned value to the local zone, in place."""
    err.clear()
    if value.time is None or value.time.time_zone is None:
        return True
    try:
        utc = _as_naive(value) - _dt.timedelta(minutes=value.time.time_zone.offset_minutes)
        local = utc.replace(tzinfo=_dt.timezone.utc).astimezone()
    except (ValueError, OverflowError, OSError) as e:
        err.set(BAD_VALUE, f"Date out of range: {e}")
        return False
    offset = local.utcoffset() or _dt.timedelta(0)
    _store(value, local.replace(tzinfo=None), XmpTimeZone.from_minutes(int(offset.total_seconds() // 60)))
    return True


def _format_zone(zone: XmpTimeZone) -> str:
    minutes = zone.offset_minutes
    if minutes == 0:
        return "Z"
    sign = "-" if minutes < 0 else "+"
    hours, mins = divmod(abs(minutes), 60)
    return f"{sign}{hours:02d}:{mins:02d}"


def format_date_time(value: XmpDateTime) -> str:
    """Canonical text form: ``YYYY[-MM[-DD]][Thh:mm[:ss[.f]]][Z|+hh:mm]``."""
    parts: list[str] = []
    if value.date is not None:
        d = value.date
        year = f"-{abs(d.year):04d}" if d.year < 0 else f"{d.year:04d}"
        parts.append(year)
        if d.month:
            parts.append(f"-{d.month:02d}")
            if d.day:
                parts.append(f"-{d.day:02d}")
    if value.time is not None:
        t = value.time
        parts.append(f"T{t.hour:02d}:{t.minute:02d}")
        if t.second or t.nanosecond:
            parts.append(f":{t.second:02d}")
            if t.nanosecond:
                parts.append("." + f"{t.nanosecond:09d}".rstrip("0"))
        if t.time_zone is not None:
            parts.append(_format_zone(t.time_zone))
    return "".join(parts)


def datetime_to_string(err: BoundaryError, value: XmpDateTime) -> OwnedText | None:
    err.clear()
    return copy_out(format_date_time(value))


def parse_date_time(text: str) -> XmpDateTime | None:
    """Parse XMP date text; None if malformed or out of range."""
    match = _DATE_TIME_RE.match(text.strip())
    if match is None or not text.strip():
        return None
    g = match.groupdict()
    if g["year"] is None and g["hour"] is None:
        return None

    date = None
    if g["year"] is not None:
        date = XmpDate(int(g["year"]), int(g["month"] or 0), int(g["day"] or 0))
        if not 0 <= date.month <= 12 or not 0 <= date.day <= 31:
            return None

    time = None
    if g["hour"] is not None:
        fraction = g["fraction"] or ""
        time = XmpTime(
            int(g["hour"]),
            int(g["minute"]),
            int(g["second"] or 0),
            int(fraction[:9].ljust(9, "0")) if fraction else 0,
        )
        if time.hour > 23 or time.minute > 59 or time.second > 59:
            return None
        zone = g["zone"]
        if zone == "Z":
            time.time_zone = XmpTimeZone(0, 0)
        elif zone:
            sign = -1 if zone[0] == "-" else 1
            hours, mins = int(zone[1:3]), int(zone[4:6])
            if hours > 23 or mins > 59:
                return None
            time.time_zone = XmpTimeZone(sign * hours, sign * mins)

    return XmpDateTime(date=date, time=time)


def datetime_from_string(err: BoundaryError, text: str) -> XmpDateTime | None:
    err.clear()
    result = parse_date_time(text)
    if result is None:
        logger.debug("[DateTimeBridge] Rejected date text %r", text)
        err.set(BAD_VALUE, f"Invalid date/time string: {text!r}")
    return result


# =====================================
# NATIVE STRUCT CONVERSION
# =====================================


def date_to_native(value: XmpDateTime) -> NativeDateTime | None:
    """Native struct for a value with date, time and zone; None otherwise.

    The C struct cannot mark parts as absent, so partial values have to be
    stored through their text form instead.
    """
    if value.date is None or value.time is None or value.time.time_zone is None:
        return None
    d, t = value.date, value.time
    minutes = t.time_zone.offset_minutes
    sign = (minutes > 0) - (minutes < 0)
    hours, mins = divmod(abs(minutes), 60)
    return NativeDateTime(
        year=d.year,
        month=d.month,
        day=d.day,
        hour=t.hour,
        minute=t.minute,
        second=t.second,
        tzSign=sign,
        tzHour=hours,
        tzMinute=mins,
        nanoSecond=t.nanosecond,
    )


def date_from_native(raw: NativeDateTime, text: str) -> XmpDateTime:
    """Domain value from the engine's struct.

    ``text`` is the stored property text; it tells which parts were present.
    """
    text = text.strip()
    date = None
    if not text.startswith("T"):
        date = XmpDate(raw.year, raw.month, raw.day)

    time = None
    if "T" in text:
        time = XmpTime(raw.hour, raw.minute, raw.second, raw.nanoSecond)
        if _ZONE_SUFFIX_RE.search(text):
            sign = -1 if raw.tzSign < 0 else 1
            time.time_zone = XmpTimeZone(sign * raw.tzHour, sign * raw.tzMinute)
    return XmpDateTime(date=date, time=time)
