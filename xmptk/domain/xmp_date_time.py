"""Module: xmp_date_time.py

Date: 2026-01-09

Date/time value types used by XMP date properties.

These are plain values: they own no native resource and are copied freely.
The operations (current time, zone conversion, text form) go through
:mod:`xmptk.infra.bridge.datetime_bridge` so they report failures the same
way as every other bridge call.

Absent components follow the toolkit's convention: a date with ``month`` or
``day`` of 0 was written with reduced precision (``"2024"``, ``"2024-03"``).
"""

from __future__ import annotations

import datetime as _dt
from dataclasses import dataclass


@dataclass
class XmpDate:
    """Calendar date. ``month``/``day`` of 0 mean "not specified"."""

    year: int = 0
    month: int = 0
    day: int = 0


@dataclass
class XmpTimeZone:
    """Offset from UTC. ``hour`` and ``minute`` carry the same sign."""

    hour: int = 0
    minute: int = 0

    @property
    def offset_minutes(self) -> int:
        return self.hour * 60 + self.minute

    @classmethod
    def from_minutes(cls, minutes: int) -> XmpTimeZone:
        sign = -1 if minutes < 0 else 1
        hours, mins = divmod(abs(minutes), 60)
        return cls(sign * hours, sign * mins)


@dataclass
class XmpTime:
    """Time of day, optionally anchored to a time zone."""

    hour: int = 0
    minute: int = 0
    second: int = 0
    nanosecond: int = 0
    time_zone: XmpTimeZone | None = None


@dataclass
class XmpDateTime:
    """A date, a time, or both, as stored in XMP date properties.

    Example:
        >>> dt = XmpDateTime.from_str("2006-04-27T15:38:36.655+02:00")
        >>> dt.time.nanosecond
        655000000
        >>> str(dt)
        '2006-04-27T15:38:36.655+02:00'

    """

    date: XmpDate | None = None
    time: XmpTime | None = None

    @classmethod
    def current(cls) -> XmpDateTime:
        """The current local date and time, including the local zone."""
        from xmptk.domain.xmp_error import check_boundary
        from xmptk.infra.bridge.boundary_error import BoundaryError
        from xmptk.infra.bridge.datetime_bridge import datetime_current

        err = BoundaryError()
        result = datetime_current(err)
        check_boundary(err)
        return result

    @classmethod
    def from_str(cls, text: str) -> XmpDateTime:
        """Parse the ISO 8601 subset used by XMP.

        Raises:
            XmpError: ``BAD_VALUE`` if the text is not a valid XMP date.

        """
        from xmptk.domain.xmp_error import check_boundary
        from xmptk.infra.bridge.boundary_error import BoundaryError
        from xmptk.infra.bridge.datetime_bridge import datetime_from_string

        err = BoundaryError()
        result = datetime_from_string(err, text)
        check_boundary(err)
        return result

    def set_local_time_zone(self) -> None:
        """Attach the local time zone to a zone-less time.

        Raises:
            XmpError: ``BAD_PARAM`` if a zone is already present or there is
                no time component.

        """
        self._apply("datetime_set_time_zone")

    def convert_to_local_time(self) -> None:
        """Shift to the local time zone. No effect on zone-less values."""
        self._apply("datetime_convert_to_local")

    def convert_to_utc(self) -> None:
        """Shift to UTC. No effect on zone-less values."""
        self._apply("datetime_convert_to_utc")

    def _apply(self, operation: str) -> None:
        from xmptk.domain.xmp_error import check_boundary
        from xmptk.infra.bridge import datetime_bridge
        from xmptk.infra.bridge.boundary_error import BoundaryError

        err = BoundaryError()
        getattr(datetime_bridge, operation)(err, self)
        check_boundary(err)

    def __str__(self) -> str:
        from xmptk.domain.xmp_error import check_boundary
        from xmptk.infra.bridge.boundary_error import BoundaryError
        from xmptk.infra.bridge.datetime_bridge import datetime_to_string
        from xmptk.infra.bridge.strings import take_text

        err = BoundaryError()
        text = take_text(datetime_to_string(err, self))
        check_boundary(err)
        return text or ""

    def to_datetime(self) -> _dt.datetime:
        """Convert to a stdlib ``datetime``.

        Zone-less values become naive datetimes. A missing time is midnight.

        Raises:
            ValueError: If the date is absent or incomplete.

        """
        if self.date is None or not self.date.month or not self.date.day:
            raise ValueError("XmpDateTime needs a full date to convert to datetime")
        t = self.time or XmpTime()
        tzinfo = None
        if t.time_zone is not None:
            tzinfo = _dt.timezone(_dt.timedelta(minutes=t.time_zone.offset_minutes))
        return _dt.datetime(
            self.date.year,
            self.date.month,
            self.date.day,
            t.hour,
            t.minute,
            t.second,
            t.nanosecond // 1000,
            tzinfo=tzinfo,
        )

    @classmethod
    def from_datetime(cls, value: _dt.datetime) -> XmpDateTime:
        """Build from a stdlib ``datetime``; aware values keep their offset."""
        zone = None
        offset = value.utcoffset()
        if offset is not None:
            zone = XmpTimeZone.from_minutes(int(offset.total_seconds() // 60))
        return cls(
            date=XmpDate(value.year, value.month, value.day),
            time=XmpTime(
                value.hour,
                value.minute,
                value.second,
                value.microsecond * 1000,
                zone,
            ),
        )


__all__ = [
    "XmpDate",
    "XmpDateTime",
    "XmpTime",
    "XmpTimeZone",
]
