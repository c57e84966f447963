"""Module: xmp_gps.py

Date: 2026-01-15

Conversion of XMP/Exif GPS coordinates (``"48,6.750N"``: degrees, decimal
minutes and a hemisphere letter) to signed decimal degrees.

Pure domain layer - no native dependencies.
"""

from __future__ import annotations

import re

_NUMBER_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def _coordinate_to_decimal(value: str, positive: str, negative: str) -> float | None:
    if not value:
        return None
    body, hemisphere = value[:-1], value[-1]
    if hemisphere == positive:
        sign = 1.0
    elif hemisphere == negative:
        sign = -1.0
    else:
        return None

    degrees, sep, minutes = body.partition(",")
    if not sep or not _NUMBER_RE.fullmatch(degrees) or not _NUMBER_RE.fullmatch(minutes):
        return None
    return (float(degrees) + float(minutes) / 60.0) * sign


def exif_latitude_to_decimal(lat: str) -> float | None:
    """Convert an ``exif:GPSLatitude`` value to decimal degrees.

    Returns None if the value cannot be parsed.

    Example:
        >>> exif_latitude_to_decimal("47,0N")
        47.0

    """
    return _coordinate_to_decimal(lat, "N", "S")


def exif_longitude_to_decimal(lon: str) -> float | None:
    """Convert an ``exif:GPSLongitude`` value to decimal degrees.

    Example:
        >>> exif_longitude_to_decimal("47,0W")
        -47.0

    """
    return _coordinate_to_decimal(lon, "E", "W")
