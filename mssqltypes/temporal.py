"""Encoding and decoding of date, time and money values in their wire formats.

Decoded date and time values are timezone-aware ``datetime.datetime`` objects.
Python keeps microseconds, so the 100-nanosecond digit of TIME, DATETIME2 and
DATETIMEOFFSET values is truncated when decoding.
"""

from __future__ import annotations

import datetime
import math

_UTC = datetime.timezone.utc
_DAY_US = 86_400_000_000


def _need(buf: bytes, size: int, what: str) -> bytes:
    if len(buf) < size:
        raise ValueError(f"buffer too short for {what}: {len(buf)} < {size}")
    return bytes(buf)


def _trunc_div(a: int, b: int) -> int:
    """Integer division rounding toward zero."""
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b >= 0) else -q


def gregorian_days(year: int, yearday: int) -> int:
    """Return days since 1 January of year 1 in the proleptic Gregorian calendar."""
    year0 = year - 1
    return year0 * 365 + year0 // 4 - year0 // 100 + year0 // 400 + yearday - 1


def calc_time_size(scale: int) -> int:
    """Return the byte size of the time part for a fractional-second scale."""
    if scale <= 2:
        return 3
    if scale <= 4:
        return 4
    return 5


def _yearday(value: datetime.date) -> int:
    return value.timetuple().tm_yday


def _date_time2(value: datetime.datetime) -> tuple[int, int, int]:
    """Split a datetime into (days since 0001-01-01, seconds of day, nanoseconds)."""
    days = gregorian_days(value.year, _yearday(value))
    seconds = value.second + value.minute * 60 + value.hour * 3600
    ns = value.microsecond * 1000
    if days < 0:
        days, seconds, ns = 0, 0, 0
    max_days = gregorian_days(9999, 365)
    if days > max_days:
        days = max_days
        seconds = 59 + 59 * 60 + 23 * 3600
        ns = 999_999_900
    return days, seconds, ns


def _from_parts(
    days: int, seconds: int, ns: int, tz: datetime.tzinfo = _UTC
) -> datetime.datetime:
    base = datetime.datetime(1, 1, 1)
    wall = base + datetime.timedelta(days=days, seconds=seconds, microseconds=ns // 1000)
    return wall.replace(tzinfo=tz)


def decode_datetim4(buf: bytes) -> datetime.datetime:
    """Decode a 4-byte smalldatetime: days since 1900-01-01 and minutes of day."""
    data = _need(buf, 4, "smalldatetime")
    days = int.from_bytes(data[0:2], "little")
    mins = int.from_bytes(data[2:4], "little")
    return datetime.datetime(1900, 1, 1, tzinfo=_UTC) + datetime.timedelta(
        days=days, minutes=mins
    )


def encode_datetim4(value: datetime.datetime) -> bytes:
    """Encode a smalldatetime; values before 1900-01-01 become the epoch."""
    if value.tzinfo is not None and value.utcoffset() is not None:
        ref = datetime.datetime(1900, 1, 1, tzinfo=_UTC)
    else:
        ref = datetime.datetime(1900, 1, 1)
    total_us = (value - ref) // datetime.timedelta(microseconds=1)
    days = _trunc_div(total_us, _DAY_US)
    mins = value.hour * 60 + value.minute
    if days < 0:
        days, mins = 0, 0
    return (days & 0xFFFF).to_bytes(2, "little") + (mins & 0xFFFF).to_bytes(2, "little")


def encode_datetime(value: datetime.datetime) -> bytes:
    """Encode an 8-byte datetime, clamped to the range 1753-01-01 .. 9999-12-31."""
    basedays = gregorian_days(1900, 1)
    days = gregorian_days(value.year, _yearday(value)) - basedays
    tm = 300 * (value.second + value.minute * 60 + value.hour * 3600) + (
        value.microsecond * 1000 * 300 // 1_000_000_000
    )
    mindays = gregorian_days(1753, 1) - basedays
    maxdays = gregorian_days(9999, 365) - basedays
    if days < mindays:
        days, tm = mindays, 0
    if days > maxdays:
        days = maxdays
        tm = (23 * 3600 + 59 * 60 + 59) * 300 + 299
    return (days & 0xFFFFFFFF).to_bytes(4, "little") + (tm & 0xFFFFFFFF).to_bytes(
        4, "little"
    )


def decode_datetime(buf: bytes) -> datetime.datetime:
    """Decode an 8-byte datetime: days since 1900-01-01 and 1/300 second ticks."""
    data = _need(buf, 8, "datetime")
    days = int.from_bytes(data[0:4], "little", signed=True)
    tm = int.from_bytes(data[4:8], "little")
    ns = int(math.trunc((tm % 300) / 0.3 + 0.5)) * 1_000_000
    secs = tm // 300
    return datetime.datetime(1900, 1, 1, tzinfo=_UTC) + datetime.timedelta(
        days=days, seconds=secs, microseconds=ns // 1000
    )


def _decode_date_int(buf: bytes) -> int:
    return buf[0] + buf[1] * 256 + buf[2] * 65536


def decode_date(buf: bytes) -> datetime.datetime:
    """Decode a 3-byte date: days since 0001-01-01."""
    data = _need(buf, 3, "date")
    return _from_parts(_decode_date_int(data), 0, 0)


def encode_date(value: datetime.datetime) -> bytes:
    """Encode the date part of a datetime as 3 bytes."""
    days, _, _ = _date_time2(value)
    return (days & 0xFFFFFF).to_bytes(3, "little")


def _decode_time_int(scale: int, buf: bytes) -> tuple[int, int]:
    acc = int.from_bytes(buf, "little")
    acc *= 10 ** max(0, 7 - scale)
    nsbig = acc * 100
    return nsbig // 1_000_000_000, nsbig % 1_000_000_000


def _encode_time_int(seconds: int, ns: int, scale: int) -> bytes:
    if scale > 9:
        raise ValueError(f"invalid time scale: {scale}")
    ns_total = seconds * 1_000_000_000 + ns
    ticks = ns_total // 10 ** (9 - scale)
    return (ticks & 0xFF_FFFF_FFFF).to_bytes(5, "little")[: calc_time_size(scale)]


def decode_time(scale: int, buf: bytes) -> datetime.datetime:
    """Decode a time value; the result is on 0001-01-01."""
    sec, ns = _decode_time_int(scale, bytes(buf))
    return _from_parts(0, sec, ns)


def encode_time(hour: int, minute: int, second: int, ns: int, scale: int) -> bytes:
    """Encode a time of day with the given fractional-second scale."""
    seconds = hour * 3600 + minute * 60 + second
    return _encode_time_int(seconds, ns, scale)


def decode_datetime2(scale: int, buf: bytes) -> datetime.datetime:
    """Decode a datetime2: time part followed by 3 bytes of days."""
    data = _need(buf, 3, "datetime2")
    timesize = len(data) - 3
    sec, ns = _decode_time_int(scale, data[:timesize])
    days = _decode_date_int(data[timesize:])
    return _from_parts(days, sec, ns)


def encode_datetime2(value: datetime.datetime, scale: int) -> bytes:
    """Encode a datetime2 from the wall-clock fields of the value."""
    days, seconds, ns = _date_time2(value)
    return _encode_time_int(seconds, ns, scale) + (days & 0xFFFFFF).to_bytes(3, "little")


def decode_datetimeoffset(scale: int, buf: bytes) -> datetime.datetime:
    """Decode a datetimeoffset: UTC time, UTC days, then offset in minutes."""
    data = _need(buf, 5, "datetimeoffset")
    timesize = len(data) - 5
    sec, ns = _decode_time_int(scale, data[:timesize])
    days = _decode_date_int(data[timesize : timesize + 3])
    offset = int.from_bytes(data[timesize + 3 : timesize + 5], "little", signed=True)
    tz = datetime.timezone(datetime.timedelta(minutes=offset))
    return _from_parts(days, sec + offset * 60, ns, tz)


def encode_datetimeoffset(value: datetime.datetime, scale: int) -> bytes:
    """Encode a datetimeoffset; naive values are taken as UTC."""
    offset_delta = value.utcoffset() if value.tzinfo is not None else None
    if offset_delta is None:
        utc_value = value
        offset_sec = 0
    else:
        utc_value = value.astimezone(_UTC)
        offset_sec = int(offset_delta.total_seconds())
    days, seconds, ns = _date_time2(utc_value)
    offset = _trunc_div(offset_sec, 60)
    return (
        _encode_time_int(seconds, ns, scale)
        + (days & 0xFFFFFF).to_bytes(3, "little")
        + (offset & 0xFFFF).to_bytes(2, "little")
    )


def _scale_digits(digits: str, scale: int) -> bytes:
    """Insert a decimal point so that `scale` digits follow it."""
    out = ""
    if digits[0] in "+-":
        out, digits = digits[0], digits[1:]
    pos = len(digits) - scale
    out += "0" if pos <= 0 else digits[:pos]
    if scale > 0:
        out += "." + "0" * max(0, -pos) + digits[max(pos, 0) :]
    return out.encode("ascii")


def decode_money(buf: bytes) -> bytes:
    """Decode an 8-byte money value (high half first) to decimal text."""
    data = _need(buf, 8, "money")
    money = int.from_bytes(data[4:8] + data[0:4], "little", signed=True)
    return _scale_digits(str(money), 4)


def decode_money4(buf: bytes) -> bytes:
    """Decode a 4-byte smallmoney value to decimal text."""
    data = _need(buf, 4, "smallmoney")
    money = int.from_bytes(data[0:4], "little", signed=True)
    return _scale_digits(str(money), 4)