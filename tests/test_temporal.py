import datetime

import pytest

from mssqltypes.temporal import (
    calc_time_size,
    decode_date,
    decode_datetim4,
    decode_datetime,
    decode_datetime2,
    decode_datetimeoffset,
    decode_money,
    decode_money4,
    decode_time,
    encode_date,
    encode_datetim4,
    encode_datetime,
    encode_datetime2,
    encode_datetimeoffset,
    encode_time,
    gregorian_days,
)

UTC = datetime.timezone.utc


def utc(*args):
    return datetime.datetime(*args, tzinfo=UTC)


@pytest.mark.parametrize(
    "year,month,day", [(1, 1, 1), (1900, 1, 1), (2000, 3, 1), (9999, 12, 31)]
)
def test_gregorian_days_matches_ordinal(year, month, day):
    d = datetime.date(year, month, day)
    assert gregorian_days(year, d.timetuple().tm_yday) == d.toordinal() - 1


@pytest.mark.parametrize(
    "scale,size", [(0, 3), (1, 3), (2, 3), (3, 4), (4, 4), (5, 5), (6, 5), (7, 5)]
)
def test_calc_time_size(scale, size):
    assert calc_time_size(scale) == size


def test_smalldatetime_epoch_bytes():
    assert encode_datetim4(datetime.datetime(1900, 1, 1)) == bytes(4)
    assert decode_datetim4(bytes(4)) == utc(1900, 1, 1)


@pytest.mark.parametrize(
    "value",
    [utc(1900, 1, 1), utc(2000, 1, 1, 12, 13), utc(2079, 6, 6, 23, 59)],
)
def test_smalldatetime_round_trip(value):
    assert decode_datetim4(encode_datetim4(value)) == value


def test_smalldatetime_before_epoch_clamps():
    assert decode_datetim4(encode_datetim4(datetime.datetime(1800, 5, 5, 10, 10))) == utc(
        1900, 1, 1
    )


def test_smalldatetime_short_buffer():
    with pytest.raises(ValueError):
        decode_datetim4(b"\x00\x00")


def test_datetime_epoch_bytes():
    assert encode_datetime(datetime.datetime(1900, 1, 1)) == bytes(8)
    assert decode_datetime(bytes(8)) == utc(1900, 1, 1)


@pytest.mark.parametrize(
    "value",
    [
        utc(1753, 1, 1),
        utc(2000, 1, 1),
        utc(2000, 1, 1, 12, 13, 14, 120000),
        utc(9999, 12, 31, 23, 59, 59, 997000),
    ],
)
def test_datetime_round_trip(value):
    assert decode_datetime(encode_datetime(value)) == value


def test_datetime_below_minimum_clamps():
    value = datetime.datetime(1752, 12, 31, 23, 59, 59, 997000)
    assert decode_datetime(encode_datetime(value)) == utc(1753, 1, 1)


def test_datetime_short_buffer():
    with pytest.raises(ValueError):
        decode_datetime(b"\x00" * 7)


def test_date_zero_is_year_one():
    assert decode_date(b"\x00\x00\x00") == utc(1, 1, 1)


@pytest.mark.parametrize(
    "value", [utc(1, 1, 1), utc(2000, 1, 1), utc(9999, 12, 31)]
)
def test_date_round_trip(value):
    encoded = encode_date(value)
    assert len(encoded) == 3
    assert decode_date(encoded) == value


def test_date_short_buffer():
    with pytest.raises(ValueError):
        decode_date(b"\x01")


@pytest.mark.parametrize(
    "hour,minute,second,ns,scale,micro",
    [
        (0, 0, 0, 0, 7, 0),
        (0, 0, 45, 123000000, 3, 123000),
        (11, 56, 45, 123000000, 3, 123000),
        (11, 56, 45, 0, 0, 0),
        (23, 59, 59, 999999900, 7, 999999),
    ],
)
def test_time_round_trip(hour, minute, second, ns, scale, micro):
    encoded = encode_time(hour, minute, second, ns, scale)
    assert len(encoded) == calc_time_size(scale)
    assert decode_time(scale, encoded) == utc(1, 1, 1, hour, minute, second, micro)


def test_time_invalid_scale():
    with pytest.raises(ValueError):
        encode_time(1, 2, 3, 0, 10)


@pytest.mark.parametrize(
    "value,scale",
    [
        (utc(1, 1, 1), 7),
        (utc(2010, 11, 15, 11, 56, 45, 123000), 3),
        (utc(2010, 11, 15, 11, 56, 45), 0),
        (utc(9999, 12, 31, 23, 59, 59, 999999), 7),
    ],
)
def test_datetime2_round_trip(value, scale):
    encoded = encode_datetime2(value, scale)
    assert len(encoded) == 3 + calc_time_size(scale)
    assert decode_datetime2(scale, encoded) == value


def test_datetime2_date_part_matches_encode_date():
    value = utc(2010, 11, 15, 11, 56, 45)
    assert encode_datetime2(value, 7)[-3:] == encode_date(value)


@pytest.mark.parametrize(
    "value,scale",
    [
        (datetime.datetime(2010, 11, 15, 11, 56, 45, 123000,
                           tzinfo=datetime.timezone(datetime.timedelta(hours=14))), 3),
        (datetime.datetime(2010, 11, 15, 11, 56, 45, 123000,
                           tzinfo=datetime.timezone(datetime.timedelta(hours=-14))), 3),
        (utc(1, 1, 1), 7),
        (utc(9999, 12, 31, 23, 59, 59, 999999), 7),
    ],
)
def test_datetimeoffset_round_trip(value, scale):
    decoded = decode_datetimeoffset(scale, encode_datetimeoffset(value, scale))
    assert decoded == value
    assert decoded.utcoffset() == value.utcoffset()
    assert decoded.replace(tzinfo=None) == value.replace(tzinfo=None)


def test_datetimeoffset_utc_matches_datetime2():
    value = utc(2006, 1, 2, 22, 4, 5, 787000)
    encoded = encode_datetimeoffset(value, 7)
    assert encoded[:-2] == encode_datetime2(value, 7)
    assert encoded[-2:] == b"\x00\x00"


def test_datetimeoffset_stores_utc_and_offset():
    tz = datetime.timezone(datetime.timedelta(hours=-7))
    value = datetime.datetime(2006, 1, 2, 22, 4, 5, tzinfo=tz)
    encoded = encode_datetimeoffset(value, 7)
    assert encoded[:-2] == encode_datetime2(value.astimezone(UTC), 7)
    assert encoded[-2:] == (-7 * 60).to_bytes(2, "little", signed=True)


def test_money_values():
    positive = (0).to_bytes(4, "little") + (12345).to_bytes(4, "little")
    assert decode_money(positive) == b"1.2345"
    raw = (-12345).to_bytes(8, "little", signed=True)
    negative = raw[4:8] + raw[0:4]
    assert decode_money(negative) == b"-1.2345"


def test_money4_values():
    assert decode_money4((12345).to_bytes(4, "little", signed=True)) == b"1.2345"
    assert decode_money4((-12345).to_bytes(4, "little", signed=True)) == b"-1.2345"
    assert decode_money4((5).to_bytes(4, "little", signed=True)) == b"0.0005"


def test_money_short_buffer():
    with pytest.raises(ValueError):
        decode_money(b"\x00" * 4)