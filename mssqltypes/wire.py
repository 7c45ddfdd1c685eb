"""Reading and writing TYPE_INFO records and column values in the binary stream format."""

from __future__ import annotations

import struct
from typing import BinaryIO, Callable, Optional

from .temporal import (
    decode_date,
    decode_datetim4,
    decode_datetime,
    decode_datetime2,
    decode_datetimeoffset,
    decode_money,
    decode_money4,
    decode_time,
)
from .typeinfo import Collation, TypeId, TypeInfo, fixed_size

PLP_NULL = 0xFFFFFFFFFFFFFFFF
UNKNOWN_PLP_LEN = 0xFFFFFFFFFFFFFFFE
PLP_TERMINATOR = 0x00000000

CharDecoder = Callable[[Collation, bytes], str]


class StreamError(Exception):
    """The byte stream does not hold what the format requires."""


_DATE_TIME_N = frozenset(
    {TypeId.DATEN, TypeId.TIMEN, TypeId.DATETIME2N, TypeId.DATETIMEOFFSETN}
)
_BYTE_LEN = frozenset(
    {
        TypeId.GUID,
        TypeId.INTN,
        TypeId.DECIMAL,
        TypeId.NUMERIC,
        TypeId.BITN,
        TypeId.DECIMALN,
        TypeId.NUMERICN,
        TypeId.FLTN,
        TypeId.MONEYN,
        TypeId.DATETIMEN,
        TypeId.CHAR,
        TypeId.VARCHAR,
        TypeId.BINARY,
        TypeId.VARBINARY,
    }
)
_SHORT_LEN = frozenset(
    {
        TypeId.BIGVARBIN,
        TypeId.BIGVARCHAR,
        TypeId.BIGBINARY,
        TypeId.BIGCHAR,
        TypeId.NVARCHAR,
        TypeId.NCHAR,
    }
)
_LONG_LEN = frozenset({TypeId.TEXT, TypeId.IMAGE, TypeId.NTEXT, TypeId.VARIANT})
_DECIMALS = frozenset(
    {TypeId.DECIMAL, TypeId.NUMERIC, TypeId.DECIMALN, TypeId.NUMERICN}
)
_COLLATED = frozenset(
    {TypeId.BIGVARCHAR, TypeId.BIGCHAR, TypeId.NVARCHAR, TypeId.NCHAR}
)


class Reader:
    """Sequential little-endian reader over a byte string."""

    def __init__(self, data) -> None:
        self._data = bytes(data)
        self._pos = 0

    def read_full(self, size: int) -> bytes:
        """Read exactly `size` bytes."""
        if size < 0:
            raise StreamError(f"invalid read size {size}")
        end = self._pos + size
        if end > len(self._data):
            raise StreamError(
                f"unexpected end of stream: wanted {size} bytes, "
                f"{len(self._data) - self._pos} left"
            )
        chunk = self._data[self._pos : end]
        self._pos = end
        return chunk

    def _unpack(self, fmt: str):
        return struct.unpack(fmt, self.read_full(struct.calcsize(fmt)))[0]

    def byte(self) -> int:
        return self._unpack("<B")

    def uint16(self) -> int:
        return self._unpack("<H")

    def uint32(self) -> int:
        return self._unpack("<I")

    def int32(self) -> int:
        return self._unpack("<i")

    def uint64(self) -> int:
        return self._unpack("<Q")

    def b_varchar(self) -> str:
        """Read a UCS-2 string prefixed by a one-byte character count."""
        return _decode_ucs2(self.read_full(self.byte() * 2))

    def us_varchar(self) -> str:
        """Read a UCS-2 string prefixed by a two-byte character count."""
        return _decode_ucs2(self.read_full(self.uint16() * 2))


def _decode_ucs2(buf: bytes) -> str:
    if len(buf) % 2:
        raise StreamError("Invalid UCS2 encoding: odd number of bytes")
    try:
        return buf.decode("utf-16-le")
    except UnicodeDecodeError as exc:
        raise StreamError(f"Invalid UCS2 encoding: {exc}") from exc


def read_collation(reader: Reader) -> Collation:
    """Read a 5-byte collation record."""
    lcid = reader.uint32()
    return Collation(lcid_and_flags=lcid, sort_id=reader.byte())


def write_collation(stream: BinaryIO, collation: Collation) -> None:
    """Write a 5-byte collation record."""
    stream.write(struct.pack("<IB", collation.lcid_and_flags, collation.sort_id))


def decode_decimal(prec: int, scale: int, buf: bytes) -> bytes:
    """Decode a sign byte followed by little-endian 32-bit words to decimal text."""
    buf = bytes(buf)
    if not buf:
        raise StreamError("empty decimal value")
    positive = buf[0] != 0
    words = min((len(buf) - 1) // 4, 4)
    value = int.from_bytes(buf[1 : 1 + words * 4], "little")
    if value == 0:
        return b"0"
    digits = str(value)
    if scale > 0:
        digits = digits.rjust(scale + 1, "0")
        digits = digits[:-scale] + "." + digits[-scale:]
    if not positive:
        digits = "-" + digits
    return digits.encode("ascii")


def _as_type_id(tid: int):
    try:
        return TypeId(tid)
    except ValueError:
        return tid


def read_type_info(reader: Reader) -> TypeInfo:
    """Read a TYPE_INFO record."""
    tid = _as_type_id(reader.byte())
    size = fixed_size(tid)
    if size is not None:
        return TypeInfo(type_id=tid, size=size)
    ti = TypeInfo(type_id=tid)
    _read_var_len(ti, reader)
    return ti


def _read_var_len(ti: TypeInfo, r: Reader) -> None:
    tid = ti.type_id
    if tid == TypeId.DATEN:
        ti.size = 3
    elif tid in _DATE_TIME_N:
        ti.scale = r.byte()
        if ti.scale <= 2:
            ti.size = 3
        elif ti.scale <= 4:
            ti.size = 4
        elif ti.scale <= 7:
            ti.size = 5
        else:
            raise StreamError("Invalid scale for TIME/DATETIME2/DATETIMEOFFSET type")
        if tid == TypeId.DATETIME2N:
            ti.size += 3
        elif tid == TypeId.DATETIMEOFFSETN:
            ti.size += 5
    elif tid in _BYTE_LEN:
        ti.size = r.byte()
        if tid in _DECIMALS:
            ti.prec = r.byte()
            ti.scale = r.byte()
    elif tid == TypeId.XML:
        ti.xml_info.schema_present = r.byte()
        if ti.xml_info.schema_present:
            ti.xml_info.db_name = r.b_varchar()
            ti.xml_info.owning_schema = r.b_varchar()
            ti.xml_info.xml_schema_collection = r.us_varchar()
    elif tid == TypeId.UDT:
        ti.size = r.uint16()
        ti.udt_info.db_name = r.b_varchar()
        ti.udt_info.schema_name = r.b_varchar()
        ti.udt_info.type_name = r.b_varchar()
        ti.udt_info.assembly_qualified_name = r.us_varchar()
    elif tid in _SHORT_LEN:
        ti.size = r.uint16()
        if tid in _COLLATED:
            ti.collation = read_collation(r)
    elif tid in _LONG_LEN:
        ti.size = r.int32()
        if tid in (TypeId.TEXT, TypeId.NTEXT):
            ti.collation = read_collation(r)
        if tid != TypeId.VARIANT:
            # table names are not used
            for _ in range(r.byte()):
                r.us_varchar()
    else:
        raise StreamError(f"Invalid type {int(tid)}")


def write_type_info(stream: BinaryIO, ti: TypeInfo) -> None:
    """Write a TYPE_INFO record."""
    tid = ti.type_id
    stream.write(struct.pack("<B", tid))
    if fixed_size(tid) is not None or tid == TypeId.TVP:
        return
    if tid == TypeId.DATEN:
        return
    if tid in _DATE_TIME_N:
        stream.write(struct.pack("<B", ti.scale))
    elif tid in _BYTE_LEN and tid != TypeId.GUID:
        if ti.size > 0xFF:
            raise ValueError("Invalid size for BYTELEN_TYPE")
        stream.write(struct.pack("<B", ti.size))
        if tid in _DECIMALS:
            stream.write(struct.pack("<BB", ti.prec, ti.scale))
    elif tid == TypeId.GUID:
        if ti.size not in (0x10, 0x00):
            raise ValueError("Invalid size for BYTELEN_TYPE")
        stream.write(struct.pack("<B", ti.size))
    elif tid in _SHORT_LEN or tid in (TypeId.XML, TypeId.UDT):
        if ti.size > 8000 or ti.size == 0:
            stream.write(struct.pack("<H", 0xFFFF))
        else:
            stream.write(struct.pack("<H", ti.size))
        if tid in _COLLATED:
            write_collation(stream, ti.collation)
        elif tid == TypeId.XML:
            stream.write(struct.pack("<B", ti.xml_info.schema_present))
    elif tid in _LONG_LEN:
        stream.write(struct.pack("<I", ti.size & 0xFFFFFFFF))
        write_collation(stream, ti.collation)
    else:
        raise ValueError("Invalid type")


def _int_le(buf: bytes, signed: bool = True) -> int:
    return int.from_bytes(buf, "little", signed=signed)


def _read_fixed(ti: TypeInfo, r: Reader):
    buf = r.read_full(ti.size)
    tid = ti.type_id
    if tid == TypeId.NULL:
        return None
    if tid == TypeId.INT1:
        return buf[0]
    if tid == TypeId.BIT:
        return buf[0] != 0
    if tid in (TypeId.INT2, TypeId.INT4, TypeId.INT8):
        return _int_le(buf)
    if tid == TypeId.DATETIM4:
        return decode_datetim4(buf)
    if tid == TypeId.FLT4:
        return struct.unpack("<f", buf)[0]
    if tid == TypeId.MONEY4:
        return decode_money4(buf)
    if tid == TypeId.MONEY:
        return decode_money(buf)
    if tid == TypeId.DATETIME:
        return decode_datetime(buf)
    if tid == TypeId.FLT8:
        return struct.unpack("<d", buf)[0]
    raise StreamError("Invalid typeid")


def _read_byte_len(ti: TypeInfo, r: Reader, decode_char: Optional[CharDecoder]):
    size = r.byte()
    if size == 0:
        return None
    if size > ti.size:
        raise StreamError(f"value of {size} bytes exceeds column size {ti.size}")
    buf = r.read_full(size)
    tid = ti.type_id
    if tid == TypeId.DATEN:
        if len(buf) != 3:
            raise StreamError("Invalid size for DATENTYPE")
        return decode_date(buf)
    if tid == TypeId.TIMEN:
        return decode_time(ti.scale, buf)
    if tid == TypeId.DATETIME2N:
        return decode_datetime2(ti.scale, buf)
    if tid == TypeId.DATETIMEOFFSETN:
        return decode_datetimeoffset(ti.scale, buf)
    if tid == TypeId.GUID:
        return buf.ljust(16, b"\x00")[:16]
    if tid == TypeId.INTN:
        if len(buf) == 1:
            return buf[0]
        if len(buf) in (2, 4, 8):
            return _int_le(buf)
        raise StreamError(f"Invalid size for INTNTYPE: {len(buf)}")
    if tid in _DECIMALS:
        return decode_decimal(ti.prec, ti.scale, buf)
    if tid == TypeId.BITN:
        if len(buf) != 1:
            raise StreamError("Invalid size for BITNTYPE")
        return buf[0] != 0
    if tid == TypeId.FLTN:
        if len(buf) == 4:
            return struct.unpack("<f", buf)[0]
        if len(buf) == 8:
            return struct.unpack("<d", buf)[0]
        raise StreamError("Invalid size for FLTNTYPE")
    if tid == TypeId.MONEYN:
        if len(buf) == 4:
            return decode_money4(buf)
        if len(buf) == 8:
            return decode_money(buf)
        raise StreamError("Invalid size for MONEYNTYPE")
    if tid == TypeId.DATETIMEN:
        if len(buf) == 4:
            return decode_datetim4(buf)
        if len(buf) == 8:
            return decode_datetime(buf)
        raise StreamError("Invalid size for DATETIMENTYPE")
    if tid in (TypeId.CHAR, TypeId.VARCHAR):
        return _char(decode_char, ti.collation, buf)
    if tid in (TypeId.BINARY, TypeId.VARBINARY):
        return buf
    raise StreamError("Invalid typeid")


def _char(decode_char: Optional[CharDecoder], collation: Collation, buf: bytes) -> str:
    if decode_char is None:
        raise StreamError("no character set decoder given for single-byte text")
    return decode_char(collation, buf)


def _read_short_len(ti: TypeInfo, r: Reader, decode_char: Optional[CharDecoder]):
    size = r.uint16()
    if size == 0xFFFF:
        return None
    buf = r.read_full(size)
    tid = ti.type_id
    if tid in (TypeId.BIGVARCHAR, TypeId.BIGCHAR):
        return _char(decode_char, ti.collation, buf)
    if tid in (TypeId.BIGVARBIN, TypeId.BIGBINARY, TypeId.UDT):
        return buf
    if tid in (TypeId.NVARCHAR, TypeId.NCHAR):
        return _decode_ucs2(buf)
    raise StreamError("Invalid typeid")


def _read_long_len(ti: TypeInfo, r: Reader, decode_char: Optional[CharDecoder]):
    textptrsize = r.byte()
    if textptrsize == 0:
        return None
    r.read_full(textptrsize)
    r.uint64()  # timestamp, unused
    size = r.int32()
    if size == -1:
        return None
    buf = r.read_full(size)
    tid = ti.type_id
    if tid == TypeId.TEXT:
        return _char(decode_char, ti.collation, buf)
    if tid == TypeId.IMAGE:
        return buf
    if tid == TypeId.NTEXT:
        return _decode_ucs2(buf)
    raise StreamError("Invalid typeid")


def _read_variant(r: Reader, decode_char: Optional[CharDecoder]):
    size = r.int32()
    if size == 0:
        return None
    vartype = r.byte()
    propbytes = r.byte()
    n = size - 2 - propbytes

    if vartype == TypeId.GUID:
        return r.read_full(n)
    if vartype == TypeId.BIT:
        return r.byte() != 0
    if vartype == TypeId.INT1:
        return r.byte()
    if vartype == TypeId.INT2:
        return _int_le(r.read_full(2))
    if vartype == TypeId.INT4:
        return r.int32()
    if vartype == TypeId.INT8:
        return _int_le(r.read_full(8))
    if vartype == TypeId.DATETIME:
        return decode_datetime(r.read_full(n))
    if vartype == TypeId.DATETIM4:
        return decode_datetim4(r.read_full(n))
    if vartype == TypeId.FLT4:
        return struct.unpack("<f", r.read_full(4))[0]
    if vartype == TypeId.FLT8:
        return struct.unpack("<d", r.read_full(8))[0]
    if vartype == TypeId.MONEY4:
        return decode_money4(r.read_full(n))
    if vartype == TypeId.MONEY:
        return decode_money(r.read_full(n))
    if vartype == TypeId.DATEN:
        return decode_date(r.read_full(n))
    if vartype == TypeId.TIMEN:
        scale = r.byte()
        return decode_time(scale, r.read_full(n))
    if vartype == TypeId.DATETIME2N:
        scale = r.byte()
        return decode_datetime2(scale, r.read_full(n))
    if vartype == TypeId.DATETIMEOFFSETN:
        scale = r.byte()
        return decode_datetimeoffset(scale, r.read_full(n))
    if vartype in (TypeId.BIGVARBIN, TypeId.BIGBINARY):
        r.uint16()  # max length, unused
        return r.read_full(n)
    if vartype in (TypeId.DECIMALN, TypeId.NUMERICN):
        prec = r.byte()
        scale = r.byte()
        return decode_decimal(prec, scale, r.read_full(n))
    if vartype in (TypeId.BIGVARCHAR, TypeId.BIGCHAR):
        collation = read_collation(r)
        r.uint16()
        return _char(decode_char, collation, r.read_full(n))
    if vartype in (TypeId.NVARCHAR, TypeId.NCHAR):
        read_collation(r)
        r.uint16()
        return _decode_ucs2(r.read_full(n))
    raise StreamError("Invalid variant typeid")


def _read_plp(ti: TypeInfo, r: Reader, decode_char: Optional[CharDecoder]):
    size = r.uint64()
    if size == PLP_NULL:
        return None
    chunks = []
    while True:
        chunksize = r.uint32()
        if chunksize == 0:
            break
        try:
            chunks.append(r.read_full(chunksize))
        except StreamError as exc:
            raise StreamError(f"Reading PLP type failed: {exc}") from exc
    buf = b"".join(chunks)
    tid = ti.type_id
    if tid in (TypeId.XML, TypeId.NVARCHAR, TypeId.NCHAR, TypeId.NTEXT):
        return _decode_ucs2(buf)
    if tid in (TypeId.BIGVARCHAR, TypeId.BIGCHAR, TypeId.TEXT):
        return _char(decode_char, ti.collation, buf)
    if tid in (TypeId.BIGVARBIN, TypeId.BIGBINARY, TypeId.IMAGE, TypeId.UDT):
        return buf
    raise StreamError("Invalid typeid")


def read_value(ti: TypeInfo, reader: Reader, decode_char: Optional[CharDecoder] = None):
    """Read one value of the described type.

    `decode_char` turns single-byte text in a collation's code page into a string.
    """
    tid = ti.type_id
    if fixed_size(tid) is not None:
        return _read_fixed(ti, reader)
    if tid in _DATE_TIME_N or tid in _BYTE_LEN:
        return _read_byte_len(ti, reader, decode_char)
    if tid in (TypeId.XML, TypeId.UDT):
        return _read_plp(ti, reader, decode_char)
    if tid in _SHORT_LEN:
        if ti.size == 0xFFFF:
            return _read_plp(ti, reader, decode_char)
        return _read_short_len(ti, reader, decode_char)
    if tid == TypeId.VARIANT:
        return _read_variant(reader, decode_char)
    if tid in _LONG_LEN:
        return _read_long_len(ti, reader, decode_char)
    raise StreamError(f"Invalid type {int(tid)}")


def _write_byte_len(stream: BinaryIO, ti: TypeInfo, buf: bytes) -> None:
    if ti.size > 0xFF:
        raise ValueError("Invalid size for BYTELEN_TYPE")
    if len(buf) > 0xFF:
        raise ValueError("value too long for BYTELEN_TYPE")
    stream.write(struct.pack("<B", len(buf)))
    stream.write(buf)


def _write_short_len(stream: BinaryIO, ti: TypeInfo, buf: Optional[bytes]) -> None:
    if buf is None:
        stream.write(struct.pack("<H", 0xFFFF))
        return
    if ti.size > 0xFFFE:
        raise ValueError("Invalid size for USHORTLEN_TYPE")
    stream.write(struct.pack("<H", ti.size))
    stream.write(buf)


def _write_long_len(stream: BinaryIO, ti: TypeInfo, buf: bytes) -> None:
    stream.write(struct.pack("<B", 0x10))
    stream.write(struct.pack("<QQ", 0xFFFFFFFFFFFFFFFF, 0xFFFFFFFFFFFFFFFF))
    stream.write(struct.pack("<Q", 0xFFFFFFFFFFFFFFFF))
    stream.write(struct.pack("<I", ti.size & 0xFFFFFFFF))
    stream.write(buf)


def _write_plp(stream: BinaryIO, buf: bytes) -> None:
    stream.write(struct.pack("<Q", UNKNOWN_PLP_LEN))
    if buf:
        stream.write(struct.pack("<I", len(buf)))
        stream.write(buf)
    stream.write(struct.pack("<I", PLP_TERMINATOR))


def write_value(stream: BinaryIO, ti: TypeInfo, buf: Optional[bytes]) -> None:
    """Write an encoded value with the framing that its TYPE_INFO implies.

    None stands for NULL where the framing has a way to express it.
    """
    tid = ti.type_id
    data = b"" if buf is None else bytes(buf)
    if fixed_size(tid) is not None or tid == TypeId.TVP:
        stream.write(data)
    elif tid in _DATE_TIME_N or tid in _BYTE_LEN:
        _write_byte_len(stream, ti, data)
    elif tid in _SHORT_LEN or tid in (TypeId.XML, TypeId.UDT):
        if ti.size > 8000 or ti.size == 0:
            _write_plp(stream, data)
        else:
            _write_short_len(stream, ti, None if buf is None else data)
    elif tid in _LONG_LEN:
        _write_long_len(stream, ti, data)
    else:
        raise ValueError("Invalid type")