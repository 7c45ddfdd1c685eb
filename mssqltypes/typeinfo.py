"""Type descriptors for column and parameter metadata, and the SQL names derived from them."""

from __future__ import annotations

import datetime
from dataclasses import dataclass, field
from enum import IntEnum


class TypeId(IntEnum):
    """Type identifiers as they appear in a TYPE_INFO record."""

    # fixed-length types
    NULL = 0x1F
    INT1 = 0x30
    BIT = 0x32
    INT2 = 0x34
    INT4 = 0x38
    DATETIM4 = 0x3A
    FLT4 = 0x3B
    MONEY = 0x3C
    DATETIME = 0x3D
    FLT8 = 0x3E
    MONEY4 = 0x7A
    INT8 = 0x7F

    # byte length types
    GUID = 0x24
    INTN = 0x26
    DECIMAL = 0x37
    NUMERIC = 0x3F
    BITN = 0x68
    DECIMALN = 0x6A
    NUMERICN = 0x6C
    FLTN = 0x6D
    MONEYN = 0x6E
    DATETIMEN = 0x6F
    DATEN = 0x28
    TIMEN = 0x29
    DATETIME2N = 0x2A
    DATETIMEOFFSETN = 0x2B
    CHAR = 0x2F
    VARCHAR = 0x27
    BINARY = 0x2D
    VARBINARY = 0x25

    # short length types
    BIGVARBIN = 0xA5
    BIGVARCHAR = 0xA7
    BIGBINARY = 0xAD
    BIGCHAR = 0xAF
    NVARCHAR = 0xE7
    NCHAR = 0xEF
    XML = 0xF1
    UDT = 0xF0
    TVP = 0xF3

    # long length types
    TEXT = 0x23
    IMAGE = 0x22
    NTEXT = 0x63
    VARIANT = 0x62


_FIXED_SIZES = {
    TypeId.NULL: 0,
    TypeId.INT1: 1,
    TypeId.BIT: 1,
    TypeId.INT2: 2,
    TypeId.INT4: 4,
    TypeId.DATETIM4: 4,
    TypeId.FLT4: 4,
    TypeId.MONEY4: 4,
    TypeId.MONEY: 8,
    TypeId.DATETIME: 8,
    TypeId.FLT8: 8,
    TypeId.INT8: 8,
}


@dataclass
class Collation:
    """Collation of a character column: locale id with flags, and sort id."""

    lcid_and_flags: int = 0
    sort_id: int = 0


@dataclass
class UdtInfo:
    """Description of a CLR user-defined type."""

    db_name: str = ""
    schema_name: str = ""
    type_name: str = ""
    assembly_qualified_name: str = ""


@dataclass
class XmlInfo:
    """Schema information attached to an XML column."""

    schema_present: int = 0
    db_name: str = ""
    owning_schema: str = ""
    xml_schema_collection: str = ""


@dataclass
class TypeInfo:
    """A TYPE_INFO record: type id with its size, precision, scale and extras."""

    type_id: int
    size: int = 0
    scale: int = 0
    prec: int = 0
    collation: Collation = field(default_factory=Collation)
    udt_info: UdtInfo = field(default_factory=UdtInfo)
    xml_info: XmlInfo = field(default_factory=XmlInfo)


def fixed_size(type_id: int) -> int | None:
    """Return the byte size of a fixed-length type, or None for variable-length types."""
    try:
        return _FIXED_SIZES[TypeId(type_id)]
    except (ValueError, KeyError):
        return None


def _by_size(ti: TypeInfo, choices: dict, label: str):
    try:
        return choices[ti.size]
    except KeyError:
        raise ValueError(f"invalid size of {label}") from None


_MONEY_TYPES = (TypeId.MONEY, TypeId.MONEY4, TypeId.MONEYN)

_SCAN_TYPES = {
    TypeId.INT1: int,
    TypeId.INT2: int,
    TypeId.INT4: int,
    TypeId.INT8: int,
    TypeId.FLT4: float,
    TypeId.FLT8: float,
    TypeId.BIGVARBIN: bytes,
    TypeId.VARCHAR: str,
    TypeId.NVARCHAR: str,
    TypeId.BIT: bool,
    TypeId.BITN: bool,
    TypeId.DECIMALN: bytes,
    TypeId.NUMERICN: bytes,
    TypeId.DATETIM4: datetime.datetime,
    TypeId.DATETIME: datetime.datetime,
    TypeId.DATETIME2N: datetime.datetime,
    TypeId.DATEN: datetime.datetime,
    TypeId.TIMEN: datetime.datetime,
    TypeId.DATETIMEOFFSETN: datetime.datetime,
    TypeId.BIGVARCHAR: str,
    TypeId.BIGCHAR: str,
    TypeId.NCHAR: str,
    TypeId.GUID: bytes,
    TypeId.XML: str,
    TypeId.TEXT: str,
    TypeId.NTEXT: str,
    TypeId.IMAGE: bytes,
    TypeId.BIGBINARY: bytes,
    TypeId.VARIANT: None,
}


def scan_type(ti: TypeInfo):
    """Return the Python type a value of this column decodes to (None for sql_variant)."""
    tid = ti.type_id
    if tid == TypeId.INTN:
        return _by_size(ti, {1: int, 2: int, 4: int, 8: int}, "INTNTYPE")
    if tid == TypeId.FLTN:
        return _by_size(ti, {4: float, 8: float}, "FLNNTYPE")
    if tid in _MONEY_TYPES:
        return _by_size(ti, {4: bytes, 8: bytes}, "MONEYN")
    if tid == TypeId.DATETIMEN:
        return _by_size(ti, {4: datetime.datetime, 8: datetime.datetime}, "DATETIMEN")
    if tid in _SCAN_TYPES:
        return _SCAN_TYPES[tid]
    raise ValueError(f"not implemented scan_type for type {int(tid)}")


_SIMPLE_DECLS = {
    TypeId.NULL: "nvarchar(1)",
    TypeId.INT1: "tinyint",
    TypeId.INT2: "smallint",
    TypeId.INT4: "int",
    TypeId.INT8: "bigint",
    TypeId.FLT4: "real",
    TypeId.FLT8: "float",
    TypeId.MONEY4: "smallmoney",
    TypeId.MONEY: "money",
    TypeId.BIT: "bit",
    TypeId.BITN: "bit",
    TypeId.DATEN: "date",
    TypeId.DATETIM4: "smalldatetime",
    TypeId.DATETIME: "datetime",
    TypeId.TIMEN: "time",
    TypeId.TEXT: "text",
    TypeId.NTEXT: "ntext",
    TypeId.GUID: "uniqueidentifier",
}


def make_decl(ti: TypeInfo) -> str:
    """Return the SQL declaration used for a parameter of this type."""
    tid = ti.type_id
    if tid in _SIMPLE_DECLS:
        return _SIMPLE_DECLS[tid]
    if tid == TypeId.BIGBINARY:
        return f"binary({ti.size})"
    if tid == TypeId.INTN:
        return _by_size(
            ti, {1: "tinyint", 2: "smallint", 4: "int", 8: "bigint"}, "INTNTYPE"
        )
    if tid == TypeId.FLTN:
        return _by_size(ti, {4: "real", 8: "float"}, "FLNNTYPE")
    if tid in (TypeId.DECIMAL, TypeId.DECIMALN):
        return f"decimal({ti.prec}, {ti.scale})"
    if tid in (TypeId.NUMERIC, TypeId.NUMERICN):
        return f"numeric({ti.prec}, {ti.scale})"
    if tid == TypeId.MONEYN:
        return _by_size(ti, {4: "smallmoney", 8: "money"}, "MONEYNTYPE")
    if tid == TypeId.BIGVARBIN:
        if ti.size > 8000 or ti.size == 0:
            return "varbinary(max)"
        return f"varbinary({ti.size})"
    if tid == TypeId.NCHAR:
        return f"nchar({ti.size // 2})"
    if tid in (TypeId.BIGCHAR, TypeId.CHAR):
        return f"char({ti.size})"
    if tid in (TypeId.BIGVARCHAR, TypeId.VARCHAR):
        if ti.size > 4000 or ti.size == 0:
            return "varchar(max)"
        return f"varchar({ti.size})"
    if tid == TypeId.NVARCHAR:
        if ti.size > 8000 or ti.size == 0:
            return "nvarchar(max)"
        return f"nvarchar({ti.size // 2})"
    if tid == TypeId.DATETIMEN:
        return _by_size(ti, {4: "smalldatetime", 8: "datetime"}, "DATETIMNTYPE")
    if tid == TypeId.DATETIME2N:
        return f"datetime2({ti.scale})"
    if tid == TypeId.DATETIMEOFFSETN:
        return f"datetimeoffset({ti.scale})"
    if tid == TypeId.UDT:
        return ti.udt_info.type_name
    if tid == TypeId.TVP:
        if ti.udt_info.schema_name:
            return f"{ti.udt_info.schema_name}.{ti.udt_info.type_name} READONLY"
        return f"{ti.udt_info.type_name} READONLY"
    raise ValueError(f"not implemented make_decl for type {int(tid):#x}")


_TYPE_NAMES = {
    TypeId.INT1: "TINYINT",
    TypeId.INT2: "SMALLINT",
    TypeId.INT4: "INT",
    TypeId.INT8: "BIGINT",
    TypeId.FLT4: "REAL",
    TypeId.FLT8: "FLOAT",
    TypeId.BIGVARBIN: "VARBINARY",
    TypeId.VARCHAR: "VARCHAR",
    TypeId.NVARCHAR: "NVARCHAR",
    TypeId.BIT: "BIT",
    TypeId.BITN: "BIT",
    TypeId.DECIMALN: "DECIMAL",
    TypeId.NUMERICN: "DECIMAL",
    TypeId.DATETIM4: "SMALLDATETIME",
    TypeId.DATETIME: "DATETIME",
    TypeId.DATETIME2N: "DATETIME2",
    TypeId.DATEN: "DATE",
    TypeId.TIMEN: "TIME",
    TypeId.DATETIMEOFFSETN: "DATETIMEOFFSET",
    TypeId.BIGVARCHAR: "VARCHAR",
    TypeId.BIGCHAR: "CHAR",
    TypeId.NCHAR: "NCHAR",
    TypeId.GUID: "UNIQUEIDENTIFIER",
    TypeId.XML: "XML",
    TypeId.TEXT: "TEXT",
    TypeId.NTEXT: "NTEXT",
    TypeId.IMAGE: "IMAGE",
    TypeId.VARIANT: "SQL_VARIANT",
    TypeId.BIGBINARY: "BINARY",
}


def type_name(ti: TypeInfo) -> str:
    """Return the upper-case database type name, without length."""
    tid = ti.type_id
    if tid == TypeId.INTN:
        return _by_size(
            ti, {1: "TINYINT", 2: "SMALLINT", 4: "INT", 8: "BIGINT"}, "INTNTYPE"
        )
    if tid == TypeId.FLTN:
        return _by_size(ti, {4: "REAL", 8: "FLOAT"}, "FLNNTYPE")
    if tid in _MONEY_TYPES:
        return _by_size(ti, {4: "SMALLMONEY", 8: "MONEY"}, "MONEYN")
    if tid == TypeId.DATETIMEN:
        return _by_size(ti, {4: "SMALLDATETIME", 8: "DATETIME"}, "DATETIMEN")
    if tid in _TYPE_NAMES:
        return _TYPE_NAMES[tid]
    raise ValueError(f"not implemented type_name for type {int(tid)}")


_NOT_VARIABLE = frozenset(
    {
        TypeId.INT1,
        TypeId.INT2,
        TypeId.INT4,
        TypeId.INT8,
        TypeId.FLT4,
        TypeId.FLT8,
        TypeId.BIT,
        TypeId.BITN,
        TypeId.DATETIM4,
        TypeId.DATETIME,
        TypeId.DATETIME2N,
        TypeId.DATEN,
        TypeId.TIMEN,
        TypeId.DATETIMEOFFSETN,
        TypeId.GUID,
        TypeId.VARIANT,
        TypeId.BIGBINARY,
    }
)

_MAX_LENGTHS = {
    TypeId.XML: 1073741822,
    TypeId.TEXT: 2147483647,
    TypeId.NTEXT: 1073741823,
    TypeId.IMAGE: 2147483647,
}


def _check_sized(ti: TypeInfo) -> bool:
    """Validate the size of size-dependent types; return True if the type is one of them."""
    tid = ti.type_id
    if tid == TypeId.INTN:
        _by_size(ti, dict.fromkeys((1, 2, 4, 8)), "INTNTYPE")
    elif tid == TypeId.FLTN:
        _by_size(ti, dict.fromkeys((4, 8)), "FLNNTYPE")
    elif tid in _MONEY_TYPES:
        _by_size(ti, dict.fromkeys((4, 8)), "MONEYN")
    elif tid == TypeId.DATETIMEN:
        _by_size(ti, dict.fromkeys((4, 8)), "DATETIMEN")
    else:
        return False
    return True


def type_length(ti: TypeInfo) -> tuple[int, bool]:
    """Return (length, is_variable) for the column type."""
    tid = ti.type_id
    if _check_sized(ti) or tid in _NOT_VARIABLE:
        return 0, False
    if tid in (TypeId.DECIMALN, TypeId.NUMERICN):
        return 0, False
    if tid in (TypeId.BIGVARBIN, TypeId.BIGVARCHAR):
        return (2147483645 if ti.size == 0xFFFF else ti.size), True
    if tid in (TypeId.VARCHAR, TypeId.BIGCHAR):
        return ti.size, True
    if tid == TypeId.NVARCHAR:
        return (2147483645 // 2 if ti.size == 0xFFFF else ti.size // 2), True
    if tid == TypeId.NCHAR:
        return ti.size // 2, True
    if tid in _MAX_LENGTHS:
        return _MAX_LENGTHS[tid], True
    raise ValueError(f"not implemented type_length for type {int(tid)}")


_NO_PRECISION = _NOT_VARIABLE | frozenset(
    {
        TypeId.BIGVARBIN,
        TypeId.VARCHAR,
        TypeId.BIGVARCHAR,
        TypeId.BIGCHAR,
        TypeId.NVARCHAR,
        TypeId.NCHAR,
        TypeId.XML,
        TypeId.TEXT,
        TypeId.NTEXT,
        TypeId.IMAGE,
    }
)


def precision_scale(ti: TypeInfo) -> tuple[int, int, bool]:
    """Return (precision, scale, has_precision) for the column type."""
    tid = ti.type_id
    if tid in (TypeId.DECIMALN, TypeId.NUMERICN):
        return ti.prec, ti.scale, True
    if _check_sized(ti) or tid in _NO_PRECISION:
        return 0, 0, False
    raise ValueError(f"not implemented precision_scale for type {int(tid)}")