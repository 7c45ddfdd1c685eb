# mssqltypes

Pure-Python handling of the data types that SQL Server exchanges over the
TDS protocol. The package reads and writes TYPE_INFO descriptors, decodes
and encodes column values, and describes column types the way a database
driver reports them.

## Installation

```
pip install mssqltypes
```

The package has no runtime dependencies.

## What is inside

- `mssqltypes.typeinfo` holds the `TypeId` enumeration and the `TypeInfo`,
  `Collation`, `UdtInfo` and `XmlInfo` dataclasses. Its functions are
  `fixed_size` (byte size of a fixed-length type, or `None`), `scan_type`
  (the Python type a column decodes to), `make_decl` (the SQL declaration for
  a parameter), `type_name` (the upper-case type name), `type_length`
  (`(length, is_variable)`) and `precision_scale`
  (`(precision, scale, has_precision)`). Types they do not cover, or sizes
  that do not fit the type, raise `ValueError`.
- `mssqltypes.temporal` converts the wire forms of `date`, `time`,
  `smalldatetime`, `datetime`, `datetime2` and `datetimeoffset` to and from
  `datetime` objects, and decodes `money` and `smallmoney` values to decimal
  text as `bytes`. Decoded values are timezone-aware; `datetimeoffset` keeps
  its offset, the others are in UTC. Python keeps microseconds, so the
  100-nanosecond digit of `time`, `datetime2` and `datetimeoffset` is
  truncated when decoding. Encoders clamp values to the range each type
  allows.
- `mssqltypes.wire` provides a little-endian byte `Reader` and the functions
  `read_type_info`, `write_type_info`, `read_value`, `write_value`,
  `read_collation`, `write_collation` and `decode_decimal`. A malformed or
  short stream raises `StreamError`.
- `mssqltypes.uniqueidentifier` provides `UniqueIdentifier`, which converts
  GUIDs between SQL Server's mixed-endian byte order (`scan` from bytes,
  `value()` back) and their canonical text form (`scan` from a 36-character
  string, `str()` back).

## Examples

Describing a column:

```python
from mssqltypes.typeinfo import TypeId, TypeInfo, make_decl, type_name, type_length

ti = TypeInfo(type_id=TypeId.NVARCHAR, size=40)
make_decl(ti)    # 'nvarchar(20)'
type_name(ti)    # 'NVARCHAR'
type_length(ti)  # (20, True)
```

Working with uniqueidentifiers:

```python
from mssqltypes.uniqueidentifier import UniqueIdentifier

guid = UniqueIdentifier.scan("01234567-89ab-cdef-0123-456789abcdef")
str(guid)     # '01234567-89AB-CDEF-0123-456789ABCDEF'
guid.value()  # the 16 bytes in SQL Server's wire order
```

Reading a value from a TDS stream:

```python
from mssqltypes.wire import Reader, read_type_info, read_value

reader = Reader(b"\x38\x2a\x00\x00\x00")  # int column holding 42
ti = read_type_info(reader)
read_value(ti, reader)  # 42
```

## What it does not do

This package is not a database driver. It opens no connections, sends no
queries and handles no login, packets or transactions; it only reads and
writes the byte forms of values and type descriptors.

It also carries no code-page tables. Single-byte text (`char`, `varchar`,
`text` and their variants) is decoded by a function you pass to
`read_value` as `decode_char`, which receives the column's `Collation` and
the raw bytes. Without it, reading such a value raises `StreamError`.
Unicode text (`nchar`, `nvarchar`, `ntext`, `xml`) needs no such function.

## Running the tests

```
pip install -e ".[test]"
pytest
```