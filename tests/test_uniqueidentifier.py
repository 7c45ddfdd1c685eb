import pytest

from mssqltypes.uniqueidentifier import UniqueIdentifier

DB_UUID = bytes(
    [0x67, 0x45, 0x23, 0x01, 0xAB, 0x89, 0xEF, 0xCD,
     0x01, 0x23, 0x45, 0x67, 0x89, 0xAB, 0xCD, 0xEF]
)
UUID = UniqueIdentifier(
    bytes(
        [0x01, 0x23, 0x45, 0x67, 0x89, 0xAB, 0xCD, 0xEF,
         0x01, 0x23, 0x45, 0x67, 0x89, 0xAB, 0xCD, 0xEF]
    )
)


def test_scan_bytes_swaps():
    assert UniqueIdentifier.scan(DB_UUID) == UUID


def test_scan_string():
    assert UniqueIdentifier.scan(str(UUID)) == UUID


def test_scan_lowercase_string():
    assert UniqueIdentifier.scan("01234567-89ab-cdef-0123-456789abcdef") == UUID


def test_value():
    assert UUID.value() == DB_UUID


def test_string():
    assert str(UUID) == "01234567-89AB-CDEF-0123-456789ABCDEF"


def test_round_trip_bytes():
    assert UniqueIdentifier.scan(UUID.value()) == UUID


def test_scan_wrong_byte_length():
    with pytest.raises(ValueError, match="length"):
        UniqueIdentifier.scan(b"\x00" * 15)


def test_scan_wrong_string_length():
    with pytest.raises(ValueError, match="string length"):
        UniqueIdentifier.scan("0123")


def test_scan_invalid_hex():
    with pytest.raises(ValueError):
        UniqueIdentifier.scan("zz234567-89ab-cdef-0123-456789abcdef")


def test_scan_wrong_type():
    with pytest.raises(TypeError, match="int"):
        UniqueIdentifier.scan(5)


def test_constructor_rejects_wrong_length():
    with pytest.raises(ValueError):
        UniqueIdentifier(b"\x01\x02")