"""SQL Server TDS data types: type descriptors, value codecs and uniqueidentifiers."""

__version__ = "0.1.0"
__all__ = ["typeinfo", "temporal", "wire", "uniqueidentifier"]