"""Format-specific entry points for reading MARC records.

Formats
-------
- **marc**: ISO 2709 binary MARC (standard interchange format)
- **marcxml**: MARC 21 XML (MARCXML slim schema)

Quick Start
-----------
>>> from marcstream.formats import marc
>>> for record in marc.read("records.mrc", encoding="marc8"):
...     print(record.title())
"""

from . import marc, marcxml

__all__ = [
    "marc",
    "marcxml",
]
