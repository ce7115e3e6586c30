"""ISO 2709 binary MARC format support.

This is the baseline MARC format defined by ISO 2709. It is the standard
interchange format for bibliographic records used by library systems worldwide.

Records are read one at a time; text is transcoded to Unicode from the
configured source encoding (best-guess by default).

Examples
--------
Read records from a MARC file, failing on any structural problem:

>>> from marcstream.formats import marc
>>> for record in marc.read("records.mrc", permissive=False):
...     print(record.control_number)

Read from a file-like object:

>>> with open("records.mrc", "rb") as f:
...     for record in marc.read(f, encoding="utf-8"):
...         process(record)

See Also
--------
- MARCReader: Low-level reader class
"""

from typing import Any, Optional

from marcstream.reader import MARCReader

__all__ = ["MARCReader", "read"]


def read(source, permissive: Optional[bool] = None, encoding: Optional[str] = None,
         **options: Any) -> MARCReader:
    """Read MARC records from an ISO 2709 file or file-like object.

    Args:
        source: File path (str or pathlib.Path) or file-like object opened
            in binary mode.
        permissive: Correct bounded structural anomalies (default true).
        encoding: Source encoding name (default best-guess).

    Returns:
        Iterator over Record objects. Close it (or use it as a context
        manager) to close a file opened from a path.
    """
    options.update(source_format="binary", binary_permissive=permissive,
                   source_encoding=encoding)
    if isinstance(source, (str, bytes)) or hasattr(source, "__fspath__"):
        f = open(source, "rb")
        try:
            reader = MARCReader(f, **options)
        except Exception:
            f.close()
            raise
        reader._owns_file = True
        return reader
    return MARCReader(source, **options)
