"""MARCXML format support.

Reads ``record`` elements, optionally wrapped in a ``collection``, from the
MARC 21 slim schema. Any well-formedness violation is fatal.

>>> from marcstream.formats import marcxml
>>> with marcxml.read("records.xml") as records:
...     titles = [r.title() for r in records]
"""

from typing import Any

from marcstream.reader import MARCReader

__all__ = ["read"]


def read(source, **options: Any) -> MARCReader:
    """Read records from a MARCXML file path or file-like object."""
    options.update(source_format="xml")
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
