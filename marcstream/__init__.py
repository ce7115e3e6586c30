"""
marcstream: streaming MARC record decoding.

Reads ISO 2709 ("MARC binary") and MARCXML streams into one normalized
record model, transcoding all text to Unicode. Binary input may be read
strictly or permissively, from MARC-8, UTF-8 or Latin-1 sources, or with
per-record best-guess encoding detection.

The record API follows pymarc where it can.
"""

import os
from typing import Any, Optional, Union

from .encoding import Encoding, resolve_encoding, strategy_for
from .errors import (
    ConfigurationError,
    MarcStreamError,
    ReaderHaltedError,
    RecoverableFieldAnomaly,
    StreamIOError,
    StructuralDecodeError,
)
from .leader import Leader
from .reader import MARCReader, create_decoder
from .record import ControlField, DataField, Indicators, Record, Subfield
from .settings import Settings

__version__ = "0.1.0"
__author__ = "marcstream Contributors"


def read(path: Union[str, Any], format: Optional[str] = None, **options: Any) -> MARCReader:
    """Read MARC records from a file, inferring the format from its extension.

    Args:
        path: File path (str or pathlib.Path) to read from.
        format: Optional format override. If not specified, format is inferred
            from the file extension. Supported values:
            - "binary" (also "marc", "mrc"): ISO 2709 binary MARC
            - "xml" (also "marcxml"): MARCXML
        **options: Further reader settings, e.g. ``permissive=False`` or
            ``encoding="marc8"``.

    Returns:
        A ``MARCReader`` over the file; it closes the file when used as a
        context manager or closed explicitly.

    Raises:
        ConfigurationError: If format cannot be determined or is unsupported.
        FileNotFoundError: If the file does not exist.

    Example:
        >>> with marcstream.read("data.mrc") as records:
        ...     for record in records:
        ...         print(record.title())
    """
    path = os.fspath(path)

    # Determine format from extension if not specified
    if format is None:
        _, ext = os.path.splitext(path)
        ext = ext.lower().lstrip('.')

        extension_map = {
            'mrc': 'binary',
            'marc': 'binary',
            'xml': 'xml',
        }

        format = extension_map.get(ext)
        if format is None:
            raise ConfigurationError(
                f"Cannot determine format from extension '.{ext}'. "
                f"Supported extensions: {', '.join(sorted(extension_map.keys()))}. "
                f"Use format= parameter to specify explicitly."
            )

    options["source_format"] = format
    f = open(path, 'rb')
    try:
        reader = MARCReader(f, **options)
    except Exception:
        f.close()
        raise
    reader._owns_file = True
    return reader


__all__ = [
    # Record model
    "Record",
    "Leader",
    "ControlField",
    "DataField",
    "Subfield",
    "Indicators",
    # Reading
    "MARCReader",
    "Settings",
    "create_decoder",
    "read",
    # Encodings
    "Encoding",
    "resolve_encoding",
    "strategy_for",
    # Errors
    "MarcStreamError",
    "ConfigurationError",
    "StructuralDecodeError",
    "ReaderHaltedError",
    "RecoverableFieldAnomaly",
    "StreamIOError",
]
