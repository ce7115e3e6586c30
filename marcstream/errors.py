"""
Error types raised while decoding MARC streams.

Fatal problems are raised as exceptions and stop iteration. Problems that
permissive binary decoding can correct are described by
``RecoverableFieldAnomaly`` values instead; they are logged and counted but
never raised.
"""

from dataclasses import dataclass
from typing import Optional

__all__ = [
    "MarcStreamError",
    "ConfigurationError",
    "StructuralDecodeError",
    "ReaderHaltedError",
    "RecoverableFieldAnomaly",
    "StreamIOError",
]


# Transport failures are propagated unchanged.
StreamIOError = OSError


class MarcStreamError(Exception):
    """Base class for all marcstream errors."""


class ConfigurationError(MarcStreamError, ValueError):
    """Unrecognized format selector, encoding name or option value."""


class StructuralDecodeError(MarcStreamError):
    """A record could not be decoded.

    Args:
        message: Description of the underlying cause.
        control_number: Value of the record's 001 field, when it could be
            recovered from the partially parsed record.
        offset: Byte offset (binary) or record index (XML) of the record
            being decoded.
    """

    def __init__(self, message: str, control_number: Optional[str] = None,
                 offset: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.control_number = control_number
        self.offset = offset

    def __str__(self) -> str:
        parts = [self.message]
        if self.control_number is not None:
            parts.append(f"001 id: {self.control_number}")
        if self.offset is not None:
            parts.append(f"at {self.offset}")
        return "; ".join(parts)


class ReaderHaltedError(MarcStreamError):
    """Raised by a reader that is called again after a fatal error."""


@dataclass(frozen=True)
class RecoverableFieldAnomaly:
    """A structural problem corrected in place by permissive decoding."""

    kind: str
    message: str
    offset: Optional[int] = None
    tag: Optional[str] = None

    def __str__(self) -> str:
        where = f" in {self.tag}" if self.tag else ""
        return f"{self.kind}{where}: {self.message}"
