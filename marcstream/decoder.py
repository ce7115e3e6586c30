"""Interface shared by the binary and XML record decoders."""

import logging
from dataclasses import dataclass
from typing import Any, List, Optional

from .encoding import EncodingStrategy
from .errors import RecoverableFieldAnomaly
from .record import Record

__all__ = ["DecoderState", "RecordDecoder"]

logger = logging.getLogger(__name__)


@dataclass
class DecoderState:
    """Per-stream state owned by exactly one decoder.

    ``position`` is the byte offset of the cursor for binary streams and
    the number of completed record elements for XML.
    """

    permissive: bool = False
    encoding: Optional[EncodingStrategy] = None
    position: int = 0
    records_read: int = 0
    exhausted: bool = False


class RecordDecoder:
    """Reads raw records from a stream and normalizes them to ``Record``.

    Decoding is split in two steps so that the reader can report the 001 of
    a record whose normalization fails: ``next_raw`` frames one record and
    returns its low-level representation (or None at end of stream), and
    ``to_record`` converts it.

    A decoder exclusively owns its stream; it must not be used from more
    than one thread.
    """

    format = "abstract"

    def __init__(self, stream, permissive: bool = False,
                 encoding: Optional[EncodingStrategy] = None):
        self.stream = stream
        self.state = DecoderState(permissive=permissive, encoding=encoding)

    @property
    def permissive(self) -> bool:
        return self.state.permissive

    def next_raw(self) -> Any:
        raise NotImplementedError

    def to_record(self, raw: Any) -> Record:
        raise NotImplementedError

    def control_number(self, raw: Any) -> Optional[str]:
        """Best-effort 001 value of a raw record, for diagnostics."""
        return None

    def _anomaly(self, anomalies: List[RecoverableFieldAnomaly], kind: str,
                 message: str, offset: Optional[int] = None,
                 tag: Optional[str] = None) -> None:
        anomaly = RecoverableFieldAnomaly(kind, message, offset, tag)
        anomalies.append(anomaly)
        logger.warning("Recovered malformed record at %s: %s", offset, anomaly)

    def __repr__(self) -> str:
        return (f"{type(self).__name__}(permissive={self.state.permissive}, "
                f"position={self.state.position}, records_read={self.state.records_read})")
