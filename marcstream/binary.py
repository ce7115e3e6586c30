"""
ISO 2709 binary MARC decoding.

A binary record is a 24-byte leader, a directory of 12-byte entries (tag,
field length, field start) ended by a field terminator, and a data area of
fields, each ended by a field terminator. The record itself ends with a
record terminator.

Strict decoding rejects any disagreement between the leader, the directory
and the data. Permissive decoding re-derives lengths and offsets from the
terminators actually present and records each correction as a
``RecoverableFieldAnomaly``; a record without a leader or without any
directory terminator is still fatal.

Memory: O(1) in the number of records; one record's bytes are held at a time.
"""

import logging
from dataclasses import dataclass, field
from typing import List, NamedTuple, Optional, Tuple

from .decoder import RecordDecoder
from .encoding import EncodingStrategy, Transcoder, strategy_for
from .errors import RecoverableFieldAnomaly, StructuralDecodeError
from .leader import LEADER_LENGTH, Leader
from .record import ControlField, DataField, Record, Subfield, is_control_tag

__all__ = [
    "BinaryDecoder",
    "DirectoryEntry",
    "RawRecord",
    "RECORD_TERMINATOR",
    "FIELD_TERMINATOR",
    "SUBFIELD_DELIMITER",
]

logger = logging.getLogger(__name__)

RECORD_TERMINATOR = b"\x1d"
FIELD_TERMINATOR = b"\x1e"
SUBFIELD_DELIMITER = b"\x1f"

DIRECTORY_ENTRY_LENGTH = 12
LENGTH_OF_LENGTH = 5
# Leader, directory terminator and record terminator.
MINIMUM_RECORD_LENGTH = LEADER_LENGTH + 2
# Bytes found between records in files that went through text tools.
FILLER = frozenset(b"\r\n \x00\x1a")

READ_CHUNK = 4096


class DirectoryEntry(NamedTuple):
    """One directory entry. ``length``/``start`` are None when not numeric."""

    tag: str
    length: Optional[int]
    start: Optional[int]


@dataclass
class RawRecord:
    """A framed binary record before field extraction.

    This is the representation attached to ``Record.legacy`` when legacy
    retention is enabled.
    """

    data: bytes
    leader: Leader
    base_address: int
    directory: Tuple[DirectoryEntry, ...]
    offset: int
    anomalies: List[RecoverableFieldAnomaly] = field(default_factory=list)
    transcoder: Optional[str] = None

    @property
    def data_area(self) -> bytes:
        """Field data, without the record terminator."""
        end = len(self.data) - 1 if self.data.endswith(RECORD_TERMINATOR) else len(self.data)
        return self.data[self.base_address:end]

    def control_number(self) -> Optional[str]:
        """Value of the 001 field, read without any structural checks."""
        area = self.data_area
        for entry in self.directory:
            if entry.tag != "001" or entry.start is None:
                continue
            end = area.find(FIELD_TERMINATOR, entry.start)
            value = area[entry.start:end if end >= 0 else len(area)]
            return value.decode("utf-8", "replace").strip() or None
        return None


class _ByteCursor:
    """Sequential reader over a byte stream with push-back."""

    def __init__(self, stream, state):
        self._stream = stream
        self._state = state
        self._pushback = b""

    def read(self, size: int) -> bytes:
        """Read up to ``size`` bytes; fewer only at end of stream."""
        chunks = []
        if self._pushback:
            chunks.append(self._pushback[:size])
            self._pushback = self._pushback[size:]
            size -= len(chunks[0])
        while size > 0:
            chunk = self._stream.read(size)
            if not chunk:
                break
            if isinstance(chunk, str):
                raise TypeError("MARC binary streams must be opened in binary mode")
            chunks.append(chunk)
            size -= len(chunk)
        data = b"".join(chunks)
        self._state.position += len(data)
        return data

    def read_until(self, terminator: bytes) -> bytes:
        """Read through the next ``terminator``, or to end of stream."""
        chunks = []
        while True:
            chunk = self.read(READ_CHUNK)
            if not chunk:
                break
            index = chunk.find(terminator)
            if index >= 0:
                self.unread(chunk[index + 1:])
                chunks.append(chunk[:index + 1])
                break
            chunks.append(chunk)
        return b"".join(chunks)

    def unread(self, data: bytes) -> None:
        if data:
            self._pushback = data + self._pushback
            self._state.position -= len(data)

    def skip(self, skippable: frozenset) -> int:
        """Skip leading bytes in ``skippable``; return how many were skipped."""
        skipped = 0
        while True:
            byte = self.read(1)
            if not byte:
                return skipped
            if byte[0] not in skippable:
                self.unread(byte)
                return skipped
            skipped += 1


class BinaryDecoder(RecordDecoder):
    """Decodes a concatenated stream of ISO 2709 records.

    Args:
        stream: File-like object opened in binary mode.
        permissive: Correct bounded structural anomalies instead of failing.
        encoding: Source encoding name or an ``EncodingStrategy``; defaults
            to best-guess.
    """

    format = "binary"

    def __init__(self, stream, permissive: bool = False, encoding=None):
        if not isinstance(encoding, EncodingStrategy):
            encoding = strategy_for(encoding)
        super().__init__(stream, permissive=permissive, encoding=encoding)
        self._cursor = _ByteCursor(stream, self.state)

    # ------------------------------------------------------------------
    # Framing
    # ------------------------------------------------------------------

    def next_raw(self) -> Optional[RawRecord]:
        """Frame the next record and parse its leader and directory.

        Returns None at end of stream.

        Raises:
            StructuralDecodeError: The record cannot be framed.
        """
        state = self.state
        if state.exhausted:
            return None
        anomalies: List[RecoverableFieldAnomaly] = []
        cursor = self._cursor
        if self.permissive:
            skipped = cursor.skip(FILLER)
            if skipped:
                self._anomaly(anomalies, "filler", f"skipped {skipped} bytes between records",
                              state.position - skipped)
        offset = state.position
        head = cursor.read(LENGTH_OF_LENGTH)
        if not head:
            state.exhausted = True
            return None
        if len(head) < LENGTH_OF_LENGTH:
            raise StructuralDecodeError(
                f"Truncated record: {len(head)} bytes before end of stream", offset=offset)

        declared = int(head) if head.isdigit() else None
        if declared is not None and declared >= MINIMUM_RECORD_LENGTH:
            data = head + cursor.read(declared - LENGTH_OF_LENGTH)
            terminator_at = data.find(RECORD_TERMINATOR)
            if len(data) < declared or terminator_at != len(data) - 1:
                if not self.permissive:
                    if len(data) < declared:
                        raise StructuralDecodeError(
                            f"Truncated record: declared length {declared}, "
                            f"{len(data)} bytes available", offset=offset)
                    if terminator_at >= 0:
                        raise StructuralDecodeError(
                            f"Record terminator at byte {terminator_at}, before "
                            f"declared length {declared}", offset=offset)
                    raise StructuralDecodeError(
                        f"Record terminator missing at declared length {declared}",
                        offset=offset)
                data = self._measure(data)
                self._anomaly(anomalies, "record-length",
                              f"declared length {declared}, measured {len(data)}", offset)
        else:
            if not self.permissive:
                raise StructuralDecodeError(f"Invalid record length {head!r}", offset=offset)
            data = self._measure(head)
            self._anomaly(anomalies, "record-length",
                          f"invalid length {head!r}, measured {len(data)}", offset)

        if not data.endswith(RECORD_TERMINATOR):
            # Only reachable in permissive mode: the stream ended mid-record.
            self._anomaly(anomalies, "record-terminator",
                          "record terminator missing, assuming end of stream", offset)
        state.records_read += 1
        return self._parse_structure(data, offset, anomalies)

    def _measure(self, data: bytes) -> bytes:
        """Cut ``data`` at its first record terminator, reading on if needed."""
        index = data.find(RECORD_TERMINATOR)
        if index >= 0:
            self._cursor.unread(data[index + 1:])
            return data[:index + 1]
        return data + self._cursor.read_until(RECORD_TERMINATOR)

    def _parse_structure(self, data: bytes, offset: int,
                         anomalies: List[RecoverableFieldAnomaly]) -> RawRecord:
        if len(data) < LEADER_LENGTH:
            raise StructuralDecodeError(
                f"Record of {len(data)} bytes is shorter than its leader", offset=offset)
        leader = Leader(data[:LEADER_LENGTH].decode("latin-1"))

        directory_end = data.find(FIELD_TERMINATOR, LEADER_LENGTH)
        if directory_end < 0:
            raise StructuralDecodeError("No directory terminator found", offset=offset)
        measured_base = directory_end + 1
        base = leader.data_base_address
        if base != measured_base:
            if not self.permissive:
                raise StructuralDecodeError(
                    f"Base address of data {leader[12:17]!r} does not match "
                    f"directory end at {measured_base}", offset=offset)
            self._anomaly(anomalies, "base-address",
                          f"declared {leader[12:17]!r}, measured {measured_base}", offset)
            base = measured_base

        directory_bytes = data[LEADER_LENGTH:base - 1]
        extra = len(directory_bytes) % DIRECTORY_ENTRY_LENGTH
        if extra:
            if not self.permissive:
                raise StructuralDecodeError(
                    f"Directory length {len(directory_bytes)} is not a multiple of "
                    f"{DIRECTORY_ENTRY_LENGTH}", offset=offset)
            self._anomaly(anomalies, "directory",
                          f"dropped {extra} trailing directory bytes", offset)
            directory_bytes = directory_bytes[:-extra]

        directory = []
        for i in range(0, len(directory_bytes), DIRECTORY_ENTRY_LENGTH):
            entry = directory_bytes[i:i + DIRECTORY_ENTRY_LENGTH]
            tag = entry[:3].decode("latin-1")
            length_text, start_text = entry[3:7], entry[7:12]
            if not (length_text.isdigit() and start_text.isdigit()):
                if not self.permissive:
                    raise StructuralDecodeError(
                        f"Invalid directory entry {entry!r} for tag {tag}", offset=offset)
                self._anomaly(anomalies, "directory",
                              f"invalid entry {entry!r}, re-deriving from terminators",
                              offset, tag)
            directory.append(DirectoryEntry(
                tag,
                int(length_text) if length_text.isdigit() else None,
                int(start_text) if start_text.isdigit() else None,
            ))

        raw = RawRecord(data, leader, base, tuple(directory), offset, anomalies)
        if not self.permissive:
            expected = base + sum(e.length for e in directory) + 1
            if expected != len(data):
                raise StructuralDecodeError(
                    f"Directory field lengths give a record length of {expected}, "
                    f"leader declares {len(data)}",
                    control_number=raw.control_number(), offset=offset)
        elif leader.record_length != len(data):
            raw.leader = leader.with_record_length(len(data))
        return raw

    # ------------------------------------------------------------------
    # Field extraction
    # ------------------------------------------------------------------

    def control_number(self, raw: RawRecord) -> Optional[str]:
        return raw.control_number()

    def to_record(self, raw: RawRecord) -> Record:
        """Extract and transcode every field of a framed record.

        Raises:
            StructuralDecodeError: A field is malformed in strict mode.
        """
        transcoder = self.state.encoding.for_record(raw.data[:LEADER_LENGTH],
                                                    raw.data[raw.base_address:])
        raw.transcoder = transcoder.name
        area = raw.data_area
        fields = []
        previous_end = 0
        for entry in raw.directory:
            extracted = self._field_bytes(raw, area, entry, previous_end)
            if extracted is None:
                continue
            content, previous_end = extracted
            if is_control_tag(entry.tag):
                value = self._text(raw, transcoder, content, entry.tag)
                fields.append(ControlField(entry.tag, value))
            else:
                fields.append(self._data_field(raw, transcoder, entry.tag, content))
        return Record(raw.leader, fields=fields)

    def _field_bytes(self, raw: RawRecord, area: bytes, entry: DirectoryEntry,
                     previous_end: int) -> Optional[Tuple[bytes, int]]:
        """Return a field's content without its terminator, and its end offset."""
        start, length = entry.start, entry.length
        if start is not None and length is not None:
            end = start + length
            if length > 0 and end <= len(area) and area[end - 1:end] == FIELD_TERMINATOR:
                return area[start:end - 1], end
            if not self.permissive:
                if end > len(area):
                    raise StructuralDecodeError(
                        f"Field {entry.tag} at {start} with length {length} runs past "
                        f"the end of the data area ({len(area)} bytes)", offset=raw.offset)
                raise StructuralDecodeError(
                    f"Field terminator missing for field {entry.tag}", offset=raw.offset)

        if start is None:
            start = previous_end
        if start >= len(area):
            self._anomaly(raw.anomalies, "field-offset",
                          f"field starts at {start}, outside the {len(area)}-byte data area; dropped",
                          raw.offset, entry.tag)
            return None
        end = area.find(FIELD_TERMINATOR, start)
        if end < 0:
            end = len(area)
            self._anomaly(raw.anomalies, "field-terminator",
                          "field terminator missing, assuming end of record",
                          raw.offset, entry.tag)
        else:
            self._anomaly(raw.anomalies, "field-length",
                          f"declared length {length}, measured {end + 1 - start}",
                          raw.offset, entry.tag)
        return area[start:end], end + 1

    def _data_field(self, raw: RawRecord, transcoder: Transcoder, tag: str,
                    content: bytes) -> DataField:
        first_delimiter = content.find(SUBFIELD_DELIMITER)
        if first_delimiter < 0:
            first_delimiter = len(content)
        indicator_count = min(first_delimiter, 2)
        if indicator_count < 2:
            if not self.permissive:
                raise StructuralDecodeError(f"Field {tag} is missing its indicators",
                                            offset=raw.offset)
            self._anomaly(raw.anomalies, "indicators", "missing indicators set to blank",
                          raw.offset, tag)
        indicators = content[:indicator_count].decode("latin-1").ljust(2)

        chunks = content[indicator_count:].split(SUBFIELD_DELIMITER)
        if chunks[0]:
            if not self.permissive:
                raise StructuralDecodeError(
                    f"Field {tag} has data before its first subfield delimiter",
                    offset=raw.offset)
            self._anomaly(raw.anomalies, "subfield",
                          f"dropped {len(chunks[0])} bytes before first subfield",
                          raw.offset, tag)
        subfields = []
        for chunk in chunks[1:]:
            if not chunk:
                if not self.permissive:
                    raise StructuralDecodeError(f"Field {tag} has an empty subfield",
                                                offset=raw.offset)
                self._anomaly(raw.anomalies, "subfield", "skipped empty subfield",
                              raw.offset, tag)
                continue
            code = chunk[:1].decode("latin-1")
            subfields.append(Subfield(code, self._text(raw, transcoder, chunk[1:], tag)))
        return DataField(tag, indicators[0], indicators[1], subfields)

    def _text(self, raw: RawRecord, transcoder: Transcoder, data: bytes, tag: str) -> str:
        try:
            return transcoder.decode(data)
        except UnicodeDecodeError as exc:
            if not self.permissive:
                raise StructuralDecodeError(
                    f"Field {tag} cannot be decoded as {transcoder.name}: {exc.reason}",
                    offset=raw.offset) from exc
            self._anomaly(raw.anomalies, "encoding",
                          f"undecodable {transcoder.name} bytes replaced", raw.offset, tag)
            return transcoder.decode(data, errors="replace")
