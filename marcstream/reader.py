"""
Format dispatch and record iteration.

``create_decoder`` picks the binary or XML decoder from the configured
``source.format``; the format is never sniffed from the content.
``MARCReader`` drives that decoder as a lazy, single-pass iterator of
``Record`` values.

A reader and its stream must be used from one thread only.
"""

import logging
from collections import Counter
from typing import Any, Mapping, Optional

from .binary import BinaryDecoder
from .decoder import RecordDecoder
from .encoding import strategy_for
from .errors import ConfigurationError, ReaderHaltedError
from .marcxml import XMLDecoder
from .record import Record
from .settings import Settings

__all__ = ["MARCReader", "create_decoder", "FORMATS"]

logger = logging.getLogger(__name__)

FORMATS = {
    "binary": BinaryDecoder,
    "xml": XMLDecoder,
}

_FORMAT_ALIASES = {
    "marc": "binary",
    "mrc": "binary",
    "iso2709": "binary",
    "marcxml": "xml",
}


def normalize_format(selector: Any) -> str:
    """Return the canonical format name for a selector.

    Raises:
        ConfigurationError: If the selector is not a supported format.
    """
    name = str(selector).strip().lower()
    name = _FORMAT_ALIASES.get(name, name)
    if name not in FORMATS:
        raise ConfigurationError(
            f"Unrecognized source.format: {selector!r}. "
            f"Supported formats: {', '.join(sorted(FORMATS))}"
        )
    return name


def create_decoder(stream, settings: Optional[Mapping[str, Any]] = None,
                   **options: Any) -> RecordDecoder:
    """Build the decoder for ``source.format`` bound to ``stream``.

    Nothing is read from the stream here; configuration errors surface
    before the first record.

    Raises:
        ConfigurationError: Unknown format or encoding, or an invalid option.
    """
    if not isinstance(settings, Settings) or options:
        settings = Settings(settings, **options)
    name = normalize_format(settings.source_format)
    if name == "binary":
        decoder = BinaryDecoder(stream, permissive=settings.permissive,
                                encoding=strategy_for(settings.encoding))
    else:
        if settings.encoding:
            logger.debug("source.encoding %r ignored for xml input", settings.encoding)
        decoder = XMLDecoder(stream)
    logger.debug("Reading %s records with %r", name, decoder)
    return decoder


class MARCReader:
    """Iterate over the records of a binary or MARCXML stream.

    Args:
        file_obj: Stream to read; binary mode for ISO 2709.
        settings: Mapping of reader settings (see ``marcstream.settings``).
        **options: Settings given as keywords, e.g. ``source_format="xml"``.

    Iteration is lazy and single pass. Once the stream is exhausted every
    call raises ``StopIteration`` without touching the stream. A fatal decode
    error is logged and re-raised with the record's 001 value attached as
    ``control_number`` when it can be recovered; the reader is then halted
    and any later call raises ``ReaderHaltedError``.

    Example:
        >>> with open("records.mrc", "rb") as f:
        ...     for record in MARCReader(f, {"source.encoding": "marc8"}):
        ...         print(record.title())
    """

    def __init__(self, file_obj, settings: Optional[Mapping[str, Any]] = None,
                 **options: Any):
        self.settings = Settings(settings, **options)
        self._decoder = create_decoder(file_obj, self.settings)
        self._file = file_obj
        self._owns_file = False
        self._pending: Optional[Record] = None
        self._done = False
        self._failure: Optional[BaseException] = None
        self.anomalies: Counter = Counter()

    @property
    def decoder(self) -> RecordDecoder:
        return self._decoder

    @property
    def source_format(self) -> str:
        return self._decoder.format

    @property
    def records_read(self) -> int:
        return self._decoder.state.records_read

    def __iter__(self):
        """Iterate over records."""
        return self

    def __next__(self) -> Record:
        """Get next record."""
        if self._pending is not None:
            record, self._pending = self._pending, None
            return record
        record = self._produce()
        if record is None:
            raise StopIteration
        return record

    next = __next__

    def has_next(self) -> bool:
        """Whether another record is available.

        Reads ahead one record; a fatal error in that record is raised here.
        """
        if self._pending is None:
            self._pending = self._produce()
        return self._pending is not None

    def read_record(self) -> Optional[Record]:
        """Read next record, or None at end of stream (pymarc compatibility)."""
        try:
            return next(self)
        except StopIteration:
            return None

    def _produce(self) -> Optional[Record]:
        if self._failure is not None:
            raise ReaderHaltedError(
                "Reader halted after a fatal error") from self._failure
        if self._done:
            return None
        decoder = self._decoder
        raw = None
        try:
            raw = decoder.next_raw()
            if raw is None:
                self._done = True
                return None
            record = decoder.to_record(raw)
        except Exception as exc:
            self._failure = exc
            self._report(exc, raw)
            raise
        if self.settings.retain_legacy:
            record.legacy = raw
        for anomaly in getattr(raw, "anomalies", ()):
            self.anomalies[anomaly.kind] += 1
        return record

    def _report(self, exc: BaseException, raw: Any) -> None:
        msg = "MARCReader: Error reading MARC, fatal, re-raising"
        control_number = getattr(exc, "control_number", None)
        if control_number is None and raw is not None:
            control_number = self._decoder.control_number(raw)
            if hasattr(exc, "control_number"):
                exc.control_number = control_number
        if control_number is not None:
            msg += f"\n    001 id: {control_number}"
        msg += f"\n    {type(exc).__name__}: {exc}"
        logger.error(msg)

    def close(self) -> None:
        """Close the underlying stream if this reader opened it."""
        if self._owns_file:
            self._file.close()

    def __enter__(self):
        """Context manager support."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager support."""
        self.close()
        return False

    def __repr__(self) -> str:
        state = "halted" if self._failure else ("done" if self._done else "open")
        return (f"MARCReader(format={self.source_format!r}, "
                f"records_read={self.records_read}, state={state!r})")
