"""
Reader configuration.

Settings are a flat mapping of dotted keys:

- ``source.format``: ``binary`` (default) or ``xml``
- ``binary.permissive``: correct bounded anomalies in binary records
  (default true; binary only)
- ``source.encoding``: ``best-guess`` (default), ``latin1``, ``utf-8`` or
  ``marc8`` (binary only; XML is always Unicode)
- ``retain-legacy-representation``: attach the decoder's raw record to each
  ``Record.legacy`` (default false)

The key names used by traject's marc4j reader (``marc_source.type``,
``marc4j_reader.permissive``, ``marc_source.encoding``,
``marc4j_reader.keep_marc4j``) are accepted as synonyms, and keyword
arguments may spell keys with underscores (``source_format=...``).
"""

import logging
from typing import Any, Dict, Iterator, Mapping, Optional

from .errors import ConfigurationError

__all__ = [
    "Settings",
    "SOURCE_FORMAT",
    "BINARY_PERMISSIVE",
    "SOURCE_ENCODING",
    "RETAIN_LEGACY",
    "DEFAULTS",
]

logger = logging.getLogger(__name__)

SOURCE_FORMAT = "source.format"
BINARY_PERMISSIVE = "binary.permissive"
SOURCE_ENCODING = "source.encoding"
RETAIN_LEGACY = "retain-legacy-representation"

DEFAULTS = {
    SOURCE_FORMAT: "binary",
    BINARY_PERMISSIVE: True,
    SOURCE_ENCODING: None,
    RETAIN_LEGACY: False,
}

_ALIASES = {
    "marc_source.type": SOURCE_FORMAT,
    "marc4j_reader.permissive": BINARY_PERMISSIVE,
    "marc_source.encoding": SOURCE_ENCODING,
    "marc4j_reader.keep_marc4j": RETAIN_LEGACY,
    # keyword spellings
    "source_format": SOURCE_FORMAT,
    "format": SOURCE_FORMAT,
    "binary_permissive": BINARY_PERMISSIVE,
    "permissive": BINARY_PERMISSIVE,
    "source_encoding": SOURCE_ENCODING,
    "encoding": SOURCE_ENCODING,
    "retain_legacy_representation": RETAIN_LEGACY,
    "retain_legacy": RETAIN_LEGACY,
}

_BOOLEANS = (BINARY_PERMISSIVE, RETAIN_LEGACY)
_TRUE = {"true", "yes", "on", "1"}
_FALSE = {"false", "no", "off", "0"}


def _to_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ConfigurationError(f"Setting '{key}' must be true or false, got {value!r}")


class Settings(Mapping):
    """Read-only, normalized view of reader options.

    Later sources win: defaults, then ``settings``, then keyword ``options``.
    ``None`` values fall back to the default.

    Example:
        >>> Settings({"marc_source.type": "xml"})["source.format"]
        'xml'
        >>> Settings(binary_permissive="false").permissive
        False
    """

    def __init__(self, settings: Optional[Mapping[str, Any]] = None, **options: Any):
        values: Dict[str, Any] = dict(DEFAULTS)
        for source in (settings or {}, options):
            for key, value in source.items():
                canonical = _ALIASES.get(key, key)
                if canonical not in DEFAULTS:
                    logger.debug("Ignoring unrecognized setting %r", key)
                    continue
                if value is None:
                    continue
                if canonical in _BOOLEANS:
                    value = _to_bool(key, value)
                values[canonical] = value
        self._values = values

    def __getitem__(self, key: str) -> Any:
        return self._values[_ALIASES.get(key, key)]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    @property
    def source_format(self) -> str:
        return str(self._values[SOURCE_FORMAT])

    @property
    def permissive(self) -> bool:
        return self._values[BINARY_PERMISSIVE]

    @property
    def encoding(self) -> Optional[str]:
        return self._values[SOURCE_ENCODING]

    @property
    def retain_legacy(self) -> bool:
        return self._values[RETAIN_LEGACY]

    def __repr__(self) -> str:
        return f"Settings({self._values!r})"
