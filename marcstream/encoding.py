"""
Encoding resolution and transcoding for binary MARC records.

A configured encoding name resolves to an ``Encoding`` and an
``EncodingStrategy``. The strategy hands out a ``Transcoder`` for each
record; fixed strategies always return the same one, while best-guess looks
at the leader and the record bytes so that a stream mixing UTF-8 and MARC-8
records decodes each record with its own encoding.

Every transcoder returns ``str``. MARC-8 is decoded with pymarc's character
set tables.
"""

import enum
import unicodedata
from typing import Optional

from pymarc import marc8_mapping

from .errors import ConfigurationError

__all__ = [
    "Encoding",
    "Transcoder",
    "CodecTranscoder",
    "Marc8Transcoder",
    "EncodingStrategy",
    "FixedEncodingStrategy",
    "BestGuessStrategy",
    "resolve_encoding",
    "strategy_for",
]

ESCAPE = 0x1B

# MARC-8 character set codes
BASIC_LATIN = 0x42
ANSEL = 0x45
EACC = 0x31


class Encoding(enum.Enum):
    """Source encodings a binary stream may be declared in."""

    BEST_GUESS = "best-guess"
    LATIN1 = "latin1"
    UTF8 = "utf-8"
    MARC8 = "marc8"


# Keys are upper-cased with '-', '_' and spaces removed.
_SYNONYMS = {
    "BESTGUESS": Encoding.BEST_GUESS,
    "ISO88591": Encoding.LATIN1,
    "LATIN1": Encoding.LATIN1,
    "UTF8": Encoding.UTF8,
    "MARC8": Encoding.MARC8,
}


def resolve_encoding(name: Optional[str]) -> Encoding:
    """Map a configured encoding name to an ``Encoding``.

    ``None`` and the empty string resolve to best-guess.

    Raises:
        ConfigurationError: If the name is not a recognized encoding.
    """
    if isinstance(name, Encoding):
        return name
    if name is None or not str(name).strip():
        return Encoding.BEST_GUESS
    key = str(name).upper()
    for char in "-_ ":
        key = key.replace(char, "")
    try:
        return _SYNONYMS[key]
    except KeyError:
        raise ConfigurationError(
            f"Unrecognized source encoding '{name}'. "
            f"Supported: {', '.join(e.value for e in Encoding)}"
        ) from None


class Transcoder:
    """Converts the raw bytes of one field value to ``str``."""

    name = "abstract"

    def decode(self, data: bytes, errors: str = "strict") -> str:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class CodecTranscoder(Transcoder):
    """Transcoder backed by a Python codec (UTF-8, Latin-1)."""

    def __init__(self, codec: str):
        self.name = codec

    def decode(self, data: bytes, errors: str = "strict") -> str:
        return data.decode(self.name, errors)


class Marc8Transcoder(Transcoder):
    """MARC-8 to Unicode using pymarc's character set tables, NFC normalized.

    Every value (a control field, or one subfield) starts with Basic Latin
    in G0 and ANSEL in G1, as pymarc decodes each subfield on its own.
    Escape sequences switch sets within the value. Combining marks precede
    their base character in MARC-8 and follow it in the output.

    pymarc's own converter substitutes a space for anything it cannot map;
    here a byte with no mapping in the active set, or an escape naming an
    unknown set, raises ``UnicodeDecodeError`` (``errors="strict"``) or
    becomes U+FFFD (``errors="replace"``).
    """

    name = "marc-8"

    def decode(self, data: bytes, errors: str = "strict") -> str:
        if errors not in ("strict", "replace"):
            raise ValueError(f"Unsupported error handler {errors!r} for MARC-8")
        chars = []
        combining = []
        g0, g1 = BASIC_LATIN, ANSEL
        pos = 0
        while pos < len(data):
            start = pos
            if data[pos] == ESCAPE:
                target, charset, pos = _designation(data, pos)
                if charset is not None:
                    if target == 0:
                        g0 = charset
                    else:
                        g1 = charset
                    continue
                reason = "unknown character set escape"
            else:
                multibyte = g0 == EACC
                if multibyte:
                    code_point = int.from_bytes(data[pos:pos + 3], "big")
                    pos += 3
                else:
                    code_point = data[pos]
                    pos += 1
                if code_point < 0x20 or 0x80 < code_point < 0xA0:
                    # C0/C1 controls carry no text
                    continue
                if multibyte and pos > len(data):
                    reason = "truncated multibyte character"
                else:
                    charset = g1 if code_point > 0x80 and not multibyte else g0
                    mapped = marc8_mapping.CODESETS[charset].get(code_point)
                    if mapped is not None:
                        char, is_combining = chr(mapped[0]), mapped[1]
                        if is_combining:
                            combining.append(char)
                        else:
                            chars.append(char)
                            chars.extend(combining)
                            combining = []
                        continue
                    if code_point in marc8_mapping.ODD_MAP:
                        chars.append(chr(marc8_mapping.ODD_MAP[code_point]))
                        continue
                    reason = f"no mapping for 0x{code_point:x} in set 0x{charset:x}"
            if errors == "strict":
                raise UnicodeDecodeError(self.name, data, start, min(pos, len(data)), reason)
            chars.append("\ufffd")
            chars.extend(combining)
            combining = []
        chars.extend(combining)
        return unicodedata.normalize("NFC", "".join(chars))


def _designation(data: bytes, pos: int):
    """Parse the escape sequence at ``pos``.

    Returns ``(target, charset, end)``: the graphic set (0 for G0, 1 for G1)
    it designates, the character set code or None when the sequence names no
    known set, and the offset just past it.
    """
    intermediate = data[pos + 1:pos + 2]
    if intermediate in (b"(", b","):
        target, final = 0, pos + 2
    elif intermediate in (b")", b"-"):
        target, final = 1, pos + 2
    elif intermediate == b"$":
        follower = data[pos + 2:pos + 3]
        if follower in (b")", b"-"):
            target, final = 1, pos + 3
        else:
            target, final = 0, pos + 3 if follower == b"," else pos + 2
    elif intermediate == b"s":
        return 0, BASIC_LATIN, pos + 2
    elif intermediate and intermediate[0] in marc8_mapping.CODESETS:
        # ESC g, ESC b and ESC p switch G0 directly
        return 0, intermediate[0], pos + 2
    else:
        return 0, None, pos + 1 + len(intermediate)
    charset = data[final] if final < len(data) else None
    if charset not in marc8_mapping.CODESETS:
        return target, None, min(final + 1, len(data))
    return target, charset, final + 1


UTF8 = CodecTranscoder("utf-8")
LATIN1 = CodecTranscoder("latin-1")
MARC8 = Marc8Transcoder()


class EncodingStrategy:
    """Chooses the transcoder for a record."""

    encoding: Encoding

    def for_record(self, leader: bytes, data: bytes) -> Transcoder:
        raise NotImplementedError


class FixedEncodingStrategy(EncodingStrategy):
    """Uses one transcoder for every record, whatever the leader says."""

    def __init__(self, encoding: Encoding, transcoder: Transcoder):
        self.encoding = encoding
        self.transcoder = transcoder

    def for_record(self, leader: bytes, data: bytes) -> Transcoder:
        return self.transcoder

    def __repr__(self) -> str:
        return f"FixedEncodingStrategy({self.encoding.value})"


class BestGuessStrategy(EncodingStrategy):
    """Per-record heuristic selection.

    Leader position 9 set to ``a`` declares UTF-8; the record is read as
    Latin-1 instead when its bytes are not valid UTF-8. Any other value
    declares MARC-8, which is used when an escape sequence is present or the
    bytes are plain ASCII. Non-ASCII bytes that form valid UTF-8 in a record
    flagged as MARC-8 are read as UTF-8, the usual mislabeling.
    """

    encoding = Encoding.BEST_GUESS

    def for_record(self, leader: bytes, data: bytes) -> Transcoder:
        if leader[9:10] == b"a":
            return UTF8 if _is_utf8(data) else LATIN1
        if ESCAPE in data or data.isascii():
            return MARC8
        return UTF8 if _is_utf8(data) else MARC8

    def __repr__(self) -> str:
        return "BestGuessStrategy()"


def _is_utf8(data: bytes) -> bool:
    try:
        data.decode("utf-8")
    except UnicodeDecodeError:
        return False
    return True


def strategy_for(name) -> EncodingStrategy:
    """Return a new strategy for a configured encoding name."""
    encoding = resolve_encoding(name)
    if encoding is Encoding.BEST_GUESS:
        return BestGuessStrategy()
    if encoding is Encoding.UTF8:
        return FixedEncodingStrategy(encoding, UTF8)
    if encoding is Encoding.LATIN1:
        return FixedEncodingStrategy(encoding, LATIN1)
    return FixedEncodingStrategy(encoding, MARC8)
