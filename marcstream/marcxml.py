"""
MARCXML decoding.

Records are read with ``xml.etree.ElementTree.iterparse`` so that only the
record being decoded is held in memory. Elements may be in the MARC 21 slim
namespace or in no namespace; record elements may be wrapped in a
``collection``. Text is Unicode already, so no transcoding is done.

Malformed XML is always fatal: permissive recovery applies to the binary
format only.
"""

import logging
import xml.etree.ElementTree as ET
from typing import Optional

from .decoder import RecordDecoder
from .errors import StructuralDecodeError
from .leader import LEADER_LENGTH, Leader
from .record import ControlField, DataField, Record, Subfield

__all__ = ["XMLDecoder", "MARC_NAMESPACE"]

logger = logging.getLogger(__name__)

MARC_NAMESPACE = "http://www.loc.gov/MARC21/slim"
_NAMESPACES = ("", MARC_NAMESPACE)


def _split(tag) -> tuple:
    """Split an ElementTree tag into (namespace, local name)."""
    if not isinstance(tag, str):
        return None, None
    if tag.startswith("{"):
        namespace, _, local = tag[1:].partition("}")
        return namespace, local
    return "", tag


def _marc_name(element: ET.Element) -> Optional[str]:
    """Local name of a MARCXML element, or None for foreign elements."""
    namespace, local = _split(element.tag)
    return local if namespace in _NAMESPACES else None


class XMLDecoder(RecordDecoder):
    """Decodes the record elements of a MARCXML document.

    Args:
        stream: File-like object (binary or text) holding the document.
    """

    format = "xml"

    def __init__(self, stream, permissive: bool = False, encoding=None):
        # Encoding is ignored: XML declares its own and yields Unicode.
        super().__init__(stream, permissive=False)
        self._events = None
        self._root = None
        self._current = None

    def next_raw(self) -> Optional[ET.Element]:
        """Parse up to the end of the next record element.

        Returns None at end of document.

        Raises:
            StructuralDecodeError: The document is not well-formed, or a
                record element starts inside another record.
        """
        state = self.state
        if state.exhausted:
            return None
        if self._events is None:
            self._events = ET.iterparse(self.stream, events=("start", "end"))
        try:
            for event, element in self._events:
                if self._root is None:
                    self._root = element
                if _marc_name(element) != "record":
                    continue
                if event == "start":
                    if self._current is not None:
                        raise StructuralDecodeError(
                            "Record element starts inside an unterminated record",
                            control_number=self.control_number(self._current),
                            offset=state.records_read)
                    self._current = element
                elif element is self._current:
                    self._current = None
                    state.records_read += 1
                    state.position = state.records_read
                    if self._root is not element:
                        # Drop finished records from the tree.
                        self._root.clear()
                    return element
        except ET.ParseError as exc:
            raise StructuralDecodeError(
                f"Malformed MARCXML: {exc}",
                control_number=self.control_number(self._current),
                offset=state.records_read) from exc
        state.exhausted = True
        return None

    def control_number(self, raw: Optional[ET.Element]) -> Optional[str]:
        if raw is None:
            return None
        for child in raw:
            if _marc_name(child) == "controlfield" and child.get("tag") == "001":
                return (child.text or "").strip() or None
        return None

    def to_record(self, raw: ET.Element) -> Record:
        """Map a record element to a ``Record``.

        Raises:
            StructuralDecodeError: A field element lacks its tag or a
                subfield lacks its code, or the leader is too long.
        """
        # Records without a leader element get a blank one, not a default
        leader = Leader(" " * LEADER_LENGTH)
        fields = []
        for child in raw:
            name = _marc_name(child)
            if name == "leader":
                text = child.text or ""
                if len(text) > LEADER_LENGTH:
                    self._fail(raw, f"Leader has {len(text)} characters")
                leader = Leader(text)
            elif name == "controlfield":
                fields.append(ControlField(self._tag(raw, child), child.text or ""))
            elif name == "datafield":
                tag = self._tag(raw, child)
                subfields = []
                for sub in child:
                    if _marc_name(sub) != "subfield":
                        continue
                    code = sub.get("code")
                    if not code:
                        self._fail(raw, f"Subfield without a code in field {tag}")
                    subfields.append(Subfield(code, sub.text or ""))
                fields.append(DataField(tag, child.get("ind1") or " ",
                                        child.get("ind2") or " ", subfields))
        return Record(leader, fields=fields)

    def _tag(self, raw: ET.Element, child: ET.Element) -> str:
        tag = child.get("tag")
        if not tag:
            self._fail(raw, f"{_marc_name(child)} element without a tag")
        return tag

    def _fail(self, raw: ET.Element, message: str) -> None:
        raise StructuralDecodeError(message, control_number=self.control_number(raw),
                                    offset=self.state.records_read - 1)
