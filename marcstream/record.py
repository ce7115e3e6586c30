"""
Normalized, format-independent record model.

Binary and XML decoding both produce these types. All text is ``str``;
field order within a record and subfield order within a field are kept
exactly as found in the source.
"""

from typing import Any, Iterator, List, NamedTuple, Optional, Sequence, Tuple, Union

from .leader import Leader

__all__ = ["Subfield", "Indicators", "ControlField", "DataField", "Record", "is_control_tag"]


def is_control_tag(tag: str) -> bool:
    """Control fields are the tags starting with ``00``."""
    return tag.startswith("00")


class Subfield(NamedTuple):
    """A subfield code and its value."""

    code: str
    value: str


class Indicators(NamedTuple):
    """Tuple-like pair of field indicators (pymarc compatibility)."""

    ind1: str
    ind2: str

    def __repr__(self) -> str:
        return f"Indicators('{self.ind1}', '{self.ind2}')"


class ControlField:
    """Control field (001-009): a tag and a value with no subfield structure."""

    __slots__ = ("tag", "value")

    def __init__(self, tag: str, value: str):
        self.tag = tag
        self.value = value

    def is_control_field(self) -> bool:
        return True

    def __eq__(self, other: Any) -> bool:
        """Compare control fields by tag and value."""
        if isinstance(other, ControlField):
            return self.tag == other.tag and self.value == other.value
        return False

    def __hash__(self) -> int:
        return hash((self.tag, self.value))

    def __repr__(self) -> str:
        return f"ControlField(tag='{self.tag}', value='{self.value}')"

    def __str__(self) -> str:
        return f"={self.tag}  {self.value}"


class DataField:
    """Data field: tag, two indicators and an ordered list of subfields."""

    __slots__ = ("tag", "indicator1", "indicator2", "subfields")

    def __init__(self, tag: str, indicator1: str = ' ', indicator2: str = ' ',
                 subfields: Optional[Sequence[Union[Subfield, Tuple[str, str]]]] = None):
        """Create a new DataField.

        Args:
            tag: 3-character field tag.
            indicator1: First indicator (default blank).
            indicator2: Second indicator (default blank).
            subfields: Subfields in source order, as ``Subfield`` values or
                ``(code, value)`` pairs.
        """
        self.tag = tag
        self.indicator1 = indicator1
        self.indicator2 = indicator2
        self.subfields = tuple(Subfield(*sf) for sf in (subfields or ()))

    def is_control_field(self) -> bool:
        return False

    @property
    def indicators(self) -> Indicators:
        """Indicators as a tuple-like object.

        Example:
            ind1, ind2 = field.indicators
        """
        return Indicators(self.indicator1, self.indicator2)

    def __getitem__(self, code: str) -> Optional[str]:
        """Get first subfield value by code, or None (pymarc compatibility)."""
        return self.get(code)

    def __contains__(self, code: str) -> bool:
        return any(sf.code == code for sf in self.subfields)

    def __iter__(self) -> Iterator[Subfield]:
        return iter(self.subfields)

    def get(self, code: str, default: Optional[str] = None) -> Optional[str]:
        """Get first subfield value by code or return default."""
        for sf in self.subfields:
            if sf.code == code:
                return sf.value
        return default

    def get_subfields(self, *codes: str) -> List[str]:
        """Get all subfield values for given codes, in field order.

        Example:
            field.get_subfields('a', 'b')
        """
        return [sf.value for sf in self.subfields if sf.code in codes]

    def subfields_as_dict(self) -> dict:
        """Return subfields as dictionary mapping code to list of values."""
        result = {}
        for sf in self.subfields:
            result.setdefault(sf.code, []).append(sf.value)
        return result

    def value(self) -> str:
        """All subfield values joined by a space."""
        return " ".join(sf.value for sf in self.subfields)

    def __eq__(self, other: Any) -> bool:
        """Compare fields by content."""
        if not isinstance(other, DataField):
            return False
        return (self.tag == other.tag and
                self.indicator1 == other.indicator1 and
                self.indicator2 == other.indicator2 and
                self.subfields == other.subfields)

    def __hash__(self) -> int:
        return hash((self.tag, self.indicator1, self.indicator2, self.subfields))

    def __repr__(self) -> str:
        return (f"DataField(tag='{self.tag}', indicators=('{self.indicator1}', "
                f"'{self.indicator2}'), subfields={list(self.subfields)!r})")

    def __str__(self) -> str:
        ind1 = self.indicator1.replace(' ', '\\')
        ind2 = self.indicator2.replace(' ', '\\')
        body = "".join(f"${sf.code}{sf.value}" for sf in self.subfields)
        return f"={self.tag}  {ind1}{ind2}{body}"


Field = Union[ControlField, DataField]


class Record:
    """A decoded bibliographic record.

    Attributes:
        leader: The record's ``Leader``.
        fields: Every field, in source order.
        legacy: The decoder's raw representation of the record, set only when
            the reader was configured to retain it.
    """

    __slots__ = ("leader", "fields", "legacy")

    def __init__(self, leader: Optional[Union[Leader, str]] = None, *,
                 fields: Optional[Sequence[Field]] = None, legacy: Any = None):
        if leader is None:
            leader = Leader()
        elif isinstance(leader, str):
            leader = Leader(leader)
        self.leader = leader
        self.fields = tuple(fields or ())
        self.legacy = legacy

    @property
    def control_fields(self) -> Tuple[ControlField, ...]:
        """Control fields in source order."""
        return tuple(f for f in self.fields if isinstance(f, ControlField))

    @property
    def data_fields(self) -> Tuple[DataField, ...]:
        """Data fields in source order."""
        return tuple(f for f in self.fields if isinstance(f, DataField))

    @property
    def control_number(self) -> Optional[str]:
        """Value of the first 001 field, used to identify the record."""
        return self.control_field("001")

    def __contains__(self, tag: str) -> bool:
        """Check if a field with given tag exists in record."""
        return self.get_field(tag) is not None

    def __getitem__(self, tag: str) -> Optional[Field]:
        """Get first field with given tag, or None (pymarc compatibility)."""
        return self.get_field(tag)

    def __iter__(self) -> Iterator[Field]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    def get_fields(self, *tags: str) -> List[Field]:
        """Get all fields with given tags, in record order.

        If no tags provided, returns all fields.
        """
        if not tags:
            return list(self.fields)
        return [f for f in self.fields if f.tag in tags]

    def get_field(self, tag: str) -> Optional[Field]:
        """Get first field with given tag."""
        for field in self.fields:
            if field.tag == tag:
                return field
        return None

    def control_field(self, tag: str) -> Optional[str]:
        """Get a control field value."""
        for field in self.fields:
            if field.tag == tag and isinstance(field, ControlField):
                return field.value
        return None

    def title(self) -> Optional[str]:
        """Get title from 245 $a and $b."""
        field = self.get_field("245")
        if not isinstance(field, DataField):
            return None
        parts = field.get_subfields("a", "b")
        return " ".join(parts) if parts else None

    def __eq__(self, other: Any) -> bool:
        """Compare records by leader and field content."""
        if not isinstance(other, Record):
            return False
        return self.leader == other.leader and self.fields == other.fields

    def __hash__(self) -> int:
        return hash((str(self.leader), self.fields))

    def __repr__(self) -> str:
        return f"Record(control_number={self.control_number!r}, fields={len(self.fields)})"

    def __str__(self) -> str:
        lines = [f"=LDR  {self.leader}"]
        lines.extend(str(f) for f in self.fields)
        return "\n".join(lines)
