"""MARC 21 record leader."""

from typing import Any, Optional, Union

__all__ = ["Leader", "LEADER_LENGTH"]

LEADER_LENGTH = 24


class Leader:
     """The 24-character leader of a decoded record.

     Provides positional access, named properties for the structural
     positions, and MARC 21 reference information for leader positions.
     Leaders are immutable once decoded.
     """

     # MARC 21 Reference: Position 5 - Record Status
     RECORD_STATUS_VALUES = {
         'a': 'Increase in encoding level',
         'c': 'Corrected or revised',
         'd': 'Deleted',
         'n': 'New',
         'p': 'Increase in encoding level from prepublication',
     }

     # MARC 21 Reference: Position 6 - Type of record
     RECORD_TYPE_VALUES = {
         'a': 'Language material',
         'c': 'Notated music',
         'd': 'Manuscript notated music',
         'e': 'Cartographic material',
         'f': 'Manuscript cartographic material',
         'g': 'Projected medium',
         'i': 'Nonmusical sound recording',
         'j': 'Musical sound recording',
         'k': 'Two-dimensional nonprojectable graphic',
         'm': 'Computer file',
         'o': 'Kit',
         'p': 'Mixed materials',
         'r': 'Three-dimensional artifact or naturally occurring object',
         't': 'Manuscript language material',
     }

     # MARC 21 Reference: Position 7 - Bibliographic level
     BIBLIOGRAPHIC_LEVEL_VALUES = {
         'a': 'Monographic component part',
         'b': 'Serial component part',
         'c': 'Collection',
         'd': 'Subunit',
         'i': 'Integrating resource',
         'm': 'Monograph',
         's': 'Serial',
     }

     # MARC 21 Reference: Position 9 - Character coding scheme
     CHARACTER_CODING_VALUES = {
         ' ': 'MARC-8',
         'a': 'UCS/Unicode',
     }

     # MARC 21 Reference: Position 17 - Encoding level
     ENCODING_LEVEL_VALUES = {
         ' ': 'Full level',
         '1': 'Full level, material not examined',
         '2': 'Less-than-full level, material not examined',
         '3': 'Abbreviated level',
         '4': 'Core level',
         '5': 'Partial (preliminary) level',
         '7': 'Minimal level',
         '8': 'Prepublication level',
         'u': 'Unknown',
         'z': 'Not applicable',
     }

     # MARC 21 Reference: Position 18 - Descriptive cataloging form
     CATALOGING_FORM_VALUES = {
         ' ': 'Non-ISBD',
         'a': 'AACR 2',
         'c': 'ISBD punctuation omitted',
         'i': 'ISBD punctuation included',
         'n': 'Non-ISBD punctuation omitted',
         'u': 'Unknown',
     }

     @classmethod
     def get_valid_values(cls, position: int) -> Optional[dict]:
         """Get dictionary of valid values for a leader position.

         MARC 21 positions with defined valid values:
         - 5: Record status (RECORD_STATUS_VALUES)
         - 6: Type of record (RECORD_TYPE_VALUES)
         - 7: Bibliographic level (BIBLIOGRAPHIC_LEVEL_VALUES)
         - 9: Character coding scheme (CHARACTER_CODING_VALUES)
         - 17: Encoding level (ENCODING_LEVEL_VALUES)
         - 18: Cataloging form (CATALOGING_FORM_VALUES)

         Returns:
             Dictionary mapping values to descriptions, or None if position
             has no defined values.
         """
         position_map = {
             5: cls.RECORD_STATUS_VALUES,
             6: cls.RECORD_TYPE_VALUES,
             7: cls.BIBLIOGRAPHIC_LEVEL_VALUES,
             9: cls.CHARACTER_CODING_VALUES,
             17: cls.ENCODING_LEVEL_VALUES,
             18: cls.CATALOGING_FORM_VALUES,
         }
         return position_map.get(position)

     @classmethod
     def is_valid_value(cls, position: int, value: str) -> bool:
         """Check if a value is valid for a leader position.

         Positions without defined values accept any single character.
         """
         valid_values = cls.get_valid_values(position)
         if valid_values is None:
             return True
         return value in valid_values

     @classmethod
     def get_value_description(cls, position: int, value: str) -> Optional[str]:
         """Get description of a leader value, or None if undefined."""
         valid_values = cls.get_valid_values(position)
         if valid_values is None:
             return None
         return valid_values.get(value)

     describe_value = get_value_description

     def __init__(self, value: str = "00000nam a2200000 a 4500"):
         """Create a leader from its 24-character text.

         Shorter values are padded with blanks; the text is otherwise kept
         exactly as found in the source.
         """
         if len(value) > LEADER_LENGTH:
             raise ValueError(
                 f"Leader string must be at most {LEADER_LENGTH} characters, got {len(value)}"
             )
         self._value = value.ljust(LEADER_LENGTH)

     def __getitem__(self, index: Union[int, slice]) -> str:
         """Get leader character(s) by position.

         Examples:
             leader[5]       # Get record status character
             leader[0:5]     # Get first 5 characters (record length)
         """
         if isinstance(index, slice):
             return self._value[index]
         if index < 0 or index >= LEADER_LENGTH:
             raise IndexError("Leader position out of range")
         return self._value[index]

     def __str__(self) -> str:
         return self._value

     def __repr__(self) -> str:
         return f"Leader('{self._value}')"

     def __len__(self) -> int:
         return LEADER_LENGTH

     def __eq__(self, other: Any) -> bool:
         if isinstance(other, Leader):
             return self._value == other._value
         if isinstance(other, str):
             return self._value == other
         return False

     def __hash__(self) -> int:
         return hash(self._value)

     def with_record_length(self, length: int) -> 'Leader':
         """Return a copy whose positions 0-4 hold ``length``."""
         return Leader(f"{length:05d}"[-5:] + self._value[5:])

     @staticmethod
     def _number(text: str) -> Optional[int]:
         return int(text) if text.isascii() and text.isdigit() else None

     @property
     def record_length(self) -> Optional[int]:
         """Record length (positions 0-4), or None if not numeric."""
         return self._number(self._value[0:5])

     @property
     def record_status(self) -> str:
         return self._value[5]

     @property
     def record_type(self) -> str:
         return self._value[6]

     @property
     def bibliographic_level(self) -> str:
         return self._value[7]

     @property
     def control_record_type(self) -> str:
         return self._value[8]

     @property
     def character_coding(self) -> str:
         """Character coding scheme: ' ' for MARC-8, 'a' for Unicode."""
         return self._value[9]

     @property
     def indicator_count(self) -> Optional[int]:
         return self._number(self._value[10])

     @property
     def subfield_code_count(self) -> Optional[int]:
         return self._number(self._value[11])

     @property
     def data_base_address(self) -> Optional[int]:
         """Base address of data (positions 12-16), or None if not numeric."""
         return self._number(self._value[12:17])

     @property
     def encoding_level(self) -> str:
         return self._value[17]

     @property
     def cataloging_form(self) -> str:
         return self._value[18]

     descriptive_cataloging_form = cataloging_form

     @property
     def multipart_level(self) -> str:
         return self._value[19]

     multipart_resource_record_level = multipart_level

     @property
     def entry_map(self) -> str:
         return self._value[20:24]
