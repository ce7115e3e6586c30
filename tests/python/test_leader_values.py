"""
Unit tests for the Leader value object and its MARC 21 value lookup helpers.
"""

import pytest

from marcstream import Leader

SAMPLE = '01234cam a2200289 a 4500'


class TestLeaderPositions:
    """Positional and named access to a decoded leader."""

    def test_index_and_slice(self):
        leader = Leader(SAMPLE)
        assert leader[5] == 'c'
        assert leader[0:5] == '01234'
        assert leader[20:24] == '4500'

    def test_index_out_of_range(self):
        with pytest.raises(IndexError):
            Leader(SAMPLE)[24]

    def test_structural_numbers(self):
        leader = Leader(SAMPLE)
        assert leader.record_length == 1234
        assert leader.data_base_address == 289
        assert leader.indicator_count == 2
        assert leader.subfield_code_count == 2

    def test_non_numeric_structural_values(self):
        leader = Leader('abcdenam a22xx289 a 4500')
        assert leader.record_length is None
        assert leader.data_base_address is None

    def test_named_positions(self):
        leader = Leader(SAMPLE)
        assert leader.record_status == 'c'
        assert leader.record_type == 'a'
        assert leader.bibliographic_level == 'm'
        assert leader.character_coding == 'a'
        assert leader.encoding_level == ' '
        assert leader.cataloging_form == 'a'
        assert leader.descriptive_cataloging_form == 'a'
        assert leader.multipart_level == ' '
        assert leader.entry_map == '4500'

    def test_short_leader_padded(self):
        assert str(Leader('00000nam')) == '00000nam' + ' ' * 16

    def test_long_leader_rejected(self):
        with pytest.raises(ValueError):
            Leader('x' * 25)

    def test_with_record_length(self):
        leader = Leader(SAMPLE).with_record_length(77)
        assert leader.record_length == 77
        assert str(leader)[5:] == SAMPLE[5:]

    def test_equality(self):
        assert Leader(SAMPLE) == Leader(SAMPLE)
        assert Leader(SAMPLE) == SAMPLE
        assert Leader(SAMPLE) != Leader()
        assert hash(Leader(SAMPLE)) == hash(Leader(SAMPLE))


class TestLeaderValidValuesPosition5:
    """Test Leader valid values for position 5 (Record status)."""

    def test_record_status_values_mapped_correctly(self):
        values = Leader.get_valid_values(5)
        assert values["a"] == "Increase in encoding level"
        assert values["c"] == "Corrected or revised"
        assert values["d"] == "Deleted"
        assert values["n"] == "New"
        assert values["p"] == "Increase in encoding level from prepublication"

    def test_describe_invalid_value_position_5(self):
        assert Leader.describe_value(5, "x") is None


class TestLeaderValidValuesPosition6:
    """Test Leader valid values for position 6 (Type of record)."""

    def test_record_type_values_mapped_correctly(self):
        values = Leader.get_valid_values(6)
        assert values["a"] == "Language material"
        assert values["c"] == "Notated music"
        assert values["m"] == "Computer file"
        assert values["t"] == "Manuscript language material"


class TestLeaderValidValuesPosition9:
    """Position 9 drives best-guess encoding detection."""

    def test_character_coding_values(self):
        values = Leader.get_valid_values(9)
        assert values == {' ': 'MARC-8', 'a': 'UCS/Unicode'}

    def test_describe_decoded_leader(self):
        leader = Leader(SAMPLE)
        assert Leader.describe_value(9, leader.character_coding) == 'UCS/Unicode'


class TestLeaderValidValuesOtherPositions:
    """Positions 7, 17 and 18, and positions without a table."""

    def test_bibliographic_level(self):
        assert Leader.describe_value(7, "s") == "Serial"

    def test_encoding_level(self):
        assert Leader.describe_value(17, "7") == "Minimal level"

    def test_cataloging_form(self):
        assert Leader.describe_value(18, "a") == "AACR 2"

    def test_get_valid_values_invalid_position(self):
        assert Leader.get_valid_values(0) is None
        assert Leader.get_valid_values(99) is None

    def test_is_valid_value(self):
        assert Leader.is_valid_value(5, 'a') is True
        assert Leader.is_valid_value(5, 'x') is False
        assert Leader.is_valid_value(0, 'x') is True

    def test_instance_method_access(self):
        leader = Leader(SAMPLE)
        assert leader.get_value_description(6, leader.record_type) == "Language material"
