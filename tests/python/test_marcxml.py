"""
MARCXML decoding.
"""

import io
import xml.etree.ElementTree as ET

import pytest

from marcstream import (
    ControlField,
    DataField,
    MARCReader,
    ReaderHaltedError,
    StructuralDecodeError,
    Subfield,
)
from marcstream.marcxml import XMLDecoder

from marc_builder import simple_record


def xml_reader(payload, **options):
    if isinstance(payload, str):
        payload = payload.encode('utf-8')
    return MARCReader(io.BytesIO(payload), source_format='xml', **options)


class TestCollection:
    """Records wrapped in a namespaced collection."""

    def test_records_in_order(self, marcxml_bytes):
        records = list(xml_reader(marcxml_bytes))
        assert [r.control_number for r in records] == ['x1', 'x2']

    def test_fields_and_indicators(self, marcxml_bytes):
        record = next(xml_reader(marcxml_bytes))
        assert [f.tag for f in record.fields] == ['001', '008', '100', '245']
        assert record['100'] == DataField('100', '1', ' ', [('a', 'Fitzgerald, F. Scott')])
        assert record['245'].indicators == ('1', '4')
        assert record['245'].subfields == (
            Subfield('a', 'The Great Gatsby /'),
            Subfield('c', 'F. Scott Fitzgerald'),
        )

    def test_leader(self, marcxml_bytes):
        records = list(xml_reader(marcxml_bytes))
        assert str(records[0].leader) == '00000nam a2200000 a 4500'
        assert records[1].leader.record_type == 'c'

    def test_encoding_setting_ignored(self, marcxml_bytes):
        records = list(xml_reader(marcxml_bytes, source_encoding='marc8'))
        assert len(records) == 2


class TestDocumentShapes:
    """Namespaces, wrappers and character data."""

    def test_single_record_without_namespace(self):
        doc = ('<record><controlfield tag="001">a1</controlfield>'
               '<datafield tag="245" ind1="1" ind2="0"><subfield code="a">Title</subfield>'
               '</datafield></record>')
        records = list(xml_reader(doc))
        assert records[0].fields == (
            ControlField('001', 'a1'),
            DataField('245', '1', '0', [Subfield('a', 'Title')]),
        )

    def test_same_model_as_binary(self):
        """The XML and binary forms of a record normalize identically."""
        doc = ('<collection xmlns="http://www.loc.gov/MARC21/slim"><record>'
               '<controlfield tag="001">a1</controlfield>'
               '<datafield tag="245" ind1="1" ind2="0"><subfield code="a">Title</subfield>'
               '</datafield></record></collection>')
        from_xml = next(xml_reader(doc))
        from_binary = next(MARCReader(io.BytesIO(simple_record())))
        assert from_xml.fields == from_binary.fields

    def test_empty_collection(self):
        assert list(xml_reader('<collection xmlns="http://www.loc.gov/MARC21/slim"/>')) == []

    def test_missing_leader_is_blank(self):
        """No record type or level is claimed when the source gives none."""
        record = next(xml_reader('<record><controlfield tag="001">n1</controlfield></record>'))
        assert str(record.leader) == ' ' * 24
        assert record.leader.record_type == ' '
        assert record.leader.record_length is None

    def test_missing_indicators_are_blank(self):
        doc = '<record><datafield tag="500"><subfield code="a">Note</subfield></datafield></record>'
        field = next(xml_reader(doc))['500']
        assert field.indicators == (' ', ' ')

    def test_unicode_text(self):
        doc = ('<?xml version="1.0" encoding="UTF-8"?><record><datafield tag="245" ind1="0" ind2="0">'
               '<subfield code="a">Ελληνικά &amp; café</subfield></datafield></record>')
        assert next(xml_reader(doc))['245']['a'] == 'Ελληνικά & café'

    def test_foreign_elements_ignored(self):
        doc = ('<wrapper xmlns:x="urn:other"><x:record><x:id>9</x:id></x:record>'
               '<record><controlfield tag="001">m1</controlfield></record></wrapper>')
        assert [r.control_number for r in xml_reader(doc)] == ['m1']

    def test_text_stream(self, marcxml_bytes):
        reader = MARCReader(io.StringIO(marcxml_bytes.decode('utf-8')), source_format='xml')
        assert len(list(reader)) == 2


class TestMalformed:
    """Well-formedness violations are always fatal."""

    def test_unterminated_record(self):
        """A record started inside an unterminated one stops iteration."""
        doc = ('<collection>'
               '<record><controlfield tag="001">r1</controlfield>'
               '<record><controlfield tag="001">r2</controlfield></record>'
               '<record><controlfield tag="001">r3</controlfield></record>'
               '</collection>')
        reader = xml_reader(doc, binary_permissive=True)
        with pytest.raises(StructuralDecodeError) as excinfo:
            next(reader)
        assert excinfo.value.control_number == 'r1'
        with pytest.raises(ReaderHaltedError):
            next(reader)

    def test_error_after_good_record(self):
        doc = ('<collection>'
               '<record><controlfield tag="001">ok</controlfield></record>'
               '<record><controlfield tag="001">bad</controlfield>'
               '</collection>')
        reader = xml_reader(doc)
        assert next(reader).control_number == 'ok'
        with pytest.raises(StructuralDecodeError, match='Malformed MARCXML') as excinfo:
            next(reader)
        assert excinfo.value.control_number == 'bad'

    def test_not_xml(self):
        with pytest.raises(StructuralDecodeError):
            list(xml_reader(simple_record()))

    def test_empty_document(self):
        with pytest.raises(StructuralDecodeError):
            list(xml_reader(b''))

    def test_subfield_without_code(self):
        doc = ('<record><controlfield tag="001">c1</controlfield>'
               '<datafield tag="245" ind1="0" ind2="0"><subfield>x</subfield></datafield></record>')
        with pytest.raises(StructuralDecodeError, match='without a code') as excinfo:
            list(xml_reader(doc))
        assert excinfo.value.control_number == 'c1'

    def test_field_without_tag(self):
        with pytest.raises(StructuralDecodeError, match='without a tag'):
            list(xml_reader('<record><controlfield>x</controlfield></record>'))

    def test_leader_too_long(self):
        doc = '<record><leader>' + 'x' * 30 + '</leader></record>'
        with pytest.raises(StructuralDecodeError, match='Leader'):
            list(xml_reader(doc))


class TestXMLDecoder:
    """Decoder-level behavior."""

    def test_raw_is_record_element(self, marcxml_bytes):
        decoder = XMLDecoder(io.BytesIO(marcxml_bytes))
        raw = decoder.next_raw()
        assert isinstance(raw, ET.Element)
        assert raw.tag.endswith('record')
        assert decoder.control_number(raw) == 'x1'
        assert decoder.state.records_read == 1

    def test_never_permissive(self, marcxml_bytes):
        assert XMLDecoder(io.BytesIO(marcxml_bytes), permissive=True).permissive is False

    def test_exhausted(self, marcxml_bytes):
        decoder = XMLDecoder(io.BytesIO(marcxml_bytes))
        assert decoder.next_raw() is not None
        assert decoder.next_raw() is not None
        assert decoder.next_raw() is None
        assert decoder.next_raw() is None
