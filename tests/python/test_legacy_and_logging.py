"""
Legacy retention hook, anomaly accounting and diagnostic logging.
"""

import io
import logging
import xml.etree.ElementTree as ET

import pytest

from marcstream import MARCReader, StructuralDecodeError
from marcstream.binary import RawRecord

from marc_builder import build_record, control, data


class TestLegacyRetention:
    """Opt-in access to the pre-normalization representation."""

    def test_off_by_default(self, stream_io):
        assert all(r.legacy is None for r in MARCReader(stream_io))

    def test_binary_raw_record(self, simple_bytes):
        reader = MARCReader(io.BytesIO(simple_bytes), {'retain-legacy-representation': True})
        record = next(reader)
        assert isinstance(record.legacy, RawRecord)
        assert record.legacy.data == simple_bytes
        assert record.legacy.control_number() == record.control_number

    def test_traject_setting_name(self, simple_bytes):
        reader = MARCReader(io.BytesIO(simple_bytes), {'marc4j_reader.keep_marc4j': 'true'})
        assert next(reader).legacy is not None

    def test_xml_element(self, marcxml_bytes):
        reader = MARCReader(io.BytesIO(marcxml_bytes), source_format='xml',
                            retain_legacy_representation=True)
        records = list(reader)
        assert all(isinstance(r.legacy, ET.Element) for r in records)
        # Retained elements survive the tree being pruned.
        assert len(records[0].legacy) == 5

    def test_no_effect_on_decoding(self, stream_bytes):
        plain = list(MARCReader(io.BytesIO(stream_bytes)))
        kept = list(MARCReader(io.BytesIO(stream_bytes), retain_legacy=True))
        assert plain == kept


class TestAnomalies:
    """Permissive corrections are counted and logged, not raised."""

    def test_counter_and_raw_record(self, simple_bytes):
        payload = b'00040' + simple_bytes[5:]
        reader = MARCReader(io.BytesIO(payload), retain_legacy=True)
        record = next(reader)
        assert reader.anomalies['record-length'] == 1
        assert [a.kind for a in record.legacy.anomalies] == ['record-length']

    def test_warning_logged(self, caplog):
        payload = build_record(
            [('001', control('w1')), ('245', data('10', ('a', 'Title')))],
            lengths={1: 40},
        )
        with caplog.at_level(logging.WARNING, logger='marcstream'):
            list(MARCReader(io.BytesIO(payload)))
        messages = [r.getMessage() for r in caplog.records if r.levelno == logging.WARNING]
        assert any('field-length in 245' in m for m in messages)


class TestFatalLogging:
    """Fatal errors are logged with the record id, then re-raised."""

    def test_error_logged_with_control_number(self, caplog):
        payload = build_record(
            [('001', control('f1')), ('245', data('10', ('a', 'Title')))],
            lengths={1: 40},
        )
        with caplog.at_level(logging.ERROR, logger='marcstream'):
            with pytest.raises(StructuralDecodeError) as excinfo:
                list(MARCReader(io.BytesIO(payload), permissive=False))
        assert excinfo.value.control_number == 'f1'
        assert '001 id: f1' in str(excinfo.value)
        errors = [r.getMessage() for r in caplog.records if r.levelno == logging.ERROR]
        assert len(errors) == 1
        assert 'Error reading MARC, fatal, re-raising' in errors[0]
        assert '001 id: f1' in errors[0]

    def test_unknown_control_number(self, caplog):
        with caplog.at_level(logging.ERROR, logger='marcstream'):
            with pytest.raises(StructuralDecodeError) as excinfo:
                list(MARCReader(io.BytesIO(b'junk!'), permissive=False))
        assert excinfo.value.control_number is None
        assert '001 id' not in caplog.text
