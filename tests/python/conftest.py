"""
Pytest configuration and fixtures for the marcstream decoder tests.
"""

import io

import pytest

from marc_builder import build_record, control, data, simple_record


MARCXML_COLLECTION = b"""<?xml version="1.0" encoding="UTF-8"?>
<collection xmlns="http://www.loc.gov/MARC21/slim">
  <record>
    <leader>00000nam a2200000 a 4500</leader>
    <controlfield tag="001">x1</controlfield>
    <controlfield tag="008">200101s2020    xxua   j      000 0 eng d</controlfield>
    <datafield tag="100" ind1="1" ind2=" ">
      <subfield code="a">Fitzgerald, F. Scott</subfield>
    </datafield>
    <datafield tag="245" ind1="1" ind2="4">
      <subfield code="a">The Great Gatsby /</subfield>
      <subfield code="c">F. Scott Fitzgerald</subfield>
    </datafield>
  </record>
  <record>
    <leader>00000ncm a2200000 a 4500</leader>
    <controlfield tag="001">x2</controlfield>
    <datafield tag="245" ind1="0" ind2="0">
      <subfield code="a">Symphonie Nr. 9</subfield>
    </datafield>
    <datafield tag="650" ind1=" " ind2="0">
      <subfield code="a">Symphonies</subfield>
      <subfield code="v">Scores.</subfield>
    </datafield>
  </record>
</collection>
"""


@pytest.fixture(scope="session")
def simple_bytes():
    """One record: 001 'a1' and 245 10 $a 'Title'."""
    return simple_record()


@pytest.fixture(scope="session")
def book_bytes():
    """A fuller UTF-8 record with repeated fields and subfields."""
    return build_record([
        ('001', control('b100')),
        ('008', control('200101s2020    xxua   j      000 0 eng d')),
        ('100', data('1 ', ('a', 'Fitzgerald, F. Scott'))),
        ('245', data('14', ('a', 'The Great Gatsby /'), ('c', 'F. Scott Fitzgerald.'))),
        ('650', data(' 0', ('a', 'Rich people'), ('z', 'New York (State)'), ('v', 'Fiction.'))),
        ('650', data(' 0', ('a', 'Long Island (N.Y.)'), ('v', 'Fiction.'))),
    ])


@pytest.fixture(scope="session")
def stream_bytes(simple_bytes, book_bytes):
    """Three records back to back."""
    return simple_bytes + book_bytes + simple_record('c3', 'Third')


@pytest.fixture(scope="session")
def marcxml_bytes():
    """MARCXML collection of two records."""
    return MARCXML_COLLECTION


@pytest.fixture
def stream_io(stream_bytes):
    """Return the three-record stream as a file-like object."""
    return io.BytesIO(stream_bytes)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "slow: mark test as slow (deselect with '-m \"not slow\"')"
    )
