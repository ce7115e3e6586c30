#!/usr/bin/env python3
"""
Reading binary MARC and MARCXML into the same record model

This example demonstrates:
- Reading ISO 2709 records strictly and permissively
- Choosing a source encoding (or letting best-guess decide per record)
- Reading MARCXML with the same reader
- Handling fatal decode errors and inspecting recovered anomalies

Run it with a file argument, or without one to decode small in-memory samples:

    python examples/reading_records.py records.mrc
    python examples/reading_records.py records.xml
"""

import io
import logging
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

try:
    import marcstream
    from marcstream import MARCReader, StructuralDecodeError
except ImportError:
    print("Error: marcstream not installed")
    print("Install with: pip install -e .")
    sys.exit(1)


SAMPLE_XML = b"""<?xml version="1.0" encoding="UTF-8"?>
<collection xmlns="http://www.loc.gov/MARC21/slim">
  <record>
    <leader>00000nam a2200000 a 4500</leader>
    <controlfield tag="001">x1</controlfield>
    <datafield tag="245" ind1="1" ind2="0">
      <subfield code="a">Caf\xc3\xa9 society /</subfield>
      <subfield code="c">anonymous.</subfield>
    </datafield>
  </record>
</collection>
"""


def sample_binary(title_bytes=b"Caf\xe2e society", coding=b" "):
    """Build one MARC-8 record by hand (combining acute before the 'e')."""
    f001 = b"m1\x1e"
    f245 = b"10\x1fa" + title_bytes + b"\x1e"
    directory = b"001" + b"%04d%05d" % (len(f001), 0)
    directory += b"245" + b"%04d%05d" % (len(f245), len(f001))
    directory += b"\x1e"
    base = 24 + len(directory)
    length = base + len(f001) + len(f245) + 1
    leader = b"%05dnam " % length + coding + b"22%05d   4500" % base
    return leader + directory + f001 + f245 + b"\x1d"


def print_record(record):
    print(f"  001: {record.control_number}")
    print(f"  Title: {record.title()}")
    for field in record.data_fields:
        ind1, ind2 = field.indicators
        print(f"  {field.tag} [{ind1}{ind2}] {field.subfields_as_dict()}")


def read_binary_samples():
    print("=== Binary MARC, best-guess encoding ===\n")
    for record in MARCReader(io.BytesIO(sample_binary())):
        print_record(record)
    print()

    print("=== Strict vs permissive on a damaged record ===\n")
    damaged = b"00040" + sample_binary()[5:]
    try:
        list(MARCReader(io.BytesIO(damaged), permissive=False))
    except StructuralDecodeError as exc:
        print(f"  strict:     {exc}")
    reader = MARCReader(io.BytesIO(damaged), permissive=True)
    record = next(reader)
    print(f"  permissive: {record.title()!r}, anomalies {dict(reader.anomalies)}")
    print()


def read_xml_sample():
    print("=== MARCXML ===\n")
    reader = MARCReader(io.BytesIO(SAMPLE_XML), {"source.format": "xml"})
    while reader.has_next():
        print_record(reader.next())
    print()


def read_file(path):
    with marcstream.read(path) as reader:
        count = 0
        for record in reader:
            count += 1
            if count <= 5:
                print_record(record)
                print()
        print(f"Read {count} records, anomalies: {dict(reader.anomalies) or 'none'}")


def main():
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")
    if len(sys.argv) > 1:
        read_file(sys.argv[1])
        return
    read_binary_samples()
    read_xml_sample()


if __name__ == '__main__':
    main()
