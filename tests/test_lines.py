from __future__ import annotations

import io

import pytest

from osmmodel.osm.lines import read_elements
from osmmodel.osm.lines import write_elements
from osmmodel.osm.serde import SerializationError


def test_write_then_read(elements):
    sink = io.StringIO()
    assert write_elements(sink, elements) == 4
    assert sink.getvalue().count("\n") == 4

    sink.seek(0)
    assert list(read_elements(sink)) == elements


def test_blank_lines_are_skipped(elements):
    sink = io.StringIO()
    write_elements(sink, elements[:1])
    source = io.StringIO("\n" + sink.getvalue() + "   \n")
    assert list(read_elements(source)) == elements[:1]


def test_malformed_line_reports_line_number(elements):
    sink = io.StringIO()
    write_elements(sink, elements[:2])
    source = io.StringIO(sink.getvalue() + '{"Area": {"id": 1}}\n')

    reader = read_elements(source)
    assert len([next(reader), next(reader)]) == 2
    with pytest.raises(SerializationError, match="line 3"):
        next(reader)
