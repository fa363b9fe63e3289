"""
Tests for the local log formatters.
"""

import logging

from scanstation.utils.logging import CompactFormatter, LocalFormatter


def make_record(json_fields=None) -> logging.LogRecord:
    record = logging.LogRecord("scanstation", logging.INFO, __file__, 1, "hello", None, None)
    if json_fields is not None:
        record.json_fields = json_fields
    return record


def test_local_formatter_appends_indented_fields():
    output = LocalFormatter("%(message)s").format(make_record({"status": 200}))
    assert output == 'hello\n{\n  "status": 200\n}'


def test_compact_formatter_single_line():
    output = CompactFormatter("%(message)s").format(make_record({"status": 200}))
    assert output == 'hello {"status": 200}'


def test_no_fields():
    assert LocalFormatter("%(message)s").format(make_record()) == "hello"
