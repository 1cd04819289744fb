from pathlib import Path

import pytest

from dbfdecode.data.loader import iter_fixed_records, iter_lines, load_fields, split_fields


def test_iter_fixed_records_skips_header_and_partial_tail():
    data = b"HDR" + b"AAAA" + b"BBBB" + b"CC"
    records = list(iter_fixed_records(data, record_length=4, header_length=3))
    assert records == [b"AAAA", b"BBBB"]


def test_iter_fixed_records_rejects_bad_lengths():
    with pytest.raises(ValueError):
        list(iter_fixed_records(b"abcd", record_length=0))
    with pytest.raises(ValueError):
        list(iter_fixed_records(b"abcd", record_length=2, header_length=-1))


def test_split_fields_by_width():
    assert split_fields(b"NOVAK  Praha", [7, 5]) == [b"NOVAK  ", b"Praha"]


def test_split_fields_short_record():
    assert split_fields(b"AB", [1, 3, 2]) == [b"A", b"B", b""]


def test_split_fields_rejects_zero_width():
    with pytest.raises(ValueError):
        split_fields(b"AB", [1, 0])


def test_iter_lines_handles_crlf():
    assert list(iter_lines(b"one\r\ntwo\nthree")) == [b"one", b"two", b"three"]


def test_load_fields_modes(tmp_path: Path):
    path = tmp_path / "dump.dat"
    path.write_bytes(b"H" + b"abcXY" + b"defZW")
    assert load_fields(path, widths=[3, 2], header_length=1) == [b"abc", b"XY", b"def", b"ZW"]
    assert load_fields(path, record_length=5, header_length=1) == [b"abcXY", b"defZW"]
    assert load_fields(path) == [b"HabcXYdefZW"]

    lines_path = tmp_path / "lines.txt"
    lines_path.write_bytes(b"a\nb\n")
    assert load_fields(lines_path, lines=True) == [b"a", b"b"]


def test_load_fields_rejects_negative_header(tmp_path: Path):
    path = tmp_path / "dump.dat"
    path.write_bytes(b"abcdef")
    with pytest.raises(ValueError):
        load_fields(path, header_length=-1)
