"""Slice raw table dumps into field byte strings.

These helpers stand in for a real table reader: they cut fixed-length
records (optionally after a header block) into fields by width, or split a
text dump into lines. Nothing here decodes; the slices go to a decoder.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from pathlib import Path


def iter_fixed_records(
    data: bytes, record_length: int, header_length: int = 0
) -> Iterable[bytes]:
    """Yield fixed-length records, skipping a header and any trailing partial record."""
    if record_length <= 0:
        raise ValueError(f"record_length must be positive, got {record_length}")
    if header_length < 0:
        raise ValueError(f"header_length must not be negative, got {header_length}")
    idx = header_length
    total = len(data)
    while idx + record_length <= total:
        yield data[idx : idx + record_length]
        idx += record_length


def split_fields(record: bytes, widths: Sequence[int]) -> list[bytes]:
    """Cut a record into consecutive fields of the given widths.

    A record shorter than the layout yields short (possibly empty) trailing
    fields rather than an error.
    """
    fields: list[bytes] = []
    pos = 0
    for width in widths:
        if width <= 0:
            raise ValueError(f"field widths must be positive, got {width}")
        fields.append(record[pos : pos + width])
        pos += width
    return fields


def iter_lines(data: bytes) -> Iterable[bytes]:
    """Yield lines without their terminators (``\\n``, ``\\r`` or ``\\r\\n``)."""
    for line in data.splitlines():
        yield line


def load_fields(
    path: Path,
    *,
    record_length: int | None = None,
    widths: Sequence[int] | None = None,
    header_length: int = 0,
    lines: bool = False,
) -> list[bytes]:
    """Read a dump from disk and return its field slices.

    With ``lines`` each line is a field. With ``record_length`` the file is
    cut into records and each record into ``widths`` (or kept whole when no
    widths are given). Otherwise the whole file is one field.
    """
    if header_length < 0:
        raise ValueError(f"header_length must not be negative, got {header_length}")
    data = path.read_bytes()
    if lines:
        return list(iter_lines(data))
    if record_length is None:
        if widths:
            record_length = sum(widths)
        else:
            return [data[header_length:]]
    fields: list[bytes] = []
    for record in iter_fixed_records(data, record_length, header_length):
        if widths:
            fields.extend(split_fields(record, widths))
        else:
            fields.append(record)
    return fields
