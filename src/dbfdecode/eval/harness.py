"""Inspection harness: run a decoder over many fields and summarize.

Useful when choosing a decoder for an unknown table: a wrong choice shows up
as failures, replacement characters, or suspicious non-ASCII counts.
Unlike ``Decoder.decode`` this keeps going after a failed field and records
it, which is the per-field policy a record reader would apply.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import asdict, dataclass, field
from typing import Any

from dbfdecode.decoder import DecodeError, Decoder, DecoderKind, decode_text, is_valid_utf8
from dbfdecode.kamenicky import BASE_CODEC, count_substitutions

REPLACEMENT_CHAR = "�"


@dataclass
class FieldSample:
    index: int
    raw: str
    text: str


@dataclass
class FieldFailure:
    index: int
    error: str
    message: str


@dataclass
class DecodeSummary:
    decoder: str
    fields: int = 0
    decoded: int = 0
    already_utf8: int = 0
    non_ascii_fields: int = 0
    replacement_chars: int = 0
    substituted_chars: int = 0
    char_counts: dict[str, int] = field(default_factory=dict)
    samples: list[FieldSample] = field(default_factory=list)
    failures: list[FieldFailure] = field(default_factory=list)


def _preview(text: str, limit: int) -> str:
    return text if len(text) <= limit else text[:limit] + "…"


def inspect_fields(
    decoder: Decoder,
    fields: Iterable[bytes],
    sample_limit: int = 3,
    preview_chars: int = 64,
) -> DecodeSummary:
    """Decode every field and tally what happened.

    ``char_counts`` counts non-ASCII characters in the decoded output, which
    is the quickest way to spot a table decoded with the wrong code page.
    ``substituted_chars`` counts letters the Kamenický repair pass rewrote.
    """
    summary = DecodeSummary(decoder=decoder.kind.value)
    chars: Counter[str] = Counter()

    for index, raw in enumerate(fields):
        summary.fields += 1
        utf8 = is_valid_utf8(raw)
        if utf8:
            summary.already_utf8 += 1
        try:
            text = decode_text(decoder, raw)
        except DecodeError as exc:
            summary.failures.append(
                FieldFailure(index=index, error=type(exc).__name__, message=str(exc))
            )
            continue
        summary.decoded += 1
        non_ascii = [ch for ch in text if ord(ch) > 0x7F]
        if non_ascii:
            summary.non_ascii_fields += 1
            chars.update(non_ascii)
        summary.replacement_chars += text.count(REPLACEMENT_CHAR)
        if decoder.kind is DecoderKind.KAMENICKY and not utf8:
            summary.substituted_chars += count_substitutions(raw.decode(BASE_CODEC))

        if len(summary.samples) < sample_limit and text.strip():
            summary.samples.append(
                FieldSample(
                    index=index,
                    raw=raw[:preview_chars].hex(" "),
                    text=_preview(text, preview_chars),
                )
            )

    summary.char_counts = dict(chars.most_common())
    return summary


def summary_to_dict(summary: DecodeSummary) -> dict[str, Any]:
    """Flatten a summary into JSON-friendly primitives."""
    payload = asdict(summary)
    payload["failure_count"] = len(summary.failures)
    return payload
