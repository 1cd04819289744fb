from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from dbfdecode.data.loader import load_fields
from dbfdecode.decoder import DEFAULT_ERRORS, Decoder, get_decoder
from dbfdecode.eval.harness import DecodeSummary, inspect_fields


@dataclass
class SourceManifest:
    name: str
    path: Path
    decoder: str
    field_widths: list[int] | None = None
    record_length: int | None = None
    header_length: int = 0
    lines: bool = False
    errors: str = DEFAULT_ERRORS
    notes: str | None = None

    @staticmethod
    def from_mapping(payload: dict[str, Any]) -> SourceManifest:
        widths = payload.get("field_widths")
        record_length = payload.get("record_length")
        return SourceManifest(
            name=str(payload["name"]),
            path=Path(payload["path"]),
            decoder=str(payload["decoder"]),
            field_widths=[int(w) for w in widths] if widths else None,
            record_length=int(record_length) if record_length is not None else None,
            header_length=int(payload.get("header_length", 0) or 0),
            lines=bool(payload.get("lines", False)),
            errors=str(payload.get("errors", DEFAULT_ERRORS)),
            notes=payload.get("notes"),
        )

    def build_decoder(self) -> Decoder:
        return get_decoder(self.decoder, errors=self.errors)


def load_manifest(path: Path) -> SourceManifest:
    if path.suffix.lower() in {".yml", ".yaml"}:
        payload = yaml.safe_load(path.read_text())
    else:
        payload = json.loads(path.read_text())
    if not isinstance(payload, dict):
        raise ValueError(f"Manifest {path} must contain a mapping, got {type(payload).__name__}")
    manifest = SourceManifest.from_mapping(payload)
    if not manifest.path.is_absolute():
        manifest.path = path.parent / manifest.path
    return manifest


def inspect_manifest(manifest: SourceManifest, sample_limit: int = 3) -> DecodeSummary:
    """Load the source described by ``manifest`` and run the inspection harness."""
    decoder = manifest.build_decoder()
    fields = load_fields(
        manifest.path,
        record_length=manifest.record_length,
        widths=manifest.field_widths,
        header_length=manifest.header_length,
        lines=manifest.lines,
    )
    return inspect_fields(decoder, fields, sample_limit=sample_limit)


def sample_manifest() -> dict[str, Any]:
    return {
        "name": "customers_kamenicky",
        "path": "data/customers.dat",
        "decoder": "kamenicky",
        "field_widths": [10, 30, 20],
        "record_length": None,
        "header_length": 0,
        "lines": False,
        "errors": "c1controls",
        "notes": "edit with real details",
    }
