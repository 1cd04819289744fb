import logging
from pathlib import Path

import orjson
import typer
import yaml
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from dbfdecode.data.loader import load_fields
from dbfdecode.decoder import (
    DECODER_ALIASES,
    DEFAULT_ERRORS,
    ERROR_POLICIES,
    DecodeError,
    Decoder,
    DecoderKind,
    get_decoder,
)
from dbfdecode.eval.harness import inspect_fields, summary_to_dict
from dbfdecode.kamenicky import substitution_bytes
from dbfdecode.manifest import inspect_manifest, load_manifest, sample_manifest

app = typer.Typer(help="Decode legacy table fields (Windows-1250, Kamenický, UTF-8) to UTF-8.")
console = Console()
err_console = Console(stderr=True)

DECODER_HELP = f"Decoder: {', '.join(k.value for k in DecoderKind)} (or an alias)."


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    root = logging.getLogger()
    root.setLevel(logging.DEBUG if verbose else logging.WARNING)
    if not any(isinstance(h, RichHandler) for h in root.handlers):
        handler = RichHandler(console=err_console, show_path=False)
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s", datefmt="%H:%M:%S"))
        root.addHandler(handler)


def _read_bytes(path: Path) -> bytes:
    if not path.is_file():
        raise typer.BadParameter(f"Input file not found: {path}")
    return path.read_bytes()


def _build_decoder(name: str, errors: str) -> Decoder:
    if errors not in ERROR_POLICIES:
        raise typer.BadParameter(f"Unsupported errors policy '{errors}'. Choose {ERROR_POLICIES}.")
    try:
        return get_decoder(name, errors=errors)
    except DecodeError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _parse_widths(widths: str | None) -> list[int] | None:
    if not widths:
        return None
    try:
        parsed = [int(w) for w in widths.split(",") if w.strip()]
    except ValueError as exc:
        raise typer.BadParameter("Widths must be comma-separated integers, e.g. 10,30,8") from exc
    if any(w <= 0 for w in parsed):
        raise typer.BadParameter("Widths must be positive.")
    return parsed


@app.command()
def decode(
    input: Path = typer.Argument(..., help="Raw field bytes to decode."),
    decoder: str = typer.Option("kamenicky", "--decoder", "-d", help=DECODER_HELP),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Write UTF-8 output here instead of printing."
    ),
    lines: bool = typer.Option(False, "--lines", help="Decode each line as a separate field."),
    errors: str = typer.Option(
        DEFAULT_ERRORS, "--errors", help=f"Undefined-byte policy: {', '.join(ERROR_POLICIES)}."
    ),
) -> None:
    """Decode a file (or each of its lines) to UTF-8."""
    dec = _build_decoder(decoder, errors)
    data = _read_bytes(input)
    chunks = data.splitlines() if lines else [data]
    try:
        decoded = b"\n".join(dec.decode(chunk) for chunk in chunks)
    except DecodeError as exc:
        err_console.print(f"[bold red]Decode failed[/] ({type(exc).__name__}): {exc}")
        raise typer.Exit(code=1) from exc

    if output:
        output.write_bytes(decoded)
        console.print(f"[bold green]Wrote[/] {len(decoded)} bytes to {output}")
    else:
        console.print(
            decoded.decode("utf-8", errors="replace"), markup=False, highlight=False, soft_wrap=True
        )


@app.command()
def inspect(
    input: Path = typer.Argument(..., help="Raw table dump to inspect."),
    decoder: str = typer.Option("kamenicky", "--decoder", "-d", help=DECODER_HELP),
    record_length: int | None = typer.Option(
        None, "--record-length", "-r", help="Fixed record length in bytes."
    ),
    widths: str | None = typer.Option(
        None, "--widths", "-w", help="Comma-separated field widths within a record."
    ),
    header_length: int = typer.Option(0, "--header-length", help="Bytes to skip at the start."),
    lines: bool = typer.Option(False, "--lines", help="Treat each line as a field."),
    samples: int = typer.Option(3, "--samples", help="Decoded samples to include."),
    errors: str = typer.Option(DEFAULT_ERRORS, "--errors", help="Undefined-byte policy."),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write JSON summary here."),
) -> None:
    """Decode every field of a dump and report failures and character usage."""
    dec = _build_decoder(decoder, errors)
    if not input.is_file():
        raise typer.BadParameter(f"Input file not found: {input}")
    if record_length is not None and record_length <= 0:
        raise typer.BadParameter("Record length must be positive.")
    if header_length < 0:
        raise typer.BadParameter("Header length must not be negative.")
    fields = load_fields(
        input,
        record_length=record_length,
        widths=_parse_widths(widths),
        header_length=header_length,
        lines=lines,
    )
    summary = inspect_fields(dec, fields, sample_limit=samples)
    payload = summary_to_dict(summary)
    payload["input"] = str(input)

    if output:
        output.write_bytes(orjson.dumps(payload, option=orjson.OPT_INDENT_2))
        console.print(f"[bold green]Wrote inspection summary[/] to {output}")
    else:
        console.print(orjson.dumps(payload, option=orjson.OPT_INDENT_2).decode())


@app.command()
def manifest(
    path: Path | None = typer.Argument(None, help="Source manifest (json/yaml)."),
    samples: int = typer.Option(3, "--samples", help="Decoded samples to include."),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write JSON summary here."),
    sample: bool = typer.Option(False, "--sample", help="Print a sample YAML manifest and exit."),
) -> None:
    """Inspect a source described by a manifest."""
    if sample:
        console.print(yaml.safe_dump(sample_manifest(), sort_keys=False), markup=False)
        return
    if path is None:
        raise typer.BadParameter("Provide a manifest path or --sample.")
    if not path.is_file():
        raise typer.BadParameter(f"Manifest not found: {path}")
    try:
        mf = load_manifest(path)
        summary = inspect_manifest(mf, sample_limit=samples)
    except (KeyError, TypeError, ValueError, OSError, yaml.YAMLError) as exc:
        raise typer.BadParameter(f"Invalid manifest {path}: {exc}") from exc
    payload = {"manifest": mf.name, "notes": mf.notes, "summary": summary_to_dict(summary)}

    if output:
        output.write_bytes(orjson.dumps(payload, option=orjson.OPT_INDENT_2))
        console.print(f"[bold green]Wrote inspection summary[/] to {output}")
    else:
        console.print(orjson.dumps(payload, option=orjson.OPT_INDENT_2).decode())


@app.command()
def table() -> None:
    """Show the Kamenický letter substitutions applied after CP437 decoding."""
    tbl = Table(title="Kamenický substitutions")
    tbl.add_column("#", justify="right")
    tbl.add_column("Byte", justify="right")
    tbl.add_column("CP437")
    tbl.add_column("Kamenický")
    for pos, (byte, source, target) in enumerate(substitution_bytes(), start=1):
        tbl.add_row(str(pos), f"0x{byte:02X}", source, target)
    console.print(tbl)


@app.command()
def decoders() -> None:
    """List available decoders and their aliases."""
    tbl = Table(title="Decoders")
    tbl.add_column("Name")
    tbl.add_column("Aliases")
    for kind in DecoderKind:
        aliases = sorted(a for a, k in DECODER_ALIASES.items() if k is kind)
        tbl.add_row(kind.value, ", ".join(aliases))
    console.print(tbl)


if __name__ == "__main__":
    app()
