"""Field decoders: raw legacy bytes in, UTF-8 bytes out.

A record reader picks one decoder per data source and calls ``decode`` on
every character field it extracts. Four decoders exist:

- ``UTF8Decoder``: the data is already UTF-8, pass it through untouched.
- ``UTF8Validator``: pass UTF-8 through, reject anything malformed.
- ``Win1250Decoder``: Windows-1250 (Central European) single-byte tables.
- ``KamenickyDecoder``: the DOS-era Kamenický encoding, decoded as CP437
  followed by a letter repair pass (see ``dbfdecode.kamenicky``).

The two transcoding decoders leave input that is already valid UTF-8 alone,
because fields converted upstream would otherwise be decoded twice.

All decoders are immutable and keep no state between calls.
"""

from __future__ import annotations

import codecs
import logging
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Protocol, assert_never

from dbfdecode.kamenicky import BASE_CODEC, repair_kamenicky

_LOGGER = logging.getLogger(__name__)

C1_CONTROLS = "c1controls"
ERROR_POLICIES: tuple[str, ...] = (C1_CONTROLS, "replace", "strict", "ignore", "backslashreplace")
DEFAULT_ERRORS = C1_CONTROLS


def _c1_controls(exc: UnicodeError) -> tuple[str, int]:
    """Decode bytes a codepage leaves undefined as the code point of the same value.

    This fills the five holes in cp1250 (0x81, 0x83, 0x88, 0x90, 0x98) the way
    the WHATWG single-byte indexes do, yielding U+0081 and friends.
    """
    if not isinstance(exc, UnicodeDecodeError):
        raise exc
    undefined = exc.object[exc.start : exc.end]
    return "".join(chr(b) for b in undefined), exc.end


codecs.register_error(C1_CONTROLS, _c1_controls)


class DecodeError(Exception):
    """Base class for decoding failures."""


class InvalidEncodingError(DecodeError):
    """Input had to be well-formed UTF-8 and was not."""

    def __init__(self, message: str = "invalid UTF-8 data") -> None:
        super().__init__(message)


class TranscodingError(DecodeError):
    """The codepage table could not turn the input into text."""

    def __init__(self, codec: str, reason: str) -> None:
        super().__init__(f"cannot decode {codec} data: {reason}")
        self.codec = codec
        self.reason = reason


class UnknownDecoderError(DecodeError, ValueError):
    """Raised when a decoder name does not match any known decoder."""


class DecoderKind(str, Enum):
    UTF8 = "utf8"
    UTF8_STRICT = "utf8-strict"
    WIN1250 = "win1250"
    KAMENICKY = "kamenicky"


DECODER_ALIASES: dict[str, DecoderKind] = {
    "utf-8": DecoderKind.UTF8,
    "utf8-validate": DecoderKind.UTF8_STRICT,
    "cp1250": DecoderKind.WIN1250,
    "windows-1250": DecoderKind.WIN1250,
    "cp895": DecoderKind.KAMENICKY,
    "keybcs2": DecoderKind.KAMENICKY,
    "kam": DecoderKind.KAMENICKY,
}


class Decoder(Protocol):
    kind: ClassVar[DecoderKind]

    def decode(self, data: bytes) -> bytes: ...


def is_valid_utf8(data: bytes) -> bool:
    """Return True when ``data`` is a well-formed UTF-8 byte sequence."""
    try:
        data.decode("utf-8")
    except UnicodeDecodeError:
        return False
    return True


def _transcode(data: bytes, codec: str, errors: str) -> str:
    try:
        return data.decode(codec, errors=errors)
    except (UnicodeDecodeError, LookupError) as exc:
        raise TranscodingError(codec, str(exc)) from exc


def _check_errors(errors: str) -> None:
    if errors not in ERROR_POLICIES:
        raise ValueError(f"Unsupported errors policy '{errors}'. Choose from {ERROR_POLICIES}.")


@dataclass(frozen=True)
class UTF8Decoder:
    """Assumes the source is UTF-8 already and returns input unchanged."""

    kind: ClassVar[DecoderKind] = DecoderKind.UTF8

    def decode(self, data: bytes) -> bytes:
        return data


@dataclass(frozen=True)
class UTF8Validator:
    """Returns input unchanged if it is valid UTF-8, raises otherwise."""

    kind: ClassVar[DecoderKind] = DecoderKind.UTF8_STRICT

    def decode(self, data: bytes) -> bytes:
        if is_valid_utf8(data):
            return data
        raise InvalidEncodingError()


@dataclass(frozen=True)
class Win1250Decoder:
    """Decodes Windows-1250 fields to UTF-8.

    ``errors`` controls the five byte values cp1250 leaves undefined: the
    default ``"c1controls"`` maps byte ``b`` to ``chr(b)``, ``"replace"``
    yields U+FFFD, ``"strict"`` raises ``TranscodingError``.
    """

    errors: str = DEFAULT_ERRORS
    kind: ClassVar[DecoderKind] = DecoderKind.WIN1250
    codec: ClassVar[str] = "cp1250"

    def __post_init__(self) -> None:
        _check_errors(self.errors)

    def decode(self, data: bytes) -> bytes:
        if is_valid_utf8(data):
            _LOGGER.debug("%s: %d bytes already UTF-8, skipping", self.codec, len(data))
            return data
        return _transcode(data, self.codec, self.errors).encode("utf-8")


@dataclass(frozen=True)
class KamenickyDecoder:
    """Decodes Kamenický fields to UTF-8 via CP437 plus letter repair."""

    errors: str = DEFAULT_ERRORS
    kind: ClassVar[DecoderKind] = DecoderKind.KAMENICKY
    codec: ClassVar[str] = BASE_CODEC

    def __post_init__(self) -> None:
        _check_errors(self.errors)

    def decode(self, data: bytes) -> bytes:
        if is_valid_utf8(data):
            _LOGGER.debug("kamenicky: %d bytes already UTF-8, skipping", len(data))
            return data
        text = _transcode(data, self.codec, self.errors)
        return repair_kamenicky(text).encode("utf-8")


def resolve_kind(name: DecoderKind | str) -> DecoderKind:
    """Map a decoder name or alias (case-insensitive) to a ``DecoderKind``."""
    if isinstance(name, DecoderKind):
        return name
    key = name.strip().lower().replace("_", "-")
    try:
        return DecoderKind(key)
    except ValueError:
        pass
    if key in DECODER_ALIASES:
        return DECODER_ALIASES[key]
    choices = sorted([k.value for k in DecoderKind] + list(DECODER_ALIASES))
    raise UnknownDecoderError(f"Unknown decoder '{name}'. Choose from {choices}.")


def get_decoder(name: DecoderKind | str, errors: str = DEFAULT_ERRORS) -> Decoder:
    """Build the decoder for ``name``.

    ``errors`` only applies to the transcoding decoders; the UTF-8 ones
    ignore it.
    """
    kind = resolve_kind(name)
    _check_errors(errors)
    if kind is DecoderKind.UTF8:
        return UTF8Decoder()
    if kind is DecoderKind.UTF8_STRICT:
        return UTF8Validator()
    if kind is DecoderKind.WIN1250:
        return Win1250Decoder(errors=errors)
    if kind is DecoderKind.KAMENICKY:
        return KamenickyDecoder(errors=errors)
    assert_never(kind)


def decode_text(decoder: Decoder, data: bytes) -> str:
    """Decode a field and return it as ``str`` rather than UTF-8 bytes.

    ``UTF8Decoder`` does not validate, so malformed input surfaces here as
    ``InvalidEncodingError``.
    """
    try:
        return decoder.decode(data).decode("utf-8")
    except UnicodeDecodeError as exc:
        raise InvalidEncodingError() from exc
