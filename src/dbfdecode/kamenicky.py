"""Kamenický letter repair on top of code page 437.

The Kamenický encoding (a.k.a. KEYBCS2 / CP895) reuses most of code page 437
byte-for-byte, but assigns Czech and Slovak accented letters to a block of
bytes where CP437 has unrelated glyphs (Western accents, currency signs,
``⌐``, ``½`` ...). Python ships no codec for it, so decoding is done in two
stages:

1. decode with the stock ``cp437`` codec;
2. swap every CP437 glyph from that block for the letter Kamenický means.

Stage 2 is table-driven. Each ``(target, source)`` pair below reads
"``source`` as produced by CP437 is really ``target``".
"""

from __future__ import annotations

# Order matches the historical replacement sequence; keep it when editing.
KAMENICKY_SUBSTITUTIONS: tuple[tuple[str, str], ...] = (
    ("ě", "ê"),
    ("ů", "û"),
    ("ý", "ÿ"),
    ("č", "ç"),
    ("ď", "â"),
    ("ĺ", "ì"),
    ("ľ", "î"),
    ("ň", "ñ"),
    ("ŕ", "¬"),
    ("ř", "⌐"),
    ("š", "¿"),
    ("ť", "ƒ"),
    ("ž", "æ"),
    ("Á", "Å"),
    ("Ě", "ë"),
    ("Í", "ï"),
    ("Ó", "ò"),
    ("Ô", "º"),
    ("Ú", "ù"),
    ("Ů", "ª"),
    ("Ý", "¥"),
    ("Č", "Ç"),
    ("Ď", "à"),
    ("Ĺ", "è"),
    ("Ľ", "£"),
    ("Ň", "Ñ"),
    ("Ŕ", "½"),
    ("Ř", "₧"),
    ("Š", "¢"),
    ("Ť", "å"),
    ("Ž", "Æ"),
)

BASE_CODEC = "cp437"

Substitutions = tuple[tuple[str, str], ...]


def build_translation(table: Substitutions) -> dict[int, str]:
    """Build a ``str.translate`` map (source code point -> target letter)."""
    return str.maketrans({source: target for target, source in table})


_TRANSLATION = build_translation(KAMENICKY_SUBSTITUTIONS)


def repair_kamenicky(text: str, translation: dict[int, str] | None = None) -> str:
    """Replace CP437 glyphs with the Kamenický letters they stand for.

    Every character is looked up exactly once, so a letter written by one
    substitution can never be picked up again by a later one.
    """
    return text.translate(_TRANSLATION if translation is None else translation)


def count_substitutions(text: str, translation: dict[int, str] | None = None) -> int:
    """Count the characters of ``text`` that ``repair_kamenicky`` would change."""
    table = _TRANSLATION if translation is None else translation
    return sum(1 for ch in text if ord(ch) in table)


def sequential_repair(text: str, table: Substitutions | None = None) -> str:
    """Apply the table as successive whole-string replacements, in order.

    This is the historical algorithm. It is only correct while no ``target``
    is also a ``source`` further down the table; ``repair_kamenicky`` does
    not depend on that.
    """
    for target, source in KAMENICKY_SUBSTITUTIONS if table is None else table:
        text = text.replace(source, target)
    return text


def substitution_bytes() -> list[tuple[int, str, str]]:
    """Return ``(byte, cp437 glyph, Kamenický letter)`` rows in table order."""
    rows = []
    for target, source in KAMENICKY_SUBSTITUTIONS:
        rows.append((source.encode(BASE_CODEC)[0], source, target))
    return rows
