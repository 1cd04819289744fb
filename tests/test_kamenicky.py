import pytest

from dbfdecode import kamenicky
from dbfdecode.decoder import KamenickyDecoder
from dbfdecode.kamenicky import (
    KAMENICKY_SUBSTITUTIONS,
    build_translation,
    count_substitutions,
    repair_kamenicky,
    sequential_repair,
    substitution_bytes,
)

SOURCES = [source for _target, source in KAMENICKY_SUBSTITUTIONS]
TARGETS = [target for target, _source in KAMENICKY_SUBSTITUTIONS]


def test_table_entries_are_single_code_points():
    for target, source in KAMENICKY_SUBSTITUTIONS:
        assert len(target) == 1
        assert len(source) == 1


def test_table_has_no_duplicates():
    assert len(set(SOURCES)) == len(SOURCES)
    assert len(set(TARGETS)) == len(TARGETS)


def test_no_target_is_also_a_source():
    assert not set(TARGETS) & set(SOURCES)


def test_every_source_is_a_single_cp437_byte_in_the_upper_half():
    for byte, source, _target in substitution_bytes():
        assert bytes([byte]).decode("cp437") == source
        assert byte >= 0x80


@pytest.mark.parametrize(("target", "source"), KAMENICKY_SUBSTITUTIONS)
def test_each_substitution_decodes_single_byte(target, source):
    raw = source.encode("cp437")
    assert len(raw) == 1
    assert KamenickyDecoder().decode(raw) == target.encode("utf-8")


def test_interleaved_sample_only_touches_table_characters():
    segments = [f"field{i:02d} " for i in range(len(SOURCES))]
    raw = b"".join(seg.encode("ascii") + src.encode("cp437") for seg, src in zip(segments, SOURCES))
    text = KamenickyDecoder().decode(raw).decode("utf-8")
    assert text == "".join(seg + tgt for seg, tgt in zip(segments, TARGETS))
    assert len(text) == len(raw)


def test_known_word():
    # "Žluťoučký kůň" in Kamenický
    raw = b"\x92lu\x9fou\x87k\x98 k\x96\xa4"
    assert KamenickyDecoder().decode(raw).decode("utf-8") == "Žluťoučký kůň"


def test_non_table_cp437_glyphs_are_kept():
    # box drawing and Greek letters are shared with plain CP437
    raw = b"\xc9\xcd\xbb \xe1\xe3"
    assert KamenickyDecoder().decode(raw).decode("utf-8") == "╔═╗ ßπ"


def test_single_pass_does_not_resubstitute_introduced_letters():
    # A target followed by a later-ordered source: the target must stay put and
    # only the source is rewritten.
    first_target, _ = KAMENICKY_SUBSTITUTIONS[0]
    _, last_source = KAMENICKY_SUBSTITUTIONS[-1]
    last_target, _ = KAMENICKY_SUBSTITUTIONS[-1]
    assert repair_kamenicky(first_target + last_source) == first_target + last_target


def test_single_pass_and_sequential_agree_on_adjacent_sources():
    for i in range(len(KAMENICKY_SUBSTITUTIONS) - 1):
        sample = SOURCES[i] + SOURCES[i + 1] + "x"
        assert repair_kamenicky(sample) == sequential_repair(sample)
        assert repair_kamenicky(sample) == TARGETS[i] + TARGETS[i + 1] + "x"


def test_single_pass_and_sequential_agree_on_every_cp437_byte():
    text = bytes(range(256)).decode("cp437")
    assert repair_kamenicky(text) == sequential_repair(text)


def test_sequential_replace_hazard_when_target_is_a_later_source():
    # With a chained table, replace-all rewrites text it introduced itself;
    # the per-character translation does not.
    chained = (("b", "a"), ("c", "b"))
    assert sequential_repair("ab", chained) == "cc"
    assert repair_kamenicky("ab", build_translation(chained)) == "bc"


def test_default_translation_matches_table():
    assert build_translation(KAMENICKY_SUBSTITUTIONS) == kamenicky._TRANSLATION
    assert repair_kamenicky("çæ") == "čž"


def test_count_substitutions():
    assert count_substitutions("ça ÿ ╔") == 2
    assert count_substitutions("plain") == 0


def test_repair_leaves_ascii_untouched():
    assert repair_kamenicky("Hello, World 123") == "Hello, World 123"
    assert repair_kamenicky("") == ""
