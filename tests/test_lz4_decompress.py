import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from yrmcds.lz4_compress import compress
from yrmcds.lz4_decompress import (
    LZ4DecodeError,
    decompress_fast,
    decompress_fast_using_dict,
    decompress_safe,
    decompress_safe_partial,
    decompress_safe_using_dict,
)

SAMPLES = [
    b"",
    b"x",
    b"hello",
    b"a" * 1000,
    b"abcdefgh" * 300,
    bytes(range(256)) * 20,
    b"The quick brown fox jumps over the lazy dog. " * 50,
    bytes(70000),
]

DICT_BLOCK = b"\x04\x08\x00\x50hello"


@pytest.mark.parametrize("data", SAMPLES)
def test_safe_round_trip(data):
    assert decompress_safe(compress(data), len(data)) == data


@pytest.mark.parametrize("data", SAMPLES)
def test_fast_round_trip_reports_consumed(data):
    block = compress(data)
    decoded, consumed = decompress_fast(block + b"trailing", len(data))
    assert decoded == data
    assert consumed == len(block)


@settings(max_examples=60, deadline=None)
@given(st.binary(max_size=3000))
def test_round_trip_property(data):
    block = compress(data)
    assert decompress_safe(block, len(data) + 100) == data
    assert decompress_fast(block, len(data)) == (data, len(block))


def test_literal_only_block():
    assert decompress_safe(b"\x50hello", 5) == b"hello"


def test_match_with_overlap():
    block = b"\x14a\x01\x00\x50aaaaa"
    assert decompress_safe(block, 14) == b"a" * 14


def test_empty_block():
    assert decompress_safe(b"\x00", 0) == b""
    assert decompress_fast(b"\x00", 0) == (b"", 1)


def test_zero_output_rejects_other_input():
    with pytest.raises(LZ4DecodeError):
        decompress_safe(b"\x10", 0)


def test_output_too_small():
    data = b"abcdefgh" * 300
    with pytest.raises(LZ4DecodeError):
        decompress_safe(compress(data), len(data) - 1)


def test_truncated_input():
    data = b"The quick brown fox jumps over the lazy dog. " * 50
    block = compress(data)
    with pytest.raises(LZ4DecodeError):
        decompress_safe(block[:-3], len(data))


def test_empty_input_error_position():
    with pytest.raises(LZ4DecodeError) as info:
        decompress_safe(b"", 5)
    assert info.value.position == 0


def test_zero_offset_rejected():
    with pytest.raises(LZ4DecodeError):
        decompress_safe(b"\x10a\x00\x00\x50hello", 100)


def test_offset_before_start_rejected():
    with pytest.raises(LZ4DecodeError):
        decompress_safe(b"\x10a\x02\x00\x50hello", 100)


def test_fast_wrong_size_rejected():
    with pytest.raises(LZ4DecodeError):
        decompress_fast(b"\x50hello", 100)


def test_partial_returns_prefix():
    data = b"The quick brown fox jumps over the lazy dog. " * 50
    block = compress(data)
    result = decompress_safe_partial(block, 10, len(data))
    assert data.startswith(result)
    assert len(result) >= 10


def test_partial_with_large_target_decodes_all():
    data = bytes(range(256)) * 20
    assert decompress_safe_partial(compress(data), len(data) * 2, len(data)) == data


def test_using_dict():
    expected = b"abcdefghhello"
    assert decompress_safe_using_dict(DICT_BLOCK, 13, b"abcdefgh") == expected
    assert decompress_fast_using_dict(DICT_BLOCK, 13, b"abcdefgh") == (expected, len(DICT_BLOCK))


def test_using_dict_needs_dictionary():
    with pytest.raises(LZ4DecodeError):
        decompress_safe(DICT_BLOCK, 13)


def test_using_long_dict_uses_tail():
    dictionary = b"x" * 70000 + b"abcdefgh"
    short = decompress_safe_using_dict(DICT_BLOCK, 13, b"abcdefgh")
    assert decompress_safe_using_dict(DICT_BLOCK, 13, dictionary) == short


def test_empty_dict_matches_plain():
    data = b"abcdefgh" * 300
    block = compress(data)
    assert decompress_safe_using_dict(block, len(data), b"") == decompress_safe(block, len(data))


def test_negative_sizes_rejected():
    with pytest.raises(ValueError):
        decompress_safe(b"\x00", -1)
    with pytest.raises(ValueError):
        decompress_fast(b"\x00", -1)
    with pytest.raises(ValueError):
        decompress_safe_partial(b"\x00", -1, 0)


def test_decode_error_is_value_error():
    with pytest.raises(ValueError):
        decompress_safe(b"\xff", 10)