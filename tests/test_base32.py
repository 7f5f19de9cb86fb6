import os

import pytest

from pointbridge_mfa.core import base32

RFC4648_VECTORS = [
    (b"", ""),
    (b"f", "MY"),
    (b"fo", "MZXQ"),
    (b"foo", "MZXW6"),
    (b"foob", "MZXW6YQ"),
    (b"fooba", "MZXW6YTB"),
    (b"foobar", "MZXW6YTBOI"),
]


@pytest.mark.parametrize("raw, text", RFC4648_VECTORS)
def test_encode_matches_rfc4648_without_padding(raw, text):
    assert base32.encode(raw) == text


@pytest.mark.parametrize("raw, text", RFC4648_VECTORS)
def test_decode_rfc4648_vectors(raw, text):
    assert base32.decode(text) == raw


def test_decode_is_case_insensitive_and_ignores_formatting():
    assert base32.decode("mzxw6ytboi") == b"foobar"
    assert base32.decode("MZXW 6YTB-OI======") == b"foobar"
    assert base32.decode("jbsw y3dp ehpk 3pxp") == base32.decode("JBSWY3DPEHPK3PXP")


def test_decode_drops_incomplete_trailing_bits():
    # "MZXW6Y" carries 30 bits: 3 full bytes + 6 leftover bits
    assert base32.decode("MZXW6Y") == b"foo"


def test_round_trip_random_buffers():
    for size in range(0, 41):
        raw = os.urandom(size)
        text = base32.encode(raw)
        assert "=" not in text
        assert set(text) <= set(base32.BASE32_ALPHABET)
        assert base32.decode(text) == raw


def test_twenty_bytes_encode_to_32_characters():
    assert len(base32.encode(bytes(range(20)))) == 32


def test_decode_rejects_non_text():
    with pytest.raises(ValueError):
        base32.decode(b"MZXW6")
