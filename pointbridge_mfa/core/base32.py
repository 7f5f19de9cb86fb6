"""
base32.py: RFC 4648 Base32 codec used for TOTP secrets.

- Alphabet A-Z2-7, never emits '=' padding (authenticator apps don't need it).
- Decoding is tolerant: lower case is accepted and anything outside the
  alphabet (spaces, dashes, padding) is dropped before decoding.
"""

BASE32_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ234567"
_INDEX = {ch: i for i, ch in enumerate(BASE32_ALPHABET)}


def encode(data: bytes) -> str:
    """
    Encode bytes to unpadded Base32.

    Every 5 bits of input map to one alphabet character; the last partial
    group is left-shifted and zero-filled.

    Arguments:
        data: arbitrary byte buffer
    Returns:
        str: Base32 text (upper case, no padding)
    """
    out = []
    value = 0
    bits = 0
    for byte in bytes(data):
        value = ((value << 8) | byte) & 0xFFFF
        bits += 8
        while bits >= 5:
            out.append(BASE32_ALPHABET[(value >> (bits - 5)) & 31])
            bits -= 5
    if bits > 0:
        out.append(BASE32_ALPHABET[(value << (5 - bits)) & 31])
    return "".join(out)


def decode(text: str) -> bytes:
    """
    Decode Base32 text to bytes.

    - Case-insensitive.
    - Characters outside A-Z2-7 are stripped first.
    - Trailing bits that don't make a full byte are discarded.

    Raises:
        ValueError: if text is not a string
    """
    if not isinstance(text, str):
        raise ValueError("Base32 input must be text")

    out = bytearray()
    value = 0
    bits = 0
    for ch in text.upper():
        index = _INDEX.get(ch)
        if index is None:
            continue
        value = ((value << 5) | index) & 0xFFF
        bits += 5
        if bits >= 8:
            out.append((value >> (bits - 8)) & 0xFF)
            bits -= 8
    return bytes(out)
