"""
otp_core.py: TOTP engine (RFC 6238 over RFC 4226 HOTP).

Goals:
- Pure helpers (int_to_bytes, dynamic_truncate, hotp, time_step) usable anywhere.
- TOTPEngine wraps them with an injected clock and random source.
- Fixed parameters: HMAC-SHA1, 30 second step, 6 digits (authenticator defaults).

Security notes:
- Secrets are 160 bits from a CSPRNG, never derived from user data.
- Verification compares every candidate code in full (hmac.compare_digest)
  and never returns early, so timing does not reveal which step matched.
"""

import hashlib
import hmac
import logging
import struct

from . import base32
from .runtime import SystemClock, SystemRandom

logger = logging.getLogger(__name__)

# --- Config / constants ----------------------------------------------------
DEFAULT_DIGITS = 6          # 6 digits
DEFAULT_TIME_STEP = 30      # TOTP step (seconds)
DEFAULT_TOLERANCE = 1       # +-1 step = 90 s acceptance window
SECRET_BYTES = 20           # 160-bit secret
SECRET_LENGTH = 32          # base32 chars for SECRET_BYTES


# --- RFC helpers -----------------------------------------------------------
def int_to_bytes(i: int) -> bytes:
    """
    Pack a counter as 8-byte big-endian, as RFC 4226 requires.

    Example: int_to_bytes(1) -> b'\\x00\\x00\\x00\\x00\\x00\\x00\\x00\\x01'
    """
    return struct.pack(">Q", i)


def dynamic_truncate(hmac_digest: bytes) -> int:
    """
    RFC 4226 dynamic truncation.

    - offset = last_byte & 0x0F
    - read 4 bytes at offset, clear the top bit
    - returns a 31-bit unsigned integer

    Raises:
        ValueError: if the digest is too short for the offset
    """
    if len(hmac_digest) < 20:
        raise ValueError("HMAC-SHA1 digest must be 20 bytes")
    offset = hmac_digest[-1] & 0x0F
    return (
        ((hmac_digest[offset] & 0x7F) << 24)
        | ((hmac_digest[offset + 1] & 0xFF) << 16)
        | ((hmac_digest[offset + 2] & 0xFF) << 8)
        | (hmac_digest[offset + 3] & 0xFF)
    )


def hotp(secret_b32: str, counter: int) -> str:
    """
    HOTP code for one counter value.

    Steps:
    1. Base32-decode secret -> key bytes
    2. message = 8-byte counter
    3. HMAC-SHA1(key, message)
    4. dynamic truncation, mod 10^6
    5. zero-pad to 6 digits

    Raises:
        ValueError: if the secret decodes to no key bytes or counter < 0
    """
    key = base32.decode(secret_b32)
    if not key:
        raise ValueError("Invalid Base32 secret")
    if counter < 0:
        raise ValueError("Counter must be non-negative")

    digest = hmac.new(key, int_to_bytes(counter), hashlib.sha1).digest()
    code = dynamic_truncate(digest) % (10 ** DEFAULT_DIGITS)
    return str(code).zfill(DEFAULT_DIGITS)


def time_step(time_millis: int) -> int:
    """floor(time_millis / 1000 / 30)"""
    return time_millis // (1000 * DEFAULT_TIME_STEP)


# --- Engine ----------------------------------------------------------------
class TOTPEngine:
    """
    Secret generation, code derivation and window verification.

    The engine holds no per-user state, so one instance can be shared by any
    number of callers.
    """

    def __init__(self, clock=None, random=None):
        self.clock = clock or SystemClock()
        self.random = random or SystemRandom()

    def generate_secret(self) -> str:
        """
        New 160-bit secret, Base32 encoded (32 characters, no padding).
        """
        return base32.encode(self.random.random_bytes(SECRET_BYTES))

    def derive_code(self, secret_b32: str, time_millis: int = None) -> str:
        """
        6-digit TOTP code for the step containing time_millis.

        Arguments:
            secret_b32: Base32 secret
            time_millis: epoch milliseconds (None -> injected clock)
        Returns:
            str: zero-padded code, e.g. "007345"
        """
        if time_millis is None:
            time_millis = self.clock.now_millis()
        return hotp(secret_b32, time_step(time_millis))

    def verify_code(self, secret_b32: str, code: str,
                    tolerance_steps: int = DEFAULT_TOLERANCE) -> bool:
        """
        Check a submitted code against the current step +- tolerance_steps.

        With the default tolerance of 1 the steps S-1, S and S+1 are accepted
        (a 90 second window, +-30 s of drift). S-2 and S+2 are rejected.
        Every candidate is derived and compared; there is no early exit.
        """
        if tolerance_steps < 0:
            raise ValueError("tolerance_steps must be >= 0")
        if not isinstance(code, str):
            return False
        submitted = code.strip().encode("utf-8")

        current = time_step(self.clock.now_millis())
        matched = False
        for offset in range(-tolerance_steps, tolerance_steps + 1):
            counter = current + offset
            if counter < 0:
                continue
            expected = hotp(secret_b32, counter).encode("ascii")
            matched |= hmac.compare_digest(expected, submitted)
        return matched

    def seconds_remaining(self, time_millis: int = None) -> int:
        """Seconds until the current code rolls over."""
        if time_millis is None:
            time_millis = self.clock.now_millis()
        return DEFAULT_TIME_STEP - (time_millis // 1000) % DEFAULT_TIME_STEP
