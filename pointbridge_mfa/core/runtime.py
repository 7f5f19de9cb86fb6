"""
runtime.py: time and randomness capabilities injected into the MFA engine.

The engine never calls time.time() / os.urandom() directly; it receives a
clock and a random source so tests can pin both.
"""

import os
import secrets
import time


class SystemClock:
    """Wall clock, epoch milliseconds."""

    def now_millis(self) -> int:
        return time.time_ns() // 1_000_000


class SystemRandom:
    """CSPRNG backed by os.urandom / secrets."""

    def random_bytes(self, n: int) -> bytes:
        return os.urandom(n)

    def randbelow(self, n: int) -> int:
        return secrets.randbelow(n)
