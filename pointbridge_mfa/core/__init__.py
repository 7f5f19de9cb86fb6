"""
pointbridge_mfa.core
====================

TOTP (RFC 6238) + backup-code MFA engine, built from primitives.

──────────────────────────────────────────────
Core algorithm
──────────────────────────────────────────────
- HOTP: code = Truncate(HMAC-SHA1(key=secret, msg=counter)) mod 10^6
- TOTP: HOTP with counter = floor(time_millis / 1000 / 30)
- Dynamic truncation: 4 bytes at offset (last byte & 0x0F), top bit cleared.
- Verification accepts the current step and one step either side (90 s).

──────────────────────────────────────────────
Quick usage
──────────────────────────────────────────────
>>> from pointbridge_mfa.core import MFAService
>>> from pointbridge_mfa.database import InMemoryProfileStore
>>> store = InMemoryProfileStore()
>>> store.add_account("u1", "email")
>>> service = MFAService(store)
>>> start = service.begin_enrollment("u1", account_label="alice@example.com")
>>> code = service.totp.derive_code(start.secret)
>>> backup_codes = service.confirm_enrollment("u1", code)
>>> service.verify_for_login("u1", service.totp.derive_code(start.secret))
True
"""

from .enrollment import MFAService
from .errors import (
    AlreadyEnabled,
    EnrollmentNotStarted,
    IneligibleAccount,
    InvalidBackupCode,
    InvalidCode,
    MFAError,
    MFANotEnabled,
    TooManyAttempts,
)
from .models import BackupCode, EnrollmentStart, MFARecord, MFAStatus
from .otp_core import TOTPEngine
from .runtime import SystemClock, SystemRandom
from .uri import build_enrollment_uri

__all__ = [
    "MFAService",
    "TOTPEngine",
    "SystemClock",
    "SystemRandom",
    "build_enrollment_uri",
    "BackupCode",
    "EnrollmentStart",
    "MFARecord",
    "MFAStatus",
    "MFAError",
    "IneligibleAccount",
    "AlreadyEnabled",
    "MFANotEnabled",
    "EnrollmentNotStarted",
    "InvalidCode",
    "InvalidBackupCode",
    "TooManyAttempts",
]
