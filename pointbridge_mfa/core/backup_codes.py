"""
backup_codes.py: single-use recovery codes.

Choices (fixed):
- 8 codes per enable / regenerate cycle
- 10 characters each from a 32-symbol alphabet without 0/O/1/I (50 bits)
- shown to the user as XXXXX-XXXXX, exactly once
- persisted only as SHA-256 hashes of the normalized code
"""

import hashlib
import hmac
from dataclasses import dataclass, replace
from datetime import datetime
from typing import List, Tuple

from .models import BackupCode, MFARecord

BACKUP_CODE_COUNT = 8
BACKUP_CODE_LENGTH = 10
BACKUP_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
_GROUP = 5


@dataclass(frozen=True)
class GeneratedBackupCodes:
    plaintext: List[str]
    entries: Tuple[BackupCode, ...]


@dataclass(frozen=True)
class ConsumeResult:
    success: bool
    record: MFARecord


def normalize_backup_code(text: str) -> str:
    """Upper-case and drop anything outside the alphabet (dashes, spaces)."""
    return "".join(ch for ch in text.upper() if ch in BACKUP_CODE_ALPHABET)


def hash_backup_code(code: str) -> str:
    return hashlib.sha256(normalize_backup_code(code).encode("ascii")).hexdigest()


def _format(raw: str) -> str:
    return "-".join(raw[i:i + _GROUP] for i in range(0, len(raw), _GROUP))


def generate_backup_codes(random, count: int = BACKUP_CODE_COUNT) -> GeneratedBackupCodes:
    """
    Draw `count` distinct codes.

    Arguments:
        random: object with randbelow(n) (see runtime.SystemRandom)
        count: number of codes, must be positive
    Returns:
        GeneratedBackupCodes: display strings and the hashed entries to store
    """
    if count <= 0:
        raise ValueError("Backup code count must be positive")

    raw_codes = []
    while len(raw_codes) < count:
        raw = "".join(
            BACKUP_CODE_ALPHABET[random.randbelow(len(BACKUP_CODE_ALPHABET))]
            for _ in range(BACKUP_CODE_LENGTH)
        )
        if raw not in raw_codes:
            raw_codes.append(raw)

    return GeneratedBackupCodes(
        plaintext=[_format(raw) for raw in raw_codes],
        entries=tuple(BackupCode(code_hash=hash_backup_code(raw)) for raw in raw_codes),
    )


def consume_backup_code(record: MFARecord, submitted: str, when: datetime = None) -> ConsumeResult:
    """
    Mark the matching unused code as used.

    All entries are compared (no early exit). On a miss, or when the only
    match is already used, the input record is returned untouched.
    The caller must run this inside the store's atomic update.
    """
    if not isinstance(submitted, str):
        return ConsumeResult(False, record)
    normalized = normalize_backup_code(submitted)
    if len(normalized) != BACKUP_CODE_LENGTH:
        return ConsumeResult(False, record)

    submitted_hash = hash_backup_code(normalized).encode("ascii")
    hit = None
    for index, entry in enumerate(record.backup_codes):
        same = hmac.compare_digest(entry.code_hash.encode("ascii"), submitted_hash)
        if same and not entry.used and hit is None:
            hit = index

    if hit is None:
        return ConsumeResult(False, record)

    codes = list(record.backup_codes)
    codes[hit] = codes[hit].mark_used(when or datetime.now().astimezone())
    return ConsumeResult(True, replace(record, backup_codes=tuple(codes)))


def format_backup_codes_sheet(codes: List[str], issuer: str, generated_at: datetime) -> str:
    """Printable recovery sheet for the user to keep offline."""
    lines = [
        f"{issuer} - Backup Codes",
        "",
        "Your backup codes for MFA recovery:",
        "",
    ]
    lines += [f"{i}. {code}" for i, code in enumerate(codes, start=1)]
    lines += [
        "",
        "Important:",
        "- Store these codes in a safe place",
        "- Each code can only be used once",
        "- Generate new codes if you run out",
        "",
        f"Generated on: {generated_at.strftime('%Y-%m-%d %H:%M:%S %Z').strip()}",
    ]
    return "\n".join(lines) + "\n"
