"""
models.py: the per-user MFA credential record.

Records are immutable; every transition builds a new record with
dataclasses.replace so a failed transition can't leave half-applied state.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Optional, Tuple

STATE_DISABLED = "disabled"
STATE_PENDING = "pending_confirmation"
STATE_ENABLED = "enabled"


@dataclass(frozen=True)
class BackupCode:
    code_hash: str
    used: bool = False
    used_at: Optional[datetime] = None

    def mark_used(self, when: datetime) -> "BackupCode":
        return replace(self, used=True, used_at=when)


@dataclass(frozen=True)
class MFARecord:
    user_id: str
    totp_secret: Optional[str] = None
    mfa_enabled: bool = False
    backup_codes: Tuple[BackupCode, ...] = field(default_factory=tuple)
    mfa_setup_completed_at: Optional[datetime] = None

    @classmethod
    def empty(cls, user_id: str) -> "MFARecord":
        return cls(user_id=user_id)

    @property
    def state(self) -> str:
        if self.mfa_enabled:
            return STATE_ENABLED
        if self.totp_secret:
            return STATE_PENDING
        return STATE_DISABLED

    @property
    def unused_backup_codes(self) -> int:
        return sum(1 for entry in self.backup_codes if not entry.used)

    def cleared(self) -> "MFARecord":
        """Back to the initial state: no secret, no codes, not enabled."""
        return MFARecord.empty(self.user_id)


@dataclass(frozen=True)
class EnrollmentStart:
    secret: str
    otpauth_uri: str


@dataclass(frozen=True)
class MFAStatus:
    user_id: str
    mfa_enabled: bool
    can_use_mfa: bool
    state: str
    backup_codes_total: int
    backup_codes_remaining: int
    mfa_setup_completed_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        completed = self.mfa_setup_completed_at
        return {
            "user_id": self.user_id,
            "mfa_enabled": self.mfa_enabled,
            "can_use_mfa": self.can_use_mfa,
            "state": self.state,
            "backup_codes_total": self.backup_codes_total,
            "backup_codes_remaining": self.backup_codes_remaining,
            "mfa_setup_completed_at": completed.isoformat() if completed else None,
        }
