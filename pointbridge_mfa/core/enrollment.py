"""
enrollment.py: MFA enrollment / verification state machine.

States (see models.MFARecord.state):

    disabled --begin--> pending_confirmation --confirm--> enabled
    enabled --regenerate backup codes--> enabled
    enabled / pending --disable--> disabled

Every read-modify-write goes through store.atomic_update_mfa_record, whose
mutator either returns the new record or raises to abort without writing.
"""

import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import List

from .backup_codes import BACKUP_CODE_COUNT, consume_backup_code, generate_backup_codes
from .errors import (
    AlreadyEnabled,
    EnrollmentNotStarted,
    IneligibleAccount,
    InvalidBackupCode,
    InvalidCode,
    MFANotEnabled,
)
from .models import EnrollmentStart, MFARecord, MFAStatus
from .otp_core import DEFAULT_TOLERANCE, TOTPEngine
from .runtime import SystemClock, SystemRandom
from .uri import DEFAULT_ISSUER, build_enrollment_uri

logger = logging.getLogger(__name__)


class MFAService:
    """
    Orchestrates enable / confirm / verify / disable / regenerate for one store.

    Arguments:
        store: profile store (get_mfa_record, atomic_update_mfa_record,
               is_eligible_for_mfa)
        clock: object with now_millis()
        random: object with random_bytes(n) and randbelow(n)
        issuer: issuer label shown by authenticator apps
        backup_code_count: codes issued per enable / regenerate
        tolerance_steps: TOTP steps accepted either side of the current one
    """

    def __init__(self, store, clock=None, random=None, issuer: str = DEFAULT_ISSUER,
                 backup_code_count: int = BACKUP_CODE_COUNT,
                 tolerance_steps: int = DEFAULT_TOLERANCE):
        self.store = store
        self.clock = clock or SystemClock()
        self.random = random or SystemRandom()
        self.issuer = issuer
        self.backup_code_count = backup_code_count
        self.tolerance_steps = tolerance_steps
        self.totp = TOTPEngine(clock=self.clock, random=self.random)

    def _now(self) -> datetime:
        return datetime.fromtimestamp(self.clock.now_millis() / 1000, tz=timezone.utc)

    # --- enrollment --------------------------------------------------------
    def begin_enrollment(self, user_id: str, account_label: str = None) -> EnrollmentStart:
        """
        Generate a secret and store it as pending (not yet enabled).

        Raises:
            IneligibleAccount: wallet-only / unknown account, nothing is written
            AlreadyEnabled: MFA is already on
        """
        if not self.store.is_eligible_for_mfa(user_id):
            logger.info("MFA enrollment refused for ineligible account %s", user_id)
            raise IneligibleAccount()

        secret = self.totp.generate_secret()

        def start(record: MFARecord) -> MFARecord:
            if record.mfa_enabled:
                raise AlreadyEnabled()
            return replace(record, totp_secret=secret, backup_codes=(),
                           mfa_setup_completed_at=None)

        self.store.atomic_update_mfa_record(user_id, start)
        uri = build_enrollment_uri(secret, account_label or user_id, self.issuer)
        logger.info("MFA enrollment started for %s", user_id)
        return EnrollmentStart(secret=secret, otpauth_uri=uri)

    def confirm_enrollment(self, user_id: str, code: str) -> List[str]:
        """
        Confirm the pending secret with a current code and enable MFA.

        Returns the plaintext backup codes; they are not retrievable later.

        Raises:
            AlreadyEnabled, EnrollmentNotStarted, InvalidCode
        """
        generated = generate_backup_codes(self.random, self.backup_code_count)
        now = self._now()

        def confirm(record: MFARecord) -> MFARecord:
            if record.mfa_enabled:
                raise AlreadyEnabled()
            if not record.totp_secret:
                raise EnrollmentNotStarted()
            if not self.totp.verify_code(record.totp_secret, code, self.tolerance_steps):
                raise InvalidCode()
            return replace(record, mfa_enabled=True, backup_codes=generated.entries,
                           mfa_setup_completed_at=now)

        try:
            self.store.atomic_update_mfa_record(user_id, confirm)
        except InvalidCode:
            logger.info("MFA confirmation failed for %s", user_id)
            raise
        logger.info("MFA enabled for %s", user_id)
        return list(generated.plaintext)

    # --- login -------------------------------------------------------------
    def verify_for_login(self, user_id: str, code: str) -> bool:
        """
        Second-factor check at login: TOTP first, then a backup code.

        Returns True / False only; the caller can't tell which path matched.

        Raises:
            MFANotEnabled: the account has no active MFA
        """
        record = self.store.get_mfa_record(user_id)
        if record is None or not record.mfa_enabled:
            raise MFANotEnabled()

        if self.totp.verify_code(record.totp_secret, code, self.tolerance_steps):
            logger.info("MFA login verified for %s", user_id)
            return True

        now = self._now()

        def consume(current: MFARecord) -> MFARecord:
            if not current.mfa_enabled:
                raise MFANotEnabled()
            result = consume_backup_code(current, code, now)
            if not result.success:
                raise InvalidBackupCode()
            return result.record

        try:
            self.store.atomic_update_mfa_record(user_id, consume)
        except InvalidBackupCode:
            logger.info("MFA login rejected for %s", user_id)
            return False
        logger.info("MFA login verified for %s", user_id)
        return True

    # --- management --------------------------------------------------------
    def disable(self, user_id: str) -> None:
        """Clear secret and backup codes. Disabling twice is fine."""
        self.store.atomic_update_mfa_record(user_id, lambda record: record.cleared())
        logger.info("MFA disabled for %s", user_id)

    def regenerate_backup_codes(self, user_id: str) -> List[str]:
        """
        Replace the whole backup-code set; the TOTP secret is kept.

        Raises:
            MFANotEnabled
        """
        generated = generate_backup_codes(self.random, self.backup_code_count)

        def regenerate(record: MFARecord) -> MFARecord:
            if not record.mfa_enabled:
                raise MFANotEnabled()
            return replace(record, backup_codes=generated.entries)

        self.store.atomic_update_mfa_record(user_id, regenerate)
        logger.info("MFA backup codes regenerated for %s", user_id)
        return list(generated.plaintext)

    def get_status(self, user_id: str) -> MFAStatus:
        record = self.store.get_mfa_record(user_id) or MFARecord.empty(user_id)
        return MFAStatus(
            user_id=user_id,
            mfa_enabled=record.mfa_enabled,
            can_use_mfa=self.store.is_eligible_for_mfa(user_id),
            state=record.state,
            backup_codes_total=len(record.backup_codes),
            backup_codes_remaining=record.unused_backup_codes,
            mfa_setup_completed_at=record.mfa_setup_completed_at,
        )
