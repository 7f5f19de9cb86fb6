"""
errors.py: typed MFA failures.

Each error carries a stable machine code and the HTTP status the backend
answers with.
"""


class MFAError(Exception):
    code = "mfa_error"
    http_status = 400
    default_message = "MFA operation failed"

    def __init__(self, message: str = None):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class IneligibleAccount(MFAError):
    code = "ineligible_account"
    http_status = 403
    default_message = (
        "MFA is only available for accounts that sign in with email, password "
        "or social login. Wallet accounts are secured by the wallet itself."
    )


class AlreadyEnabled(MFAError):
    code = "already_enabled"
    http_status = 409
    default_message = "MFA is already enabled for this account"


class MFANotEnabled(MFAError):
    code = "mfa_not_enabled"
    http_status = 409
    default_message = "MFA is not enabled for this account"


class EnrollmentNotStarted(MFAError):
    code = "enrollment_not_started"
    http_status = 409
    default_message = "No pending MFA enrollment; start enrollment first"


class InvalidCode(MFAError):
    code = "invalid_code"
    http_status = 400
    default_message = "Invalid verification code"


class InvalidBackupCode(MFAError):
    code = "invalid_backup_code"
    http_status = 400
    default_message = "Invalid backup code"


class TooManyAttempts(MFAError):
    """Raised by the caller's rate limiter; the core keeps no attempt counter."""

    code = "too_many_attempts"
    http_status = 429
    default_message = "Too many attempts, try again later"
