"""
PointBridge MFA: TOTP (RFC 6238) + backup code second factor.

Packages:
- core      pure OTP logic and the enrollment state machine
- database  profile stores (SQLite, in-memory)
- backend   Flask HTTP adapter
"""

__version__ = "0.1.0"
