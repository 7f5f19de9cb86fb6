# Accounts that sign in with an identity (email / password / social) can use
# MFA; wallet accounts are secured by the wallet and are not eligible.
ELIGIBLE_AUTH_METHODS = frozenset({"email", "password", "social"})
AUTH_METHODS = ELIGIBLE_AUTH_METHODS | {"wallet"}


def is_eligible(auth_method: str, is_active: bool) -> bool:
    return bool(is_active) and auth_method in ELIGIBLE_AUTH_METHODS


def check_auth_method(auth_method: str) -> str:
    if auth_method not in AUTH_METHODS:
        raise ValueError(f"Unknown auth method '{auth_method}'")
    return auth_method
