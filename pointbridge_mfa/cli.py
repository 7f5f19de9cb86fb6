#!/usr/bin/env python3
"""
cli.py: command line front end for the MFA engine (SQLite store).

Subcommands:
- account add : register an account and its sign-in method
- enroll      : start enrollment, print secret + otpauth URI
- confirm     : confirm with the first code, print backup codes
- verify      : login check with a TOTP or backup code
- disable     : turn MFA off
- regenerate  : issue a fresh set of backup codes
- status      : show MFA status
- code        : print the current TOTP code for a secret
- uri         : print the otpauth URI for a secret
"""

import argparse
import sys
import time
from datetime import datetime

from .core.backup_codes import format_backup_codes_sheet
from .core.enrollment import MFAService
from .core.errors import MFAError
from .core.otp_core import TOTPEngine
from .core.uri import DEFAULT_ISSUER, build_enrollment_uri
from .database import SQLiteProfileStore
from .database.accounts import AUTH_METHODS
from .database.setup_database import DATABASE_FILE


def _service(args) -> MFAService:
    return MFAService(SQLiteProfileStore(args.db), issuer=args.issuer)


def _print_codes(codes, args):
    print("[*] Backup codes (shown once, each works one time):")
    for i, code in enumerate(codes, start=1):
        print(f"    {i}. {code}")
    if args.out:
        sheet = format_backup_codes_sheet(codes, args.issuer, datetime.now().astimezone())
        with open(args.out, "w", encoding="utf-8") as f:
            f.write(sheet)
        print(f"[*] Recovery sheet written to {args.out}")


# --- CLI command handlers ---
def cmd_account_add(args):
    SQLiteProfileStore(args.db).add_account(args.user, args.method, is_active=not args.inactive)
    print(f"[+] Account '{args.user}' registered ({args.method})")


def cmd_enroll(args):
    start = _service(args).begin_enrollment(args.user, account_label=args.account)
    print(f"[*] Pending MFA enrollment for user '{args.user}':")
    print("    secret:", start.secret)
    print("    TOTP  :", start.otpauth_uri)


def cmd_confirm(args):
    codes = _service(args).confirm_enrollment(args.user, args.code)
    print(f"[+] MFA enabled for user '{args.user}'")
    _print_codes(codes, args)


def cmd_verify(args):
    if _service(args).verify_for_login(args.user, args.code):
        print(f"[user={args.user}] [+] code is VALID")
        return 0
    print(f"[user={args.user}] [-] code is INVALID")
    return 1


def cmd_disable(args):
    _service(args).disable(args.user)
    print(f"[+] MFA disabled for user '{args.user}'")


def cmd_regenerate(args):
    codes = _service(args).regenerate_backup_codes(args.user)
    print(f"[+] New backup codes for user '{args.user}'")
    _print_codes(codes, args)


def cmd_status(args):
    status = _service(args).get_status(args.user)
    for key, value in status.to_dict().items():
        print(f"{key:24} {value}")


def cmd_code(args):
    engine = TOTPEngine()
    if not args.watch:
        print(f"TOTP: {engine.derive_code(args.secret)}  (valid ~{engine.seconds_remaining():2d}s)")
        return 0

    print("Press Ctrl+C to quit. Generating TOTP in real time...\n")
    last_code = None
    try:
        while True:
            code = engine.derive_code(args.secret)
            remaining = engine.seconds_remaining()
            if code != last_code:
                print(f"TOTP: {code}  (valid ~{remaining:2d}s)")
                last_code = code
            else:
                print(f".. {remaining:2d}s left", end="\r", flush=True)
            time.sleep(1)
    except KeyboardInterrupt:
        print("\nBye.")
    return 0


def cmd_uri(args):
    print(build_enrollment_uri(args.secret, args.account, args.issuer))


def cmd_help(args):
    print("'pointbridge-mfa -h' for help.")


# --- Argparse builder ---
def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="PointBridge TOTP + backup code MFA tool")
    p.add_argument("--db", default=DATABASE_FILE, help="SQLite database file")
    p.add_argument("--issuer", default=DEFAULT_ISSUER, help="Issuer label for otpauth URI")
    sub = p.add_subparsers(dest="cmd")
    p.set_defaults(func=cmd_help)

    # account add
    pa = sub.add_parser("account", help="Manage accounts known to the MFA store")
    sub_a = pa.add_subparsers(dest="account_cmd")
    paa = sub_a.add_parser("add", help="Register an account")
    paa.add_argument("--user", required=True, help="User id")
    paa.add_argument("--method", required=True, choices=sorted(AUTH_METHODS), help="Sign-in method")
    paa.add_argument("--inactive", action="store_true", help="Register as inactive")
    paa.set_defaults(func=cmd_account_add)

    # enroll
    pe = sub.add_parser("enroll", help="Start MFA enrollment for a user")
    pe.add_argument("--user", required=True, help="User id")
    pe.add_argument("--account", help="Account label for otpauth URI (default: user id)")
    pe.set_defaults(func=cmd_enroll)

    # confirm
    pc = sub.add_parser("confirm", help="Confirm enrollment with a code from the app")
    pc.add_argument("--user", required=True, help="User id")
    pc.add_argument("--code", required=True, help="6-digit code")
    pc.add_argument("--out", help="Write the backup-code recovery sheet to this file")
    pc.set_defaults(func=cmd_confirm)

    # verify
    pv = sub.add_parser("verify", help="Verify a TOTP or backup code for login")
    pv.add_argument("--user", required=True, help="User id")
    pv.add_argument("--code", required=True, help="TOTP or backup code")
    pv.set_defaults(func=cmd_verify)

    # disable
    pd = sub.add_parser("disable", help="Disable MFA for a user")
    pd.add_argument("--user", required=True, help="User id")
    pd.set_defaults(func=cmd_disable)

    # regenerate
    pr = sub.add_parser("regenerate", help="Replace a user's backup codes")
    pr.add_argument("--user", required=True, help="User id")
    pr.add_argument("--out", help="Write the backup-code recovery sheet to this file")
    pr.set_defaults(func=cmd_regenerate)

    # status
    ps = sub.add_parser("status", help="Show MFA status for a user")
    ps.add_argument("--user", required=True, help="User id")
    ps.set_defaults(func=cmd_status)

    # code
    pt = sub.add_parser("code", help="Print the current TOTP code for a secret")
    pt.add_argument("--secret", required=True, help="Base32 secret")
    pt.add_argument("--watch", action="store_true", help="Keep printing codes in real time")
    pt.set_defaults(func=cmd_code)

    # uri
    pu = sub.add_parser("uri", help="Print the otpauth URI for a secret")
    pu.add_argument("--secret", required=True, help="Base32 secret")
    pu.add_argument("--account", default="user@example", help="Account label")
    pu.set_defaults(func=cmd_uri)

    return p


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return args.func(args) or 0
    except MFAError as e:
        print(f"[!] {e.message}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
