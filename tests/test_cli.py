import re

import pytest

from pointbridge_mfa.cli import main
from pointbridge_mfa.core.otp_core import TOTPEngine


@pytest.fixture
def db(tmp_path):
    return str(tmp_path / "cli.db")


def _run(db, *argv):
    return main(["--db", db, *argv])


def _enroll(db, capsys, user="alice"):
    assert _run(db, "account", "add", "--user", user, "--method", "email") == 0
    assert _run(db, "enroll", "--user", user, "--account", "alice@example.com") == 0
    out = capsys.readouterr().out
    return re.search(r"secret: ([A-Z2-7]{32})", out).group(1)


def test_enroll_prints_secret_and_uri(db, capsys):
    assert _run(db, "account", "add", "--user", "alice", "--method", "email") == 0
    assert _run(db, "enroll", "--user", "alice", "--account", "alice@example.com") == 0
    out = capsys.readouterr().out
    assert "Account 'alice' registered (email)" in out
    assert "otpauth://totp/PointBridge:alice%40example.com?secret=" in out


def test_confirm_verify_and_sheet(db, capsys, tmp_path):
    secret = _enroll(db, capsys)
    sheet = tmp_path / "codes.txt"
    code = TOTPEngine().derive_code(secret)
    assert _run(db, "confirm", "--user", "alice", "--code", code, "--out", str(sheet)) == 0
    out = capsys.readouterr().out
    backup_codes = re.findall(r"\d\. ([A-Z2-9]{5}-[A-Z2-9]{5})", out)
    assert len(backup_codes) == 8
    assert sheet.read_text(encoding="utf-8").startswith("PointBridge - Backup Codes")

    assert _run(db, "verify", "--user", "alice", "--code", backup_codes[0]) == 0
    assert "code is VALID" in capsys.readouterr().out
    assert _run(db, "verify", "--user", "alice", "--code", backup_codes[0]) == 1
    assert "code is INVALID" in capsys.readouterr().out

    assert _run(db, "status", "--user", "alice") == 0
    out = capsys.readouterr().out
    assert re.search(r"backup_codes_remaining\s+7", out)


def test_errors_are_reported(db, capsys):
    assert _run(db, "account", "add", "--user", "walt", "--method", "wallet") == 0
    assert _run(db, "enroll", "--user", "walt") == 1
    assert "[!] MFA is only available" in capsys.readouterr().out

    assert _run(db, "regenerate", "--user", "walt") == 1
    assert "[!] MFA is not enabled" in capsys.readouterr().out


def test_disable(db, capsys):
    secret = _enroll(db, capsys)
    _run(db, "confirm", "--user", "alice", "--code", TOTPEngine().derive_code(secret))
    assert _run(db, "disable", "--user", "alice") == 0
    assert _run(db, "verify", "--user", "alice", "--code", "123456") == 1


def test_code_and_uri_commands(db, capsys):
    secret = "GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ"
    assert _run(db, "code", "--secret", secret) == 0
    assert re.match(r"TOTP: \d{6}  \(valid ~[ \d]\ds\)", capsys.readouterr().out)

    assert _run(db, "--issuer", "Acme", "uri", "--secret", secret, "--account", "bob") == 0
    assert capsys.readouterr().out.strip() == (
        f"otpauth://totp/Acme:bob?secret={secret}&issuer=Acme&algorithm=SHA1&digits=6&period=30"
    )


def test_no_command_prints_help_hint(db, capsys):
    assert _run(db) == 0
    assert "-h" in capsys.readouterr().out
