import re
from datetime import datetime, timezone

import pytest

from pointbridge_mfa.core.backup_codes import (
    BACKUP_CODE_ALPHABET,
    BACKUP_CODE_COUNT,
    consume_backup_code,
    format_backup_codes_sheet,
    generate_backup_codes,
    hash_backup_code,
    normalize_backup_code,
)
from pointbridge_mfa.core.models import MFARecord

CODE_SHAPE = re.compile(r"^[%s]{5}-[%s]{5}$" % (BACKUP_CODE_ALPHABET, BACKUP_CODE_ALPHABET))
WHEN = datetime(2025, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def generated(seeded_random):
    return generate_backup_codes(seeded_random)


@pytest.fixture
def record(generated):
    return MFARecord(user_id="u1", totp_secret="JBSWY3DPEHPK3PXP", mfa_enabled=True,
                     backup_codes=generated.entries)


def test_generates_fixed_count_of_distinct_codes(generated):
    assert len(generated.plaintext) == BACKUP_CODE_COUNT == 8
    assert len(set(generated.plaintext)) == 8
    assert len(generated.entries) == 8
    for code in generated.plaintext:
        assert CODE_SHAPE.match(code), code


def test_only_hashes_are_kept_for_persistence(generated):
    for code, entry in zip(generated.plaintext, generated.entries):
        assert entry.code_hash == hash_backup_code(code)
        assert code.replace("-", "") not in entry.code_hash
        assert entry.used is False


def test_custom_count(seeded_random):
    assert len(generate_backup_codes(seeded_random, count=10).plaintext) == 10
    with pytest.raises(ValueError):
        generate_backup_codes(seeded_random, count=0)


def test_normalize_strips_formatting():
    assert normalize_backup_code(" abcde-fghjk ") == "ABCDEFGHJK"
    assert hash_backup_code("abcde fghjk") == hash_backup_code("ABCDE-FGHJK")


def test_consume_marks_single_entry_used(generated, record):
    result = consume_backup_code(record, generated.plaintext[2], WHEN)
    assert result.success
    used = [entry.used for entry in result.record.backup_codes]
    assert used == [False, False, True, False, False, False, False, False]
    assert result.record.backup_codes[2].used_at == WHEN
    # input record untouched
    assert not any(entry.used for entry in record.backup_codes)


def test_consume_twice_succeeds_once(generated, record):
    code = generated.plaintext[0]
    first = consume_backup_code(record, code, WHEN)
    second = consume_backup_code(first.record, code, WHEN)
    assert first.success
    assert not second.success
    assert second.record is first.record


def test_consume_accepts_lowercase_without_dash(generated, record):
    code = generated.plaintext[5].replace("-", "").lower()
    assert consume_backup_code(record, code, WHEN).success


@pytest.mark.parametrize("submitted", ["", "123456", "ZZZZZ-ZZZZZ", "ABCDEFGHJKL", None])
def test_consume_miss_returns_input_record(record, submitted):
    result = consume_backup_code(record, submitted, WHEN)
    assert not result.success
    assert result.record is record


def test_recovery_sheet_lists_codes(generated):
    sheet = format_backup_codes_sheet(generated.plaintext, "PointBridge", WHEN)
    assert sheet.startswith("PointBridge - Backup Codes\n")
    for i, code in enumerate(generated.plaintext, start=1):
        assert f"{i}. {code}" in sheet
    assert "Each code can only be used once" in sheet
    assert "Generated on: 2025-01-01 00:00:00 UTC" in sheet
