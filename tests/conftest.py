import random

import pytest

from pointbridge_mfa.backend import create_app
from pointbridge_mfa.core import MFAService
from pointbridge_mfa.database import InMemoryProfileStore, SQLiteProfileStore

# 2009-02-13T23:31:30Z, exactly on a step boundary
START_MILLIS = 1_234_567_890_000


class FixedClock:
    def __init__(self, millis: int = START_MILLIS):
        self.millis = millis

    def now_millis(self) -> int:
        return self.millis

    def advance(self, seconds: float) -> None:
        self.millis += int(seconds * 1000)


class SeededRandom:
    def __init__(self, seed: int = 1234):
        self._rng = random.Random(seed)

    def random_bytes(self, n: int) -> bytes:
        return bytes(self._rng.getrandbits(8) for _ in range(n))

    def randbelow(self, n: int) -> int:
        return self._rng.randrange(n)


def _add_accounts(store):
    store.add_account("u1", "email")
    store.add_account("alice", "password")
    store.add_account("walt", "wallet")
    store.add_account("sleepy", "email", is_active=False)
    return store


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def seeded_random():
    return SeededRandom()


@pytest.fixture
def memory_store():
    return _add_accounts(InMemoryProfileStore())


@pytest.fixture
def sqlite_store(tmp_path):
    return _add_accounts(SQLiteProfileStore(str(tmp_path / "mfa.db")))


@pytest.fixture(params=["memory", "sqlite"])
def store(request, tmp_path):
    if request.param == "memory":
        return _add_accounts(InMemoryProfileStore())
    return _add_accounts(SQLiteProfileStore(str(tmp_path / "mfa.db")))


@pytest.fixture
def service(store, clock, seeded_random):
    return MFAService(store, clock=clock, random=seeded_random)


@pytest.fixture
def enabled_user(service):
    """u1 with MFA enabled; returns (secret, backup_codes)."""
    start = service.begin_enrollment("u1")
    codes = service.confirm_enrollment("u1", service.totp.derive_code(start.secret))
    return start.secret, codes


@pytest.fixture
def app(memory_store, clock, seeded_random):
    app = create_app(
        config={"TESTING": True, "LOG_LEVEL": "WARNING"},
        store=memory_store,
        clock=clock,
        random=seeded_random,
    )
    return app


@pytest.fixture
def client(app):
    return app.test_client()
