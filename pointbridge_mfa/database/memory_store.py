"""In-process profile store: one lock per user guards each read-modify-write."""

import threading

from ..core.models import MFARecord
from .accounts import check_auth_method, is_eligible


class InMemoryProfileStore:
    def __init__(self):
        self._accounts = {}
        self._records = {}
        self._locks = {}
        self._locks_guard = threading.Lock()

    def add_account(self, user_id: str, auth_method: str, is_active: bool = True) -> None:
        self._accounts[user_id] = (check_auth_method(auth_method), is_active)

    def is_eligible_for_mfa(self, user_id: str) -> bool:
        account = self._accounts.get(user_id)
        return account is not None and is_eligible(*account)

    def get_mfa_record(self, user_id: str):
        return self._records.get(user_id)

    def _lock_for(self, user_id: str) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(user_id, threading.Lock())

    def atomic_update_mfa_record(self, user_id: str, mutator) -> MFARecord:
        """
        Apply mutator(current) -> new record while holding the user's lock.

        If the mutator raises, the stored record is left as it was.
        """
        with self._lock_for(user_id):
            current = self._records.get(user_id) or MFARecord.empty(user_id)
            updated = mutator(current)
            self._records[user_id] = updated
            return updated
