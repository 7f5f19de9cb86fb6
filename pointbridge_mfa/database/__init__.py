"""
Profile stores for MFA records.

Both stores expose the same contract used by core.MFAService:
get_mfa_record, atomic_update_mfa_record, is_eligible_for_mfa.
"""

from .db_manager import SQLiteProfileStore
from .memory_store import InMemoryProfileStore
from .setup_database import setup_database

__all__ = ["SQLiteProfileStore", "InMemoryProfileStore", "setup_database"]
