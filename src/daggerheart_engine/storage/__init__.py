"""Collaborator utilities around the rules engine.

Provides:
- The application state container passed to collaborators
- Optimistic updates with rollback for remote writes
"""

from daggerheart_engine.storage.state import AppState, PendingRoll
from daggerheart_engine.storage.transactions import (
    RollbackFn,
    TransactionResult,
    update_character,
    with_optimistic_update,
)

__all__ = [
    "AppState",
    "PendingRoll",
    "RollbackFn",
    "TransactionResult",
    "update_character",
    "with_optimistic_update",
]
