"""Optimistic updates with rollback.

Collaborators apply a computed result to local state immediately, then try
the remote write. When the write fails the captured rollback restores the
previous local state and the failure is reported in the returned result
rather than raised. Only a rollback that fails itself raises.

Example:
    >>> result = with_optimistic_update(
    ...     lambda: apply_locally(),  # returns a rollback callable
    ...     lambda: client.save(character),
    ...     "Failed to update HP",
    ... )
    >>> result.success
    True
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

from daggerheart_engine.core.exceptions import TransactionError
from daggerheart_engine.core.logging import get_logger
from daggerheart_engine.models.character import Character
from daggerheart_engine.storage.state import AppState


logger = get_logger(__name__)

T = TypeVar("T")

RollbackFn = Callable[[], None]


@dataclass(frozen=True)
class TransactionResult(Generic[T]):
    """Outcome of an optimistic update.

    Attributes:
        success: Whether the remote commit succeeded.
        data: Value returned by the commit on success.
        error: User-facing error message on failure.
    """

    success: bool
    data: T | None = None
    error: str | None = None


def with_optimistic_update(
    update_fn: Callable[[], RollbackFn],
    commit_fn: Callable[[], T],
    error_message: str = "Operation failed",
) -> TransactionResult[T]:
    """Apply a local update, commit it remotely, and roll back on failure.

    Args:
        update_fn: Applies the local change and returns its rollback.
        commit_fn: Performs the remote write; raising signals failure.
        error_message: Message reported when the commit fails.

    Returns:
        TransactionResult carrying the commit's return value, or the error.

    Raises:
        TransactionError: If the rollback itself fails after a failed commit.
    """
    rollback = update_fn()

    try:
        data = commit_fn()
    except Exception as exc:
        logger.error(
            "Remote commit failed, rolling back",
            error_message=error_message,
            error=str(exc),
            error_type=type(exc).__name__,
        )
        try:
            rollback()
        except Exception as rollback_exc:
            logger.error(
                "Rollback failed, local state is inconsistent",
                error_message=error_message,
                error=str(rollback_exc),
            )
            raise TransactionError(
                f"{error_message}: rollback failed",
                operation=error_message,
                details={"commit_error": str(exc), "rollback_error": str(rollback_exc)},
            ) from rollback_exc
        description = getattr(exc, "message", None) or str(exc) or "Please try again"
        return TransactionResult(success=False, error=f"{error_message}: {description}")

    return TransactionResult(success=True, data=data)


def update_character(
    state: AppState,
    character: Character,
    commit_fn: Callable[[Character], T],
    error_message: str = "Failed to save character",
) -> TransactionResult[T]:
    """Optimistically replace the active character and persist it.

    Args:
        state: Application state holding the active character.
        character: The updated character, e.g. from a level-up commit.
        commit_fn: Persists the character; raising signals failure.
        error_message: Message reported when the commit fails.
    """

    def apply() -> RollbackFn:
        previous = state.snapshot()
        state.character = character

        def rollback() -> None:
            state.character = previous

        return rollback

    return with_optimistic_update(apply, lambda: commit_fn(character), error_message)


__all__ = [
    "RollbackFn",
    "TransactionResult",
    "with_optimistic_update",
    "update_character",
]
