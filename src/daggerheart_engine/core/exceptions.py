"""Custom exception hierarchy for the Daggerheart rules engine.

This module defines the exceptions raised by the engine and its collaborator
utilities. All exceptions inherit from DaggerheartError, enabling unified
error handling at the application boundary while preserving domain-specific
context.

Level-up validation problems are not exceptions: validators return lists of
field-tagged records (see ``daggerheart_engine.engine.validation``). The
exceptions below cover caller misuse and infrastructure failures only.

Example:
    >>> from daggerheart_engine.core.exceptions import InvalidLevelError
    >>> raise InvalidLevelError("Level out of range", level=11)
"""

from __future__ import annotations

from typing import Any


class DaggerheartError(Exception):
    """Base exception for all rules engine errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary containing additional error context.
    """

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        """Initialize the base exception.

        Args:
            message: Human-readable error description.
            details: Optional dictionary containing additional error context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the exception message with optional details.

        Returns:
            Formatted error message including any provided details.
        """
        if self.details:
            detail_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} [{detail_str}]"
        return self.message

    def __repr__(self) -> str:
        """Return a detailed string representation of the exception.

        Returns:
            String representation suitable for debugging.
        """
        return f"{self.__class__.__name__}(message={self.message!r}, details={self.details!r})"


# =============================================================================
# Rules Engine Exceptions
# =============================================================================


class RulesEngineError(DaggerheartError):
    """Base exception for errors raised by the rules engine.

    Raised when a caller asks the engine for something the rules cannot
    answer, such as the tier of a level outside the playable range.
    """


class InvalidLevelError(RulesEngineError):
    """Raised when a character level falls outside the playable range."""

    def __init__(
        self,
        message: str,
        *,
        level: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize invalid level error with the offending level.

        Args:
            message: Human-readable error description.
            level: The level that was rejected.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if level is not None:
            combined_details["level"] = level
        super().__init__(message, details=combined_details)


class DiceNotationError(RulesEngineError):
    """Raised when a dice expression cannot be used where one is required.

    Parsing itself is tolerant; this is only raised by strict helpers.
    """

    def __init__(
        self,
        message: str,
        *,
        expression: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize dice notation error with expression context.

        Args:
            message: Human-readable error description.
            expression: The dice expression that caused the error.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if expression:
            combined_details["expression"] = expression
        super().__init__(message, details=combined_details)


class LevelUpError(RulesEngineError):
    """Base exception for level-up session misuse."""


class LevelUpStateError(LevelUpError):
    """Raised when a level-up session is driven out of order.

    This occurs when advancing past a step whose selections are invalid,
    stepping back from the first step, or committing before the final step.
    """

    def __init__(
        self,
        message: str,
        *,
        current_step: str | None = None,
        expected_steps: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize level-up state error with step context.

        Args:
            message: Human-readable error description.
            current_step: The step the session was in.
            expected_steps: Steps from which the operation would be allowed.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if current_step:
            combined_details["current_step"] = current_step
        if expected_steps:
            combined_details["expected_steps"] = expected_steps
        super().__init__(message, details=combined_details)


# =============================================================================
# Configuration Exceptions
# =============================================================================


class ConfigurationError(DaggerheartError):
    """Raised when application configuration is invalid."""

    def __init__(
        self,
        message: str,
        *,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize configuration error with config key context.

        Args:
            message: Human-readable error description.
            config_key: The configuration key that caused the error.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if config_key:
            combined_details["config_key"] = config_key
        super().__init__(message, details=combined_details)


# =============================================================================
# Persistence Collaborator Exceptions
# =============================================================================


class PersistenceError(DaggerheartError):
    """Base exception for persistence collaborator failures."""


class TransactionError(PersistenceError):
    """Raised when a remote commit inside an optimistic update fails.

    The transaction helper catches this (and any other commit failure),
    rolls back local state and reports the failure in its result.
    """

    def __init__(
        self,
        message: str,
        *,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize transaction error with operation context.

        Args:
            message: Human-readable error description.
            operation: Name of the remote operation that failed.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if operation:
            combined_details["operation"] = operation
        super().__init__(message, details=combined_details)


__all__ = [
    "DaggerheartError",
    # Rules engine
    "RulesEngineError",
    "InvalidLevelError",
    "DiceNotationError",
    "LevelUpError",
    "LevelUpStateError",
    # Configuration
    "ConfigurationError",
    # Persistence
    "PersistenceError",
    "TransactionError",
]
