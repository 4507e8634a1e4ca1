"""Core module providing configuration, logging, and base exceptions.

Exports:
    Exceptions:
        DaggerheartError: Base exception for all engine errors.
        InvalidLevelError: Level outside the playable range.
        LevelUpStateError: Level-up session driven out of order.
        ConfigurationError: Configuration-related errors.

    Configuration:
        Settings: Main application settings class.
        get_settings: Get the settings singleton.
        clear_settings_cache: Force settings reload.

    Logging:
        configure_logging: Set up application logging.
        get_logger: Get a configured logger instance.
        bind_context: Add context to log entries.
        clear_context: Clear logging context.
        character_context: Tag entries with the character being changed.
"""

from __future__ import annotations

from daggerheart_engine.core.config import (
    RulesSettings,
    Settings,
    clear_settings_cache,
    get_settings,
)
from daggerheart_engine.core.exceptions import (
    ConfigurationError,
    DaggerheartError,
    DiceNotationError,
    InvalidLevelError,
    LevelUpError,
    LevelUpStateError,
    PersistenceError,
    RulesEngineError,
    TransactionError,
)
from daggerheart_engine.core.logging import (
    bind_context,
    character_context,
    clear_context,
    configure_logging,
    get_logger,
)


__all__ = [
    # Exceptions
    "DaggerheartError",
    "RulesEngineError",
    "InvalidLevelError",
    "DiceNotationError",
    "LevelUpError",
    "LevelUpStateError",
    "ConfigurationError",
    "PersistenceError",
    "TransactionError",
    # Configuration
    "RulesSettings",
    "Settings",
    "get_settings",
    "clear_settings_cache",
    # Logging
    "configure_logging",
    "get_logger",
    "bind_context",
    "clear_context",
    "character_context",
]
