"""Configuration management for the Daggerheart rules engine.

This module provides centralized configuration management using pydantic-settings,
supporting environment variables, .env files, and runtime configuration overrides.
The rules settings expose the handful of numbers tables commonly house-rule;
their defaults follow the published rules.

Example:
    >>> from daggerheart_engine.core.config import get_settings
    >>> settings = get_settings()
    >>> settings.rules.armor_score_cap
    12

Environment Variables:
    DAGGERHEART_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    DAGGERHEART_RULES_ARMOR_SCORE_CAP: Maximum armor score
    DAGGERHEART_RULES_BASE_STRESS: Stress slots every character starts with
    DAGGERHEART_RULES_ADD_LEVEL_TO_ARMOR_THRESHOLDS: Offset armor thresholds by level
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from daggerheart_engine.core import constants
from daggerheart_engine.core.exceptions import ConfigurationError


class RulesSettings(BaseSettings):
    """Configuration for rules calculations.

    Attributes:
        max_level: Highest reachable character level.
        advancement_slots_per_level: Slots that must be spent per level-up.
        armor_score_cap: Maximum armor score.
        base_stress: Stress slots before modifiers.
        default_class_hp: Starting hit points when the class is silent.
        tier_experience_value: Value of the Experience granted on tier entry.
        vital_slot_max_per_advancement: Upper bound of a vital slot advancement.
        add_level_to_armor_thresholds: Offset armor-provided major/severe
            thresholds by the character level instead of replacing them.
    """

    model_config = SettingsConfigDict(
        env_prefix="DAGGERHEART_RULES_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    max_level: int = Field(
        default=constants.MAX_CHARACTER_LEVEL,
        ge=1,
        le=constants.MAX_CHARACTER_LEVEL,
        description="Highest reachable character level",
    )
    advancement_slots_per_level: int = Field(
        default=constants.ADVANCEMENT_SLOTS_PER_LEVEL,
        ge=1,
        description="Advancement slots spent per level-up",
    )
    armor_score_cap: int = Field(
        default=constants.ARMOR_SCORE_CAP,
        description="Maximum armor score",
    )
    base_stress: int = Field(
        default=constants.BASE_STRESS,
        ge=0,
        description="Stress slots before modifiers",
    )
    default_class_hp: int = Field(
        default=constants.DEFAULT_CLASS_HP,
        ge=1,
        description="Starting hit points when the class does not specify any",
    )
    tier_experience_value: int = Field(
        default=constants.TIER_EXPERIENCE_VALUE,
        ge=1,
        description="Value of the Experience granted on entering a new tier",
    )
    vital_slot_max_per_advancement: int = Field(
        default=constants.MAX_VITAL_SLOTS_PER_ADVANCEMENT,
        ge=constants.MIN_VITAL_SLOTS_PER_ADVANCEMENT,
        description="Maximum slots a single vital slot advancement may add",
    )
    add_level_to_armor_thresholds: bool = Field(
        default=False,
        description="Offset armor-provided thresholds by level instead of replacing",
    )

    @model_validator(mode="after")
    def validate_armor_cap(self) -> RulesSettings:
        """Ensure the armor cap leaves room for at least one point of armor.

        Returns:
            The validated settings instance.

        Raises:
            ConfigurationError: If the cap is below one.
        """
        if self.armor_score_cap < 1:
            raise ConfigurationError(
                "armor_score_cap must be at least 1",
                config_key="armor_score_cap",
                details={"armor_score_cap": self.armor_score_cap},
            )
        return self


class Settings(BaseSettings):
    """Main application settings aggregating all configuration domains.

    Attributes:
        app_name: Application name.
        app_version: Application version string.
        debug: Enable debug mode.
        log_level: Application logging level.
        rules: Rules calculation settings.
    """

    model_config = SettingsConfigDict(
        env_prefix="DAGGERHEART_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_nested_delimiter="__",
    )

    app_name: str = Field(
        default="Daggerheart Rules Engine",
        description="Application name",
    )
    app_version: str = Field(
        default="0.1.0",
        description="Application version",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    rules: RulesSettings = Field(default_factory=RulesSettings)

    @property
    def is_production(self) -> bool:
        """Check if running in production mode.

        Returns:
            True if not in debug mode.
        """
        return not self.debug


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the application settings singleton.

    Returns:
        The application Settings instance.

    Raises:
        ConfigurationError: If configuration is invalid.
    """
    try:
        return Settings()
    except ConfigurationError:
        raise
    except Exception as exc:
        raise ConfigurationError(
            f"Failed to load application settings: {exc}",
            details={"original_error": str(exc)},
        ) from exc


def clear_settings_cache() -> None:
    """Clear the settings cache, forcing a reload on next access.

    Example:
        >>> clear_settings_cache()
        >>> settings = get_settings()  # Reloads from environment
    """
    get_settings.cache_clear()


__all__ = [
    "RulesSettings",
    "Settings",
    "get_settings",
    "clear_settings_cache",
]
