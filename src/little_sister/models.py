"""Base Pydantic models for runner elements.

This module defines the foundational model classes used by tasks, locators,
results and settings. Value objects are immutable and strictly validated so
that a built suite cannot change while it runs.
"""

from pydantic import BaseModel, ConfigDict
from pydantic_settings import BaseSettings, SettingsConfigDict


class SchemaModel(BaseModel):
    """Base immutable model for all runner value objects.

    Design principles enforced by this model:
        - Immutability: tasks, locators and results cannot be modified
          after creation, so a validated suite is executed exactly as built.
        - Strict schema validation: unknown or extra fields are rejected.

    All task, locator and result models must inherit from this class.
    """

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        frozen=True,
        extra='forbid',
    )


class SettingsModel(BaseSettings):
    """Base immutable model for runtime settings.

    Settings are resolved from init arguments (CLI overrides and config
    files) and environment variables. Unknown fields are ignored so that
    the surrounding environment may contain unrelated variables.
    """

    model_config = SettingsConfigDict(
        env_prefix='LITTLE_SISTER_',
        frozen=True,
        extra='ignore',
    )
