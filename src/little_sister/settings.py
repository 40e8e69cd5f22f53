"""Driver settings.

Settings are resolved, in decreasing precedence, from CLI overrides, an
optional YAML config file, `LITTLE_SISTER_*` environment variables and the
field defaults.
"""

from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING, Any

from pydantic import Field, ValidationError, field_validator
from yaml import YAMLError, safe_load

from little_sister.errors import ConfigurationError
from little_sister.models import SettingsModel

if TYPE_CHECKING:
    from pathlib import Path

logger = getLogger(__name__)

BROWSER_ALIASES = {
    'chrome': 'chromium',
}


class Browser(StrEnum):
    """Browser engines supported by the driver."""

    CHROMIUM = 'chromium'
    FIREFOX = 'firefox'
    WEBKIT = 'webkit'


class DriverSettings(SettingsModel):
    """Browser driver settings."""

    browser: Browser = Field(
        default=Browser.CHROMIUM,
        title='Browser',
        description='Browser engine; `chrome` is accepted for `chromium`.',
    )

    server_url: str | None = Field(
        default=None,
        title='Server URL',
        description='WebSocket endpoint of a remote Playwright server.',
    )

    port: int | None = Field(
        default=None,
        ge=1,
        le=65535,
        title='Server port',
        description='Port of a Playwright server listening on localhost.',
    )

    headless: bool = Field(
        default=True,
        title='Headless',
        description='Launch a local browser without a window.',
    )

    workers: int = Field(
        default=2,
        ge=1,
        title='Workers',
        description='Number of suites executed concurrently.',
    )

    @field_validator('browser', mode='before')
    @classmethod
    def _normalize_browser(cls, value: Any) -> Any:  # noqa: ANN401
        if isinstance(value, str):
            value = value.strip().lower()
            return BROWSER_ALIASES.get(value, value)

        return value

    @property
    def endpoint(self) -> str | None:
        """Return the remote server endpoint, if any.

        An explicit `server_url` wins over `port`.
        """
        if self.server_url:
            return self.server_url

        if self.port is not None:
            return f'ws://127.0.0.1:{self.port}/'

        return None


def read_config(path: 'Path') -> dict[str, Any]:
    """Read a YAML driver config file.

    Args:
        path: Path to the config file.

    Returns:
        The config mapping; empty for an empty file.

    Raises:
        ConfigurationError: If the file cannot be read or is not a mapping.
    """
    try:
        with path.open('rt', encoding='utf-8') as content:
            data = safe_load(content)

    except OSError as base:
        raise ConfigurationError(f'Unable to read config file: {path}') from base

    except YAMLError as base:
        raise ConfigurationError(f'Unable to deserialize config file: {path}') from base

    if data is None:
        return {}

    if not isinstance(data, dict):
        raise ConfigurationError(f'Config file is not a mapping: {path}')

    return data


def load_settings(config_path: 'Path | None' = None,
                  **overrides: Any) -> DriverSettings:  # noqa: ANN401
    """Resolve driver settings.

    Args:
        config_path: Optional YAML config file.
        **overrides: Explicit values; `None` values are ignored.

    Returns:
        Validated driver settings.

    Raises:
        ConfigurationError: If the config file or a value is invalid.
    """
    data = {}
    if config_path is not None:
        data = read_config(config_path)
        logger.debug('driver config loaded from %s', config_path)

    data.update({
        key: value
        for key, value in overrides.items()
        if value is not None
    })

    try:
        return DriverSettings(**data)

    except ValidationError as base:
        problems = '; '.join(
            f'{".".join(map(str, error["loc"]))}: {error["msg"]}'
            for error in base.errors()
        )
        raise ConfigurationError(f'Invalid driver settings: {problems}') from base
