"""Tests configurations and fixtures."""

from typing import TYPE_CHECKING

import pytest

from little_sister.driver import BrowserDriver
from little_sister.session import Session

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from pytest_mock import MockerFixture, MockType


@pytest.fixture
def driver(mocker: 'MockerFixture') -> 'MockType':
    """Provide an async double of the browser driver.

    Every driver operation is an `AsyncMock`; reads return empty strings
    unless a test configures them, and `find` returns a sentinel handle.
    """
    double = mocker.AsyncMock(spec=BrowserDriver)
    double.find.return_value = mocker.sentinel.handle

    double.text.return_value = ''
    double.inner_html.return_value = ''
    double.css_value.return_value = ''
    double.property_value.return_value = ''

    return double


@pytest.fixture
def session(driver: 'MockType') -> Session:
    """Provide a ready session over the driver double."""
    return Session(driver)


@pytest.fixture
def patch_session(mocker: 'MockerFixture', driver: 'MockType') -> 'MockType':
    """Replace browser session creation with the driver double.

    Returns:
        The patched `Session.open` mock; every call opens a fresh session
        over the shared driver double.
    """
    async def open_session(settings: object, variables: object = None) -> Session:
        return Session(driver)

    return mocker.patch(
        'little_sister.core.runner.Session.open',
        side_effect=open_session,
    )


@pytest.fixture
def write_suite(tmp_path: 'Path') -> 'Callable[[str, str], Path]':
    """Provide a factory writing suite documents below `tmp_path`."""
    def write(name: str, content: str) -> 'Path':
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding='utf-8')
        return path

    return write
