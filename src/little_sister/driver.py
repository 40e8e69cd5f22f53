"""Browser driver capability.

Tasks talk to the browser only through the `BrowserDriver` protocol. The
`PlaywrightDriver` implementation drives one page of one browser context,
either launched locally or obtained from a remote Playwright server.

Every driver failure surfaces as a `DriverError`; tasks attach their kind
to it.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from json import dumps
from logging import getLogger
from re import compile as regexp
from typing import TYPE_CHECKING, Any, Protocol, Self

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright

from little_sister.errors import DriverError, SessionCreationError
from little_sister.schema.elements import LocatorKind

if TYPE_CHECKING:
    from playwright.async_api import Browser, BrowserContext, ElementHandle, Page, Playwright

    from little_sister.schema.elements import Element
    from little_sister.settings import DriverSettings

logger = getLogger(__name__)

#: WebDriver key code points mapped to Playwright key names.
SPECIAL_KEYS = {
    '\ue003': 'Backspace',
    '\ue004': 'Tab',
    '\ue006': 'Enter',
    '\ue007': 'Enter',
    '\ue008': 'Shift',
    '\ue009': 'Control',
    '\ue00a': 'Alt',
    '\ue00c': 'Escape',
    '\ue00d': 'Space',
    '\ue00e': 'PageUp',
    '\ue00f': 'PageDown',
    '\ue010': 'End',
    '\ue011': 'Home',
    '\ue012': 'ArrowLeft',
    '\ue013': 'ArrowUp',
    '\ue014': 'ArrowRight',
    '\ue015': 'ArrowDown',
    '\ue016': 'Insert',
    '\ue017': 'Delete',
    '\ue03d': 'Meta',
    **{chr(0xe031 + offset): f'F{offset + 1}' for offset in range(12)},
}

_KEYS_PATTERN = regexp(f'([{"".join(SPECIAL_KEYS)}])')

_CSS_VALUE_SCRIPT = (
    '(element, name) => '
    'window.getComputedStyle(element).getPropertyValue(name)'
)


def split_keys(text: str) -> Iterator[tuple[bool, str]]:
    """Split a text into plain runs and special keys.

    Args:
        text: Text optionally holding WebDriver key code points.

    Yields:
        Pairs of `(is_key, value)`, where `value` is either a plain text
        run or a Playwright key name.
    """
    for part in _KEYS_PATTERN.split(text):
        if not part:
            continue

        if part in SPECIAL_KEYS:
            yield True, SPECIAL_KEYS[part]
        else:
            yield False, part


def selector(element: 'Element') -> str:
    """Render a locator as a Playwright selector.

    Args:
        element: Resolved locator.

    Returns:
        The selector string.
    """
    match element.kind:
        case LocatorKind.ID:
            return f'[id={dumps(element.value)}]'
        case LocatorKind.CLASSNAME:
            return f'[class~={dumps(element.value)}]'
        case LocatorKind.XPATH:
            return f'xpath={element.value}'

    raise DriverError(f'Unsupported locator - {element}')


def stringify(value: Any) -> str:  # noqa: ANN401
    """Render a DOM property value for string comparison."""
    if value is None:
        return ''

    if isinstance(value, bool):
        return 'true' if value else 'false'

    if isinstance(value, float) and value.is_integer():
        return str(int(value))

    if isinstance(value, (dict, list)):
        return dumps(value, ensure_ascii=False)

    return str(value)


@contextmanager
def driver_errors(prefix: str | None = None) -> Iterator[None]:
    """Translate Playwright failures raised in the block to `DriverError`."""
    try:
        yield

    except PlaywrightError as base:
        message = base.message.splitlines()[0] if base.message else repr(base)
        if prefix:
            message = f'{prefix}: {message}'
        raise DriverError(message) from base


class BrowserDriver(Protocol):
    """Driver session capability used by tasks."""

    async def goto(self, url: str) -> None:
        """Navigate to a URL."""

    async def find(self, element: 'Element') -> 'ElementHandle':
        """Locate exactly one element."""

    async def click(self, handle: 'ElementHandle') -> None:
        """Click an element."""

    async def send_keys(self, handle: 'ElementHandle', text: str) -> None:
        """Type a text, pressing WebDriver key code points as keys."""

    async def screenshot(self, path: str, handle: 'ElementHandle | None' = None) -> None:
        """Capture the full page, or one element, to a file."""

    async def add_cookie(self, name: str, value: str, domain: str, path: str) -> None:
        """Install a cookie."""

    async def text(self, handle: 'ElementHandle') -> str:
        """Read the rendered text of an element."""

    async def inner_html(self, handle: 'ElementHandle') -> str:
        """Read the inner HTML of an element."""

    async def css_value(self, handle: 'ElementHandle', name: str) -> str:
        """Read a computed CSS property of an element."""

    async def property_value(self, handle: 'ElementHandle', name: str) -> str:
        """Read a DOM property of an element."""

    async def wait_visible(self, element: 'Element', timeout_ms: int) -> None:
        """Wait until an element is visible."""

    async def quit(self) -> None:
        """Release the browser session."""


class PlaywrightDriver:
    """Playwright implementation of the driver capability."""

    def __init__(self, playwright: 'Playwright', browser: 'Browser',
                 context: 'BrowserContext', page: 'Page') -> None:
        """Initialize a driver over an opened page.

        Args:
            playwright: Started Playwright instance.
            browser: Launched or connected browser.
            context: Browser context owning the page.
            page: Page driven by tasks.
        """
        self.playwright = playwright
        self.browser = browser
        self.context = context
        self.page = page

    @classmethod
    async def connect(cls, settings: 'DriverSettings') -> Self:
        """Open a browser session.

        Args:
            settings: Driver settings.

        Returns:
            A driver over a fresh page.

        Raises:
            SessionCreationError: If the browser cannot be launched or
                reached.
        """
        playwright = None

        try:
            playwright = await async_playwright().start()
            browser_type = getattr(playwright, settings.browser.value)

            if endpoint := settings.endpoint:
                logger.debug('connecting to %s browser at %s', settings.browser, endpoint)
                browser = await browser_type.connect(endpoint)
            else:
                logger.debug('launching %s browser', settings.browser)
                browser = await browser_type.launch(headless=settings.headless)

            context = await browser.new_context()
            page = await context.new_page()

        except (PlaywrightError, OSError) as base:
            if playwright is not None:
                await playwright.stop()

            message = base.message if isinstance(base, PlaywrightError) else str(base)
            raise SessionCreationError(
                f'Unable to create browser session: {message}',
            ) from base

        return cls(playwright, browser, context, page)

    async def goto(self, url: str) -> None:
        with driver_errors():
            await self.page.goto(url)

    async def find(self, element: 'Element') -> 'ElementHandle':
        with driver_errors(f'Unable to find element - {element}'):
            handle = await self.page.query_selector(selector(element))

        if handle is None:
            raise DriverError(f'Unable to find element - {element}')

        return handle

    async def click(self, handle: 'ElementHandle') -> None:
        with driver_errors():
            await handle.click()

    async def send_keys(self, handle: 'ElementHandle', text: str) -> None:
        with driver_errors():
            for is_key, value in split_keys(text):
                if is_key:
                    await handle.press(value)
                else:
                    await handle.type(value)

    async def screenshot(self, path: str, handle: 'ElementHandle | None' = None) -> None:
        with driver_errors():
            if handle is None:
                await self.page.screenshot(path=path, full_page=True)
            else:
                await handle.screenshot(path=path)

    async def add_cookie(self, name: str, value: str, domain: str, path: str) -> None:
        with driver_errors():
            await self.context.add_cookies([{
                'name': name,
                'value': value,
                'domain': domain,
                'path': path,
                'sameSite': 'Lax',
            }])

    async def text(self, handle: 'ElementHandle') -> str:
        with driver_errors():
            return await handle.inner_text()

    async def inner_html(self, handle: 'ElementHandle') -> str:
        with driver_errors():
            return await handle.inner_html()

    async def css_value(self, handle: 'ElementHandle', name: str) -> str:
        with driver_errors():
            return stringify(await handle.evaluate(_CSS_VALUE_SCRIPT, name))

    async def property_value(self, handle: 'ElementHandle', name: str) -> str:
        with driver_errors():
            value = await handle.get_property(name)
            return stringify(await value.json_value())

    async def wait_visible(self, element: 'Element', timeout_ms: int) -> None:
        try:
            with driver_errors():
                await self.page.wait_for_selector(
                    selector(element),
                    state='visible',
                    timeout=timeout_ms,
                )

        except DriverError as base:
            if isinstance(base.__cause__, PlaywrightTimeoutError):
                raise DriverError(
                    f'Element is not visible after {timeout_ms}ms - {element}',
                ) from base.__cause__
            raise

    async def quit(self) -> None:
        """Close the context and the browser, then stop Playwright."""
        try:
            with driver_errors():
                await self.context.close()
                await self.browser.close()

        finally:
            await self.playwright.stop()
