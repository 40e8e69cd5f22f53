"""Suite session.

A session couples the driver handle of one running suite with its
variable bindings and its execution state. It is created after the suite
was parsed successfully and is owned by that suite's task loop only.
"""

from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING, Self

from little_sister.driver import PlaywrightDriver
from little_sister.variables import Variables

if TYPE_CHECKING:
    from collections.abc import Mapping

    from little_sister.driver import BrowserDriver
    from little_sister.settings import DriverSettings

logger = getLogger(__name__)


class SessionState(StrEnum):
    """Execution state of a suite session."""

    READY = 'ready'
    RUNNING = 'running'
    FAILED = 'failed'
    CLOSED = 'closed'


class Session:
    """Mutable state threaded through the tasks of one suite.

    Attributes:
        driver: Browser driver exclusively owned by this session.
        variables: Variable bindings of the suite.
        state: Current execution state.
        position: Index of the task being executed.
    """

    def __init__(self, driver: 'BrowserDriver',
                 variables: 'Mapping[str, str] | None' = None) -> None:
        """Initialize a session over an opened driver.

        Args:
            driver: Browser driver.
            variables: Initial variable bindings.
        """
        self.driver = driver
        self.variables = Variables(variables or {})
        self.state = SessionState.READY
        self.position = 0

        self._released = False

    @classmethod
    async def open(cls, settings: 'DriverSettings',
                   variables: 'Mapping[str, str] | None' = None) -> Self:
        """Open a browser session.

        Raises:
            SessionCreationError: If the driver cannot be connected.
        """
        return cls(await PlaywrightDriver.connect(settings), variables)

    @property
    def released(self) -> bool:
        """Return whether the driver was released."""
        return self._released

    def resolve(self, text: str) -> str:
        """Resolve placeholders against the session variables."""
        return self.variables.resolve(text)

    async def release(self) -> None:
        """Release the driver.

        The driver is quit at most once; later calls do nothing. A failed
        session stays failed, any other session becomes closed.
        """
        if self._released:
            return

        self._released = True
        if self.state != SessionState.FAILED:
            self.state = SessionState.CLOSED

        logger.debug('releasing browser session')
        await self.driver.quit()
