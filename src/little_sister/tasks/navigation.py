"""Navigation tasks: opening a link and closing the session."""

from time import perf_counter
from typing import TYPE_CHECKING, Any, ClassVar

from pydantic import Field

from little_sister.errors import DeclarationError, DriverError
from little_sister.names import TaskKind
from little_sister.schema import BaseTask, string_field, task_body

if TYPE_CHECKING:
    from little_sister.schema import Declaration, TaskOk
    from little_sister.session import Session


class Link(BaseTask):
    """Navigate the page to a URL.

    Example:
        ```yaml
        name: open home page
        link:
          url: https://{host|example.com}/
        ```
    """

    kind: ClassVar[TaskKind] = TaskKind.LINK

    url: str = Field(
        min_length=1,
        title='URL',
        description='Address to open; may contain variable placeholders.',
    )

    @classmethod
    def parse(cls, declaration: 'Declaration') -> dict[str, Any]:
        body = task_body(declaration, cls.kind)
        return {'url': string_field(body, 'url')}

    async def execute(self, session: 'Session') -> 'TaskOk':
        started = perf_counter()

        try:
            await session.driver.goto(session.resolve(self.url))
        except DriverError as base:
            raise DriverError('Unable to open link', kind=self.kind) from base

        return self.done(started)


class Close(BaseTask):
    """Release the browser session.

    The declared value is ignored. Tasks declared after a Close are never
    executed.
    """

    kind: ClassVar[TaskKind] = TaskKind.CLOSE

    @classmethod
    def parse(cls, declaration: 'Declaration') -> dict[str, Any]:
        if cls.kind not in declaration:
            raise DeclarationError('Malformed Task')

        return {}

    async def execute(self, session: 'Session') -> 'TaskOk':
        started = perf_counter()

        with self.driver_errors('Unable to close browser session'):
            await session.release()

        return self.done(started)
