"""Page capture and cookie tasks."""

from time import perf_counter
from typing import TYPE_CHECKING, Any, ClassVar

from pydantic import Field

from little_sister.names import TaskKind
from little_sister.schema import BaseTask, Element, string_field, task_body
from little_sister.schema.elements import ELEMENT_KEY

if TYPE_CHECKING:
    from little_sister.schema import Declaration, TaskOk
    from little_sister.session import Session


class Screenshot(BaseTask):
    """Capture the full page, or the region of one element, to a file."""

    kind: ClassVar[TaskKind] = TaskKind.SCREENSHOT

    path: str = Field(
        min_length=1,
        title='Path',
        description='Output image path; may contain variable placeholders.',
    )

    element: Element | None = Field(
        default=None,
        title='Element',
        description='Element to capture instead of the full page.',
    )

    @classmethod
    def parse(cls, declaration: 'Declaration') -> dict[str, Any]:
        body = task_body(declaration, cls.kind)

        fields: dict[str, Any] = {'path': string_field(body, 'path')}
        if ELEMENT_KEY in body:
            fields['element'] = Element.from_body(body)

        return fields

    async def execute(self, session: 'Session') -> 'TaskOk':
        started = perf_counter()
        path = session.resolve(self.path)

        with self.driver_errors('Unable to take a screenshot'):
            handle = None
            if self.element is not None:
                handle = await session.driver.find(self.element.resolve(session.variables))

            await session.driver.screenshot(path, handle)

        return self.done(started)


class Cookie(BaseTask):
    """Install a cookie with `SameSite=Lax`."""

    kind: ClassVar[TaskKind] = TaskKind.COOKIE

    cookie_key: str = Field(min_length=1, title='Cookie name')
    cookie_value: str = Field(min_length=1, title='Cookie value')
    domain: str = Field(min_length=1, title='Cookie domain')
    path: str = Field(min_length=1, title='Cookie path')

    @classmethod
    def parse(cls, declaration: 'Declaration') -> dict[str, Any]:
        body = task_body(declaration, cls.kind)
        return {
            key: string_field(body, key)
            for key in ('cookie_key', 'cookie_value', 'domain', 'path')
        }

    async def execute(self, session: 'Session') -> 'TaskOk':
        started = perf_counter()

        with self.driver_errors('Unable to add cookie'):
            await session.driver.add_cookie(
                session.resolve(self.cookie_key),
                session.resolve(self.cookie_value),
                session.resolve(self.domain),
                session.resolve(self.path),
            )

        return self.done(started)
