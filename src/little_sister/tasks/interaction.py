"""Element interaction tasks."""

from time import perf_counter
from typing import TYPE_CHECKING, Any, ClassVar

from pydantic import Field

from little_sister.names import TaskKind
from little_sister.schema import BaseTask, Element, string_field, task_body

if TYPE_CHECKING:
    from little_sister.schema import Declaration, TaskOk
    from little_sister.session import Session


class Click(BaseTask):
    """Click one element."""

    kind: ClassVar[TaskKind] = TaskKind.CLICK

    element: Element

    @classmethod
    def parse(cls, declaration: 'Declaration') -> dict[str, Any]:
        body = task_body(declaration, cls.kind)
        return {'element': Element.from_body(body)}

    async def execute(self, session: 'Session') -> 'TaskOk':
        started = perf_counter()

        with self.driver_errors():
            handle = await session.driver.find(self.element.resolve(session.variables))
            await session.driver.click(handle)

        return self.done(started)


class SendKey(BaseTask):
    """Type a text into one element.

    WebDriver key code points embedded in the text (for example
    `\\ue007` for Enter) are pressed as keys.
    """

    kind: ClassVar[TaskKind] = TaskKind.SEND_KEY

    input: str = Field(
        min_length=1,
        title='Input',
        description='Text to type; may contain variable placeholders.',
    )

    element: Element

    @classmethod
    def parse(cls, declaration: 'Declaration') -> dict[str, Any]:
        body = task_body(declaration, cls.kind)
        return {
            'input': string_field(body, 'input'),
            'element': Element.from_body(body),
        }

    async def execute(self, session: 'Session') -> 'TaskOk':
        started = perf_counter()

        with self.driver_errors():
            handle = await session.driver.find(self.element.resolve(session.variables))
            await session.driver.send_keys(handle, session.resolve(self.input))

        return self.done(started)
