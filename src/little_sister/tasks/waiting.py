"""Wait task.

A wait either sleeps for a fixed duration, polls until an element becomes
visible, or does both in that order:

```yaml
name: wait for results
wait:
  duration_ms: 500
  element:
    id: results
  timeout_ms: 10000
```

A bare non-negative integer (`wait: 500`) is accepted as an alias of
`duration_ms`.
"""

from asyncio import sleep
from collections.abc import Mapping
from time import perf_counter
from typing import TYPE_CHECKING, Any, ClassVar

from pydantic import Field

from little_sister.errors import DeclarationError
from little_sister.names import TaskKind
from little_sister.schema import BaseTask, Element
from little_sister.schema.elements import ELEMENT_KEY

if TYPE_CHECKING:
    from little_sister.schema import Declaration, TaskOk
    from little_sister.session import Session

DURATION_KEY = 'duration_ms'
TIMEOUT_KEY = 'timeout_ms'

DEFAULT_TIMEOUT_MS = 30000


def milliseconds(value: Any, key: str, *, positive: bool = False) -> int:  # noqa: ANN401
    """Validate a non-negative integer number of milliseconds.

    Args:
        value: Declared value.
        key: Field name used in errors.
        positive: Whether zero is rejected as well.

    Raises:
        DeclarationError: If the value is not a valid number of milliseconds.
    """
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise DeclarationError(f'{key} is not a number')

    if positive and value == 0:
        raise DeclarationError(f'{key} must be positive')

    return value


class Wait(BaseTask):
    """Sleep and/or wait for an element to become visible."""

    kind: ClassVar[TaskKind] = TaskKind.WAIT

    duration_ms: int | None = Field(
        default=None,
        ge=0,
        title='Duration',
        description='Fixed sleep in milliseconds.',
    )

    element: Element | None = Field(
        default=None,
        title='Awaited element',
        description='Element to wait for until it is visible.',
    )

    timeout_ms: int = Field(
        default=DEFAULT_TIMEOUT_MS,
        gt=0,
        title='Timeout',
        description='Upper bound of the visibility wait in milliseconds.',
    )

    @classmethod
    def parse(cls, declaration: 'Declaration') -> dict[str, Any]:
        if cls.kind not in declaration:
            raise DeclarationError('Malformed Task')

        body = declaration[cls.kind]
        if isinstance(body, int) and not isinstance(body, bool):
            return {DURATION_KEY: milliseconds(body, DURATION_KEY)}

        if not isinstance(body, Mapping):
            raise DeclarationError('Task data is Malformed')

        if not body:
            raise DeclarationError('Task data is empty')

        fields = {}
        if DURATION_KEY in body:
            fields[DURATION_KEY] = milliseconds(body[DURATION_KEY], DURATION_KEY)
        if ELEMENT_KEY in body:
            fields[ELEMENT_KEY] = Element.from_body(body)
        if TIMEOUT_KEY in body:
            fields[TIMEOUT_KEY] = milliseconds(body[TIMEOUT_KEY], TIMEOUT_KEY, positive=True)

        if DURATION_KEY not in fields and ELEMENT_KEY not in fields:
            raise DeclarationError('Wait requires duration_ms or element')

        return fields

    async def execute(self, session: 'Session') -> 'TaskOk':
        started = perf_counter()

        if self.duration_ms:
            await sleep(self.duration_ms / 1000)

        if self.element is not None:
            with self.driver_errors():
                await session.driver.wait_visible(
                    self.element.resolve(session.variables),
                    self.timeout_ms,
                )

        return self.done(started)
