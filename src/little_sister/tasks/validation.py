"""Validate task.

Reads live values of one element and compares them, by exact string
equality, with the declared expectations:

```yaml
name: check banner
validate:
  element:
    className: banner
  expect:
    text: Welcome, {user|guest}
    innerHtml: <b>Welcome</b>
    css:
      color: rgb(0, 0, 0)
    property:
      childElementCount: 1
```

Every non-empty expectation leaf produces one `ValidationResult`; empty
leaves are skipped.
"""

from collections.abc import Mapping
from time import perf_counter
from typing import TYPE_CHECKING, Any, ClassVar

from pydantic import Field

from little_sister.driver import stringify
from little_sister.errors import DeclarationError
from little_sister.models import SchemaModel
from little_sister.names import TaskKind
from little_sister.schema import BaseTask, Element, ValidationResult, task_body

if TYPE_CHECKING:
    from playwright.async_api import ElementHandle

    from little_sister.schema import Declaration, TaskOk
    from little_sister.session import Session

EXPECT_KEY = 'expect'

TEXT_KEY = 'text'
INNER_HTML_KEY = 'innerHtml'
CSS_KEY = 'css'
PROPERTY_KEY = 'property'

EXPECTATION_KEYS = (TEXT_KEY, INNER_HTML_KEY, CSS_KEY, PROPERTY_KEY)


def _text_clause(expect: Mapping[Any, Any], key: str) -> str | None:
    value = expect.get(key)
    if value is None:
        return None

    if not isinstance(value, str):
        raise DeclarationError(f'{key} is not a string')

    return value or None


def _named_clause(expect: Mapping[Any, Any], key: str) -> dict[str, str]:
    values = expect.get(key)
    if values is None:
        return {}

    if not isinstance(values, Mapping):
        raise DeclarationError(f'{key} is not a map')

    clause = {}
    for name, value in values.items():
        if not isinstance(name, str) or not name:
            raise DeclarationError(f'{key} name is not a string: {name}')

        if isinstance(value, bool) or not isinstance(value, (str, int, float)):
            raise DeclarationError(f'{key} value is not a string or number: {name}')

        if value := stringify(value):
            clause[name] = value

    return clause


class Expectation(SchemaModel):
    """Non-empty expectation clauses of a Validate task."""

    text: str | None = Field(
        default=None,
        title='Text',
        description='Expected rendered text.',
    )

    inner_html: str | None = Field(
        default=None,
        title='Inner HTML',
        description='Expected inner HTML.',
    )

    css: dict[str, str] = Field(
        default_factory=dict,
        title='CSS',
        description='Expected computed CSS values by property name.',
    )

    properties: dict[str, str] = Field(
        default_factory=dict,
        title='Properties',
        description='Expected DOM property values by property name.',
    )

    @property
    def empty(self) -> bool:
        """Return whether no clause is left to check."""
        return (
            self.text is None
            and self.inner_html is None
            and not self.css
            and not self.properties
        )

    @classmethod
    def from_body(cls, body: Mapping[Any, Any]) -> 'Expectation':
        """Build expectations from the `expect` entry of a task body.

        Raises:
            DeclarationError: If the entry is missing or malformed, or no
                clause is left once empty ones are skipped.
        """
        if EXPECT_KEY not in body:
            raise DeclarationError(f'{EXPECT_KEY} field not found')

        expect = body[EXPECT_KEY]
        if not isinstance(expect, Mapping):
            raise DeclarationError(f'{EXPECT_KEY} is not a map')

        for key in expect:
            if key not in EXPECTATION_KEYS:
                raise DeclarationError(f'Unknown expectation: {key}')

        expectation = cls(
            text=_text_clause(expect, TEXT_KEY),
            inner_html=_text_clause(expect, INNER_HTML_KEY),
            css=_named_clause(expect, CSS_KEY),
            properties=_named_clause(expect, PROPERTY_KEY),
        )

        if expectation.empty:
            raise DeclarationError('Validate requires at least one expectation')

        return expectation


class Validate(BaseTask):
    """Compare live values of one element with expectations."""

    kind: ClassVar[TaskKind] = TaskKind.VALIDATE

    element: Element
    expect: Expectation

    @classmethod
    def parse(cls, declaration: 'Declaration') -> dict[str, Any]:
        body = task_body(declaration, cls.kind)
        return {
            'element': Element.from_body(body),
            'expect': Expectation.from_body(body),
        }

    async def execute(self, session: 'Session') -> 'TaskOk':
        started = perf_counter()

        with self.driver_errors():
            handle = await session.driver.find(self.element.resolve(session.variables))
            results = await self.check(session, handle)

        return self.done(started, tuple(results))

    async def check(self, session: 'Session',
                    handle: 'ElementHandle') -> list[ValidationResult]:
        """Evaluate every clause against the located element."""
        driver = session.driver
        results = []

        if self.expect.text is not None:
            results.append(ValidationResult.compare(
                'Text',
                session.resolve(self.expect.text),
                await driver.text(handle),
            ))

        if self.expect.inner_html is not None:
            results.append(ValidationResult.compare(
                'innerHtml',
                session.resolve(self.expect.inner_html),
                await driver.inner_html(handle),
            ))

        for name, expected in self.expect.css.items():
            results.append(ValidationResult.compare(
                f'css {name}',
                session.resolve(expected),
                await driver.css_value(handle, name),
            ))

        for name, expected in self.expect.properties.items():
            results.append(ValidationResult.compare(
                f'property {name}',
                session.resolve(expected),
                await driver.property_value(handle, name),
            ))

        return results
